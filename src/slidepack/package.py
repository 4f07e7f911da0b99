"""Second pass of serialization: render every part and write the ZIP archive."""

from __future__ import annotations

import logging
import os
import tempfile
import zipfile
from dataclasses import dataclass, field
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional, Union

from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from .chart_style import chart_colors_xml, chart_style_xml
from .charts import chart_part_xml, chart_workbook_blob
from .errors import ErrorKind, PackageError
from .fetch import HttpOptions
from .layouts import layout_xml, master_xml, tag_xml
from .notes import notes_master_xml, notes_slide_xml
from .plan import (
    APP_PART,
    CORE_PART,
    MASTER_PART,
    NOTES_MASTER_PART,
    NOTES_THEME_PART,
    PRES_PROPS_PART,
    PRESENTATION_PART,
    THEME_PART,
    PackagePlan,
    chart_colors_part,
    chart_style_part,
    layout_part,
    plan_package,
    tag_part,
    workbook_part,
)
from .props import app_props_xml, core_props_xml, pres_props_xml
from .sections import section_list_xml
from .slides import slide_xml
from .theme import theme_xml
from .units import SLIDE_HEIGHT, SLIDE_WIDTH
from .xmlwriter import XML_DECLARATION, encode_part, language_tag, nsdecls

if TYPE_CHECKING:
    from .presentation import Presentation

logger = logging.getLogger(__name__)

ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
ZIP_LIMIT = 0xFFFFFFFF
ZIP_MAX_ENTRIES = 0xFFFF
FIRST_SLIDE_ID = 256
FIRST_MASTER_ID = 2147483648


class Compression(str, Enum):
    DEFLATE = "deflate"
    STORE = "store"

    @property
    def zip_method(self) -> int:
        return zipfile.ZIP_DEFLATED if self is Compression.DEFLATE else zipfile.ZIP_STORED


@dataclass(frozen=True)
class PackageOptions:
    """How a presentation is written.

    Attributes:
        compression: ZIP method for every entry.
        strict: Reject text containing characters XML 1.0 does not allow
            instead of replacing them.
        language: Language tag for text runs; taken from the locale
            environment when not given.
        http: Options for URL-backed image sources.
    """

    compression: Compression = Compression.DEFLATE
    strict: bool = False
    language: Optional[str] = None
    http: HttpOptions = field(default_factory=HttpOptions)


def presentation_xml(plan: PackagePlan) -> str:
    """XML for ``ppt/presentation.xml``.

    Slide ids start at 256 in slide order; the section list refers to the
    same ids.
    """
    slide_rels = plan.presentation_rels.of_type(RT.SLIDE)
    notes_master = ""
    if plan.notes_master_rid:
        notes_master = f'<p:notesMasterIdLst><p:notesMasterId r:id="{plan.notes_master_rid}"/></p:notesMasterIdLst>'
    ids = [FIRST_SLIDE_ID + i for i in range(len(slide_rels))]
    slide_ids = "".join(f'<p:sldId id="{sld_id}" r:id="{rel.rid}"/>' for sld_id, rel in zip(ids, slide_rels))
    slide_list = f"<p:sldIdLst>{slide_ids}</p:sldIdLst>" if slide_ids else ""
    return (
        f'{XML_DECLARATION}<p:presentation {nsdecls("a", "r", "p")} saveSubsetFonts="1">'
        f'<p:sldMasterIdLst><p:sldMasterId id="{FIRST_MASTER_ID}" r:id="rId1"/></p:sldMasterIdLst>'
        f"{notes_master}{slide_list}"
        f'<p:sldSz cx="{SLIDE_WIDTH}" cy="{SLIDE_HEIGHT}" type="screen4x3"/>'
        f'<p:notesSz cx="{SLIDE_HEIGHT}" cy="{SLIDE_WIDTH}"/>'
        '<p:defaultTextStyle><a:defPPr><a:defRPr lang="en-US"/></a:defPPr></p:defaultTextStyle>'
        f"{section_list_xml(plan.presentation.sections, ids)}"
        "</p:presentation>"
    )


class PackageWriter:
    """Renders a :class:`PackagePlan` into ordered ``(part name, bytes)`` entries."""

    def __init__(self, plan: PackagePlan, strict: bool = False):
        self.plan = plan
        self.strict = strict

    def _xml(self, part_name: str, xml: str) -> tuple[str, bytes]:
        return part_name, encode_part(xml, part_name, self.strict)

    def entries(self) -> Iterator[tuple[str, bytes]]:
        """Yield ``(part name, bytes)`` for every part, in archive order.

        Order: content types, package and presentation relationships, the
        presentation, slides each followed by its notes, slide
        relationships, media, chart parts per chart, notes relationships,
        the notes master with its theme, layouts each followed by their
        relationships, layout tags, the slide master, theme, presentation
        properties and document properties.
        """
        plan = self.plan
        pres = plan.presentation
        lang = plan.lang

        yield self._xml("[Content_Types].xml", plan.content_types.xml())
        yield self._xml(plan.root_rels.part_name, plan.root_rels.xml())
        yield self._xml(plan.presentation_rels.part_name, plan.presentation_rels.xml())
        yield self._xml(PRESENTATION_PART, presentation_xml(plan))

        for slide in plan.slides:
            yield self._xml(slide.part_name, slide_xml(slide.slide, slide.refs, lang))
            if slide.has_notes:
                yield self._xml(slide.notes_part_name, notes_slide_xml(slide.slide.notes, lang))
        for slide in plan.slides:
            yield self._xml(slide.rels.part_name, slide.rels.xml())

        for media_file in plan.media_files:
            yield media_file.part_name, media_file.data

        for chart in plan.charts:
            yield self._xml(chart.part_name, chart_part_xml(chart.chart, chart.index, lang))
            yield self._xml(chart_style_part(chart.index), chart_style_xml())
            yield self._xml(chart_colors_part(chart.index), chart_colors_xml())
            yield self._xml(chart.rels.part_name, chart.rels.xml())
            yield workbook_part(chart.index), chart_workbook_blob(chart.chart, chart.index)

        for slide in plan.slides:
            if slide.notes_rels is not None:
                yield self._xml(slide.notes_rels.part_name, slide.notes_rels.xml())
        if plan.notes_master_rels is not None:
            yield self._xml(NOTES_MASTER_PART, notes_master_xml())
            yield self._xml(plan.notes_master_rels.part_name, plan.notes_master_rels.xml())
            yield self._xml(NOTES_THEME_PART, theme_xml())

        for n, rels in enumerate(plan.layout_rels, start=1):
            yield self._xml(layout_part(n), layout_xml(n))
            yield self._xml(rels.part_name, rels.xml())
        for n in range(1, plan.tag_count + 1):
            yield self._xml(tag_part(n), tag_xml(n))

        yield self._xml(MASTER_PART, master_xml())
        yield self._xml(plan.master_rels.part_name, plan.master_rels.xml())
        yield self._xml(THEME_PART, theme_xml())

        if plan.has_pres_props:
            yield self._xml(PRES_PROPS_PART, pres_props_xml(pres.slide_show, pres.print_settings))
        yield self._xml(CORE_PART, core_props_xml(pres.title, pres.author, pres.timestamp))
        yield self._xml(APP_PART, app_props_xml(len(plan.slides), plan.notes_count, _media_count(plan)))


def _media_count(plan: PackagePlan) -> int:
    return sum(len(slide.slide.media) for slide in plan.slides)


def _zip_info(name: str, compression: Compression) -> zipfile.ZipInfo:
    """Entry header with a fixed 1980 timestamp and file mode."""
    info = zipfile.ZipInfo(name, date_time=ZIP_EPOCH)
    info.compress_type = compression.zip_method
    info.create_system = 0
    info.external_attr = 0o600 << 16
    return info


def write_archive(entries: list[tuple[str, bytes]], compression: Compression = Compression.DEFLATE) -> bytes:
    """Zip *entries* in order with fixed timestamps.

    Args:
        entries: (part name, bytes) pairs in archive order.
        compression: Stored or deflated entries.

    Returns:
        The archive bytes.

    Raises:
        PackageError: ``package_overflow`` when the archive would need ZIP64.
    """
    total = sum(len(data) for _, data in entries)
    if total > ZIP_LIMIT or len(entries) > ZIP_MAX_ENTRIES:
        raise PackageError(
            ErrorKind.PACKAGE_OVERFLOW,
            f"package of {total} bytes in {len(entries)} parts exceeds the 4 GiB ZIP limit",
        )
    buffer = BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w", allowZip64=False) as archive:
            for name, data in entries:
                logger.debug(f"Writing {name} ({len(data)} bytes)")
                archive.writestr(_zip_info(name, compression), data)
    except zipfile.LargeZipFile as e:
        raise PackageError(ErrorKind.PACKAGE_OVERFLOW, f"package exceeds the 4 GiB ZIP limit: {e}") from e
    return buffer.getvalue()


def build_package(presentation: "Presentation", options: PackageOptions = PackageOptions()) -> bytes:
    """Serialize *presentation* to PPTX bytes.

    Nothing is returned unless every part was rendered; any failure
    surfaces as a single :class:`PackageError`.
    """
    lang = options.language or presentation.language or language_tag()
    plan = plan_package(presentation, lang, options.http)
    entries = list(PackageWriter(plan, options.strict).entries())
    data = write_archive(entries, Compression(options.compression))
    logger.info(
        f"Built package: {len(plan.slides)} slides, {len(plan.charts)} charts, "
        f"{len(plan.media_files)} media files, {len(entries)} parts, {len(data)} bytes"
    )
    return data


def save_package(
    presentation: "Presentation", path: Union[str, Path], options: PackageOptions = PackageOptions()
) -> Path:
    """Write *presentation* to *path*.

    The archive goes to a temporary file in the same directory first and
    replaces *path* only once complete.
    """
    path = Path(path)
    data = build_package(presentation, options)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=path.parent, prefix=f".{path.name}.", delete=False) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise PackageError(ErrorKind.IO, f"cannot write {path}: {e}") from e
    logger.info(f"Saved presentation to {path}")
    return path
