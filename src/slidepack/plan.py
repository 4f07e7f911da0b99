"""First pass of package serialization: part names and relationship ids.

Slides, layouts and the master reference each other, so nothing can be
written until every part has a name and every relationship an id.
:func:`plan_package` walks the presentation once, loads images and media,
numbers charts across the whole package and allocates every ``rId``.
The second pass (:mod:`slidepack.package`) only renders XML from the plan.
"""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from pptx.opc.constants import CONTENT_TYPE as CT
from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from .charts import Chart
from .errors import ErrorKind, PackageError
from .fetch import HttpOptions
from .hyperlinks import LinkAction
from .images import ImageFormat, load_image
from .layouts import LAYOUT_COUNT, TAGS_PER_LAYOUT, layout_tag_targets
from .media import Media, load_media
from .relationships import ContentTypes, Relationships
from .sections import check_sections
from .slides import Slide, SlideRefs

if TYPE_CHECKING:
    from .presentation import Presentation

logger = logging.getLogger(__name__)

RT_CHART_STYLE = "http://schemas.microsoft.com/office/2011/relationships/chartStyle"

PRESENTATION_PART = "ppt/presentation.xml"
MASTER_PART = "ppt/slideMasters/slideMaster1.xml"
THEME_PART = "ppt/theme/theme1.xml"
NOTES_THEME_PART = "ppt/theme/theme2.xml"
NOTES_MASTER_PART = "ppt/notesMasters/notesMaster1.xml"
PRES_PROPS_PART = "ppt/presProps.xml"
CORE_PART = "docProps/core.xml"
APP_PART = "docProps/app.xml"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def slide_part(number: int) -> str:
    return f"ppt/slides/slide{number}.xml"


def notes_part(number: int) -> str:
    return f"ppt/notesSlides/notesSlide{number}.xml"


def layout_part(number: int) -> str:
    return f"ppt/slideLayouts/slideLayout{number}.xml"


def tag_part(number: int) -> str:
    return f"ppt/tags/tag{number}.xml"


def chart_part(index: int) -> str:
    return f"ppt/charts/chart{index}.xml"


def chart_style_part(index: int) -> str:
    return f"ppt/charts/style{index}.xml"


def chart_colors_part(index: int) -> str:
    return f"ppt/charts/colors{index}.xml"


def workbook_part(index: int) -> str:
    return f"ppt/embeddings/chart{index}_data.xlsx"


def _relative(source: str, part: str) -> str:
    """Target of a relationship from *source* to *part*, relative to the source folder."""
    return posixpath.relpath(part, posixpath.dirname(source))


@dataclass(frozen=True)
class MediaFile:
    """A binary file stored under ``ppt/media/``."""

    part_name: str
    data: bytes
    content_type: str

    @property
    def extension(self) -> str:
        return posixpath.splitext(self.part_name)[1].lstrip(".")


@dataclass
class ChartPlan:
    """A chart with its global index, which numbers its chart, style, colors and workbook parts."""

    index: int
    chart: Chart
    slide_number: int
    rels: Relationships = field(init=False)

    def __post_init__(self):
        part = chart_part(self.index)
        self.rels = Relationships(part)
        self.rels.add(RT.PACKAGE, _relative(part, workbook_part(self.index)))
        self.rels.add(RT_CHART_STYLE, _relative(part, chart_style_part(self.index)))
        self.rels.add(RT.CHART_COLOR_STYLE, _relative(part, chart_colors_part(self.index)))

    @property
    def part_name(self) -> str:
        return chart_part(self.index)


@dataclass
class SlidePlan:
    """Relationships and shape references of one slide.

    Attributes:
        number: 1-based slide number.
        slide: The slide content.
        rels: Relationships of the slide part.
        refs: rIds the slide XML refers to.
        charts: Charts placed on this slide.
        notes_rels: Relationships of the notes slide, or None without notes.
    """

    number: int
    slide: Slide
    rels: Relationships
    refs: SlideRefs
    charts: list[ChartPlan] = field(default_factory=list)
    notes_rels: Optional[Relationships] = None

    @property
    def part_name(self) -> str:
        return slide_part(self.number)

    @property
    def notes_part_name(self) -> str:
        return notes_part(self.number)

    @property
    def has_notes(self) -> bool:
        return self.notes_rels is not None


@dataclass
class PackagePlan:
    """Everything the writer needs: part names, relationships and content types.

    Built once by :func:`plan_package`; rendering never changes it.
    """

    presentation: "Presentation"
    lang: str
    slides: list[SlidePlan]
    charts: list[ChartPlan]
    media_files: list[MediaFile]
    root_rels: Relationships
    presentation_rels: Relationships
    master_rels: Relationships
    layout_rels: list[Relationships]
    notes_master_rels: Optional[Relationships]
    notes_master_rid: Optional[str]
    has_pres_props: bool
    content_types: ContentTypes

    @property
    def notes_count(self) -> int:
        return sum(1 for s in self.slides if s.has_notes)

    @property
    def tag_count(self) -> int:
        return LAYOUT_COUNT * TAGS_PER_LAYOUT


class _MediaNamer:
    """Allocates unique file names under ``ppt/media/``.

    Disk sources keep their (sanitized) basename; clashes get ``_2``,
    ``_3``, ... appended. In-memory sources are numbered ``image1.png``,
    ``media1.mp4``, ...
    """

    def __init__(self):
        self._used: set[str] = set()
        self._counters = {"image": 0, "media": 0}

    def name(self, basename: Optional[str], prefix: str, extension: str) -> str:
        """Unique file name for a new part.

        Args:
            basename: File name of a disk source, or None for in-memory data.
            prefix: ``image`` or ``media``, used when numbering.
            extension: Extension used for numbered names and for disk names
                whose extension does not match the detected format.

        Returns:
            The ``ppt/media/`` part name.
        """
        if basename:
            stem, ext = posixpath.splitext(_UNSAFE_NAME_CHARS.sub("_", basename))
            if ext.lstrip(".").lower() != extension:
                ext = f".{extension}"
            candidate, n = f"{stem}{ext.lower()}", 1
            while candidate in self._used:
                n += 1
                candidate = f"{stem}_{n}{ext.lower()}"
        else:
            while True:
                self._counters[prefix] += 1
                candidate = f"{prefix}{self._counters[prefix]}.{extension}"
                if candidate not in self._used:
                    break
        self._used.add(candidate)
        return f"ppt/media/{candidate}"


def _image_extension(fmt: ImageFormat, basename: Optional[str]) -> str:
    """Keep a disk file's own extension when it denotes the same format (``jpg`` for JPEG)."""
    if basename:
        ext = posixpath.splitext(basename)[1].lstrip(".").lower()
        if ext and ImageFormat.from_extension(ext) is fmt:
            return ext
    return fmt.extension


class _Planner:
    """First serialization pass over one presentation.

    Walks the slides in order, loading every image and media source and
    handing out part names, relationship ids and content types. Nothing
    is rendered here.
    """

    def __init__(self, presentation: "Presentation", lang: str, http: HttpOptions):
        self.presentation = presentation
        self.lang = lang
        self.http = http
        self.namer = _MediaNamer()
        self.media_files: list[MediaFile] = []
        self.content_types = ContentTypes()
        self.charts: list[ChartPlan] = []

    def _store(self, data: bytes, basename: Optional[str], prefix: str, extension: str, content_type: str) -> str:
        """Register a binary part under ``ppt/media/`` and return its part name."""
        part_name = self.namer.name(basename, prefix, extension)
        self.media_files.append(MediaFile(part_name, data, content_type))
        self.content_types.add_default(posixpath.splitext(part_name)[1].lstrip("."), content_type)
        logger.debug(f"Media file {part_name}: {len(data)} bytes")
        return part_name

    def plan(self) -> PackagePlan:
        """Plan every slide, then the presentation, master, layout and package relationships.

        Raises:
            PackageError: A slide or section cannot be written.
        """
        check_sections(self.presentation.sections)
        slides = [self._plan_slide(number, slide) for number, slide in enumerate(self.presentation.slides, start=1)]
        has_notes = any(s.has_notes for s in slides)
        has_pres_props = self.presentation.slide_show is not None or self.presentation.print_settings is not None

        root_rels = Relationships("")
        root_rels.add(RT.OFFICE_DOCUMENT, PRESENTATION_PART)
        root_rels.add(RT.CORE_PROPERTIES, CORE_PART)
        root_rels.add(RT.EXTENDED_PROPERTIES, APP_PART)

        pres_rels = Relationships(PRESENTATION_PART)
        pres_rels.add(RT.SLIDE_MASTER, _relative(PRESENTATION_PART, MASTER_PART))
        pres_rels.add(RT.THEME, _relative(PRESENTATION_PART, THEME_PART))
        for plan in slides:
            pres_rels.add(RT.SLIDE, _relative(PRESENTATION_PART, plan.part_name))
        notes_master_rid = None
        notes_master_rels = None
        if has_notes:
            notes_master_rid = pres_rels.add(RT.NOTES_MASTER, _relative(PRESENTATION_PART, NOTES_MASTER_PART))
            notes_master_rels = Relationships(NOTES_MASTER_PART)
            notes_master_rels.add(RT.THEME, _relative(NOTES_MASTER_PART, NOTES_THEME_PART))
        if has_pres_props:
            pres_rels.add(RT.PRES_PROPS, _relative(PRESENTATION_PART, PRES_PROPS_PART))

        master_rels = Relationships(MASTER_PART)
        for n in range(1, LAYOUT_COUNT + 1):
            master_rels.add(RT.SLIDE_LAYOUT, _relative(MASTER_PART, layout_part(n)))
        master_rels.add(RT.THEME, _relative(MASTER_PART, THEME_PART))

        layout_rels = []
        for n in range(1, LAYOUT_COUNT + 1):
            rels = Relationships(layout_part(n))
            rels.add(RT.SLIDE_MASTER, _relative(layout_part(n), MASTER_PART))
            for target in layout_tag_targets(n):
                rels.add(RT.TAGS, target)
            layout_rels.append(rels)

        self._add_overrides(slides, has_notes, has_pres_props)
        logger.debug(
            f"Planned {len(slides)} slides, {len(self.charts)} charts, {len(self.media_files)} media files"
        )
        return PackagePlan(
            presentation=self.presentation,
            lang=self.lang,
            slides=slides,
            charts=self.charts,
            media_files=self.media_files,
            root_rels=root_rels,
            presentation_rels=pres_rels,
            master_rels=master_rels,
            layout_rels=layout_rels,
            notes_master_rels=notes_master_rels,
            notes_master_rid=notes_master_rid,
            has_pres_props=has_pres_props,
            content_types=self.content_types,
        )

    def _plan_slide(self, number: int, slide: Slide) -> SlidePlan:
        """Allocate the relationships of one slide.

        Relationship ids follow a fixed order: layout, charts, chart
        workbooks, images, media, hyperlinks and finally the notes slide.
        Charts get their global index here.

        Args:
            number: 1-based slide number.
            slide: The slide content.

        Returns:
            The slide plan, including the ids its XML refers to.

        Raises:
            PackageError: A shape, connector or chart is invalid, a source
                cannot be loaded, or a link targets a missing slide.
        """
        part = slide_part(number)
        rels = Relationships(part)
        refs = SlideRefs()
        rels.add(RT.SLIDE_LAYOUT, _relative(part, layout_part(slide.layout.layout_number)))

        for shape in slide.shapes:
            shape.check()
        for connector in slide.connectors:
            connector.check()

        chart_plans = []
        for chart in slide.charts:
            chart.check()
            chart_plan = ChartPlan(len(self.charts) + 1, chart, number)
            self.charts.append(chart_plan)
            chart_plans.append(chart_plan)
        for chart_plan in chart_plans:
            refs.chart_rids.append(rels.add(RT.CHART, _relative(part, chart_plan.part_name)))
        for chart_plan in chart_plans:
            rels.add(RT.PACKAGE, _relative(part, workbook_part(chart_plan.index)))

        for image in slide.images:
            loaded = load_image(image, self.http)
            ext = _image_extension(loaded.format, loaded.basename)
            media_part = self._store(loaded.data, loaded.basename, "image", ext, loaded.format.content_type)
            refs.images.append((loaded, rels.add(RT.IMAGE, _relative(part, media_part))))

        for media in slide.media:
            refs.media.append(self._plan_media(media, part, rels))

        for link in slide.hyperlinks():
            if not link.needs_relationship or link in refs.links:
                continue
            if link.action is LinkAction.SLIDE:
                if not 1 <= link.slide <= len(self.presentation.slides):
                    raise PackageError(
                        ErrorKind.INVALID_ARGUMENT,
                        f"slide {number} links to slide {link.slide}, "
                        f"but the presentation has {len(self.presentation.slides)} slides",
                    )
                refs.links[link] = rels.add(RT.SLIDE, link.relationship_target)
            else:
                refs.links[link] = rels.add(RT.HYPERLINK, link.relationship_target, external=True)

        notes_rels = None
        if slide.has_notes:
            rels.add(RT.NOTES_SLIDE, _relative(part, notes_part(number)))
            notes_rels = Relationships(notes_part(number))
            notes_rels.add(RT.NOTES_MASTER, _relative(notes_part(number), NOTES_MASTER_PART))
            notes_rels.add(RT.SLIDE, _relative(notes_part(number), part))

        logger.debug(f"Slide {number}: {len(rels)} relationships")
        return SlidePlan(number, slide, rels, refs, chart_plans, notes_rels)

    def _plan_media(self, media: Media, part: str, rels: Relationships) -> tuple[str, str, str]:
        """Store a video or audio file with its poster frame.

        Args:
            media: The media item.
            part: Part name of the owning slide.
            rels: The slide relationships to extend.

        Returns:
            Tuple of (media rId, video or audio link rId, poster image rId).
        """
        loaded = load_media(media)
        media_part = self._store(
            loaded.data, loaded.basename, "media", media.format.extension, media.format.content_type
        )
        poster_basename = media.poster.basename if media.poster is not None else None
        poster_part = self._store(
            loaded.poster,
            poster_basename,
            "image",
            _image_extension(loaded.poster_format, poster_basename),
            loaded.poster_format.content_type,
        )
        target = _relative(part, media_part)
        media_rid = rels.add(RT.MEDIA, target)
        link_rid = rels.add(RT.VIDEO if media.relationship_type_name == "video" else RT.AUDIO, target)
        poster_rid = rels.add(RT.IMAGE, _relative(part, poster_part))
        return media_rid, link_rid, poster_rid

    def _add_overrides(self, slides: list[SlidePlan], has_notes: bool, has_pres_props: bool) -> None:
        """Content-type overrides for every XML part except relationships."""
        ct = self.content_types
        ct.add_override(PRESENTATION_PART, CT.PML_PRESENTATION_MAIN)
        for plan in slides:
            ct.add_override(plan.part_name, CT.PML_SLIDE)
            if plan.has_notes:
                ct.add_override(plan.notes_part_name, CT.PML_NOTES_SLIDE)
        for n in range(1, LAYOUT_COUNT + 1):
            ct.add_override(layout_part(n), CT.PML_SLIDE_LAYOUT)
        ct.add_override(MASTER_PART, CT.PML_SLIDE_MASTER)
        ct.add_override(THEME_PART, CT.OFC_THEME)
        if has_notes:
            ct.add_override(NOTES_MASTER_PART, CT.PML_NOTES_MASTER)
            ct.add_override(NOTES_THEME_PART, CT.OFC_THEME)
        for chart_plan in self.charts:
            ct.add_override(chart_plan.part_name, CT.DML_CHART)
            ct.add_override(chart_style_part(chart_plan.index), CT.OFC_CHART_STYLE)
            ct.add_override(chart_colors_part(chart_plan.index), CT.OFC_CHART_COLORS)
            ct.add_override(workbook_part(chart_plan.index), CT.SML_SHEET)
        for n in range(1, LAYOUT_COUNT * TAGS_PER_LAYOUT + 1):
            ct.add_override(tag_part(n), CT.PML_TAGS)
        if has_pres_props:
            ct.add_override(PRES_PROPS_PART, CT.PML_PRES_PROPS)
        ct.add_override(CORE_PART, CT.OPC_CORE_PROPERTIES)
        ct.add_override(APP_PART, CT.OFC_EXTENDED_PROPERTIES)


def plan_package(presentation: "Presentation", lang: str, http: HttpOptions = HttpOptions()) -> PackagePlan:
    """Allocate part names and relationship ids for *presentation*.

    Raises:
        PackageError: when a source cannot be loaded, a chart is missing
            data its kind needs, or a hyperlink jumps to a slide that does
            not exist.
    """
    return _Planner(presentation, lang, http).plan()
