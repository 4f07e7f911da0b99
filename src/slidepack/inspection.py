"""Read back a written package: summaries and structural checks."""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Union

from lxml import etree
from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from .errors import ErrorKind, PackageError
from .relationships import CT_NS, RELS_NS, resolve_target
from .xmlwriter import namespace_uri

logger = logging.getLogger(__name__)

PackageSource = Union[str, Path, bytes]

_A = namespace_uri("a")
_P = namespace_uri("p")
_P14 = namespace_uri("p14")


@dataclass
class PackageSummary:
    slide_count: int = 0
    chart_count: int = 0
    media_count: int = 0
    notes_count: int = 0
    titles: list[str] = field(default_factory=list)
    sections: list[str] = field(default_factory=list)
    parts: list[str] = field(default_factory=list)


def _open(source: PackageSource) -> zipfile.ZipFile:
    try:
        if isinstance(source, (bytes, bytearray)):
            return zipfile.ZipFile(BytesIO(source))
        return zipfile.ZipFile(Path(source))
    except zipfile.BadZipFile as e:
        raise PackageError(ErrorKind.INVALID_ARGUMENT, f"not a ZIP package: {e}") from e
    except OSError as e:
        raise PackageError.from_os_error(e, str(source)) from e


def _content_type_rules(archive: zipfile.ZipFile) -> tuple[dict[str, str], dict[str, str]]:
    root = etree.fromstring(archive.read("[Content_Types].xml"))
    defaults = {
        el.get("Extension", "").lower(): el.get("ContentType", "") for el in root.iter(f"{{{CT_NS}}}Default")
    }
    overrides = {el.get("PartName", ""): el.get("ContentType", "") for el in root.iter(f"{{{CT_NS}}}Override")}
    return defaults, overrides


def _relationships(archive: zipfile.ZipFile, rels_name: str) -> list[etree._Element]:
    root = etree.fromstring(archive.read(rels_name))
    return list(root.iter(f"{{{RELS_NS}}}Relationship"))


def _source_of(rels_name: str) -> str:
    directory, _, filename = rels_name.rpartition("_rels/")
    return directory + filename[: -len(".rels")]


def _slide_number(name: str) -> int:
    return int(name[len("ppt/slides/slide"):-len(".xml")])


def _slide_title(xml: bytes) -> str:
    root = etree.fromstring(xml)
    for sp in root.iter(f"{{{_P}}}sp"):
        ph = sp.find(f"{{{_P}}}nvSpPr/{{{_P}}}nvPr/{{{_P}}}ph")
        if ph is not None and ph.get("type") in ("title", "ctrTitle"):
            return "".join(t.text or "" for t in sp.iter(f"{{{_A}}}t"))
    return ""


def _section_names(xml: bytes) -> list[str]:
    root = etree.fromstring(xml)
    return [el.get("name", "") for el in root.iter(f"{{{_P14}}}section")]


def inspect_package(source: PackageSource) -> PackageSummary:
    """Summarize a PPTX archive given as a path or as bytes."""
    with _open(source) as archive:
        names = archive.namelist()
        slides = sorted(
            (n for n in names if n.startswith("ppt/slides/slide") and n.endswith(".xml")), key=_slide_number
        )
        summary = PackageSummary(
            slide_count=len(slides),
            chart_count=sum(1 for n in names if n.startswith("ppt/charts/chart") and n.endswith(".xml")),
            media_count=sum(1 for n in names if n.startswith("ppt/media/")),
            notes_count=sum(1 for n in names if n.startswith("ppt/notesSlides/notesSlide")),
            parts=names,
        )
        for name in slides:
            try:
                summary.titles.append(_slide_title(archive.read(name)))
            except etree.XMLSyntaxError:
                summary.titles.append("")
        if "ppt/presentation.xml" in names:
            try:
                summary.sections = _section_names(archive.read("ppt/presentation.xml"))
            except etree.XMLSyntaxError:
                logger.debug("presentation.xml does not parse; no sections read")
    logger.debug(f"Inspected package: {summary.slide_count} slides, {len(summary.parts)} parts")
    return summary


def validate_package(source: PackageSource) -> list[str]:
    """Structural problems in a PPTX archive; an empty list means none were found.

    Checks that ``[Content_Types].xml`` exists, that every XML part parses,
    that every internal relationship target exists, and that every part
    has a content type.
    """
    problems: list[str] = []
    with _open(source) as archive:
        names = archive.namelist()
        present = set(names)
        if "[Content_Types].xml" not in present:
            return ["missing [Content_Types].xml"]

        for name in names:
            if name.endswith(".xml") or name.endswith(".rels"):
                try:
                    etree.fromstring(archive.read(name))
                except etree.XMLSyntaxError as e:
                    problems.append(f"{name}: unparsable XML ({e})")

        try:
            defaults, overrides = _content_type_rules(archive)
        except etree.XMLSyntaxError:
            return problems
        for name in names:
            if name == "[Content_Types].xml" or name.endswith("/"):
                continue
            ext = name.rsplit(".", 1)[-1].lower() if "." in name.rsplit("/", 1)[-1] else ""
            if f"/{name}" not in overrides and ext not in defaults:
                problems.append(f"{name}: no content type")

        if "_rels/.rels" not in present:
            problems.append("missing _rels/.rels")
        for rels_name in (n for n in names if n.endswith(".rels")):
            source_part = _source_of(rels_name)
            try:
                rels = _relationships(archive, rels_name)
            except etree.XMLSyntaxError:
                continue
            if rels_name == "_rels/.rels" and not any(rel.get("Type") == RT.OFFICE_DOCUMENT for rel in rels):
                problems.append("_rels/.rels: no officeDocument relationship")
            for rel in rels:
                if rel.get("TargetMode") == "External":
                    continue
                target = resolve_target(source_part, rel.get("Target", ""))
                if target not in present:
                    problems.append(f"{rels_name}: {rel.get('Id')} targets missing part {target}")
    for problem in problems:
        logger.debug(f"Validation: {problem}")
    return problems
