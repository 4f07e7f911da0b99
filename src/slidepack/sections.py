"""Slide sections, written as the ``p14:sectionLst`` extension of ``presentation.xml``."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable, Optional

from .errors import ErrorKind, PackageError
from .xmlwriter import escape, nsdecls

logger = logging.getLogger(__name__)

SECTION_LIST_URI = "{521415D9-36F7-43E2-AB2F-B90AF26B5E84}"
DEFAULT_SECTION_NAME = "Default Section"


@dataclass(frozen=True)
class SlideSection:
    """A named run of consecutive slides.

    Attributes:
        name: Name shown in the PowerPoint slide sorter.
        first_slide: 0-based index of the first slide in the section.
        slide_count: Number of slides; an empty section is allowed.
    """

    name: str
    first_slide: int
    slide_count: int

    @property
    def last_slide(self) -> int:
        """Index of the last slide (inclusive); ``first_slide`` for an empty section."""
        return self.first_slide + max(self.slide_count, 1) - 1

    def contains(self, slide_index: int) -> bool:
        return self.first_slide <= slide_index < self.first_slide + self.slide_count

    def overlaps(self, other: "SlideSection") -> bool:
        if not self.slide_count or not other.slide_count:
            return False
        return self.first_slide < other.first_slide + other.slide_count and other.first_slide < self.first_slide + self.slide_count


def check_sections(sections: Iterable[SlideSection]) -> None:
    """Reject sections that cannot be written.

    Raises:
        PackageError: ``invalid_argument`` for an empty name, a negative
            index or count, or two sections covering the same slide.
    """
    seen: list[SlideSection] = []
    for section in sections:
        if not section.name.strip():
            raise PackageError(ErrorKind.INVALID_ARGUMENT, "section name is empty")
        if section.first_slide < 0 or section.slide_count < 0:
            raise PackageError(
                ErrorKind.INVALID_ARGUMENT,
                f"section '{section.name}' has a negative first slide or slide count",
            )
        for existing in seen:
            if existing.overlaps(section):
                raise PackageError(
                    ErrorKind.INVALID_ARGUMENT,
                    f"section '{section.name}' (slides {section.first_slide + 1}-{section.last_slide + 1}) "
                    f"overlaps '{existing.name}' (slides {existing.first_slide + 1}-{existing.last_slide + 1})",
                )
        seen.append(section)


def sections_from_markers(markers: Iterable[Optional[str]]) -> tuple[SlideSection, ...]:
    """Group slides by per-slide section markers.

    A marker opens a section that runs until the next marker. Slides
    before the first marker go into a leading default section so that
    every slide belongs to one. No markers at all means no sections.

    Args:
        markers: One entry per slide, the section name or a falsy value.

    Returns:
        The sections in slide order.
    """
    markers = list(markers)
    starts = [(i, name) for i, name in enumerate(markers) if name]
    if not starts:
        return ()
    if starts[0][0] != 0:
        starts.insert(0, (0, DEFAULT_SECTION_NAME))
    sections = []
    for n, (first, name) in enumerate(starts):
        end = starts[n + 1][0] if n + 1 < len(starts) else len(markers)
        sections.append(SlideSection(str(name), first, end - first))
    logger.debug(f"Grouped {len(markers)} slides into {len(sections)} sections")
    return tuple(sections)


def section_id(section: SlideSection) -> str:
    """Stable GUID for a section, derived from its name and position."""
    return "{%s}" % str(uuid.uuid5(uuid.NAMESPACE_URL, f"slidepack:section:{section.first_slide}:{section.name}")).upper()


def section_list_xml(sections: Iterable[SlideSection], slide_ids: list[int]) -> str:
    """``p:extLst`` holding the section list, or ``""`` without sections.

    Args:
        sections: Sections in slide order.
        slide_ids: The ``p:sldId`` id of each slide, by slide index.
            Section members beyond the last slide are skipped.
    """
    sections = list(sections)
    if not sections:
        return ""
    body = []
    for section in sections:
        members = "".join(
            f'<p14:sldId id="{slide_ids[i]}"/>'
            for i in range(section.first_slide, section.first_slide + section.slide_count)
            if i < len(slide_ids)
        )
        body.append(
            f'<p14:section name="{escape(section.name)}" id="{section_id(section)}">'
            f"<p14:sldIdLst>{members}</p14:sldIdLst></p14:section>"
        )
    return (
        f'<p:extLst><p:ext uri="{SECTION_LIST_URI}"><p14:sectionLst {nsdecls("p14")}>'
        f"{''.join(body)}</p14:sectionLst></p:ext></p:extLst>"
    )
