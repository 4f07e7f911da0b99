"""The top-level presentation model."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

from .package import PackageOptions, build_package, save_package
from .props import PrintSettings, SlideShowSettings
from .sections import SlideSection
from .slides import Slide, blank_slide

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "slidepack"


@dataclass(frozen=True)
class Presentation:
    """An ordered list of slides plus document-level settings.

    Builder methods return a new presentation; serialization never
    modifies the model.
    """

    title: str = ""
    slides: tuple[Slide, ...] = ()
    author: str = DEFAULT_AUTHOR
    language: Optional[str] = None
    timestamp: Optional[datetime] = None
    slide_show: Optional[SlideShowSettings] = None
    print_settings: Optional[PrintSettings] = None
    sections: tuple[SlideSection, ...] = ()

    def add_slide(self, slide: Slide) -> "Presentation":
        return replace(self, slides=self.slides + (slide,))

    def add_slides(self, slides: Iterable[Slide]) -> "Presentation":
        return replace(self, slides=self.slides + tuple(slides))

    def with_title(self, title: str) -> "Presentation":
        return replace(self, title=title)

    def with_author(self, author: str) -> "Presentation":
        return replace(self, author=author)

    def with_language(self, language: Optional[str]) -> "Presentation":
        return replace(self, language=language)

    def with_timestamp(self, timestamp: Optional[datetime]) -> "Presentation":
        return replace(self, timestamp=timestamp)

    def with_slide_show(self, settings: Optional[SlideShowSettings]) -> "Presentation":
        return replace(self, slide_show=settings)

    def with_print_settings(self, settings: Optional[PrintSettings]) -> "Presentation":
        return replace(self, print_settings=settings)

    def add_section(self, name: str, first_slide: int, slide_count: int) -> "Presentation":
        """Group *slide_count* slides from *first_slide* (0-based) into a named section.

        Sections are kept ordered by first slide. Overlaps are reported
        when the package is built.
        """
        section = SlideSection(str(name), first_slide, slide_count)
        return replace(self, sections=tuple(sorted(self.sections + (section,), key=lambda s: s.first_slide)))

    def with_sections(self, sections: Iterable[SlideSection]) -> "Presentation":
        return replace(self, sections=tuple(sorted(sections, key=lambda s: s.first_slide)))

    @property
    def slide_count(self) -> int:
        return len(self.slides)

    @property
    def notes_count(self) -> int:
        return sum(1 for slide in self.slides if slide.has_notes)

    def to_bytes(self, options: PackageOptions = PackageOptions()) -> bytes:
        return build_package(self, options)

    def save(self, path: Union[str, Path], options: PackageOptions = PackageOptions()) -> Path:
        return save_package(self, path, options)


def blank_presentation(title: str, slide_count: int = 1) -> Presentation:
    """A deck of *slide_count* centered-title slides, each showing *title*."""
    return Presentation(title=title, slides=tuple(blank_slide(title) for _ in range(max(0, slide_count))))
