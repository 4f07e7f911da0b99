"""Click actions attached to shapes and text runs."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional
from urllib.parse import quote

from .xmlwriter import attrs


class LinkAction(str, Enum):
    URL = "url"
    SLIDE = "slide"
    FIRST_SLIDE = "firstslide"
    LAST_SLIDE = "lastslide"
    NEXT_SLIDE = "nextslide"
    PREVIOUS_SLIDE = "previousslide"
    END_SHOW = "endshow"
    EMAIL = "email"
    FILE = "file"


_SHOW_JUMPS = {
    LinkAction.FIRST_SLIDE,
    LinkAction.LAST_SLIDE,
    LinkAction.NEXT_SLIDE,
    LinkAction.PREVIOUS_SLIDE,
    LinkAction.END_SHOW,
}


@dataclass(frozen=True)
class Hyperlink:
    """A hyperlink or navigation action.

    Attributes:
        action: What happens on click.
        target: URL, e-mail address or file path, depending on the action.
        slide: 1-based slide number for ``LinkAction.SLIDE``.
        subject: Optional e-mail subject.
        tooltip: Optional tooltip shown on hover.
        highlight_click: Whether the click is highlighted.
    """

    action: LinkAction
    target: str = ""
    slide: int = 0
    subject: Optional[str] = None
    tooltip: Optional[str] = None
    highlight_click: bool = True

    @classmethod
    def url(cls, address: str) -> "Hyperlink":
        return cls(LinkAction.URL, target=address)

    @classmethod
    def to_slide(cls, number: int) -> "Hyperlink":
        return cls(LinkAction.SLIDE, slide=number)

    @classmethod
    def first_slide(cls) -> "Hyperlink":
        return cls(LinkAction.FIRST_SLIDE)

    @classmethod
    def last_slide(cls) -> "Hyperlink":
        return cls(LinkAction.LAST_SLIDE)

    @classmethod
    def next_slide(cls) -> "Hyperlink":
        return cls(LinkAction.NEXT_SLIDE)

    @classmethod
    def previous_slide(cls) -> "Hyperlink":
        return cls(LinkAction.PREVIOUS_SLIDE)

    @classmethod
    def end_show(cls) -> "Hyperlink":
        return cls(LinkAction.END_SHOW)

    @classmethod
    def email(cls, address: str, subject: Optional[str] = None) -> "Hyperlink":
        return cls(LinkAction.EMAIL, target=address, subject=subject)

    @classmethod
    def file(cls, path: str) -> "Hyperlink":
        return cls(LinkAction.FILE, target=path)

    def with_tooltip(self, tooltip: str) -> "Hyperlink":
        return replace(self, tooltip=tooltip)

    def with_highlight_click(self, highlight: bool) -> "Hyperlink":
        return replace(self, highlight_click=highlight)

    @property
    def needs_relationship(self) -> bool:
        return self.action not in _SHOW_JUMPS

    @property
    def is_external(self) -> bool:
        return self.action in (LinkAction.URL, LinkAction.EMAIL, LinkAction.FILE)

    @property
    def relationship_target(self) -> str:
        if self.action is LinkAction.SLIDE:
            return f"slide{self.slide}.xml"
        if self.action is LinkAction.EMAIL:
            target = f"mailto:{self.target}"
            if self.subject:
                target += f"?subject={quote(self.subject)}"
            return target
        if self.action is LinkAction.FILE:
            return f"file:///{self.target.lstrip('/')}"
        return self.target

    @property
    def ppaction(self) -> Optional[str]:
        if self.action is LinkAction.SLIDE:
            return "ppaction://hlinksldjump"
        if self.action in _SHOW_JUMPS:
            return f"ppaction://hlinkshowjump?jump={self.action.value}"
        return None


def hlink_click_xml(link: Hyperlink, rid: Optional[str]) -> str:
    """``a:hlinkClick`` element; *rid* is ignored for show jumps."""
    return "<a:hlinkClick{}/>".format(
        attrs(
            [
                ("r:id", rid if link.needs_relationship else ""),
                ("tooltip", link.tooltip),
                ("highlightClick", True if link.highlight_click else None),
                ("action", link.ppaction),
            ]
        )
    )
