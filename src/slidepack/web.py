"""Web page to slides: headings become slide titles, their text becomes bullets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from bs4 import BeautifulSoup

from .fetch import HttpOptions, fetch
from .presentation import Presentation
from .slides import Slide, SlideLayout
from .text import BulletStyle

logger = logging.getLogger(__name__)

HEADINGS = ("h1", "h2", "h3")
MAX_BULLET_CHARS = 200
DEFAULT_MAX_SLIDES = 10
DEFAULT_MAX_BULLETS = 6


@dataclass
class WebSection:
    heading: str
    level: int
    items: list[str] = field(default_factory=list)


def _clean(text: str) -> str:
    text = " ".join(text.split())
    if len(text) > MAX_BULLET_CHARS:
        text = text[: MAX_BULLET_CHARS - 1].rstrip() + "…"
    return text


def extract_sections(html: str) -> tuple[str, list[WebSection]]:
    """Page title and the heading sections of *html*, in document order.

    Paragraphs and list items before the first heading are collected into
    a section headed by the page title.
    """
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript", "nav", "footer", "header"]):
        tag.decompose()

    title = ""
    if soup.title and soup.title.string:
        title = _clean(soup.title.string)
    if not title:
        h1 = soup.find("h1")
        title = _clean(h1.get_text(" ", strip=True)) if h1 else ""

    sections: list[WebSection] = []
    current: Optional[WebSection] = None
    for element in soup.find_all(HEADINGS + ("p", "li")):
        text = _clean(element.get_text(" ", strip=True))
        if not text:
            continue
        if element.name in HEADINGS:
            current = WebSection(text, int(element.name[1]))
            sections.append(current)
            continue
        if element.name == "p" and element.find_parent("li") is not None:
            continue
        if current is None:
            current = WebSection(title or "Introduction", 1)
            sections.append(current)
        current.items.append(text)
    logger.debug(f"Extracted {len(sections)} sections from page '{title}'")
    return title, sections


def sections_to_presentation(
    title: str,
    sections: list[WebSection],
    source: str = "",
    max_slides: int = DEFAULT_MAX_SLIDES,
    max_bullets: int = DEFAULT_MAX_BULLETS,
) -> Presentation:
    """A title slide followed by one slide per section with content.

    *max_slides* counts the title slide; each slide keeps at most
    *max_bullets* bullets.
    """
    slides = [Slide(title=title or source or "Untitled", layout=SlideLayout.CENTERED_TITLE)]
    for section in sections:
        if len(slides) >= max_slides:
            break
        if not section.items:
            continue
        slide = Slide(title=section.heading).add_bullets(section.items[:max_bullets])
        if section.level > 1:
            slide = slide.with_bullet_style(BulletStyle.DASH)
        if source:
            slide = slide.set_notes(f"Source: {source}")
        slides.append(slide)
    logger.info(f"Built {len(slides)} slides from {len(sections)} sections")
    return Presentation(title=title or source, slides=tuple(slides))


def web_to_presentation(
    url: str,
    max_slides: int = DEFAULT_MAX_SLIDES,
    max_bullets: int = DEFAULT_MAX_BULLETS,
    http: HttpOptions = HttpOptions(),
) -> Presentation:
    """Fetch *url* and convert it to a presentation.

    Raises:
        PackageError: ``io`` when the page cannot be fetched.
    """
    response = fetch(url, http)
    logger.info(f"Fetched {url}: {len(response.content)} bytes")
    title, sections = extract_sections(response.text)
    return sections_to_presentation(title, sections, url, max_slides, max_bullets)
