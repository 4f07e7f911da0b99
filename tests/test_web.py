from __future__ import annotations

from types import SimpleNamespace

import pytest

from slidepack import web
from slidepack.errors import ErrorKind, PackageError
from slidepack.slides import SlideLayout
from slidepack.text import BulletStyle
from slidepack.web import WebSection, extract_sections, sections_to_presentation, web_to_presentation

PAGE = """<html><head><title>  Field   Guide </title><script>var hidden = 1;</script></head>
<body>
<nav><p>Menu</p></nav>
<p>Lead paragraph.</p>
<h1>Field Guide</h1>
<h2>Birds</h2>
<ul><li>Robin</li><li><p>Wren</p></li></ul>
<h3>Empty</h3>
<footer><p>Copyright</p></footer>
</body></html>"""


def test_extract_sections_follows_headings() -> None:
    title, sections = extract_sections(PAGE)
    assert title == "Field Guide"
    assert [(s.heading, s.level, s.items) for s in sections] == [
        ("Field Guide", 1, ["Lead paragraph."]),
        ("Field Guide", 1, []),
        ("Birds", 2, ["Robin", "Wren"]),
        ("Empty", 3, []),
    ]


def test_title_falls_back_to_first_heading() -> None:
    title, sections = extract_sections("<body><h1>Only Heading</h1><p>text</p></body>")
    assert title == "Only Heading"
    assert sections[0].items == ["text"]


def test_long_text_is_truncated() -> None:
    _, sections = extract_sections(f"<p>{'x' * 300}</p>")
    (item,) = sections[0].items
    assert len(item) == web.MAX_BULLET_CHARS
    assert item.endswith("…")
    assert sections[0].heading == "Introduction"


def test_sections_become_slides_after_a_title_slide() -> None:
    title, sections = extract_sections(PAGE)
    pres = sections_to_presentation(title, sections, "https://example.com/guide")
    cover, lead, birds = pres.slides
    assert cover.layout is SlideLayout.CENTERED_TITLE
    assert cover.title == "Field Guide"
    assert lead.bullets[0].text == "Lead paragraph."
    assert lead.bullet_style is None
    assert birds.bullet_style is BulletStyle.DASH
    assert birds.notes == "Source: https://example.com/guide"


def test_slide_and_bullet_caps() -> None:
    sections = [WebSection(f"Part {i}", 1, [f"item {j}" for j in range(10)]) for i in range(5)]
    pres = sections_to_presentation("Capped", sections, max_slides=3, max_bullets=2)
    assert pres.slide_count == 3
    assert [len(s.bullets) for s in pres.slides[1:]] == [2, 2]
    assert pres.slides[1].notes is None


def test_web_to_presentation_uses_fetched_page(monkeypatch) -> None:
    calls = []

    def fake_fetch(url, http):
        calls.append(url)
        return SimpleNamespace(text=PAGE, content=PAGE.encode("utf-8"))

    monkeypatch.setattr(web, "fetch", fake_fetch)
    pres = web_to_presentation("https://example.com/guide", max_slides=2)
    assert calls == ["https://example.com/guide"]
    assert pres.title == "Field Guide"
    assert pres.slide_count == 2


def test_fetch_failure_propagates(monkeypatch) -> None:
    def fail(url, http):
        raise PackageError(ErrorKind.IO, f"failed to fetch {url}: 503")

    monkeypatch.setattr(web, "fetch", fail)
    with pytest.raises(PackageError, match="503"):
        web_to_presentation("https://example.com/down")
