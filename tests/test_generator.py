from __future__ import annotations

import pytest

from slidepack.config import Config
from slidepack.generator import PresentationGenerator
from slidepack.inspection import inspect_package
from slidepack.package import Compression
from slidepack.slides import SlideLayout


@pytest.fixture
def generator(tmp_path) -> PresentationGenerator:
    config = Config.from_dict({
        "settings": {"author": "Configured", "package": {"compression": "store"}},
        "defaults": {"layout": "TwoColumn"},
        "paths": {"project_root": ".", "content": "talk.md", "output": "build/talk.pptx"},
    }, tmp_path)
    return PresentationGenerator(config)


def test_config_supplies_author_and_layout(generator) -> None:
    assert generator.default_layout is SlideLayout.TWO_COLUMN
    assert generator.blank_to_presentation("X", 2).author == "Configured"
    assert generator.config.package_options.compression is Compression.STORE


def test_markdown_frontmatter_overrides_config(tmp_path, generator) -> None:
    md = tmp_path / "talk.md"
    md.write_text(
        "---\nauthor: Speaker\nlanguage: fr-FR\nlayout: content\n---\n\n# Opening\n\n---\n\n## Body\n- point\n",
        encoding="utf-8",
    )
    pres = generator.markdown_to_presentation(md)
    assert pres.author == "Speaker"
    assert pres.language == "fr-FR"
    assert pres.title == "Opening"
    assert [s.layout for s in pres.slides] == [SlideLayout.CENTERED_TITLE, SlideLayout.TITLE_AND_CONTENT]


def test_markdown_title_falls_back_to_file_stem(tmp_path, generator) -> None:
    md = tmp_path / "untitled-notes.md"
    md.write_text("- just a bullet\n", encoding="utf-8")
    pres = generator.markdown_to_presentation(md)
    assert pres.title == "untitled-notes"
    assert pres.slides[0].layout is SlideLayout.TWO_COLUMN


def test_generate_uses_configured_paths(tmp_path, generator) -> None:
    (tmp_path / "talk.md").write_text("# Hello\n\n---\n\n# World\n- item\n", encoding="utf-8")
    written = generator.generate()
    assert written == (tmp_path / "build" / "talk.pptx").resolve()
    assert inspect_package(written).titles == ["Hello", "World"]


def test_markdown_section_markers_reach_the_package(tmp_path, generator) -> None:
    md = tmp_path / "talk.md"
    md.write_text(
        "# Opening\n\n---\n\n<!-- section: Deep Dive -->\n## Part one\n- a\n\n---\n\n## Part two\n- b\n",
        encoding="utf-8",
    )
    pres = generator.markdown_to_presentation(md)
    assert [(s.name, s.first_slide, s.slide_count) for s in pres.sections] == [
        ("Default Section", 0, 1),
        ("Deep Dive", 1, 2),
    ]
    written = generator.save(pres, tmp_path / "talk.pptx")
    assert inspect_package(written).sections == ["Default Section", "Deep Dive"]
