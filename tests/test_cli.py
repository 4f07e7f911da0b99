from __future__ import annotations

import zipfile
from types import SimpleNamespace

import pytest

from slidepack import web
from slidepack.cli import build_parser, main
from slidepack.inspection import inspect_package

MARKDOWN = """---
title: Team Update
---

# Team Update

---

## Progress
- Shipped the importer
- Fixed **three** bugs
"""


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_create_blank_deck(workdir, capsys) -> None:
    assert main(["create", "out/deck.pptx", "--title", "Hello", "--slides", "2"]) == 0
    assert "Created" in capsys.readouterr().out
    summary = inspect_package(workdir / "out" / "deck.pptx")
    assert summary.titles == ["Hello", "Hello"]


def test_create_rejects_negative_slide_count(capsys) -> None:
    assert main(["create", "deck.pptx", "--slides", "-1"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_create_from_deck_file(workdir) -> None:
    (workdir / "deck.yaml").write_text("title: From YAML\nslides:\n  - One\n  - Two\n", encoding="utf-8")
    assert main(["create", "yaml.pptx", "--from", "deck.yaml"]) == 0
    assert inspect_package(workdir / "yaml.pptx").titles == ["One", "Two"]


def test_invalid_deck_reports_issues(workdir, capsys) -> None:
    (workdir / "bad.yaml").write_text("slides:\n  - layout: Nope\n", encoding="utf-8")
    assert main(["create", "bad.pptx", "--from", "bad.yaml"]) == 1
    err = capsys.readouterr().err
    assert "slides[0].layout: unknown layout 'Nope'" in err
    assert not (workdir / "bad.pptx").exists()


@pytest.mark.parametrize("command", ["md2ppt", "from-md"])
def test_markdown_conversion_defaults_output_name(workdir, capsys, command) -> None:
    (workdir / "notes.md").write_text(MARKDOWN, encoding="utf-8")
    assert main([command, "notes.md"]) == 0
    assert "notes.pptx" in capsys.readouterr().out
    summary = inspect_package(workdir / "notes.pptx")
    assert summary.titles == ["Team Update", "Progress"]


def test_markdown_conversion_can_also_write_html(workdir, capsys) -> None:
    (workdir / "notes.md").write_text(MARKDOWN, encoding="utf-8")
    assert main(["md2ppt", "notes.md", "notes.pptx", "--html", "site/notes.html"]) == 0
    assert "Wrote HTML" in capsys.readouterr().out
    page = (workdir / "site" / "notes.html").read_text(encoding="utf-8")
    assert "<h2>Progress</h2>" in page
    assert (workdir / "notes.pptx").exists()


def test_missing_markdown_file_fails(capsys) -> None:
    assert main(["md2ppt", "absent.md", "out.pptx"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_web2ppt_with_stubbed_fetch(workdir, monkeypatch) -> None:
    page = "<html><head><title>Docs</title></head><body><h2>Intro</h2><p>Hello.</p></body></html>"
    monkeypatch.setattr(web, "fetch", lambda url, http: SimpleNamespace(text=page, content=page.encode()))
    assert main(["web2ppt", "https://example.com", "site.pptx"]) == 0
    assert inspect_package(workdir / "site.pptx").titles == ["Docs", "Intro"]


def test_web2ppt_rejects_zero_max_slides(capsys) -> None:
    assert main(["web2ppt", "https://example.com", "--max-slides", "0"]) == 1
    assert "--max-slides" in capsys.readouterr().err


def test_info_and_validate(workdir, capsys) -> None:
    main(["create", "deck.pptx", "--title", "Check"])
    capsys.readouterr()

    assert main(["info", "deck.pptx"]) == 0
    out = capsys.readouterr().out
    assert "Slides:   1" in out
    assert "1. Check" in out

    assert main(["validate", "deck.pptx"]) == 0
    assert capsys.readouterr().out.strip() == "deck.pptx: OK"


def test_validate_flags_non_packages(workdir, capsys) -> None:
    (workdir / "fake.pptx").write_bytes(b"not a zip")
    assert main(["validate", "fake.pptx"]) == 1
    assert "not a ZIP package" in capsys.readouterr().err


def test_config_file_sets_author(workdir) -> None:
    (workdir / "custom.yaml").write_text("settings:\n  author: Docs Team\n", encoding="utf-8")
    assert main(["--config", "custom.yaml", "create", "a.pptx"]) == 0
    with zipfile.ZipFile(workdir / "a.pptx") as archive:
        assert b"<dc:creator>Docs Team</dc:creator>" in archive.read("docProps/core.xml")


def test_missing_config_file(capsys) -> None:
    assert main(["--config", "nope.yaml", "info", "x.pptx"]) == 1
    assert "Configuration file not found" in capsys.readouterr().err
