from __future__ import annotations

import io
import zipfile

import pytest

from conftest import open_package
from slidepack import Chart, ChartKind, ErrorKind, PackageError, Presentation, Series, Slide
from slidepack.inspection import inspect_package, validate_package


@pytest.fixture
def deck_bytes() -> bytes:
    chart = Chart.new(ChartKind.PIE, "Share").with_categories(["a", "b"]).add_series(Series.of("s", [1, 2]))
    return (
        Presentation(title="Review")
        .add_slide(Slide(title="Opening").set_notes("welcome everyone"))
        .add_slide(Slide(title="Numbers").add_chart(chart))
        .add_slide(Slide(title="Close"))
        .to_bytes()
    )


def rewrite(data: bytes, drop=(), replace=None) -> bytes:
    replace = replace or {}
    out = io.BytesIO()
    with open_package(data) as src, zipfile.ZipFile(out, "w") as dst:
        for name in src.namelist():
            if name in drop:
                continue
            dst.writestr(name, replace.get(name, src.read(name)))
    return out.getvalue()


def test_summary_counts_and_titles(deck_bytes) -> None:
    summary = inspect_package(deck_bytes)
    assert summary.slide_count == 3
    assert summary.chart_count == 1
    assert summary.notes_count == 1
    assert summary.media_count == 0
    assert summary.titles == ["Opening", "Numbers", "Close"]
    assert "ppt/presentation.xml" in summary.parts


def test_inspect_from_path(tmp_path, deck_bytes) -> None:
    path = tmp_path / "deck.pptx"
    path.write_bytes(deck_bytes)
    assert inspect_package(path).slide_count == 3
    assert inspect_package(str(path)).titles[0] == "Opening"


def test_fresh_package_validates_cleanly(deck_bytes) -> None:
    assert validate_package(deck_bytes) == []


def test_missing_relationship_target_is_reported(deck_bytes) -> None:
    tampered = rewrite(deck_bytes, drop={"ppt/slides/slide2.xml"})
    problems = validate_package(tampered)
    assert any("targets missing part ppt/slides/slide2.xml" in p for p in problems)


def test_unparsable_part_is_reported(deck_bytes) -> None:
    tampered = rewrite(deck_bytes, replace={"ppt/slides/slide1.xml": b"<p:sld"})
    problems = validate_package(tampered)
    assert any(p.startswith("ppt/slides/slide1.xml: unparsable XML") for p in problems)


def test_missing_content_types_short_circuits(deck_bytes) -> None:
    assert validate_package(rewrite(deck_bytes, drop={"[Content_Types].xml"})) == ["missing [Content_Types].xml"]


def test_part_without_content_type_is_reported(deck_bytes) -> None:
    out = io.BytesIO()
    out.write(rewrite(deck_bytes))
    with zipfile.ZipFile(out, "a") as archive:
        archive.writestr("ppt/extra.unknownext", b"?")
    assert "ppt/extra.unknownext: no content type" in validate_package(out.getvalue())


def test_non_zip_bytes_are_invalid() -> None:
    with pytest.raises(PackageError) as excinfo:
        inspect_package(b"definitely not a zip")
    assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT


def test_missing_file_is_not_found(tmp_path) -> None:
    with pytest.raises(PackageError) as excinfo:
        validate_package(tmp_path / "absent.pptx")
    assert excinfo.value.kind is ErrorKind.NOT_FOUND
