from __future__ import annotations

from pathlib import Path

import pytest

from slidepack.charts import ChartKind
from slidepack.deck import deck_from_string, load_deck, parse_length
from slidepack.errors import ConfigError
from slidepack.inspection import inspect_package, validate_package
from slidepack.slides import SlideLayout
from slidepack.text import BulletStyle
from slidepack.units import Dimension, to_emu_x, to_emu_y

DECK = """
title: Quarterly Review
author: Finance
language: de-DE
slides:
  - Opening
  - title: Revenue
    layout: two-column
    bullets:
      - Up **12%** year over year
      - text: Driven by services
        level: 1
        style: dash
    notes: Mention the one-off in March.
    charts:
      - kind: column
        title: By quarter
        categories: [Q1, Q2, Q3]
        series:
          - name: "2025"
            values: [10, 12, 15]
        x: 50%
        y: 1.5in
        legend: false
  - title: Detail
    layout: TitleOnly
    shapes:
      - type: ellipse
        fill: "#336699"
        text: Core
        x: 1in
        y: 2in
        width: 2in
        height: 1in
    tables:
      - rows: [[Region, Sales], [North, "10"]]
        column_widths: [1828800, 1828800]
    images:
      - path: photo.png
        width: 2in
"""


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (914400, 914400),
        ("1.5in", Dimension.inches(1.5)),
        ("2.54cm", Dimension.cm(2.54)),
        ("72pt", Dimension.pt(72.0)),
        ("50%", Dimension.ratio(0.5)),
        ("1200emu", 1200),
        ("  300 ", 300),
    ],
)
def test_parse_length(value, expected) -> None:
    assert parse_length(value) == expected


@pytest.mark.parametrize("value", ["wide", "3 miles", True, "", None])
def test_parse_length_rejects_garbage(value) -> None:
    with pytest.raises(ValueError):
        parse_length(value)


def test_deck_builds_slides(tmp_path, png_file) -> None:
    pres = deck_from_string(DECK, png_file.parent)
    assert pres.title == "Quarterly Review"
    assert pres.author == "Finance"
    assert pres.language == "de-DE"
    opening, revenue, detail = pres.slides

    assert opening.title == "Opening"
    assert revenue.layout is SlideLayout.TWO_COLUMN
    assert revenue.bullets[0].text == "Up 12% year over year"
    assert revenue.bullets[1].level == 1
    assert revenue.bullets[1].style is BulletStyle.DASH
    assert revenue.notes == "Mention the one-off in March."

    (chart,) = revenue.charts
    assert chart.kind is ChartKind.COLUMN
    assert chart.categories == ("Q1", "Q2", "Q3")
    assert to_emu_x(chart.x) == 4572000
    assert to_emu_y(chart.y) == 1371600
    assert chart.show_legend is False

    assert detail.layout is SlideLayout.TITLE_ONLY
    assert detail.shapes[0].text == "Core"
    assert detail.tables[0].column_widths == (1828800, 1828800)
    assert detail.images[0].source.value == str(png_file)


def test_deck_writes_a_valid_package(png_file) -> None:
    data = deck_from_string(DECK, png_file.parent).to_bytes()
    assert validate_package(data) == []
    summary = inspect_package(data)
    assert summary.slide_count == 3
    assert summary.chart_count == 1
    assert summary.titles == ["Opening", "Revenue", "Detail"]


def test_slide_section_keys_become_sections() -> None:
    text = """
slides:
  - Opening
  - title: Revenue
    section: Numbers
  - title: Costs
  - title: Questions
    section: Close
"""
    pres = deck_from_string(text)
    assert [(s.name, s.first_slide, s.slide_count) for s in pres.sections] == [
        ("Default Section", 0, 1),
        ("Numbers", 1, 2),
        ("Close", 3, 1),
    ]
    assert deck_from_string(DECK, Path(".")).sections == ()


def test_load_deck_resolves_images_next_to_file(tmp_path, png_file) -> None:
    path = tmp_path / "deck.yaml"
    path.write_text(DECK, encoding="utf-8")
    pres = load_deck(path)
    assert pres.slides[2].images[0].source.value == str(tmp_path / "photo.png")


def test_problems_are_collected_into_one_error() -> None:
    text = """
slides:
  - title: Bad
    layout: Diagonal
    bullets:
      - text: x
        style: sparkle
    shapes:
      - type: blob
    charts:
      - kind: column
        x: far
        series:
          - name: s
  - 42
"""
    with pytest.raises(ConfigError) as excinfo:
        deck_from_string(text)
    assert excinfo.value.issues == [
        "slides[0].layout: unknown layout 'Diagonal'",
        "slides[0].bullets[0].style: unknown bullet style 'sparkle'",
        "slides[0].shapes[0].type: unknown shape 'blob'",
        "slides[0].charts[0].series[0]: expected a mapping with a values list",
        "slides[0].charts[0].x: invalid length 'far'",
        "slides[1]: expected a mapping",
    ]


def test_deck_needs_a_slide_list() -> None:
    with pytest.raises(ConfigError, match="slides: expected a list of slides"):
        deck_from_string("title: Empty\n")
    with pytest.raises(ConfigError, match="top level must be a mapping"):
        deck_from_string("- just\n- a list\n")
