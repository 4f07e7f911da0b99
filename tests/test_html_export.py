from __future__ import annotations

import base64

import pytest

from slidepack.charts import Chart, ChartKind, Series
from slidepack.errors import ErrorKind, PackageError
from slidepack.html_export import export_html, save_html
from slidepack.images import Image
from slidepack.presentation import Presentation
from slidepack.shapes import Shape, ShapeType
from slidepack.slides import Slide
from slidepack.tables import Table


def test_title_and_slides_are_escaped() -> None:
    pres = Presentation(title="R&D <Review>").add_slide(
        Slide(title="Tom & Jerry").add_bullets(["a < b", "plain"]).set_notes("Say \"hi\"")
    )
    document = export_html(pres)
    assert "<title>R&amp;D &lt;Review&gt;</title>" in document
    assert "<h1>R&amp;D &lt;Review&gt;</h1>" in document
    assert '<div class="slide" id="slide-1">' in document
    assert '<div class="slide-number">1</div>' in document
    assert "<h2>Tom &amp; Jerry</h2>" in document
    assert "<li style=\"margin-left:0px\">a &lt; b</li>" in document
    assert '<div class="notes">Say &quot;hi&quot;</div>' in document


def test_bullet_levels_are_indented() -> None:
    pres = Presentation().add_slide(Slide(title="Nested").add_bullet("child", level=2))
    assert '<li style="margin-left:48px">child</li>' in export_html(pres)


def test_section_label_marks_the_first_slide_of_each_section() -> None:
    pres = (
        Presentation(title="Deck")
        .add_slides([Slide(title="One"), Slide(title="Two"), Slide(title="Three")])
        .add_section("Intro", 0, 1)
        .add_section("Body", 1, 2)
    )
    document = export_html(pres)
    assert document.count('<div class="section">') == 2
    assert '<div class="section">Intro</div>' in document
    assert document.index('<div class="section">Body</div>') < document.index("<h2>Two</h2>")


def test_code_block_and_text_shapes() -> None:
    code = Shape(ShapeType.RECTANGLE, 0, 0, 100, 100).with_text("[python]\nif a < b:\n    pass")
    note = Shape(ShapeType.RECTANGLE, 0, 0, 100, 100).with_text("Callout")
    pres = Presentation().add_slide(Slide(title="Code").add_shape(code).add_shape(note))
    document = export_html(pres)
    assert "<pre><code>if a &lt; b:\n    pass</code></pre>" in document
    assert "<p>Callout</p>" in document


def test_tables_keep_header_and_spans() -> None:
    table = Table.from_grid([["Name", "Score"], ["Ada", "10"]])
    pres = Presentation().add_slide(Slide(title="Scores").add_table(table))
    document = export_html(pres)
    assert "<tr><th>Name</th><th>Score</th></tr>" in document
    assert "<tr><td>Ada</td><td>10</td></tr>" in document


def test_charts_render_their_data_including_zero() -> None:
    chart = (
        Chart.new(ChartKind.COLUMN, "Sales")
        .with_categories(["Q1", "Q2"])
        .add_series(Series.of("2024", [0, 5]))
    )
    document = export_html(Presentation().add_slide(Slide(title="Chart").add_chart(chart)))
    assert "<figcaption>Sales</figcaption>" in document
    assert "<tr><th>Q1</th><td>0</td></tr>" in document
    assert "<tr><th>Q2</th><td>5</td></tr>" in document


def test_images_are_embedded_as_data_uris(png_file, png_bytes) -> None:
    image = Image.from_file(png_file).with_description("A red square")
    document = export_html(Presentation().add_slide(Slide(title="Pic").add_image(image)))
    encoded = base64.b64encode(png_bytes).decode("ascii")
    assert f'<img src="data:image/png;base64,{encoded}" alt="A red square">' in document


def test_missing_image_is_not_found(tmp_path) -> None:
    pres = Presentation().add_slide(Slide(title="Pic").add_image(Image.from_file(tmp_path / "gone.png")))
    with pytest.raises(PackageError) as excinfo:
        export_html(pres)
    assert excinfo.value.kind is ErrorKind.NOT_FOUND


def test_save_html_writes_utf8(tmp_path) -> None:
    pres = Presentation(title="Café").add_slide(Slide(title="Résumé"))
    path = save_html(pres, tmp_path / "out" / "deck.html")
    assert path.exists()
    text = path.read_text(encoding="utf-8")
    assert text.startswith("<!DOCTYPE html>")
    assert "<h2>Résumé</h2>" in text
