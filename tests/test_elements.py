from __future__ import annotations

import io
import zipfile

import pytest
from lxml import etree

from slidepack import Presentation, Slide
from slidepack.charts import Chart, ChartKind, Series, chart_part_xml, chart_workbook_blob
from slidepack.chart_workbook import sheet_name
from slidepack.connectors import ArrowType, ConnectionSite, Connector, connector_xml
from slidepack.errors import ErrorKind, PackageError
from slidepack.hyperlinks import Hyperlink, hlink_click_xml
from slidepack.shapes import GradientFill, Shape, ShapeType, shape_xml
from slidepack.slides import describe
from slidepack.tables import Table, TableCell, table_xml
from slidepack.xmlwriter import nsdecls

A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"


def parse_fragment(xml: str) -> etree._Element:
    return etree.fromstring(f"<root {nsdecls('a', 'r', 'p')}>{xml}</root>")


def test_merged_table_cell_emits_placeholder() -> None:
    table = (
        Table(column_widths=(914400, 914400))
        .add_row([TableCell("Header").with_span(col_span=2)])
        .add_row([TableCell("a"), TableCell("b")])
    )
    root = parse_fragment(table_xml(table, 2))

    assert len(root.findall(f".//{{{A_NS}}}gridCol")) == 2
    first_row, second_row = root.findall(f".//{{{A_NS}}}tr")
    cells = first_row.findall(f"{{{A_NS}}}tc")
    assert len(cells) == 2
    assert cells[0].get("gridSpan") == "2"
    assert cells[1].get("hMerge") == "1"
    assert [t.text for t in cells[1].iter(f"{{{A_NS}}}t")] == []
    assert cells[1].find(f"{{{A_NS}}}tcPr") is not None
    assert len(second_row.findall(f"{{{A_NS}}}tc")) == 2


def test_table_from_grid_bolds_header_row() -> None:
    table = Table.from_grid([["Name", "Score"], ["Ada", "10"]], [1000, 2000])
    assert table.column_widths == (1000, 2000)
    assert table.width == 3000
    assert table.rows[0].cells[0].bold
    assert not table.rows[1].cells[0].bold
    xml = table_xml(table, 5)
    assert 'firstRow="1"' in xml
    assert 'bandRow="1"' in xml


def test_shape_text_contrasts_with_dark_fill() -> None:
    shape = Shape(ShapeType.ROUNDED_RECTANGLE, 0, 0, 1828800, 914400).with_fill("#003366").with_text("Dark")
    xml = shape_xml(shape, 4)
    assert 'prst="roundRect"' in xml
    assert '<a:srgbClr val="003366"/>' in xml
    assert '<a:srgbClr val="FFFFFF"/>' in xml
    assert 'id="4" name="Shape 3"' in xml


def test_shape_transparency_and_rotation() -> None:
    shape = Shape(ShapeType.STAR_5, 0, 0, 100, 100).with_fill("FF0000", transparency=40).with_rotation(45)
    xml = shape_xml(shape, 2)
    assert '<a:alpha val="60000"/>' in xml
    assert 'rot="2700000"' in xml


def test_gradient_takes_precedence_over_solid_fill() -> None:
    shape = Shape(ShapeType.RECTANGLE, 0, 0, 100, 100).with_fill("00FF00").with_gradient(GradientFill.blue())
    xml = shape_xml(shape, 2)
    assert "<a:gradFill" in xml
    assert "<a:solidFill><a:srgbClr val=\"00FF00\"/>" not in xml


def test_code_block_shape_uses_monospace_paragraphs() -> None:
    shape = Shape(ShapeType.RECTANGLE, 0, 0, 4572000, 914400).with_text("[python]\nprint('hi')\nx = 1")
    xml = shape_xml(shape, 2)
    assert 'anchor="t"' in xml
    assert "Consolas" in xml
    assert "print(&apos;hi&apos;)" in xml
    assert "<a:normAutofit/>" not in xml


def test_shape_hyperlink_sits_in_cnvpr() -> None:
    link = Hyperlink.url("https://example.com").with_tooltip("Go")
    shape = Shape(ShapeType.RECTANGLE, 0, 0, 100, 100).with_hyperlink(link)
    xml = shape_xml(shape, 2, links={link: "rId7"})
    assert '<p:cNvPr id="2" name="Shape 1"><a:hlinkClick r:id="rId7" tooltip="Go"' in xml


def test_show_jump_links_need_no_relationship() -> None:
    link = Hyperlink.next_slide()
    assert not link.needs_relationship
    xml = hlink_click_xml(link, None)
    assert 'action="ppaction://hlinkshowjump?jump=nextslide"' in xml


def test_hyperlink_targets() -> None:
    assert Hyperlink.to_slide(3).relationship_target == "slide3.xml"
    assert Hyperlink.to_slide(3).ppaction == "ppaction://hlinksldjump"
    assert Hyperlink.email("a@b.c", "Hi there").relationship_target == "mailto:a@b.c?subject=Hi%20there"
    assert Hyperlink.file("/tmp/x.txt").relationship_target == "file:///tmp/x.txt"
    assert Hyperlink.url("https://x.y").is_external


def test_connector_flips_and_glue() -> None:
    connector = (
        Connector.elbow(914400, 914400, 0, 1828800)
        .with_arrows(ArrowType.NONE, ArrowType.TRIANGLE)
        .connect_start(2, ConnectionSite.RIGHT)
        .connect_end(3, ConnectionSite.LEFT)
    )
    xml = connector_xml(connector, 4)
    assert 'flipH="1"' in xml
    assert 'flipV="1"' not in xml
    assert '<a:off x="0" y="914400"/>' in xml
    assert '<a:stCxn id="2" idx="1"/><a:endCxn id="3" idx="3"/>' in xml
    assert '<a:tailEnd type="triangle" w="med" len="med"/>' in xml
    assert "headEnd" not in xml
    assert 'prst="bentConnector3"' in xml


def test_labelled_connector_uses_two_shape_ids() -> None:
    connector = Connector.straight(0, 0, 914400, 0).with_label("flows to")
    assert connector.shape_id_count == 2
    root = parse_fragment(connector_xml(connector, 6))
    ids = [el.get("id") for el in root.iter("{http://schemas.openxmlformats.org/presentationml/2006/main}cNvPr")]
    assert ids == ["6", "7"]


def test_sheet_names_follow_global_chart_index() -> None:
    assert sheet_name(1) == "Sheet1"
    assert sheet_name(4) == "Sheet4"


@pytest.mark.parametrize(
    ("kind", "fragment"),
    [
        (ChartKind.BAR, '<c:barDir val="bar"/><c:grouping val="clustered"/>'),
        (ChartKind.COLUMN_STACKED, '<c:barDir val="col"/><c:grouping val="stacked"/>'),
        (ChartKind.LINE_MARKERS, "<c:lineChart>"),
        (ChartKind.DOUGHNUT, '<c:holeSize val="50"/>'),
        (ChartKind.AREA_STACKED_100, '<c:grouping val="percentStacked"/>'),
        (ChartKind.RADAR_FILLED, '<c:radarStyle val="filled"/>'),
        (ChartKind.STOCK_OHLC, "<c:upDownBars>"),
    ],
)
def test_category_chart_kinds(kind: ChartKind, fragment: str) -> None:
    chart = (
        Chart.new(kind, "Title")
        .with_categories(["a", "b", "c"])
        .add_series(Series.of("s1", [1, 2, 3]))
        .add_series(Series.of("s2", [4, 5, 6]))
    )
    xml = chart_part_xml(chart, 1)
    assert fragment in xml
    etree.fromstring(xml.encode("utf-8"))


def test_combo_chart_splits_series_between_bars_and_lines() -> None:
    chart = Chart.new(ChartKind.COMBO).with_categories(["a"])
    for name in ("one", "two", "three"):
        chart = chart.add_series(Series.of(name, [1]))
    xml = chart_part_xml(chart, 1)
    bar, line = xml.split("<c:lineChart>")
    assert bar.count("<c:ser>") == 2
    assert line.count("<c:ser>") == 1


def test_bubble_chart_references_three_columns_per_series() -> None:
    chart = (
        Chart.new(ChartKind.BUBBLE)
        .add_series(Series.of("a", [1, 2], x_values=[3, 4], bubble_sizes=[5, 6]))
        .add_series(Series.of("b", [1, 2], x_values=[3, 4], bubble_sizes=[5, 6]))
    )
    xml = chart_part_xml(chart, 2)
    assert '<c:bubbleScale val="100"/>' in xml
    assert "Sheet2!$D$2:$D$3" in xml
    assert "Sheet2!$F$2:$F$3" in xml


def test_scatter_without_x_values_is_rejected() -> None:
    chart = Chart.new(ChartKind.SCATTER).add_series(Series.of("pts", [1, 2]))
    with pytest.raises(PackageError, match="requires x values") as excinfo:
        chart.check()
    assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT


def test_chart_workbook_is_a_valid_xlsx() -> None:
    chart = Chart.new(ChartKind.PIE).with_categories(["x", "y"]).add_series(Series.of("share", [60, 40]))
    blob = chart_workbook_blob(chart, 3)
    with zipfile.ZipFile(io.BytesIO(blob)) as workbook:
        assert "xl/worksheets/sheet1.xml" in workbook.namelist()
        assert b'name="Sheet3"' in workbook.read("xl/workbook.xml")


def test_empty_color_is_rejected_when_planning() -> None:
    shape = Shape(ShapeType.RECTANGLE, 0, 0, 100, 100).with_fill("  ")
    with pytest.raises(PackageError, match="empty color") as excinfo:
        shape.check()
    assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT

    pres = Presentation(title="x").add_slide(Slide(title="s").add_connector(Connector.straight(0, 0, 1, 1).with_line("")))
    with pytest.raises(PackageError, match="connector line has an empty color"):
        pres.to_bytes()


def test_describe_lists_only_present_elements() -> None:
    slide = Slide(title="Mixed").add_bullets(["a", "b"]).add_chart(
        Chart.new(ChartKind.PIE).with_categories(["x"]).add_series(Series.of("s", [1]))
    )
    assert describe(slide) == "Mixed [TitleAndContent]: 2 bullets, 1 charts"
    assert describe(Slide()) == "(untitled) [TitleAndContent]"
