"""Chart model and chart-part XML.

Every cell reference in the emitted XML is obtained from the chart's
workbook writer, see :mod:`slidepack.chart_workbook`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence

from .chart_workbook import (
    BubbleWorkbookWriter,
    CategoryWorkbookWriter,
    WorkbookWriter,
)
from .errors import ErrorKind, PackageError
from .units import DimensionLike, to_emu_x, to_emu_y
from .xmlwriter import DEFAULT_LANG, XML_DECLARATION, escape, lang_attrs, nsdecls

logger = logging.getLogger(__name__)

CHART_URI = "http://schemas.openxmlformats.org/drawingml/2006/chart"

TITLE_FONT_SIZE = 1800
TITLE_COLOR = "595959"
DOUGHNUT_HOLE_SIZE = 50
BUBBLE_SCALE = 100

# axis ids only need to be unique within a chart part
CATEGORY_AXIS_ID = 500000001
VALUE_AXIS_ID = 500000002


class ChartKind(str, Enum):
    BAR = "bar"
    BAR_STACKED = "bar_stacked"
    BAR_STACKED_100 = "bar_stacked_100"
    COLUMN = "column"
    COLUMN_STACKED = "column_stacked"
    COLUMN_STACKED_100 = "column_stacked_100"
    LINE = "line"
    LINE_MARKERS = "line_markers"
    LINE_STACKED = "line_stacked"
    PIE = "pie"
    DOUGHNUT = "doughnut"
    AREA = "area"
    AREA_STACKED = "area_stacked"
    AREA_STACKED_100 = "area_stacked_100"
    SCATTER = "scatter"
    SCATTER_LINES = "scatter_lines"
    SCATTER_SMOOTH = "scatter_smooth"
    BUBBLE = "bubble"
    RADAR = "radar"
    RADAR_FILLED = "radar_filled"
    STOCK_HLC = "stock_hlc"
    STOCK_OHLC = "stock_ohlc"
    COMBO = "combo"

    @property
    def is_bubble(self) -> bool:
        return self is ChartKind.BUBBLE

    @property
    def is_xy(self) -> bool:
        return self in (ChartKind.SCATTER, ChartKind.SCATTER_LINES, ChartKind.SCATTER_SMOOTH, ChartKind.BUBBLE)

    @property
    def has_axes(self) -> bool:
        return self not in (ChartKind.PIE, ChartKind.DOUGHNUT)

    @property
    def grouping(self) -> str:
        if self.value.endswith("_stacked_100"):
            return "percentStacked"
        if self.value.endswith("_stacked"):
            return "stacked"
        if self.value.startswith(("bar", "column")):
            return "clustered"
        return "standard"


@dataclass(frozen=True)
class Series:
    """One data series.

    Attributes:
        name: Series name, written to row 1 of the workbook.
        values: Values per category; Y values for scatter and bubble charts.
        x_values: X values, required by scatter and bubble charts.
        bubble_sizes: Bubble sizes, required by bubble charts.
    """

    name: str
    values: tuple[float, ...]
    x_values: Optional[tuple[float, ...]] = None
    bubble_sizes: Optional[tuple[float, ...]] = None

    @classmethod
    def of(
        cls,
        name: str,
        values: Sequence[float],
        x_values: Optional[Sequence[float]] = None,
        bubble_sizes: Optional[Sequence[float]] = None,
    ) -> "Series":
        """Build a series from any sequences of numbers."""
        return cls(
            name,
            tuple(values),
            tuple(x_values) if x_values is not None else None,
            tuple(bubble_sizes) if bubble_sizes is not None else None,
        )


@dataclass(frozen=True)
class Chart:
    """A chart placed at (x, y) with extent (width, height)."""

    kind: ChartKind
    title: str = ""
    categories: tuple[str, ...] = ()
    series: tuple[Series, ...] = ()
    x: DimensionLike = 457200
    y: DimensionLike = 1600200
    width: DimensionLike = 8229600
    height: DimensionLike = 4572000
    show_legend: bool = True

    @classmethod
    def new(cls, kind: ChartKind, title: str = "") -> "Chart":
        return cls(ChartKind(kind), title)

    def with_title(self, title: str) -> "Chart":
        return replace(self, title=title)

    def with_categories(self, categories: Sequence[str]) -> "Chart":
        return replace(self, categories=tuple(str(c) for c in categories))

    def add_series(self, series: Series) -> "Chart":
        return replace(self, series=self.series + (series,))

    def with_position(self, x: DimensionLike, y: DimensionLike) -> "Chart":
        return replace(self, x=x, y=y)

    def with_size(self, width: DimensionLike, height: DimensionLike) -> "Chart":
        return replace(self, width=width, height=height)

    def with_legend(self, show: bool = True) -> "Chart":
        return replace(self, show_legend=show)

    def check(self) -> None:
        """Raise ``invalid_argument`` when a series lacks data its kind needs."""
        for series in self.series:
            if self.kind.is_xy and series.x_values is None:
                raise PackageError(
                    ErrorKind.INVALID_ARGUMENT,
                    f"{self.kind.value} chart series {series.name!r} requires x values",
                )
            if self.kind.is_bubble and series.bubble_sizes is None:
                raise PackageError(
                    ErrorKind.INVALID_ARGUMENT,
                    f"bubble chart series {series.name!r} requires bubble sizes",
                )


def _number(value) -> str:
    """Number as cached in chart XML; integral values lose the ``.0``."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _str_cache(values: Sequence[str]) -> str:
    points = "".join(f'<c:pt idx="{i}"><c:v>{escape(v)}</c:v></c:pt>' for i, v in enumerate(values))
    return f'<c:strCache><c:ptCount val="{len(values)}"/>{points}</c:strCache>'


def _num_cache(values: Sequence[float]) -> str:
    points = "".join(f'<c:pt idx="{i}"><c:v>{_number(v)}</c:v></c:pt>' for i, v in enumerate(values))
    return (
        f'<c:numCache><c:formatCode>General</c:formatCode><c:ptCount val="{len(values)}"/>'
        f"{points}</c:numCache>"
    )


def _num_ref(tag: str, ref: str, values: Sequence[float]) -> str:
    return f"<c:{tag}><c:numRef><c:f>{escape(ref)}</c:f>{_num_cache(values)}</c:numRef></c:{tag}>"


def _tx_xml(ref: str, name: str) -> str:
    return f"<c:tx><c:strRef><c:f>{escape(ref)}</c:f>{_str_cache([name])}</c:strRef></c:tx>"


def _cat_xml(writer: CategoryWorkbookWriter, categories: Sequence[str]) -> str:
    """``c:cat`` referencing column A of the chart workbook."""
    return f"<c:cat><c:strRef><c:f>{escape(writer.categories_ref())}</c:f>{_str_cache(categories)}</c:strRef></c:cat>"


_NO_LINE = '<c:spPr><a:ln w="19050"><a:noFill/></a:ln></c:spPr>'
_NO_MARKER = '<c:marker><c:symbol val="none"/></c:marker>'


class _ChartXmlWriter:
    """Builds ``c:chartSpace`` for one chart.

    Subclasses provide the plot (chart-type elements and axes); the
    surrounding chart space is shared.
    """

    def __init__(self, chart: Chart, workbook, lang: str):
        self._chart = chart
        self._workbook = workbook
        self._lang = lang

    @property
    def xml(self) -> str:
        """Full ``c:chartSpace`` document for this chart, including the XML declaration."""
        chart = self._chart
        legend = '<c:legend><c:legendPos val="r"/><c:overlay val="0"/></c:legend>' if chart.show_legend else ""
        return (
            f"{XML_DECLARATION}<c:chartSpace {nsdecls('c', 'a', 'r')}>"
            '<c:date1904 val="0"/><c:roundedCorners val="0"/>'
            f"<c:chart>{self._title_xml()}"
            f'<c:autoTitleDeleted val="{0 if chart.title else 1}"/>'
            f"<c:plotArea><c:layout/>{self.plot_xml()}</c:plotArea>"
            f'{legend}<c:plotVisOnly val="1"/><c:dispBlanksAs val="gap"/></c:chart>'
            '<c:externalData r:id="rId1"><c:autoUpdate val="0"/></c:externalData>'
            "</c:chartSpace>"
        )

    def plot_xml(self) -> str:
        """Chart-type element(s) and axes placed inside ``c:plotArea``."""
        raise NotImplementedError("must be implemented by each subclass")

    def _title_xml(self) -> str:
        if not self._chart.title:
            return ""
        return (
            "<c:title><c:tx><c:rich><a:bodyPr/><a:lstStyle/><a:p>"
            f'<a:pPr><a:defRPr sz="{TITLE_FONT_SIZE}" b="0"/></a:pPr>'
            f'<a:r><a:rPr {lang_attrs(self._lang)} sz="{TITLE_FONT_SIZE}" b="0">'
            f'<a:solidFill><a:srgbClr val="{TITLE_COLOR}"/></a:solidFill></a:rPr>'
            f"<a:t>{escape(self._chart.title)}</a:t></a:r></a:p></c:rich></c:tx>"
            '<c:overlay val="0"/></c:title>'
        )

    def _series_head(self, index: int, series: Series) -> str:
        """``c:idx``, ``c:order`` and the ``c:tx`` name reference shared by every series kind."""
        return (
            f'<c:idx val="{index}"/><c:order val="{index}"/>'
            f"{_tx_xml(self._workbook.series_name_ref(index), series.name)}"
        )

    def _category_series(self, index: int, series: Series, extra_before: str = "", extra_after: str = "") -> str:
        """``c:ser`` for a category chart.

        Args:
            index: 0-based series index, also the workbook column offset.
            series: The series.
            extra_before: Elements placed before ``c:cat`` (markers, line properties).
            extra_after: Elements placed after ``c:val`` (``c:smooth``).
        """
        return (
            f"<c:ser>{self._series_head(index, series)}{extra_before}"
            f"{_cat_xml(self._workbook, self._chart.categories)}"
            f"{_num_ref('val', self._workbook.values_ref(index, series), series.values)}"
            f"{extra_after}</c:ser>"
        )

    @staticmethod
    def _ax_ids() -> str:
        return f'<c:axId val="{CATEGORY_AXIS_ID}"/><c:axId val="{VALUE_AXIS_ID}"/>'

    @staticmethod
    def _cat_ax(position: str = "b") -> str:
        return (
            f'<c:catAx><c:axId val="{CATEGORY_AXIS_ID}"/><c:scaling><c:orientation val="minMax"/></c:scaling>'
            f'<c:delete val="0"/><c:axPos val="{position}"/><c:numFmt formatCode="General" sourceLinked="1"/>'
            '<c:majorTickMark val="out"/><c:minorTickMark val="none"/><c:tickLblPos val="nextTo"/>'
            f'<c:crossAx val="{VALUE_AXIS_ID}"/><c:crosses val="autoZero"/><c:auto val="1"/>'
            '<c:lblAlgn val="ctr"/><c:lblOffset val="100"/><c:noMultiLvlLbl val="0"/></c:catAx>'
        )

    @staticmethod
    def _val_ax(
        axis_id: int = VALUE_AXIS_ID,
        cross_id: int = CATEGORY_AXIS_ID,
        position: str = "l",
        cross_between: str = "between",
        gridlines: bool = True,
    ) -> str:
        """``c:valAx``; scatter and bubble charts use two of these instead of a category axis."""
        grid = "<c:majorGridlines/>" if gridlines else ""
        return (
            f'<c:valAx><c:axId val="{axis_id}"/><c:scaling><c:orientation val="minMax"/></c:scaling>'
            f'<c:delete val="0"/><c:axPos val="{position}"/>{grid}'
            '<c:numFmt formatCode="General" sourceLinked="1"/><c:majorTickMark val="out"/>'
            '<c:minorTickMark val="none"/><c:tickLblPos val="nextTo"/>'
            f'<c:crossAx val="{cross_id}"/><c:crosses val="autoZero"/>'
            f'<c:crossBetween val="{cross_between}"/></c:valAx>'
        )


class _BarChartXmlWriter(_ChartXmlWriter):
    """Clustered, stacked and percent-stacked bars and columns."""

    def plot_xml(self) -> str:
        kind = self._chart.kind
        horizontal = kind.value.startswith("bar")
        return self.bar_chart_xml(range(len(self._chart.series)), horizontal) + (
            self._cat_ax("l" if horizontal else "b") + self._val_ax(position="b" if horizontal else "l")
        )

    def bar_chart_xml(self, indices, horizontal: bool = False, grouping: Optional[str] = None) -> str:
        """``c:barChart`` holding the series at *indices*.

        Args:
            indices: Series indices to include.
            horizontal: Bars instead of columns.
            grouping: Overrides the grouping implied by the chart kind.
        """
        grouping = grouping or self._chart.kind.grouping
        series = "".join(
            self._category_series(i, self._chart.series[i], '<c:invertIfNegative val="0"/>') for i in indices
        )
        overlap = '<c:overlap val="100"/>' if grouping != "clustered" else ""
        return (
            f'<c:barChart><c:barDir val="{"bar" if horizontal else "col"}"/><c:grouping val="{grouping}"/>'
            f'<c:varyColors val="0"/>{series}<c:gapWidth val="150"/>{overlap}'
            f"{self._ax_ids()}</c:barChart>"
        )


class _LineChartXmlWriter(_ChartXmlWriter):
    """Line charts, with or without markers."""

    def plot_xml(self) -> str:
        return self.line_chart_xml(range(len(self._chart.series))) + self._cat_ax() + self._val_ax()

    def line_chart_xml(self, indices, grouping: Optional[str] = None, markers: Optional[bool] = None) -> str:
        """``c:lineChart`` holding the series at *indices*; markers default by chart kind."""
        kind = self._chart.kind
        if markers is None:
            markers = kind is ChartKind.LINE_MARKERS
        marker = "" if markers else _NO_MARKER
        series = "".join(
            self._category_series(i, self._chart.series[i], marker, '<c:smooth val="0"/>') for i in indices
        )
        return (
            f'<c:lineChart><c:grouping val="{grouping or kind.grouping}"/><c:varyColors val="0"/>'
            f'{series}<c:marker val="1"/>{self._ax_ids()}</c:lineChart>'
        )


class _PieChartXmlWriter(_ChartXmlWriter):
    """Pie and doughnut charts; neither has axes."""

    def plot_xml(self) -> str:
        series = "".join(self._category_series(i, s) for i, s in enumerate(self._chart.series))
        if self._chart.kind is ChartKind.DOUGHNUT:
            return (
                f'<c:doughnutChart><c:varyColors val="1"/>{series}<c:firstSliceAng val="0"/>'
                f'<c:holeSize val="{DOUGHNUT_HOLE_SIZE}"/></c:doughnutChart>'
            )
        return f'<c:pieChart><c:varyColors val="1"/>{series}<c:firstSliceAng val="0"/></c:pieChart>'


class _AreaChartXmlWriter(_ChartXmlWriter):
    """Area charts in all three groupings."""

    def plot_xml(self) -> str:
        series = "".join(self._category_series(i, s) for i, s in enumerate(self._chart.series))
        return (
            f'<c:areaChart><c:grouping val="{self._chart.kind.grouping}"/><c:varyColors val="0"/>'
            f"{series}{self._ax_ids()}</c:areaChart>" + self._cat_ax() + self._val_ax()
        )


class _RadarChartXmlWriter(_ChartXmlWriter):
    def plot_xml(self) -> str:
        filled = self._chart.kind is ChartKind.RADAR_FILLED
        marker = "" if filled else _NO_MARKER
        series = "".join(self._category_series(i, s, marker) for i, s in enumerate(self._chart.series))
        return (
            f'<c:radarChart><c:radarStyle val="{"filled" if filled else "marker"}"/><c:varyColors val="0"/>'
            f"{series}{self._ax_ids()}</c:radarChart>" + self._cat_ax() + self._val_ax(cross_between="between")
        )


class _StockChartXmlWriter(_ChartXmlWriter):
    """High-low-close or open-high-low-close; series are given in that order."""

    def plot_xml(self) -> str:
        series = "".join(
            self._category_series(i, s, _NO_LINE + _NO_MARKER, '<c:smooth val="0"/>')
            for i, s in enumerate(self._chart.series)
        )
        up_down = ""
        if self._chart.kind is ChartKind.STOCK_OHLC:
            up_down = (
                '<c:upDownBars><c:gapWidth val="150"/>'
                '<c:upBars><c:spPr><a:solidFill><a:srgbClr val="FFFFFF"/></a:solidFill></c:spPr></c:upBars>'
                '<c:downBars><c:spPr><a:solidFill><a:srgbClr val="000000"/></a:solidFill></c:spPr></c:downBars>'
                "</c:upDownBars>"
            )
        return (
            f"<c:stockChart>{series}<c:hiLowLines/>{up_down}{self._ax_ids()}</c:stockChart>"
            + self._cat_ax()
            + self._val_ax()
        )


class _XyChartXmlWriter(_ChartXmlWriter):
    """Scatter charts; X and Y come from separate workbook columns per series."""

    def plot_xml(self) -> str:
        kind = self._chart.kind
        style = "smoothMarker" if kind is ChartKind.SCATTER_SMOOTH else "lineMarker"
        smooth = '<c:smooth val="1"/>' if kind is ChartKind.SCATTER_SMOOTH else '<c:smooth val="0"/>'
        line = _NO_LINE if kind is ChartKind.SCATTER else ""
        series = []
        for i, s in enumerate(self._chart.series):
            series.append(
                f"<c:ser>{self._series_head(i, s)}{line}"
                f"{_num_ref('xVal', self._workbook.x_values_ref(i, s), s.x_values or ())}"
                f"{_num_ref('yVal', self._workbook.values_ref(i, s), s.values)}"
                f"{smooth}</c:ser>"
            )
        return (
            f'<c:scatterChart><c:scatterStyle val="{style}"/><c:varyColors val="0"/>'
            f"{''.join(series)}{self._ax_ids()}</c:scatterChart>" + self._xy_axes()
        )

    def _xy_axes(self) -> str:
        return self._val_ax(
            CATEGORY_AXIS_ID, VALUE_AXIS_ID, position="b", cross_between="midCat", gridlines=False
        ) + self._val_ax(VALUE_AXIS_ID, CATEGORY_AXIS_ID, position="l", cross_between="midCat")


class _BubbleChartXmlWriter(_XyChartXmlWriter):
    """Bubble charts; a third workbook column per series holds the sizes."""

    def plot_xml(self) -> str:
        workbook: BubbleWorkbookWriter = self._workbook
        series = []
        for i, s in enumerate(self._chart.series):
            series.append(
                f'<c:ser>{self._series_head(i, s)}<c:invertIfNegative val="0"/>'
                f"{_num_ref('xVal', workbook.x_values_ref(i, s), s.x_values or ())}"
                f"{_num_ref('yVal', workbook.values_ref(i, s), s.values)}"
                f"{_num_ref('bubbleSize', workbook.bubble_sizes_ref(i, s), s.bubble_sizes or ())}"
                '<c:bubble3D val="0"/></c:ser>'
            )
        return (
            f'<c:bubbleChart><c:varyColors val="0"/>{"".join(series)}'
            f'<c:bubbleScale val="{BUBBLE_SCALE}"/><c:showNegBubbles val="0"/>'
            f"{self._ax_ids()}</c:bubbleChart>" + self._xy_axes()
        )


class _ComboChartXmlWriter(_BarChartXmlWriter, _LineChartXmlWriter):
    """First half of the series as clustered columns, the rest as lines."""

    def plot_xml(self) -> str:
        count = len(self._chart.series)
        split = (count + 1) // 2
        plot = self.bar_chart_xml(range(split), horizontal=False, grouping="clustered")
        if split < count:
            plot += self.line_chart_xml(range(split, count), grouping="standard", markers=True)
        return plot + self._cat_ax() + self._val_ax()


def _writer_class(kind: ChartKind):
    """XML writer class for *kind*."""
    if kind is ChartKind.COMBO:
        return _ComboChartXmlWriter
    if kind is ChartKind.BUBBLE:
        return _BubbleChartXmlWriter
    if kind.is_xy:
        return _XyChartXmlWriter
    if kind in (ChartKind.PIE, ChartKind.DOUGHNUT):
        return _PieChartXmlWriter
    if kind in (ChartKind.STOCK_HLC, ChartKind.STOCK_OHLC):
        return _StockChartXmlWriter
    if kind in (ChartKind.RADAR, ChartKind.RADAR_FILLED):
        return _RadarChartXmlWriter
    if kind.value.startswith("area"):
        return _AreaChartXmlWriter
    if kind.value.startswith("line"):
        return _LineChartXmlWriter
    return _BarChartXmlWriter


def chart_part_xml(chart: Chart, chart_index: int, lang: str = DEFAULT_LANG) -> str:
    """XML for ``ppt/charts/chart{chart_index}.xml``."""
    workbook = WorkbookWriter(chart, chart_index)
    logger.debug(f"Chart {chart_index}: {chart.kind.value} with {len(chart.series)} series on {workbook.sheet}")
    return _writer_class(chart.kind)(chart, workbook, lang).xml


def chart_workbook_blob(chart: Chart, chart_index: int) -> bytes:
    """Bytes for ``ppt/embeddings/chart{chart_index}_data.xlsx``."""
    return WorkbookWriter(chart, chart_index).xlsx_blob


def chart_frame_xml(chart: Chart, shape_id: int, rid: str) -> str:
    """``p:graphicFrame`` referencing a chart part through *rid*."""
    x, y = to_emu_x(chart.x), to_emu_y(chart.y)
    cx, cy = to_emu_x(chart.width), to_emu_y(chart.height)
    return (
        f'<p:graphicFrame><p:nvGraphicFramePr><p:cNvPr id="{shape_id}" name="Chart {shape_id - 1}"/>'
        f"<p:cNvGraphicFramePr/><p:nvPr/></p:nvGraphicFramePr>"
        f'<p:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></p:xfrm>'
        f'<a:graphic><a:graphicData uri="{CHART_URI}">'
        f'<c:chart {nsdecls("c", "r")} r:id="{rid}"/></a:graphicData></a:graphic></p:graphicFrame>'
    )

