"""Embedded workbooks backing chart data.

The workbook writers are the authority for worksheet ranges: the chart
XML asks them for every cell reference so formulas and cell contents can
never disagree.
"""

from __future__ import annotations

import io
import re
from datetime import datetime
from typing import TYPE_CHECKING, Union

from xlsxwriter import Workbook
from xlsxwriter.utility import xl_col_to_name

if TYPE_CHECKING:
    from .charts import Chart, Series

# fixed so that identical charts produce identical bytes
WORKBOOK_CREATED = datetime(2000, 1, 1, 0, 0, 0)

CellValue = Union[str, float]


def sheet_name(chart_index: int) -> str:
    """Worksheet name for the package-global chart index (1-based)."""
    return "Sheet1" if chart_index == 1 else f"Sheet{chart_index}"


def quote_sheet(name: str) -> str:
    if re.fullmatch(r"[A-Za-z_][A-Za-z0-9_.]*", name):
        return name
    return "'{}'".format(name.replace("'", "''"))


def _ref(sheet: str, col: int, first_row: int, last_row: int) -> str:
    letter = xl_col_to_name(col)
    return f"{quote_sheet(sheet)}!${letter}${first_row}:${letter}${last_row}"


def _cell_ref(sheet: str, col: int, row: int) -> str:
    return f"{quote_sheet(sheet)}!${xl_col_to_name(col)}${row}"


class _BaseWorkbookWriter:
    """Shared members for workbook writers."""

    def __init__(self, chart: "Chart", sheet: str):
        self._chart = chart
        self.sheet = sheet

    @property
    def xlsx_blob(self) -> bytes:
        xlsx_file = io.BytesIO()
        with Workbook(xlsx_file, {"in_memory": True}) as workbook:
            workbook.set_properties({"created": WORKBOOK_CREATED})
            worksheet = workbook.add_worksheet(self.sheet)
            for row, col, value in self.cells():
                if isinstance(value, str):
                    worksheet.write_string(row, col, value)
                else:
                    worksheet.write_number(row, col, value)
        return xlsx_file.getvalue()

    def cells(self) -> list[tuple[int, int, CellValue]]:
        """Zero-based (row, col, value) triples making up the sheet."""
        raise NotImplementedError("must be implemented by each subclass")


class CategoryWorkbookWriter(_BaseWorkbookWriter):
    """Categories down column A from row 2, one column per series after it.

    Row 1 holds the series names.
    """

    def categories_ref(self) -> str:
        return _ref(self.sheet, 0, 2, max(len(self._chart.categories), 1) + 1)

    def series_name_ref(self, index: int) -> str:
        return _cell_ref(self.sheet, index + 1, 1)

    def values_ref(self, index: int, series: "Series") -> str:
        return _ref(self.sheet, index + 1, 2, max(len(series.values), 1) + 1)

    def cells(self) -> list[tuple[int, int, CellValue]]:
        cells: list[tuple[int, int, CellValue]] = []
        for row, category in enumerate(self._chart.categories, start=1):
            cells.append((row, 0, str(category)))
        for col, series in enumerate(self._chart.series, start=1):
            cells.append((0, col, series.name))
            for row, value in enumerate(series.values, start=1):
                cells.append((row, col, float(value)))
        return cells


class XyWorkbookWriter(_BaseWorkbookWriter):
    """Each series owns a block of columns: X values then Y values.

    The Y column heading carries the series name.
    """

    columns_per_series = 2

    def _first_col(self, index: int) -> int:
        return index * self.columns_per_series

    def series_name_ref(self, index: int) -> str:
        return _cell_ref(self.sheet, self._first_col(index) + 1, 1)

    def x_values_ref(self, index: int, series: "Series") -> str:
        return _ref(self.sheet, self._first_col(index), 2, max(len(series.x_values or ()), 1) + 1)

    def values_ref(self, index: int, series: "Series") -> str:
        return _ref(self.sheet, self._first_col(index) + 1, 2, max(len(series.values), 1) + 1)

    def cells(self) -> list[tuple[int, int, CellValue]]:
        cells: list[tuple[int, int, CellValue]] = []
        for index, series in enumerate(self._chart.series):
            col = self._first_col(index)
            cells.append((0, col, "X"))
            cells.append((0, col + 1, series.name))
            for row, x in enumerate(series.x_values or (), start=1):
                cells.append((row, col, float(x)))
            for row, y in enumerate(series.values, start=1):
                cells.append((row, col + 1, float(y)))
        return cells


class BubbleWorkbookWriter(XyWorkbookWriter):
    """XY layout with a third ``Size`` column per series."""

    columns_per_series = 3

    def bubble_sizes_ref(self, index: int, series: "Series") -> str:
        return _ref(self.sheet, self._first_col(index) + 2, 2, max(len(series.bubble_sizes or ()), 1) + 1)

    def cells(self) -> list[tuple[int, int, CellValue]]:
        cells = super().cells()
        for index, series in enumerate(self._chart.series):
            col = self._first_col(index) + 2
            cells.append((0, col, "Size"))
            for row, size in enumerate(series.bubble_sizes or (), start=1):
                cells.append((row, col, float(size)))
        return cells


def WorkbookWriter(chart: "Chart", chart_index: int) -> _BaseWorkbookWriter:
    """Workbook writer matching the data layout of *chart*'s kind."""
    sheet = sheet_name(chart_index)
    if chart.kind.is_bubble:
        return BubbleWorkbookWriter(chart, sheet)
    if chart.kind.is_xy:
        return XyWorkbookWriter(chart, sheet)
    return CategoryWorkbookWriter(chart, sheet)
