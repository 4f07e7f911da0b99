"""Tables: grid, rows and cells with spans, borders and per-cell formatting."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional, Sequence, Union

from .text import Links, Paragraph, Run, TextAlign, normalize_color, paragraph_xml
from .units import SLIDE_WIDTH, DimensionLike, to_emu_x, to_emu_y
from .xmlwriter import DEFAULT_LANG, attrs, escape

TABLE_URI = "http://schemas.openxmlformats.org/drawingml/2006/table"
DEFAULT_ROW_HEIGHT = 370840

_MERGE_PLACEHOLDER = "<a:txBody><a:bodyPr/><a:lstStyle/><a:p/></a:txBody><a:tcPr/>"


class CellVerticalAlign(str, Enum):
    TOP = "t"
    MIDDLE = "ctr"
    BOTTOM = "b"


class BorderDash(str, Enum):
    SOLID = "solid"
    DASH = "dash"
    DOT = "dot"
    DOUBLE = "dbl"
    NONE = "none"


@dataclass(frozen=True)
class CellBorder:
    width: int = 12700
    color: str = "000000"
    dash: BorderDash = BorderDash.SOLID


@dataclass(frozen=True)
class CellBorders:
    left: Optional[CellBorder] = None
    right: Optional[CellBorder] = None
    top: Optional[CellBorder] = None
    bottom: Optional[CellBorder] = None

    @classmethod
    def all(cls, border: CellBorder) -> "CellBorders":
        return cls(border, border, border, border)


@dataclass(frozen=True)
class CellMargins:
    left: int = 91440
    right: int = 91440
    top: int = 45720
    bottom: int = 45720


@dataclass(frozen=True)
class TableCell:
    text: str = ""
    row_span: int = 1
    col_span: int = 1
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False
    text_color: Optional[str] = None
    background: Optional[str] = None
    font_size: Optional[int] = None
    font_family: Optional[str] = None
    align: Optional[TextAlign] = None
    vertical_align: CellVerticalAlign = CellVerticalAlign.MIDDLE
    borders: CellBorders = field(default_factory=CellBorders)
    margins: CellMargins = field(default_factory=CellMargins)
    merged: bool = False

    def __post_init__(self):
        object.__setattr__(self, "row_span", max(1, int(self.row_span)))
        object.__setattr__(self, "col_span", max(1, int(self.col_span)))

    @classmethod
    def placeholder(cls) -> "TableCell":
        return cls(merged=True)

    def with_span(self, row_span: int = 1, col_span: int = 1) -> "TableCell":
        return replace(self, row_span=row_span, col_span=col_span)

    def with_bold(self, bold: bool = True) -> "TableCell":
        return replace(self, bold=bold)

    def with_italic(self, italic: bool = True) -> "TableCell":
        return replace(self, italic=italic)

    def with_underline(self, underline: bool = True) -> "TableCell":
        return replace(self, underline=underline)

    def with_strike(self, strike: bool = True) -> "TableCell":
        return replace(self, strike=strike)

    def with_text_color(self, color: str) -> "TableCell":
        return replace(self, text_color=normalize_color(color))

    def with_background(self, color: str) -> "TableCell":
        return replace(self, background=normalize_color(color))

    def with_font(self, size: Optional[int] = None, family: Optional[str] = None) -> "TableCell":
        return replace(self, font_size=size, font_family=family)

    def with_align(self, align: TextAlign) -> "TableCell":
        return replace(self, align=align)

    def with_vertical_align(self, align: CellVerticalAlign) -> "TableCell":
        return replace(self, vertical_align=align)

    def with_borders(self, borders: CellBorders) -> "TableCell":
        return replace(self, borders=borders)

    def with_margins(self, margins: CellMargins) -> "TableCell":
        return replace(self, margins=margins)


@dataclass(frozen=True)
class TableRow:
    cells: tuple[TableCell, ...]
    height: Optional[int] = None

    def with_height(self, height: int) -> "TableRow":
        return replace(self, height=height)


@dataclass(frozen=True)
class Table:
    """A table positioned at (x, y); column widths are in EMU."""

    column_widths: tuple[int, ...]
    rows: tuple[TableRow, ...] = ()
    x: DimensionLike = 457200
    y: DimensionLike = 1600200
    first_row: bool = True
    band_row: bool = True

    @classmethod
    def from_grid(
        cls,
        grid: Sequence[Sequence[str]],
        column_widths: Optional[Sequence[int]] = None,
        header: bool = True,
    ) -> "Table":
        """Build a table from rows of strings; the first row is bold when *header*."""
        columns = max((len(row) for row in grid), default=0)
        if column_widths is None:
            width = (int(SLIDE_WIDTH) - 2 * 457200) // max(columns, 1)
            column_widths = [width] * columns
        rows = []
        for index, values in enumerate(grid):
            cells = tuple(TableCell(str(v), bold=header and index == 0) for v in values)
            rows.append(TableRow(cells))
        return cls(tuple(column_widths), tuple(rows), first_row=header)

    def add_row(self, cells: Iterable[TableCell], height: Optional[int] = None) -> "Table":
        return replace(self, rows=self.rows + (TableRow(tuple(cells), height),))

    def with_position(self, x: DimensionLike, y: DimensionLike) -> "Table":
        return replace(self, x=x, y=y)

    @property
    def width(self) -> int:
        return sum(self.column_widths)

    @property
    def height(self) -> int:
        return sum(row.height or DEFAULT_ROW_HEIGHT for row in self.rows)


def border_xml(tag: str, border: Optional[CellBorder]) -> str:
    """One cell border line (``a:lnL``, ``a:lnR``, ``a:lnT`` or ``a:lnB``).

    Args:
        tag: Local name of the border element.
        border: The border, or None to inherit the table style.

    Returns:
        The element XML; ``""`` for None, a zero-width unfilled line for
        ``BorderDash.NONE``.
    """
    if border is None:
        return ""
    if border.dash is BorderDash.NONE:
        return f'<a:{tag} w="0"><a:noFill/></a:{tag}>'
    compound = "dbl" if border.dash is BorderDash.DOUBLE else "sng"
    dash = "solid" if border.dash is BorderDash.DOUBLE else border.dash.value
    return (
        f'<a:{tag} w="{border.width}" cap="flat" cmpd="{compound}" algn="ctr">'
        f'<a:solidFill><a:srgbClr val="{escape(border.color)}"/></a:solidFill>'
        f'<a:prstDash val="{dash}"/></a:{tag}>'
    )


def cell_xml(cell: TableCell, lang: str = DEFAULT_LANG, links: Optional[Links] = None) -> str:
    """``a:tc`` for a real cell; the text body precedes ``a:tcPr``.

    Each line of the cell text becomes a paragraph carrying the cell's
    run formatting. Spans larger than one become ``rowSpan``/``gridSpan``.

    Args:
        cell: The cell to render.
        lang: Language tag for the runs.
        links: Relationship ids of hyperlinks on the slide.

    Returns:
        The ``a:tc`` element XML.
    """
    paragraphs = []
    for line in cell.text.split("\n"):
        runs: tuple[Run, ...] = ()
        if line:
            runs = (
                Run(
                    line,
                    bold=cell.bold,
                    italic=cell.italic,
                    underline=cell.underline,
                    strike=cell.strike,
                    size=cell.font_size,
                    color=cell.text_color,
                    font=cell.font_family,
                ),
            )
        paragraphs.append(paragraph_xml(Paragraph(runs, align=cell.align), lang, links))

    margins = cell.margins
    tc_pr_attrs = attrs(
        [
            ("marL", margins.left),
            ("marR", margins.right),
            ("marT", margins.top),
            ("marB", margins.bottom),
            ("anchor", cell.vertical_align.value),
        ]
    )
    borders = cell.borders
    tc_pr_children = (
        border_xml("lnL", borders.left)
        + border_xml("lnR", borders.right)
        + border_xml("lnT", borders.top)
        + border_xml("lnB", borders.bottom)
    )
    if cell.background:
        tc_pr_children += f'<a:solidFill><a:srgbClr val="{escape(cell.background)}"/></a:solidFill>'

    span_attrs = attrs(
        [
            ("rowSpan", cell.row_span if cell.row_span > 1 else None),
            ("gridSpan", cell.col_span if cell.col_span > 1 else None),
        ]
    )
    return (
        f"<a:tc{span_attrs}><a:txBody><a:bodyPr/><a:lstStyle/>{''.join(paragraphs)}</a:txBody>"
        f"<a:tcPr{tc_pr_attrs}>{tc_pr_children}</a:tcPr></a:tc>"
    )


def merge_placeholder_xml(horizontal: bool, vertical: bool) -> str:
    """``a:tc`` for a grid position covered by another cell's span."""
    return "<a:tc{}>{}</a:tc>".format(
        attrs([("hMerge", True if horizontal else None), ("vMerge", True if vertical else None)]),
        _MERGE_PLACEHOLDER,
    )


@dataclass(frozen=True)
class MergedSlot:
    """A grid position covered by a neighbouring cell's span."""

    horizontal: bool
    vertical: bool


def layout_rows(table: Table) -> list[list[Union[TableCell, MergedSlot]]]:
    """Place cells on the grid.

    Spans of real cells decide which positions are covered; placeholder
    cells supplied by the caller are consumed by that coverage. Rows that
    come up short are padded with empty cells to the grid width.

    Args:
        table: The table to lay out.

    Returns:
        One list per row holding, for each column, either the cell that
        starts there or the :class:`MergedSlot` covering it.
    """
    columns = len(table.column_widths)
    covered: dict[tuple[int, int], MergedSlot] = {}
    laid_out = []
    for r, row in enumerate(table.rows):
        cells = iter(cell for cell in row.cells if not cell.merged)
        slots: list[Union[TableCell, MergedSlot]] = []
        c = 0
        while True:
            if (r, c) in covered:
                slots.append(covered[(r, c)])
                c += 1
                continue
            cell = next(cells, None)
            if cell is None:
                if c < columns:
                    slots.append(TableCell())
                    c += 1
                    continue
                break
            slots.append(cell)
            for dr in range(cell.row_span):
                for dc in range(cell.col_span):
                    if dr or dc:
                        covered[(r + dr, c + dc)] = MergedSlot(horizontal=dc > 0, vertical=dr > 0)
            c += 1
        laid_out.append(slots)
    return laid_out


def table_xml(table: Table, shape_id: int, lang: str = DEFAULT_LANG, links: Optional[Links] = None) -> str:
    """``p:graphicFrame`` wrapping the ``a:tbl``."""
    x, y = to_emu_x(table.x), to_emu_y(table.y)
    grid = "".join(f'<a:gridCol w="{int(width)}"/>' for width in table.column_widths)

    rows_xml = []
    for row, slots in zip(table.rows, layout_rows(table)):
        cells = "".join(
            merge_placeholder_xml(slot.horizontal, slot.vertical) if isinstance(slot, MergedSlot) else cell_xml(slot, lang, links)
            for slot in slots
        )
        rows_xml.append(f'<a:tr h="{row.height or DEFAULT_ROW_HEIGHT}">{cells}</a:tr>')

    tbl_pr = "<a:tblPr{}/>".format(
        attrs([("firstRow", True if table.first_row else None), ("bandRow", True if table.band_row else None)])
    )
    return (
        f'<p:graphicFrame><p:nvGraphicFramePr><p:cNvPr id="{shape_id}" name="Table {shape_id - 1}"/>'
        f'<p:cNvGraphicFramePr><a:graphicFrameLocks noGrp="1"/></p:cNvGraphicFramePr><p:nvPr/></p:nvGraphicFramePr>'
        f'<p:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{table.width}" cy="{table.height}"/></p:xfrm>'
        f'<a:graphic><a:graphicData uri="{TABLE_URI}"><a:tbl>{tbl_pr}<a:tblGrid>{grid}</a:tblGrid>'
        f"{''.join(rows_xml)}</a:tbl></a:graphicData></a:graphic></p:graphicFrame>"
    )
