"""Connector lines between points or shapes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from .errors import ErrorKind, PackageError
from .shapes import LineDash, color_xml
from .text import normalize_color
from .units import DimensionLike, to_emu_x, to_emu_y
from .xmlwriter import DEFAULT_LANG, escape, lang_attrs

LABEL_WIDTH = 914400
LABEL_HEIGHT = 276999
LABEL_FONT_SIZE = 1000


class ConnectorType(str, Enum):
    STRAIGHT = "straightConnector1"
    ELBOW = "bentConnector3"
    CURVED = "curvedConnector3"


class ArrowType(str, Enum):
    NONE = "none"
    TRIANGLE = "triangle"
    STEALTH = "stealth"
    DIAMOND = "diamond"
    OVAL = "oval"
    OPEN = "arrow"


class ArrowSize(str, Enum):
    SMALL = "sm"
    MEDIUM = "med"
    LARGE = "lg"


class ConnectionSite(int, Enum):
    """Connection-site index on a rectangular shape."""

    TOP = 0
    RIGHT = 1
    BOTTOM = 2
    LEFT = 3
    TOP_LEFT = 4
    TOP_RIGHT = 5
    BOTTOM_RIGHT = 6
    BOTTOM_LEFT = 7
    CENTER = 8


@dataclass(frozen=True)
class ConnectorLine:
    color: str = "000000"
    width: int = 12700
    dash: LineDash = LineDash.SOLID


@dataclass(frozen=True)
class Connector:
    """A connector from (start_x, start_y) to (end_x, end_y).

    ``start_shape``/``end_shape`` glue an end to a shape id and connection
    site. A label is rendered as a small text box at the midpoint.
    """

    connector_type: ConnectorType
    start_x: DimensionLike
    start_y: DimensionLike
    end_x: DimensionLike
    end_y: DimensionLike
    line: ConnectorLine = field(default_factory=ConnectorLine)
    start_arrow: ArrowType = ArrowType.NONE
    end_arrow: ArrowType = ArrowType.NONE
    arrow_size: ArrowSize = ArrowSize.MEDIUM
    start_shape: Optional[tuple[int, ConnectionSite]] = None
    end_shape: Optional[tuple[int, ConnectionSite]] = None
    label: Optional[str] = None

    @classmethod
    def straight(cls, start_x, start_y, end_x, end_y) -> "Connector":
        return cls(ConnectorType.STRAIGHT, start_x, start_y, end_x, end_y)

    @classmethod
    def elbow(cls, start_x, start_y, end_x, end_y) -> "Connector":
        return cls(ConnectorType.ELBOW, start_x, start_y, end_x, end_y)

    @classmethod
    def curved(cls, start_x, start_y, end_x, end_y) -> "Connector":
        return cls(ConnectorType.CURVED, start_x, start_y, end_x, end_y)

    def with_line(self, color: str, width: int = 12700, dash: LineDash = LineDash.SOLID) -> "Connector":
        return replace(self, line=ConnectorLine(normalize_color(color), width, dash))

    def with_arrows(self, start: ArrowType, end: ArrowType) -> "Connector":
        return replace(self, start_arrow=start, end_arrow=end)

    def with_start_arrow(self, arrow: ArrowType) -> "Connector":
        return replace(self, start_arrow=arrow)

    def with_end_arrow(self, arrow: ArrowType) -> "Connector":
        return replace(self, end_arrow=arrow)

    def with_arrow_size(self, size: ArrowSize) -> "Connector":
        return replace(self, arrow_size=size)

    def connect_start(self, shape_id: int, site: ConnectionSite) -> "Connector":
        return replace(self, start_shape=(shape_id, ConnectionSite(site)))

    def connect_end(self, shape_id: int, site: ConnectionSite) -> "Connector":
        return replace(self, end_shape=(shape_id, ConnectionSite(site)))

    def with_label(self, label: str) -> "Connector":
        return replace(self, label=label)

    def check(self) -> None:
        if not self.line.color:
            raise PackageError(ErrorKind.INVALID_ARGUMENT, "connector line has an empty color")

    @property
    def shape_id_count(self) -> int:
        return 2 if self.label else 1


def _arrow_xml(tag: str, arrow: ArrowType, size: ArrowSize) -> str:
    if arrow is ArrowType.NONE:
        return ""
    return f'<a:{tag} type="{arrow.value}" w="{size.value}" len="{size.value}"/>'


def connector_xml(connector: Connector, shape_id: int, lang: str = DEFAULT_LANG) -> str:
    """``p:cxnSp`` element, followed by its label text box when labelled."""
    x1, y1 = to_emu_x(connector.start_x), to_emu_y(connector.start_y)
    x2, y2 = to_emu_x(connector.end_x), to_emu_y(connector.end_y)
    flips = ""
    if x2 < x1:
        flips += ' flipH="1"'
    if y2 < y1:
        flips += ' flipV="1"'

    glue = ""
    if connector.start_shape is not None:
        glue += '<a:stCxn id="{}" idx="{}"/>'.format(connector.start_shape[0], int(connector.start_shape[1]))
    if connector.end_shape is not None:
        glue += '<a:endCxn id="{}" idx="{}"/>'.format(connector.end_shape[0], int(connector.end_shape[1]))
    c_nv = f"<p:cNvCxnSpPr>{glue}</p:cNvCxnSpPr>" if glue else "<p:cNvCxnSpPr/>"

    line = connector.line
    xml = (
        f'<p:cxnSp><p:nvCxnSpPr><p:cNvPr id="{shape_id}" name="Connector {shape_id - 1}"/>{c_nv}<p:nvPr/></p:nvCxnSpPr>'
        f'<p:spPr><a:xfrm{flips}><a:off x="{min(x1, x2)}" y="{min(y1, y2)}"/>'
        f'<a:ext cx="{abs(x2 - x1)}" cy="{abs(y2 - y1)}"/></a:xfrm>'
        f'<a:prstGeom prst="{connector.connector_type.value}"><a:avLst/></a:prstGeom>'
        f'<a:ln w="{line.width}"><a:solidFill>{color_xml(line.color)}</a:solidFill>'
        f'<a:prstDash val="{line.dash.value}"/>'
        f"{_arrow_xml('headEnd', connector.start_arrow, connector.arrow_size)}"
        f"{_arrow_xml('tailEnd', connector.end_arrow, connector.arrow_size)}"
        f"</a:ln></p:spPr></p:cxnSp>"
    )
    if connector.label:
        xml += _label_xml(connector.label, shape_id + 1, (x1 + x2) // 2, (y1 + y2) // 2, lang)
    return xml


def _label_xml(label: str, shape_id: int, center_x: int, center_y: int, lang: str) -> str:
    x = max(0, center_x - LABEL_WIDTH // 2)
    y = max(0, center_y - LABEL_HEIGHT // 2)
    return (
        f'<p:sp><p:nvSpPr><p:cNvPr id="{shape_id}" name="Connector Label {shape_id - 1}"/>'
        f'<p:cNvSpPr txBox="1"/><p:nvPr/></p:nvSpPr>'
        f'<p:spPr><a:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{LABEL_WIDTH}" cy="{LABEL_HEIGHT}"/></a:xfrm>'
        f'<a:prstGeom prst="rect"><a:avLst/></a:prstGeom><a:noFill/></p:spPr>'
        f'<p:txBody><a:bodyPr wrap="none" rtlCol="0" anchor="ctr"><a:spAutoFit/></a:bodyPr><a:lstStyle/>'
        f'<a:p><a:pPr algn="ctr"/><a:r><a:rPr {lang_attrs(lang)} sz="{LABEL_FONT_SIZE}" dirty="0"/>'
        f"<a:t>{escape(label)}</a:t></a:r></a:p></p:txBody></p:sp>"
    )
