"""Auto shapes: preset geometry, fills, outlines and shape text."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence

from .errors import ErrorKind, PackageError
from .hyperlinks import Hyperlink, hlink_click_xml
from .text import (
    CODE_INSETS,
    CodeToken,
    Links,
    TextBody,
    autofit_font_size,
    code_block_paragraphs_xml,
    contrast_color,
    is_code_block,
    normalize_color,
    paragraphs_xml,
)
from .units import DimensionLike, to_emu_x, to_emu_y
from .xmlwriter import DEFAULT_LANG, attrs, escape, lang_attrs

DEFAULT_LINE_WIDTH = 12700


class ShapeType(str, Enum):
    """Preset geometries; the value is the DrawingML ``prst`` name."""

    RECTANGLE = "rect"
    ROUNDED_RECTANGLE = "roundRect"
    ELLIPSE = "ellipse"
    TRIANGLE = "triangle"
    RIGHT_TRIANGLE = "rtTriangle"
    DIAMOND = "diamond"
    PENTAGON = "pentagon"
    HEXAGON = "hexagon"
    OCTAGON = "octagon"
    PARALLELOGRAM = "parallelogram"
    TRAPEZOID = "trapezoid"
    STAR_4 = "star4"
    STAR_5 = "star5"
    STAR_6 = "star6"
    STAR_8 = "star8"
    STAR_12 = "star12"
    RIGHT_ARROW = "rightArrow"
    LEFT_ARROW = "leftArrow"
    UP_ARROW = "upArrow"
    DOWN_ARROW = "downArrow"
    LEFT_RIGHT_ARROW = "leftRightArrow"
    UP_DOWN_ARROW = "upDownArrow"
    CHEVRON = "chevron"
    HOME_PLATE = "homePlate"
    HEART = "heart"
    LIGHTNING_BOLT = "lightningBolt"
    SUN = "sun"
    MOON = "moon"
    CLOUD = "cloud"
    SMILEY_FACE = "smileyFace"
    DONUT = "donut"
    NO_SMOKING = "noSmoking"
    BLOCK_ARC = "blockArc"
    CAN = "can"
    CUBE = "cube"
    PLUS = "plus"
    FRAME = "frame"
    PLAQUE = "plaque"
    FOLDED_CORNER = "foldedCorner"
    BEVEL = "bevel"
    RECTANGULAR_CALLOUT = "wedgeRectCallout"
    ROUNDED_RECTANGULAR_CALLOUT = "wedgeRoundRectCallout"
    OVAL_CALLOUT = "wedgeEllipseCallout"
    CLOUD_CALLOUT = "cloudCallout"
    FLOWCHART_PROCESS = "flowChartProcess"
    FLOWCHART_DECISION = "flowChartDecision"
    FLOWCHART_TERMINATOR = "flowChartTerminator"
    FLOWCHART_DOCUMENT = "flowChartDocument"
    FLOWCHART_DATA = "flowChartInputOutput"
    FLOWCHART_CONNECTOR = "flowChartConnector"


class LineDash(str, Enum):
    SOLID = "solid"
    DASH = "dash"
    DOT = "dot"
    DASH_DOT = "dashDot"
    LONG_DASH = "lgDash"
    LONG_DASH_DOT = "lgDashDot"
    LONG_DASH_DOT_DOT = "lgDashDotDot"
    SYSTEM_DASH = "sysDash"
    SYSTEM_DOT = "sysDot"


class GradientDirection(Enum):
    """Linear gradient angle in 60000ths of a degree."""

    HORIZONTAL = 0
    VERTICAL = 5400000
    DIAGONAL_DOWN = 2700000
    DIAGONAL_UP = 18900000


@dataclass(frozen=True)
class SolidFill:
    color: str
    transparency: int = 0

    def __post_init__(self):
        object.__setattr__(self, "transparency", max(0, min(100, int(self.transparency))))


@dataclass(frozen=True)
class GradientStop:
    position: int
    color: str
    transparency: int = 0

    def __post_init__(self):
        object.__setattr__(self, "position", max(0, min(100000, int(self.position))))
        object.__setattr__(self, "transparency", max(0, min(100, int(self.transparency))))


@dataclass(frozen=True)
class GradientFill:
    """Linear gradient; *angle* (whole degrees) overrides *direction*."""

    stops: tuple[GradientStop, ...]
    direction: GradientDirection = GradientDirection.HORIZONTAL
    angle: Optional[int] = None

    @classmethod
    def two_color(cls, start: str, end: str, direction: GradientDirection = GradientDirection.HORIZONTAL) -> "GradientFill":
        return cls(
            stops=(GradientStop(0, normalize_color(start)), GradientStop(100000, normalize_color(end))),
            direction=direction,
        )

    @classmethod
    def blue(cls) -> "GradientFill":
        return cls.two_color("0066CC", "003366", GradientDirection.VERTICAL)

    @classmethod
    def green(cls) -> "GradientFill":
        return cls.two_color("00CC66", "006633", GradientDirection.VERTICAL)

    @classmethod
    def red(cls) -> "GradientFill":
        return cls.two_color("CC0000", "660000", GradientDirection.VERTICAL)

    @classmethod
    def orange(cls) -> "GradientFill":
        return cls.two_color("FF9900", "CC6600", GradientDirection.VERTICAL)

    def add_stop(self, stop: GradientStop) -> "GradientFill":
        return replace(self, stops=self.stops + (stop,))

    def with_angle(self, degrees: int) -> "GradientFill":
        return replace(self, angle=degrees)

    @property
    def angle_value(self) -> int:
        if self.angle is not None:
            return self.angle * 60000
        return self.direction.value


@dataclass(frozen=True)
class LineStyle:
    color: str = "000000"
    width: int = DEFAULT_LINE_WIDTH
    dash: Optional[LineDash] = None


@dataclass(frozen=True)
class Shape:
    """An auto shape placed on a slide.

    A gradient fill takes precedence over a solid fill when both are set.
    ``text_body`` replaces the auto-fitted ``text`` when rich formatting is
    needed; ``code_tokens`` feeds highlighted lines to code-block text.
    """

    shape_type: ShapeType
    x: DimensionLike
    y: DimensionLike
    width: DimensionLike
    height: DimensionLike
    fill: Optional[SolidFill] = None
    gradient: Optional[GradientFill] = None
    line: Optional[LineStyle] = None
    text: Optional[str] = None
    text_body: Optional[TextBody] = None
    rotation: Optional[int] = None
    hyperlink: Optional[Hyperlink] = None
    code_tokens: Optional[tuple[tuple[CodeToken, ...], ...]] = None
    name: Optional[str] = None

    def with_fill(self, color: str, transparency: int = 0) -> "Shape":
        return replace(self, fill=SolidFill(normalize_color(color), transparency))

    def with_gradient(self, gradient: GradientFill) -> "Shape":
        return replace(self, gradient=gradient)

    def with_line(self, color: str, width: int = DEFAULT_LINE_WIDTH, dash: Optional[LineDash] = None) -> "Shape":
        return replace(self, line=LineStyle(normalize_color(color), width, dash))

    def with_text(self, text: str) -> "Shape":
        return replace(self, text=text)

    def with_text_body(self, body: TextBody) -> "Shape":
        return replace(self, text_body=body)

    def with_rotation(self, degrees: int) -> "Shape":
        return replace(self, rotation=degrees)

    def with_hyperlink(self, link: Hyperlink) -> "Shape":
        return replace(self, hyperlink=link)

    def with_code_tokens(self, lines: Sequence[Sequence[CodeToken]]) -> "Shape":
        return replace(self, code_tokens=tuple(tuple(line) for line in lines))

    def with_name(self, name: str) -> "Shape":
        return replace(self, name=name)

    def check(self) -> None:
        """Raise ``invalid_argument`` for an empty fill, gradient or line color."""
        colors = []
        if self.fill is not None:
            colors.append(self.fill.color)
        if self.gradient is not None:
            colors.extend(stop.color for stop in self.gradient.stops)
        if self.line is not None:
            colors.append(self.line.color)
        if any(not color for color in colors):
            raise PackageError(ErrorKind.INVALID_ARGUMENT, f"{self.name or self.shape_type.value} shape has an empty color")

    def hyperlinks(self) -> list[Hyperlink]:
        links = [self.hyperlink] if self.hyperlink else []
        if self.text_body is not None:
            links.extend(self.text_body.hyperlinks())
        return links


def color_xml(color: str, transparency: int = 0) -> str:
    """``a:srgbClr``; *transparency* in percent becomes an ``a:alpha`` child."""
    if transparency:
        alpha = (100 - transparency) * 1000
        return f'<a:srgbClr val="{escape(color)}"><a:alpha val="{alpha}"/></a:srgbClr>'
    return f'<a:srgbClr val="{escape(color)}"/>'


def solid_fill_xml(fill: SolidFill) -> str:
    return f"<a:solidFill>{color_xml(fill.color, fill.transparency)}</a:solidFill>"


def gradient_fill_xml(gradient: GradientFill) -> str:
    """Linear ``a:gradFill`` with the stops in the order given."""
    stops = "".join(
        f'<a:gs pos="{stop.position}">{color_xml(stop.color, stop.transparency)}</a:gs>'
        for stop in gradient.stops
    )
    return f'<a:gradFill rotWithShape="1"><a:gsLst>{stops}</a:gsLst><a:lin ang="{gradient.angle_value}" scaled="1"/></a:gradFill>'


def line_xml(line: LineStyle) -> str:
    dash = f'<a:prstDash val="{line.dash.value}"/>' if line.dash else ""
    return f'<a:ln w="{line.width}"><a:solidFill>{color_xml(line.color)}</a:solidFill>{dash}</a:ln>'


def fill_xml(shape: Shape) -> str:
    """Fill of a shape; a gradient wins over a solid fill, and no fill means the theme default."""
    if shape.gradient is not None:
        return gradient_fill_xml(shape.gradient)
    if shape.fill is not None:
        return solid_fill_xml(shape.fill)
    return ""


def shape_text_xml(shape: Shape, width: int, height: int, lang: str = DEFAULT_LANG, links: Optional[Links] = None) -> str:
    """``p:txBody`` of a shape.

    A rich text body is written as given. Plain text is either a code
    block (monospace, token colored, top anchored) or label text whose
    size is fitted to the shape and whose color contrasts with the fill.

    Args:
        shape: The shape.
        width: Shape width in EMU, used to fit the font size.
        height: Shape height in EMU.
        lang: Language tag for the runs.
        links: Relationship ids of hyperlinks on the slide.

    Returns:
        The text body XML; an empty paragraph when the shape has no text.
    """
    if shape.text_body is not None:
        anchor = shape.text_body.anchor.value if shape.text_body.anchor else None
        body_pr = "<a:bodyPr{}/>".format(attrs([("wrap", "square"), ("rtlCol", "0"), ("anchor", anchor)]))
        return f"<p:txBody>{body_pr}<a:lstStyle/>{paragraphs_xml(shape.text_body.paragraphs, lang, links)}</p:txBody>"

    text = shape.text
    if not text:
        return "<p:txBody><a:bodyPr/><a:lstStyle/><a:p/></p:txBody>"

    if is_code_block(text):
        left, top, right, bottom = CODE_INSETS
        return (
            f'<p:txBody><a:bodyPr wrap="square" rtlCol="0" anchor="t" lIns="{left}" tIns="{top}" rIns="{right}" bIns="{bottom}"/>'
            f"<a:lstStyle/>{code_block_paragraphs_xml(text, shape.code_tokens, lang)}</p:txBody>"
        )

    size = autofit_font_size(width, height, text)
    color = contrast_color(shape.fill.color if shape.fill and shape.gradient is None else None)
    multiline = "\n" in text
    align = "l" if multiline else "ctr"
    anchor = "t" if multiline else "ctr"
    paragraphs = "".join(
        f'<a:p><a:pPr algn="{align}"/><a:r><a:rPr {lang_attrs(lang)} sz="{size}" dirty="0">'
        f'<a:solidFill><a:srgbClr val="{color}"/></a:solidFill></a:rPr>'
        f"<a:t>{escape(line)}</a:t></a:r></a:p>"
        for line in text.split("\n")
    )
    return (
        f'<p:txBody><a:bodyPr wrap="square" rtlCol="0" anchor="{anchor}"><a:normAutofit/></a:bodyPr>'
        f"<a:lstStyle/>{paragraphs}</p:txBody>"
    )


def shape_xml(shape: Shape, shape_id: int, lang: str = DEFAULT_LANG, links: Optional[Links] = None) -> str:
    """``p:sp`` element for *shape* with the given slide-unique id."""
    x, y = to_emu_x(shape.x), to_emu_y(shape.y)
    cx, cy = to_emu_x(shape.width), to_emu_y(shape.height)
    name = shape.name or f"Shape {shape_id - 1}"

    hlink = ""
    if shape.hyperlink is not None:
        hlink = hlink_click_xml(shape.hyperlink, (links or {}).get(shape.hyperlink))
    if hlink:
        c_nv_pr = f'<p:cNvPr id="{shape_id}" name="{escape(name)}">{hlink}</p:cNvPr>'
    else:
        c_nv_pr = f'<p:cNvPr id="{shape_id}" name="{escape(name)}"/>'

    rot = f' rot="{shape.rotation * 60000}"' if shape.rotation else ""
    line = line_xml(shape.line) if shape.line is not None else ""
    return (
        f"<p:sp><p:nvSpPr>{c_nv_pr}<p:cNvSpPr/><p:nvPr/></p:nvSpPr>"
        f'<p:spPr><a:xfrm{rot}><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm>'
        f'<a:prstGeom prst="{shape.shape_type.value}"><a:avLst/></a:prstGeom>'
        f"{fill_xml(shape)}{line}</p:spPr>"
        f"{shape_text_xml(shape, cx, cy, lang, links)}</p:sp>"
    )
