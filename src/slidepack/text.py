"""Text runs, paragraphs, bullets and their DrawingML serialization.

Also holds the rule-based sizing used for shape text: the auto-fit
point size and the contrast color picked from a shape's fill.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping, Optional, Sequence

from .hyperlinks import Hyperlink, hlink_click_xml
from .xmlwriter import DEFAULT_LANG, attrs, escape, lang_attrs

# Hanging indent for bullets: text at marL, bullet hangs 0.5" to the left
BULLET_INDENT_EMU = 457200

MIN_AUTOFIT_SIZE = 800
MAX_AUTOFIT_SIZE = 4400

CODE_FONT = "Consolas"
CODE_FONT_SIZE = 1200
CODE_INSETS = (91440, 45720, 91440, 45720)

WHITE = "FFFFFF"
BLACK = "000000"

Links = Mapping[Hyperlink, str]


def normalize_color(value: str) -> str:
    """``#ff0000`` and ``ff0000`` both become ``FF0000``."""
    return str(value).strip().lstrip("#").upper()


def is_dark(color: Optional[str]) -> bool:
    """True when white text reads better than black on *color*.

    Uses the luminance ``0.299R + 0.587G + 0.114B < 128``. Anything that is
    not six hex digits counts as light.
    """
    if not color:
        return False
    hex_value = normalize_color(color)
    if len(hex_value) != 6:
        return False
    try:
        r, g, b = (int(hex_value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return False
    return 0.299 * r + 0.587 * g + 0.114 * b < 128


def contrast_color(fill_color: Optional[str]) -> str:
    """White text on dark fills, black otherwise."""
    return WHITE if is_dark(fill_color) else BLACK


def autofit_font_size(width: int, height: int, text: str) -> int:
    """Font size in hundredths of a point that fits *text* in the box.

    At 18pt an average character is about 0.1" wide and a line 0.25"
    tall; 80% of the box is usable. The result is clamped to 8..44pt.
    """
    lines = text.split("\n")
    line_count = max(len(lines), 1)
    max_chars = max(max((len(line) for line in lines), default=0), 1)

    width_limited = 1800 * (0.8 * width / 914400 * 10) / max_chars
    height_limited = 1800 * (0.8 * height / 914400 / 0.25) / line_count
    size = min(width_limited, height_limited)
    return int(max(MIN_AUTOFIT_SIZE, min(MAX_AUTOFIT_SIZE, size)))


def is_code_block(text: Optional[str]) -> bool:
    """Code blocks look like ``[python]\\n...``."""
    return bool(text) and text.startswith("[") and "]\n" in text


class TextAlign(str, Enum):
    LEFT = "l"
    CENTER = "ctr"
    RIGHT = "r"
    JUSTIFY = "just"


class VerticalAnchor(str, Enum):
    TOP = "t"
    MIDDLE = "ctr"
    BOTTOM = "b"


@dataclass(frozen=True)
class Run:
    """A span of uniformly formatted text."""

    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False
    size: Optional[int] = None
    color: Optional[str] = None
    font: Optional[str] = None
    hyperlink: Optional[Hyperlink] = None

    def with_bold(self, bold: bool = True) -> "Run":
        return replace(self, bold=bold)

    def with_italic(self, italic: bool = True) -> "Run":
        return replace(self, italic=italic)

    def with_underline(self, underline: bool = True) -> "Run":
        return replace(self, underline=underline)

    def with_strike(self, strike: bool = True) -> "Run":
        return replace(self, strike=strike)

    def with_size(self, points: int) -> "Run":
        return replace(self, size=points)

    def with_color(self, color: str) -> "Run":
        return replace(self, color=normalize_color(color))

    def with_font(self, font: str) -> "Run":
        return replace(self, font=font)

    def with_hyperlink(self, link: Hyperlink) -> "Run":
        return replace(self, hyperlink=link)


@dataclass(frozen=True)
class Paragraph:
    runs: tuple[Run, ...] = ()
    align: Optional[TextAlign] = None
    level: int = 0
    space_before: Optional[int] = None
    space_after: Optional[int] = None

    @classmethod
    def of(cls, text: str, **run_format) -> "Paragraph":
        return cls(runs=(Run(text, **run_format),))

    def add_run(self, run: Run) -> "Paragraph":
        return replace(self, runs=self.runs + (run,))

    def with_align(self, align: TextAlign) -> "Paragraph":
        return replace(self, align=align)

    def with_level(self, level: int) -> "Paragraph":
        return replace(self, level=max(0, min(8, level)))

    def with_spacing(self, before: Optional[int] = None, after: Optional[int] = None) -> "Paragraph":
        return replace(self, space_before=before, space_after=after)

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


@dataclass(frozen=True)
class TextBody:
    paragraphs: tuple[Paragraph, ...] = ()
    anchor: Optional[VerticalAnchor] = None

    @classmethod
    def from_text(cls, text: str) -> "TextBody":
        return cls(tuple(Paragraph.of(line) for line in text.split("\n")))

    def add_paragraph(self, paragraph: Paragraph) -> "TextBody":
        return replace(self, paragraphs=self.paragraphs + (paragraph,))

    def with_anchor(self, anchor: VerticalAnchor) -> "TextBody":
        return replace(self, anchor=anchor)

    def hyperlinks(self) -> list[Hyperlink]:
        return [run.hyperlink for p in self.paragraphs for run in p.runs if run.hyperlink]


class BulletStyle(str, Enum):
    BULLET = "bullet"
    DASH = "dash"
    ARROW = "arrow"
    CHECK = "check"
    NUMBER = "number"
    LETTER = "letter"
    ROMAN = "roman"
    NONE = "none"


_BULLET_CHARS = {
    BulletStyle.BULLET: "•",
    BulletStyle.DASH: "–",
    BulletStyle.ARROW: "→",
    BulletStyle.CHECK: "✓",
}

_AUTO_NUMBERS = {
    BulletStyle.NUMBER: "arabicPeriod",
    BulletStyle.LETTER: "alphaLcParenR",
    BulletStyle.ROMAN: "romanUcPeriod",
}


@dataclass(frozen=True)
class Bullet:
    """One bullet point; *runs* replaces *text* when rich formatting is needed."""

    text: str
    level: int = 0
    style: Optional[BulletStyle] = None
    runs: tuple[Run, ...] = field(default=())

    def __post_init__(self):
        object.__setattr__(self, "level", max(0, min(8, int(self.level))))

    def with_level(self, level: int) -> "Bullet":
        return replace(self, level=level)

    def with_style(self, style: BulletStyle) -> "Bullet":
        return replace(self, style=style)

    def hyperlinks(self) -> list[Hyperlink]:
        return [run.hyperlink for run in self.runs if run.hyperlink]


@dataclass(frozen=True)
class CodeToken:
    """A highlighted fragment of one code line."""

    text: str
    color: str = WHITE
    bold: bool = False
    italic: bool = False


def run_xml(run: Run, lang: str = DEFAULT_LANG, links: Optional[Links] = None) -> str:
    """``a:r`` for *run*; embedded newlines become ``a:br`` elements."""
    props = rpr_xml(run, lang, links)
    pieces = []
    for i, line in enumerate(run.text.split("\n")):
        if i:
            pieces.append(f"<a:br>{props}</a:br>")
        pieces.append(f"<a:r>{props}<a:t>{escape(line)}</a:t></a:r>")
    return "".join(pieces)


def rpr_xml(run: Run, lang: str = DEFAULT_LANG, links: Optional[Links] = None) -> str:
    """``a:rPr`` for a run.

    Args:
        run: The formatted run.
        lang: Language tag written as ``lang``.
        links: Relationship ids of hyperlinks on the slide; a link missing
            from the map is written without ``r:id``.

    Returns:
        The run properties element, self-closed when it has no children.
    """
    attributes = attrs(
        [
            ("sz", run.size * 100 if run.size else None),
            ("b", True if run.bold else None),
            ("i", True if run.italic else None),
            ("u", "sng" if run.underline else None),
            ("strike", "sngStrike" if run.strike else None),
            ("dirty", "0"),
        ]
    )
    children = ""
    if run.color:
        children += f'<a:solidFill><a:srgbClr val="{escape(run.color)}"/></a:solidFill>'
    if run.font:
        children += f'<a:latin typeface="{escape(run.font)}"/>'
    if run.hyperlink is not None:
        rid = (links or {}).get(run.hyperlink)
        children += hlink_click_xml(run.hyperlink, rid)
    if not children:
        return f"<a:rPr {lang_attrs(lang)}{attributes}/>"
    return f"<a:rPr {lang_attrs(lang)}{attributes}>{children}</a:rPr>"


def paragraph_xml(paragraph: Paragraph, lang: str = DEFAULT_LANG, links: Optional[Links] = None) -> str:
    """``a:p`` for a rich paragraph; an empty paragraph keeps an ``a:endParaRPr``."""
    ppr_attrs = attrs(
        [
            ("lvl", paragraph.level or None),
            ("algn", paragraph.align.value if paragraph.align else None),
        ]
    )
    spacing = ""
    if paragraph.space_before is not None:
        spacing += f'<a:spcBef><a:spcPts val="{int(paragraph.space_before * 100)}"/></a:spcBef>'
    if paragraph.space_after is not None:
        spacing += f'<a:spcAft><a:spcPts val="{int(paragraph.space_after * 100)}"/></a:spcAft>'
    if spacing:
        ppr = f"<a:pPr{ppr_attrs}>{spacing}</a:pPr>"
    elif ppr_attrs:
        ppr = f"<a:pPr{ppr_attrs}/>"
    else:
        ppr = ""
    runs = "".join(run_xml(run, lang, links) for run in paragraph.runs)
    if not runs:
        return f"<a:p>{ppr}<a:endParaRPr {lang_attrs(lang)} dirty=\"0\"/></a:p>"
    return f"<a:p>{ppr}{runs}</a:p>"


def paragraphs_xml(paragraphs: Sequence[Paragraph], lang: str = DEFAULT_LANG, links: Optional[Links] = None) -> str:
    return "".join(paragraph_xml(p, lang, links) for p in paragraphs) or "<a:p/>"


def bullet_ppr_xml(level: int, style: Optional[BulletStyle]) -> str:
    """``a:pPr`` for a bullet paragraph.

    Args:
        level: 0-based indent level.
        style: Marker style; None inherits the placeholder's list style.

    Returns:
        The paragraph properties, or ``""`` when nothing overrides the
        inherited style.
    """
    lvl = f' lvl="{level}"' if level else ""
    if style is None:
        return f"<a:pPr{lvl}/>" if lvl else ""
    if style is BulletStyle.NONE:
        return f'<a:pPr{lvl} marL="0" indent="0"><a:buNone/></a:pPr>'
    margin = BULLET_INDENT_EMU * (level + 1)
    if style in _AUTO_NUMBERS:
        marker = f'<a:buAutoNum type="{_AUTO_NUMBERS[style]}"/>'
    else:
        marker = f'<a:buFont typeface="Arial"/><a:buChar char="{escape(_BULLET_CHARS[style])}"/>'
    return f'<a:pPr{lvl} marL="{margin}" indent="-{BULLET_INDENT_EMU}">{marker}</a:pPr>'


def bullet_xml(
    bullet: Bullet,
    lang: str = DEFAULT_LANG,
    links: Optional[Links] = None,
    default_style: Optional[BulletStyle] = None,
) -> str:
    """``a:p`` for one bullet; the bullet's own style wins over *default_style*."""
    ppr = bullet_ppr_xml(bullet.level, bullet.style or default_style)
    runs = bullet.runs or (Run(bullet.text),)
    return "<a:p>{}{}</a:p>".format(ppr, "".join(run_xml(run, lang, links) for run in runs))


def code_block_paragraphs_xml(
    text: str,
    tokens: Optional[Sequence[Sequence[CodeToken]]] = None,
    lang: str = DEFAULT_LANG,
) -> str:
    """One left-aligned monospace paragraph per line of *text*.

    *tokens* holds highlighter output per line; without it every line is
    a single white run.
    """
    paragraphs = []
    for index, line in enumerate(text.split("\n")):
        if tokens is not None and index < len(tokens):
            line_tokens = tokens[index]
        else:
            line_tokens = [CodeToken(line)]
        runs = "".join(_code_run_xml(token, lang) for token in line_tokens)
        paragraphs.append(f'<a:p><a:pPr algn="l"/>{runs}</a:p>')
    return "".join(paragraphs)


def _code_run_xml(token: CodeToken, lang: str) -> str:
    flags = attrs([("b", True if token.bold else None), ("i", True if token.italic else None)])
    return (
        f'<a:r><a:rPr {lang_attrs(lang)} sz="{CODE_FONT_SIZE}"{flags} dirty="0">'
        f'<a:solidFill><a:srgbClr val="{escape(normalize_color(token.color))}"/></a:solidFill>'
        f'<a:latin typeface="{CODE_FONT}"/>'
        f"</a:rPr><a:t>{escape(token.text)}</a:t></a:r>"
    )
