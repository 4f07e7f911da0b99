"""The Office theme: colors, Calibri fonts and the standard format scheme."""

from __future__ import annotations

from .xmlwriter import XML_DECLARATION, escape, nsdecls

THEME_NAME = "Office Theme"

COLOR_SCHEME = (
    ("dk1", '<a:sysClr val="windowText" lastClr="000000"/>'),
    ("lt1", '<a:sysClr val="window" lastClr="FFFFFF"/>'),
    ("dk2", '<a:srgbClr val="1F497D"/>'),
    ("lt2", '<a:srgbClr val="EEECE1"/>'),
    ("accent1", '<a:srgbClr val="4F81BD"/>'),
    ("accent2", '<a:srgbClr val="C0504D"/>'),
    ("accent3", '<a:srgbClr val="9BBB59"/>'),
    ("accent4", '<a:srgbClr val="8064A2"/>'),
    ("accent5", '<a:srgbClr val="4BACC6"/>'),
    ("accent6", '<a:srgbClr val="F79646"/>'),
    ("hlink", '<a:srgbClr val="0000FF"/>'),
    ("folHlink", '<a:srgbClr val="800080"/>'),
)

MAJOR_FONT = "Calibri"
MINOR_FONT = "Calibri"


def _font(tag: str, typeface: str) -> str:
    return f'<a:{tag}><a:latin typeface="{typeface}"/><a:ea typeface=""/><a:cs typeface=""/></a:{tag}>'


def _ph(*mods: tuple[str, int]) -> str:
    inner = "".join(f'<a:{name} val="{val}"/>' for name, val in mods)
    return f'<a:schemeClr val="phClr">{inner}</a:schemeClr>'


def _gradient(stops, angle: int, scaled: bool) -> str:
    gs = "".join(f'<a:gs pos="{pos}">{color}</a:gs>' for pos, color in stops)
    return f'<a:gradFill rotWithShape="1"><a:gsLst>{gs}</a:gsLst><a:lin ang="{angle}" scaled="{int(scaled)}"/></a:gradFill>'


def _shadow(blur: int, dist: int, alpha: int) -> str:
    return (
        f'<a:effectLst><a:outerShdw blurRad="{blur}" dist="{dist}" dir="5400000" rotWithShape="0">'
        f'<a:srgbClr val="000000"><a:alpha val="{alpha}"/></a:srgbClr></a:outerShdw></a:effectLst>'
    )


def _fmt_scheme() -> str:
    fills = (
        f"<a:solidFill>{_ph()}</a:solidFill>"
        + _gradient(
            ((0, _ph(("tint", 50000), ("satMod", 300000))),
             (35000, _ph(("tint", 37000), ("satMod", 300000))),
             (100000, _ph(("tint", 15000), ("satMod", 350000)))),
            16200000, True,
        )
        + _gradient(
            ((0, _ph(("shade", 51000), ("satMod", 130000))),
             (80000, _ph(("shade", 93000), ("satMod", 130000))),
             (100000, _ph(("shade", 94000), ("satMod", 135000)))),
            16200000, False,
        )
    )
    lines = "".join(
        f'<a:ln w="{w}" cap="flat" cmpd="sng" algn="ctr"><a:solidFill>{color}</a:solidFill>'
        '<a:prstDash val="solid"/></a:ln>'
        for w, color in ((9525, _ph(("shade", 95000), ("satMod", 105000))), (25400, _ph()), (38100, _ph()))
    )
    effects = (
        f"<a:effectStyle>{_shadow(40000, 20000, 38000)}</a:effectStyle>"
        f"<a:effectStyle>{_shadow(40000, 23000, 35000)}</a:effectStyle>"
        f"<a:effectStyle>{_shadow(40000, 23000, 35000)}</a:effectStyle>"
    )
    backgrounds = (
        f"<a:solidFill>{_ph()}</a:solidFill>"
        + _gradient(
            ((0, _ph(("tint", 40000), ("satMod", 350000))),
             (40000, _ph(("tint", 45000), ("shade", 99000), ("satMod", 350000))),
             (100000, _ph(("shade", 20000), ("satMod", 255000)))),
            16200000, True,
        )
        + _gradient(
            ((0, _ph(("tint", 80000), ("satMod", 300000))),
             (100000, _ph(("shade", 30000), ("satMod", 200000)))),
            5400000, False,
        )
    )
    return (
        f'<a:fmtScheme name="Office"><a:fillStyleLst>{fills}</a:fillStyleLst>'
        f"<a:lnStyleLst>{lines}</a:lnStyleLst>"
        f"<a:effectStyleLst>{effects}</a:effectStyleLst>"
        f"<a:bgFillStyleLst>{backgrounds}</a:bgFillStyleLst></a:fmtScheme>"
    )


def theme_xml(name: str = THEME_NAME) -> str:
    """XML for ``ppt/theme/theme{n}.xml``."""
    colors = "".join(f"<a:{slot}>{color}</a:{slot}>" for slot, color in COLOR_SCHEME)
    fonts = _font("majorFont", MAJOR_FONT) + _font("minorFont", MINOR_FONT)
    return (
        f'{XML_DECLARATION}<a:theme {nsdecls("a")} name="{escape(name)}"><a:themeElements>'
        f'<a:clrScheme name="Office">{colors}</a:clrScheme>'
        f'<a:fontScheme name="Office">{fonts}</a:fontScheme>'
        f"{_fmt_scheme()}</a:themeElements><a:objectDefaults/><a:extraClrSchemeLst/></a:theme>"
    )
