"""The fixed chart style (``cs:chartStyle``) and color (``cs:colorStyle``) parts."""

from __future__ import annotations

from .xmlwriter import XML_DECLARATION, nsdecls

STYLE_ID = 10


def _tx1(mod: int, off: int) -> str:
    return f'<a:schemeClr val="tx1"><a:lumMod val="{mod}"/><a:lumOff val="{off}"/></a:schemeClr>'


def _line(width: int, color: str) -> str:
    return (
        f'<cs:spPr><a:ln w="{width}" cap="flat" cmpd="sng" algn="ctr">'
        f"<a:solidFill>{color}</a:solidFill><a:round/></a:ln></cs:spPr>"
    )


_PH = '<a:schemeClr val="phClr"/>'
_NO_FILL_NO_LINE = "<cs:spPr><a:noFill/><a:ln><a:noFill/></a:ln></cs:spPr>"
_AXIS_LINE = _line(9525, _tx1(15000, 85000))

# name, spPr, defRPr size, style-colored refs (line, fill), font color
_ENTRIES = (
    ("axisTitle", "", 1330, (False, False), _tx1(65000, 35000)),
    ("categoryAxis", _AXIS_LINE, 1197, (False, False), _tx1(65000, 35000)),
    (
        "chartArea",
        '<cs:spPr><a:solidFill><a:schemeClr val="bg1"/></a:solidFill>'
        f'<a:ln w="9525" cap="flat" cmpd="sng" algn="ctr"><a:solidFill>{_tx1(15000, 85000)}</a:solidFill>'
        "<a:round/></a:ln></cs:spPr>",
        1330,
        (False, False),
        '<a:schemeClr val="tx1"/>',
    ),
    ("dataLabel", "", 1197, (False, False), _tx1(75000, 25000)),
    ("dataPoint", f"<cs:spPr><a:solidFill>{_PH}</a:solidFill></cs:spPr>", None, (False, True), '<a:schemeClr val="tx1"/>'),
    ("dataPoint3D", f"<cs:spPr><a:solidFill>{_PH}</a:solidFill></cs:spPr>", None, (False, True), '<a:schemeClr val="tx1"/>'),
    (
        "dataPointLine",
        f'<cs:spPr><a:ln w="28575" cap="rnd"><a:solidFill>{_PH}</a:solidFill><a:round/></a:ln></cs:spPr>',
        None,
        (True, False),
        '<a:schemeClr val="tx1"/>',
    ),
    (
        "dataPointMarker",
        f'<cs:spPr><a:solidFill>{_PH}</a:solidFill><a:ln w="9525"><a:solidFill>{_PH}</a:solidFill></a:ln></cs:spPr>',
        None,
        (True, True),
        '<a:schemeClr val="tx1"/>',
    ),
    (
        "dataPointWireframe",
        f'<cs:spPr><a:ln w="9525" cap="rnd"><a:solidFill>{_PH}</a:solidFill><a:round/></a:ln></cs:spPr>',
        None,
        (True, False),
        '<a:schemeClr val="tx1"/>',
    ),
    ("dataTable", _line(9525, _tx1(15000, 85000)).replace("<cs:spPr>", "<cs:spPr><a:noFill/>"), 1197, (False, False), _tx1(65000, 35000)),
    (
        "downBar",
        f'<cs:spPr><a:solidFill><a:schemeClr val="dk1"><a:lumMod val="65000"/><a:lumOff val="35000"/></a:schemeClr>'
        '</a:solidFill><a:ln w="9525"><a:solidFill><a:schemeClr val="tx1"><a:lumMod val="65000"/>'
        '<a:lumOff val="35000"/></a:schemeClr></a:solidFill></a:ln></cs:spPr>',
        None,
        (False, False),
        '<a:schemeClr val="tx1"/>',
    ),
    ("dropLine", _line(9525, _tx1(35000, 65000)), None, (False, False), '<a:schemeClr val="tx1"/>'),
    ("errorBar", _line(9525, _tx1(65000, 35000)), None, (False, False), '<a:schemeClr val="tx1"/>'),
    ("floor", _NO_FILL_NO_LINE, None, (False, False), '<a:schemeClr val="tx1"/>'),
    ("gridlineMajor", _AXIS_LINE, None, (False, False), '<a:schemeClr val="tx1"/>'),
    ("gridlineMinor", _line(9525, _tx1(5000, 95000)), None, (False, False), '<a:schemeClr val="tx1"/>'),
    ("hiLoLine", _line(9525, _tx1(75000, 25000)), None, (False, False), '<a:schemeClr val="tx1"/>'),
    ("leaderLine", _line(9525, _tx1(35000, 65000)), None, (False, False), '<a:schemeClr val="tx1"/>'),
    ("legend", "", 1197, (False, False), _tx1(65000, 35000)),
    ("plotArea", "", None, (False, False), '<a:schemeClr val="tx1"/>'),
    ("plotArea3D", "", None, (False, False), '<a:schemeClr val="tx1"/>'),
    ("seriesAxis", _AXIS_LINE, 1197, (False, False), _tx1(65000, 35000)),
    ("seriesLine", _line(9525, _tx1(35000, 65000)), None, (False, False), '<a:schemeClr val="tx1"/>'),
    ("title", "", 1862, (False, False), _tx1(65000, 35000)),
    (
        "trendline",
        f'<cs:spPr><a:ln w="19050" cap="rnd"><a:solidFill>{_PH}</a:solidFill>'
        '<a:prstDash val="sysDot"/></a:ln></cs:spPr>',
        None,
        (True, False),
        '<a:schemeClr val="tx1"/>',
    ),
    ("trendlineLabel", "", 1197, (False, False), _tx1(65000, 35000)),
    (
        "upBar",
        '<cs:spPr><a:solidFill><a:schemeClr val="lt1"/></a:solidFill>'
        f'<a:ln w="9525"><a:solidFill>{_tx1(15000, 85000)}</a:solidFill></a:ln></cs:spPr>',
        None,
        (False, False),
        '<a:schemeClr val="tx1"/>',
    ),
    ("valueAxis", "", 1197, (False, False), _tx1(65000, 35000)),
    ("wall", _NO_FILL_NO_LINE, None, (False, False), '<a:schemeClr val="tx1"/>'),
)

_VARIATIONS = (
    "",
    '<a:lumMod val="60000"/>',
    '<a:lumMod val="80000"/><a:lumOff val="20000"/>',
    '<a:lumMod val="80000"/>',
    '<a:lumMod val="60000"/><a:lumOff val="40000"/>',
    '<a:lumMod val="50000"/>',
    '<a:lumMod val="70000"/><a:lumOff val="30000"/>',
    '<a:lumMod val="70000"/>',
    '<a:lumMod val="50000"/><a:lumOff val="50000"/>',
)


def _ref(tag: str, styled: bool) -> str:
    idx = 1 if styled and tag == "fillRef" else 0
    if styled:
        return f'<cs:{tag} idx="{idx}"><cs:styleClr val="auto"/></cs:{tag}>'
    return f'<cs:{tag} idx="{idx}"/>'


def _entry(name, sp_pr, size, styled, font_color) -> str:
    line_styled, fill_styled = styled
    def_rpr = f'<cs:defRPr sz="{size}" kern="1200"/>' if size else ""
    if name == "title" and size:
        def_rpr = f'<cs:defRPr sz="{size}" b="0" kern="1200" spc="0" baseline="0"/>'
    return (
        f"<cs:{name}>{_ref('lnRef', line_styled)}{_ref('fillRef', fill_styled)}"
        '<cs:effectRef idx="0"/>'
        f'<cs:fontRef idx="minor">{font_color}</cs:fontRef>'
        f"{sp_pr}{def_rpr}</cs:{name}>"
    )


def chart_style_xml() -> str:
    """XML for ``ppt/charts/style{n}.xml``; identical for every chart."""
    entries = "".join(_entry(*entry) for entry in _ENTRIES)
    return f'{XML_DECLARATION}<cs:chartStyle {nsdecls("cs", "a")} id="{STYLE_ID}">{entries}</cs:chartStyle>'


def chart_colors_xml() -> str:
    """XML for ``ppt/charts/colors{n}.xml``: the six accents, cycled."""
    accents = "".join(f'<a:schemeClr val="accent{n}"/>' for n in range(1, 7))
    variations = "".join(f"<cs:variation>{v}</cs:variation>" if v else "<cs:variation/>" for v in _VARIATIONS)
    return (
        f'{XML_DECLARATION}<cs:colorStyle {nsdecls("cs", "a")} meth="cycle" id="{STYLE_ID}">'
        f"{accents}{variations}</cs:colorStyle>"
    )
