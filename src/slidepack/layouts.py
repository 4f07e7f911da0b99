"""The slide master, its eleven layouts and the layout tag parts.

These parts are the same for every package. Slides pick a layout by
number (see :attr:`slidepack.slides.SlideLayout.layout_number`); the
master declares all eleven whether or not a slide uses them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .slides import SP_TREE_HEADER
from .xmlwriter import XML_DECLARATION, attrs, escape, nsdecls

LAYOUT_COUNT = 11
TAGS_PER_LAYOUT = 5
FIRST_LAYOUT_ID = 2147483649

_MASTER_TITLE = (457200, 274638, 8229600, 1143000)
_MASTER_BODY = (457200, 1600200, 8229600, 4525963)
_MASTER_DATE = (457200, 6356350, 2133600, 365125)
_MASTER_FOOTER = (3124200, 6356350, 2895600, 365125)
_MASTER_NUMBER = (6553200, 6356350, 2133600, 365125)

TITLE_PROMPT = "Click to edit Master title style"
TEXT_PROMPT = "Click to edit Master text styles"


@dataclass(frozen=True)
class Placeholder:
    """One placeholder in a layout; ``box=None`` inherits the master's geometry."""

    kind: Optional[str]
    name: str
    idx: Optional[int] = None
    size: Optional[str] = None
    orient: Optional[str] = None
    box: Optional[tuple[int, int, int, int]] = None
    prompt: Optional[str] = None


@dataclass(frozen=True)
class LayoutSpec:
    kind: str
    name: str
    placeholders: tuple[Placeholder, ...]


def _title(box=None, kind="title", orient=None) -> Placeholder:
    return Placeholder(kind, "Title", orient=orient, box=box, prompt=TITLE_PROMPT)


def _content(idx, box=None, size=None, name="Content Placeholder") -> Placeholder:
    return Placeholder(None, name, idx=idx, size=size, box=box, prompt=TEXT_PROMPT)


def _text(idx, box=None, size=None, orient=None, name="Text Placeholder") -> Placeholder:
    return Placeholder("body", name, idx=idx, size=size, orient=orient, box=box, prompt=TEXT_PROMPT)


_FOOTERS = (
    Placeholder("dt", "Date Placeholder", idx=10, size="half"),
    Placeholder("ftr", "Footer Placeholder", idx=11, size="quarter"),
    Placeholder("sldNum", "Slide Number Placeholder", idx=12, size="quarter"),
)

LAYOUTS: tuple[LayoutSpec, ...] = (
    LayoutSpec("title", "Title Slide", (
        _title((685800, 2130425, 7772400, 1470025), kind="ctrTitle"),
        Placeholder("subTitle", "Subtitle", idx=1, box=(1371600, 3886200, 6400800, 1752600),
                    prompt="Click to edit Master subtitle style"),
    ) + _FOOTERS),
    LayoutSpec("obj", "Title and Content", (_title(), _content(1)) + _FOOTERS),
    LayoutSpec("secHead", "Section Header", (
        _title((722313, 4406900, 7772400, 1362075)),
        _text(1, (722313, 2906713, 7772400, 1500187)),
    ) + _FOOTERS),
    LayoutSpec("twoObj", "Two Content", (
        _title(),
        _content(1, (457200, 1600200, 4038600, 4525963), size="half"),
        _content(2, (4648200, 1600200, 4038600, 4525963), size="half"),
    ) + _FOOTERS),
    LayoutSpec("twoTxTwoObj", "Comparison", (
        _title(),
        _text(1, (457200, 1535113, 4040188, 639762)),
        _content(2, (457200, 2174875, 4040188, 3951288), size="half"),
        _text(3, (4645025, 1535113, 4041775, 639762), size="quarter"),
        _content(4, (4645025, 2174875, 4041775, 3951288), size="quarter"),
    ) + _FOOTERS),
    LayoutSpec("titleOnly", "Title Only", (_title(),) + _FOOTERS),
    LayoutSpec("blank", "Blank", _FOOTERS),
    LayoutSpec("objTx", "Content with Caption", (
        _title((457200, 273050, 3008313, 1162050)),
        _content(1, (3575050, 273050, 5111750, 5853113)),
        _text(2, (457200, 1435100, 3008313, 4691063), size="half"),
    ) + _FOOTERS),
    LayoutSpec("picTx", "Picture with Caption", (
        _title((1792288, 4800600, 5486400, 566738)),
        Placeholder("pic", "Picture Placeholder", idx=1, box=(1792288, 612775, 5486400, 4114800)),
        _text(2, (1792288, 5367338, 5486400, 804862), size="half"),
    ) + _FOOTERS),
    LayoutSpec("vertTx", "Title and Vertical Text", (
        _title(),
        _text(1, orient="vert", name="Vertical Text Placeholder"),
    ) + _FOOTERS),
    LayoutSpec("vertTitleAndTx", "Vertical Title and Text", (
        _title((6629400, 274638, 2057400, 5851525), orient="vert"),
        _text(1, (457200, 274638, 6019800, 5851525), orient="vert", name="Vertical Text Placeholder"),
    ) + _FOOTERS),
)


def _sp_pr(box: Optional[tuple[int, int, int, int]]) -> str:
    if box is None:
        return "<p:spPr/>"
    x, y, cx, cy = box
    return f'<p:spPr><a:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm></p:spPr>'


def placeholder_xml(ph: Placeholder, shape_id: int, body_pr: str = "<a:bodyPr/>") -> str:
    ph_attrs = attrs([("type", ph.kind), ("orient", ph.orient), ("sz", ph.size), ("idx", ph.idx)])
    locks = '<a:spLocks noGrp="1"/>'
    if ph.prompt:
        text = f'<a:p><a:r><a:rPr lang="en-US"/><a:t>{escape(ph.prompt)}</a:t></a:r></a:p>'
    else:
        text = '<a:p><a:endParaRPr lang="en-US"/></a:p>'
    body = "" if ph.kind == "pic" else f"<p:txBody>{body_pr}<a:lstStyle/>{text}</p:txBody>"
    return (
        f'<p:sp><p:nvSpPr><p:cNvPr id="{shape_id}" name="{escape(ph.name)} {shape_id - 1}"/>'
        f"<p:cNvSpPr>{locks}</p:cNvSpPr><p:nvPr><p:ph{ph_attrs}/></p:nvPr></p:nvSpPr>"
        f"{_sp_pr(ph.box)}{body}</p:sp>"
    )


def layout_xml(number: int) -> str:
    """XML for ``ppt/slideLayouts/slideLayout{number}.xml`` (1-based)."""
    spec = LAYOUTS[number - 1]
    shapes = "".join(placeholder_xml(ph, i) for i, ph in enumerate(spec.placeholders, start=2))
    tags = "".join(f'<p:tags r:id="rId{k}"/>' for k in range(2, TAGS_PER_LAYOUT + 2))
    return (
        f'{XML_DECLARATION}<p:sldLayout {nsdecls("a", "r", "p")} type="{spec.kind}" preserve="1">'
        f'<p:cSld name="{escape(spec.name)}"><p:spTree>{SP_TREE_HEADER}{shapes}</p:spTree>'
        f"<p:custDataLst>{tags}</p:custDataLst></p:cSld>"
        "<p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr></p:sldLayout>"
    )


def tag_number(layout_number: int, k: int) -> int:
    """Global number of the *k*-th (1-based) tag part of a layout."""
    return (layout_number - 1) * TAGS_PER_LAYOUT + k


def layout_tag_targets(layout_number: int) -> list[str]:
    return [f"../tags/tag{tag_number(layout_number, k)}.xml" for k in range(1, TAGS_PER_LAYOUT + 1)]


def tag_xml(number: int) -> str:
    """XML for ``ppt/tags/tag{number}.xml``, describing the owning layout."""
    layout_number, k = divmod(number - 1, TAGS_PER_LAYOUT)
    spec = LAYOUTS[layout_number]
    name, value = (
        ("SLIDEPACK.LAYOUT", spec.name),
        ("SLIDEPACK.TYPE", spec.kind),
        ("SLIDEPACK.INDEX", str(layout_number + 1)),
        ("SLIDEPACK.PLACEHOLDERS", str(len(spec.placeholders))),
        ("SLIDEPACK.GENERATOR", "slidepack"),
    )[k]
    return (
        f'{XML_DECLARATION}<p:tagLst {nsdecls("a", "r", "p")}>'
        f'<p:tag name="{name}" val="{escape(value)}"/></p:tagLst>'
    )


CLR_MAP = (
    'bg1="lt1" tx1="dk1" bg2="lt2" tx2="dk2" accent1="accent1" accent2="accent2" accent3="accent3" '
    'accent4="accent4" accent5="accent5" accent6="accent6" hlink="hlink" folHlink="folHlink"'
)


def _level(n: int, mar_l: Optional[int], indent: Optional[int], size: int, bullet: str = "",
            spc_bef: int = 20, algn: str = "l") -> str:
    margin = attrs([("marL", mar_l), ("indent", indent), ("algn", algn), ("defTabSz", 914400),
                    ("rtl", False), ("eaLnBrk", True), ("latinLnBrk", False), ("hangingPunct", True)])
    spacing = f'<a:spcBef><a:spcPct val="{spc_bef * 1000}"/></a:spcBef>' if spc_bef else ""
    return (
        f"<a:lvl{n}pPr{margin}>{spacing}{bullet}"
        f'<a:defRPr sz="{size}" kern="1200"><a:solidFill><a:schemeClr val="tx1"/></a:solidFill>'
        '<a:latin typeface="+mn-lt"/><a:ea typeface="+mn-ea"/><a:cs typeface="+mn-cs"/></a:defRPr>'
        f"</a:lvl{n}pPr>"
    )


def _body_style() -> str:
    bullets = ("•", "–", "•", "–", "»")
    sizes = (3200, 2800, 2400, 2000, 2000)
    levels = []
    for n in range(1, 10):
        char = bullets[min(n, 5) - 1]
        size = sizes[min(n, 5) - 1]
        bullet = f'<a:buFont typeface="Arial" pitchFamily="34" charset="0"/><a:buChar char="{char}"/>'
        levels.append(_level(n, 342900 + 400050 * (n - 1), -342900 if n == 1 else -285750, size, bullet))
    return f"<p:bodyStyle>{''.join(levels)}</p:bodyStyle>"


def _other_style() -> str:
    levels = "".join(_level(n, 457200 * (n - 1), None, 1800, spc_bef=0) for n in range(1, 10))
    return f'<p:otherStyle><a:defPPr><a:defRPr lang="en-US"/></a:defPPr>{levels}</p:otherStyle>'


def _title_style() -> str:
    return (
        '<p:titleStyle><a:lvl1pPr algn="ctr" defTabSz="914400" rtl="0" eaLnBrk="1" latinLnBrk="0" hangingPunct="1">'
        '<a:spcBef><a:spcPct val="0"/></a:spcBef><a:buNone/>'
        '<a:defRPr sz="4400" kern="1200"><a:solidFill><a:schemeClr val="tx1"/></a:solidFill>'
        '<a:latin typeface="+mj-lt"/><a:ea typeface="+mj-ea"/><a:cs typeface="+mj-cs"/></a:defRPr>'
        "</a:lvl1pPr></p:titleStyle>"
    )


def master_xml() -> str:
    """XML for ``ppt/slideMasters/slideMaster1.xml``."""
    placeholders = (
        Placeholder("title", "Title Placeholder", box=_MASTER_TITLE, prompt=TITLE_PROMPT),
        Placeholder("body", "Text Placeholder", idx=1, box=_MASTER_BODY, prompt=TEXT_PROMPT),
        Placeholder("dt", "Date Placeholder", idx=2, size="half", box=_MASTER_DATE),
        Placeholder("ftr", "Footer Placeholder", idx=3, size="quarter", box=_MASTER_FOOTER),
        Placeholder("sldNum", "Slide Number Placeholder", idx=4, size="quarter", box=_MASTER_NUMBER),
    )
    shapes = "".join(placeholder_xml(ph, i) for i, ph in enumerate(placeholders, start=2))
    layout_ids = "".join(
        f'<p:sldLayoutId id="{FIRST_LAYOUT_ID + n}" r:id="rId{n + 1}"/>' for n in range(LAYOUT_COUNT)
    )
    return (
        f'{XML_DECLARATION}<p:sldMaster {nsdecls("a", "r", "p")}><p:cSld>'
        '<p:bg><p:bgRef idx="1001"><a:schemeClr val="bg1"/></p:bgRef></p:bg>'
        f"<p:spTree>{SP_TREE_HEADER}{shapes}</p:spTree></p:cSld>"
        f"<p:clrMap {CLR_MAP}/><p:sldLayoutIdLst>{layout_ids}</p:sldLayoutIdLst>"
        f"<p:txStyles>{_title_style()}{_body_style()}{_other_style()}</p:txStyles></p:sldMaster>"
    )
