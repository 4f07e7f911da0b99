"""Speaker notes slides and the notes master."""

from __future__ import annotations

from .layouts import CLR_MAP, Placeholder, placeholder_xml
from .slides import SP_TREE_HEADER
from .xmlwriter import DEFAULT_LANG, XML_DECLARATION, escape, lang_attrs, nsdecls

NOTES_MASTER_PART = "ppt/notesMasters/notesMaster1.xml"

_SLIDE_IMAGE = (1143000, 685800, 4572000, 3429000)
_NOTES_BODY = (685800, 4343400, 5486400, 4114800)


def _slide_image_xml(shape_id: int, box=None) -> str:
    sp_pr = "<p:spPr/>"
    if box is not None:
        x, y, cx, cy = box
        sp_pr = (
            f'<p:spPr><a:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm>'
            '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom><a:noFill/>'
            '<a:ln w="12700"><a:solidFill><a:prstClr val="black"/></a:solidFill></a:ln></p:spPr>'
        )
    idx = ' idx="2"' if box is not None else ""
    return (
        f'<p:sp><p:nvSpPr><p:cNvPr id="{shape_id}" name="Slide Image Placeholder {shape_id - 1}"/>'
        '<p:cNvSpPr><a:spLocks noGrp="1" noRot="1" noChangeAspect="1"/></p:cNvSpPr>'
        f'<p:nvPr><p:ph type="sldImg"{idx}/></p:nvPr></p:nvSpPr>{sp_pr}</p:sp>'
    )


def notes_paragraphs_xml(notes: str, lang: str = DEFAULT_LANG) -> str:
    """One paragraph per line of *notes*; blank lines stay as empty paragraphs."""
    paragraphs = []
    for line in notes.strip().splitlines():
        if line:
            paragraphs.append(f"<a:p><a:r><a:rPr {lang_attrs(lang)} dirty=\"0\"/><a:t>{escape(line)}</a:t></a:r></a:p>")
        else:
            paragraphs.append(f"<a:p><a:endParaRPr {lang_attrs(lang)} dirty=\"0\"/></a:p>")
    return "".join(paragraphs) or "<a:p/>"


def notes_slide_xml(notes: str, lang: str = DEFAULT_LANG) -> str:
    """XML for ``ppt/notesSlides/notesSlide{n}.xml``."""
    body = (
        '<p:sp><p:nvSpPr><p:cNvPr id="3" name="Notes Placeholder 2"/>'
        '<p:cNvSpPr><a:spLocks noGrp="1"/></p:cNvSpPr><p:nvPr><p:ph type="body" idx="1"/></p:nvPr></p:nvSpPr>'
        f"<p:spPr/><p:txBody><a:bodyPr/><a:lstStyle/>{notes_paragraphs_xml(notes, lang)}</p:txBody></p:sp>"
    )
    return (
        f'{XML_DECLARATION}<p:notes {nsdecls("a", "r", "p")}><p:cSld><p:spTree>{SP_TREE_HEADER}'
        f"{_slide_image_xml(2)}{body}</p:spTree></p:cSld>"
        "<p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr></p:notes>"
    )


def _notes_level(n: int) -> str:
    return (
        f'<a:lvl{n}pPr marL="{457200 * (n - 1)}" algn="l" defTabSz="914400" rtl="0" eaLnBrk="1" '
        'latinLnBrk="0" hangingPunct="1"><a:defRPr sz="1200" kern="1200"><a:solidFill><a:schemeClr val="tx1"/>'
        '</a:solidFill><a:latin typeface="+mn-lt"/><a:ea typeface="+mn-ea"/><a:cs typeface="+mn-cs"/></a:defRPr>'
        f"</a:lvl{n}pPr>"
    )


def notes_master_xml() -> str:
    """XML for ``ppt/notesMasters/notesMaster1.xml``."""
    shapes = (
        placeholder_xml(Placeholder("hdr", "Header Placeholder", size="quarter", box=(0, 0, 2971800, 457200)), 2)
        + placeholder_xml(Placeholder("dt", "Date Placeholder", idx=1, box=(3884613, 0, 2971800, 457200)), 3)
        + _slide_image_xml(4, _SLIDE_IMAGE)
        + placeholder_xml(
            Placeholder("body", "Notes Placeholder", idx=3, size="quarter", box=_NOTES_BODY,
                        prompt="Click to edit Master text styles"),
            5,
        )
        + placeholder_xml(Placeholder("ftr", "Footer Placeholder", idx=4, size="quarter",
                                      box=(0, 8685213, 2971800, 457200)), 6)
        + placeholder_xml(Placeholder("sldNum", "Slide Number Placeholder", idx=5, size="quarter",
                                      box=(3884613, 8685213, 2971800, 457200)), 7)
    )
    levels = "".join(_notes_level(n) for n in range(1, 10))
    return (
        f'{XML_DECLARATION}<p:notesMaster {nsdecls("a", "r", "p")}><p:cSld>'
        '<p:bg><p:bgRef idx="1001"><a:schemeClr val="bg1"/></p:bgRef></p:bg>'
        f"<p:spTree>{SP_TREE_HEADER}{shapes}</p:spTree></p:cSld>"
        f"<p:clrMap {CLR_MAP}/><p:notesStyle>{levels}</p:notesStyle></p:notesMaster>"
    )
