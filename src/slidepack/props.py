"""Document properties (core, app) and presentation properties."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .xmlwriter import XML_DECLARATION, attrs, escape, nsdecls

APPLICATION = "slidepack"
APP_VERSION = "16.0000"
PRESENTATION_FORMAT = "On-screen Show (4:3)"

_CORE_NS = (
    'xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties" '
    'xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:dcterms="http://purl.org/dc/terms/" '
    'xmlns:dcmitype="http://purl.org/dc/dcmitype/" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"'
)
_APP_NS = 'xmlns="http://schemas.openxmlformats.org/officeDocument/2006/extended-properties"'


class ShowType(str, Enum):
    PRESENT = "present"
    BROWSE = "browse"
    KIOSK = "kiosk"


class PrintWhat(str, Enum):
    SLIDES = "slides"
    HANDOUTS1 = "handouts1"
    HANDOUTS2 = "handouts2"
    HANDOUTS3 = "handouts3"
    HANDOUTS4 = "handouts4"
    HANDOUTS6 = "handouts6"
    HANDOUTS9 = "handouts9"
    NOTES = "notes"
    OUTLINE = "outline"


class ColorMode(str, Enum):
    COLOR = "clr"
    GRAYSCALE = "gray"
    BLACK_WHITE = "bw"


@dataclass(frozen=True)
class SlideShowSettings:
    loop: bool = False
    show_narration: bool = True
    show_animation: bool = True
    show_type: ShowType = ShowType.PRESENT

    def xml(self) -> str:
        show_attrs = attrs([
            ("loop", self.loop),
            ("showNarration", self.show_narration),
            ("showAnimation", self.show_animation),
            ("useTimings", True),
        ])
        show_type = ShowType(self.show_type).value
        return f"<p:showPr{show_attrs}><p:{show_type}/><p:sldAll/></p:showPr>"


@dataclass(frozen=True)
class PrintSettings:
    print_what: PrintWhat = PrintWhat.SLIDES
    color_mode: ColorMode = ColorMode.COLOR
    frame_slides: bool = False
    hidden_slides: bool = False
    scale_to_fit: bool = False

    def xml(self) -> str:
        return "<p:prnPr{}/>".format(attrs([
            ("prnWhat", PrintWhat(self.print_what).value),
            ("clrMode", ColorMode(self.color_mode).value),
            ("hiddenSlides", self.hidden_slides),
            ("scaleToFitPaper", self.scale_to_fit),
            ("frameSlides", self.frame_slides),
        ]))


def pres_props_xml(show: Optional[SlideShowSettings], printing: Optional[PrintSettings]) -> str:
    """XML for ``ppt/presProps.xml``; print settings precede show settings in the schema."""
    body = (printing.xml() if printing else "") + (show.xml() if show else "")
    return f'{XML_DECLARATION}<p:presentationPr {nsdecls("a", "r", "p")}>{body}</p:presentationPr>'


def w3cdtf(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.replace(microsecond=0).isoformat() + "Z"


def core_props_xml(title: str, author: str, timestamp: Optional[datetime] = None) -> str:
    """XML for ``docProps/core.xml``.

    Dates are written only when *timestamp* is given so that identical
    presentations produce identical bytes.
    """
    dates = ""
    if timestamp is not None:
        stamp = w3cdtf(timestamp)
        dates = (
            f'<dcterms:created xsi:type="dcterms:W3CDTF">{stamp}</dcterms:created>'
            f'<dcterms:modified xsi:type="dcterms:W3CDTF">{stamp}</dcterms:modified>'
        )
    return (
        f"{XML_DECLARATION}<cp:coreProperties {_CORE_NS}>"
        f"<dc:title>{escape(title)}</dc:title><dc:creator>{escape(author)}</dc:creator>"
        f"<cp:lastModifiedBy>{escape(author)}</cp:lastModifiedBy><cp:revision>1</cp:revision>"
        f"{dates}</cp:coreProperties>"
    )


def app_props_xml(slide_count: int, notes_count: int, media_count: int = 0) -> str:
    """XML for ``docProps/app.xml``."""
    return (
        f"{XML_DECLARATION}<Properties {_APP_NS} {nsdecls('vt')}>"
        f"<TotalTime>0</TotalTime><Words>0</Words><Application>{APPLICATION}</Application>"
        f"<PresentationFormat>{PRESENTATION_FORMAT}</PresentationFormat>"
        f"<Paragraphs>0</Paragraphs><Slides>{slide_count}</Slides><Notes>{notes_count}</Notes>"
        f"<HiddenSlides>0</HiddenSlides><MMClips>{media_count}</MMClips><ScaleCrop>false</ScaleCrop>"
        "<LinksUpToDate>false</LinksUpToDate><SharedDoc>false</SharedDoc>"
        f"<HyperlinksChanged>false</HyperlinksChanged><AppVersion>{APP_VERSION}</AppVersion></Properties>"
    )
