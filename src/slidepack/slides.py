"""Slides: the content model handed to the package writer, and slide XML."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional, Union

from .charts import Chart, chart_frame_xml
from .connectors import Connector, connector_xml
from .hyperlinks import Hyperlink
from .images import Image, LoadedImage, picture_xml
from .media import Media, media_xml
from .shapes import Shape, shape_xml
from .tables import Table, table_xml
from .text import Bullet, BulletStyle, Links, Run, bullet_xml, normalize_color, run_xml
from .xmlwriter import DEFAULT_LANG, XML_DECLARATION, attrs, lang_attrs, nsdecls

logger = logging.getLogger(__name__)

SP_TREE_HEADER = (
    '<p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
    '<p:grpSpPr><a:xfrm><a:off x="0" y="0"/><a:ext cx="0" cy="0"/>'
    '<a:chOff x="0" y="0"/><a:chExt cx="0" cy="0"/></a:xfrm></p:grpSpPr>'
)


class SlideLayout(str, Enum):
    """Layout tag of a slide; each selects one of the eleven layout parts."""

    TITLE_ONLY = "TitleOnly"
    TITLE_AND_CONTENT = "TitleAndContent"
    TITLE_AND_BIG_CONTENT = "TitleAndBigContent"
    BLANK = "Blank"
    CENTERED_TITLE = "CenteredTitle"
    TWO_COLUMN = "TwoColumn"

    @property
    def layout_number(self) -> int:
        return _LAYOUT_NUMBERS[self]

    @property
    def has_body(self) -> bool:
        return self in (SlideLayout.TITLE_AND_CONTENT, SlideLayout.TITLE_AND_BIG_CONTENT, SlideLayout.TWO_COLUMN)

    @property
    def has_title(self) -> bool:
        return self is not SlideLayout.BLANK

    @classmethod
    def from_name(cls, name: str) -> Optional["SlideLayout"]:
        """Lenient lookup: ``two-column``, ``two_column`` and ``TwoColumn`` all match."""
        key = name.replace("-", "").replace("_", "").replace(" ", "").lower()
        for layout in cls:
            if layout.value.lower() == key:
                return layout
        return _LAYOUT_ALIASES.get(key)


_LAYOUT_NUMBERS = {
    SlideLayout.CENTERED_TITLE: 1,
    SlideLayout.TITLE_AND_CONTENT: 2,
    SlideLayout.TITLE_AND_BIG_CONTENT: 2,
    SlideLayout.TWO_COLUMN: 4,
    SlideLayout.TITLE_ONLY: 6,
    SlideLayout.BLANK: 7,
}

_LAYOUT_ALIASES = {
    "title": SlideLayout.CENTERED_TITLE,
    "titleslide": SlideLayout.CENTERED_TITLE,
    "centered": SlideLayout.CENTERED_TITLE,
    "content": SlideLayout.TITLE_AND_CONTENT,
    "bigcontent": SlideLayout.TITLE_AND_BIG_CONTENT,
    "twocontent": SlideLayout.TWO_COLUMN,
    "columns": SlideLayout.TWO_COLUMN,
    "section": SlideLayout.TITLE_ONLY,
    "titleonly": SlideLayout.TITLE_ONLY,
    "empty": SlideLayout.BLANK,
}

# explicit geometry for the big-content variant; other layouts inherit
_BIG_TITLE_XFRM = (457200, 152400, 8229600, 685800)
_BIG_BODY_XFRM = (457200, 914400, 8229600, 5715000)


@dataclass(frozen=True)
class TextFormat:
    """Run formatting applied to a whole title or to all bullets."""

    size: Optional[int] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    color: Optional[str] = None

    def run(self, text: str) -> Run:
        return Run(
            text,
            bold=self.bold,
            italic=self.italic,
            underline=self.underline,
            size=self.size,
            color=normalize_color(self.color) if self.color else None,
        )


@dataclass(frozen=True)
class Slide:
    """One slide. Every ``add_*``/``set_*``/``with_*`` method returns a new slide."""

    title: str = ""
    layout: SlideLayout = SlideLayout.TITLE_AND_CONTENT
    notes: Optional[str] = None
    bullets: tuple[Bullet, ...] = ()
    shapes: tuple[Shape, ...] = ()
    images: tuple[Image, ...] = ()
    tables: tuple[Table, ...] = ()
    charts: tuple[Chart, ...] = ()
    connectors: tuple[Connector, ...] = ()
    media: tuple[Media, ...] = ()
    bullet_style: Optional[BulletStyle] = None
    title_format: TextFormat = field(default_factory=TextFormat)
    content_format: TextFormat = field(default_factory=TextFormat)

    def with_title(self, title: str) -> "Slide":
        return replace(self, title=title)

    def with_layout(self, layout: SlideLayout) -> "Slide":
        return replace(self, layout=SlideLayout(layout))

    def add_bullet(self, bullet: Union[str, Bullet], level: int = 0, style: Optional[BulletStyle] = None) -> "Slide":
        if not isinstance(bullet, Bullet):
            bullet = Bullet(str(bullet), level, style)
        return replace(self, bullets=self.bullets + (bullet,))

    def add_bullets(self, bullets: Iterable[Union[str, Bullet]]) -> "Slide":
        slide = self
        for bullet in bullets:
            slide = slide.add_bullet(bullet)
        return slide

    def add_shape(self, shape: Shape) -> "Slide":
        return replace(self, shapes=self.shapes + (shape,))

    def add_image(self, image: Image) -> "Slide":
        return replace(self, images=self.images + (image,))

    def add_table(self, table: Table) -> "Slide":
        return replace(self, tables=self.tables + (table,))

    def add_chart(self, chart: Chart) -> "Slide":
        return replace(self, charts=self.charts + (chart,))

    def add_connector(self, connector: Connector) -> "Slide":
        return replace(self, connectors=self.connectors + (connector,))

    def add_media(self, media: Media) -> "Slide":
        return replace(self, media=self.media + (media,))

    def set_notes(self, notes: Optional[str]) -> "Slide":
        return replace(self, notes=notes)

    def with_bullet_style(self, style: BulletStyle) -> "Slide":
        return replace(self, bullet_style=style)

    def with_title_format(self, **kwargs) -> "Slide":
        return replace(self, title_format=replace(self.title_format, **kwargs))

    def with_content_format(self, **kwargs) -> "Slide":
        return replace(self, content_format=replace(self.content_format, **kwargs))

    @property
    def has_notes(self) -> bool:
        return bool(self.notes and self.notes.strip())

    def hyperlinks(self) -> list[Hyperlink]:
        """Every hyperlink on the slide, in emission order, duplicates included."""
        links: list[Hyperlink] = []
        if self.layout.has_body:
            for bullet in self.bullets:
                links.extend(bullet.hyperlinks())
        for shape in self.shapes:
            links.extend(shape.hyperlinks())
        return links


@dataclass
class SlideRefs:
    """Relationship ids allocated for one slide's embedded objects."""

    chart_rids: list[str] = field(default_factory=list)
    images: list[tuple[LoadedImage, str]] = field(default_factory=list)
    media: list[tuple[str, str, str]] = field(default_factory=list)
    links: dict[Hyperlink, str] = field(default_factory=dict)


def _xfrm(box: Optional[tuple[int, int, int, int]]) -> str:
    """``p:spPr`` with an explicit transform, or empty to inherit the layout position."""
    if box is None:
        return "<p:spPr/>"
    x, y, cx, cy = box
    return f'<p:spPr><a:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm></p:spPr>'


def title_placeholder_xml(slide: Slide, shape_id: int, lang: str = DEFAULT_LANG) -> str:
    """Title placeholder of a slide.

    Centered-title slides use a ``ctrTitle`` placeholder. An untitled
    slide still gets the placeholder, holding an empty paragraph.

    Args:
        slide: The slide.
        shape_id: Slide-unique shape id.
        lang: Language tag for the runs.
    """
    centered = slide.layout is SlideLayout.CENTERED_TITLE
    ph_type = "ctrTitle" if centered else "title"
    box = _BIG_TITLE_XFRM if slide.layout is SlideLayout.TITLE_AND_BIG_CONTENT else None
    if slide.title:
        paragraph = "<a:p>{}</a:p>".format(run_xml(slide.title_format.run(slide.title), lang))
    else:
        paragraph = f'<a:p><a:endParaRPr {lang_attrs(lang)} dirty="0"/></a:p>'
    return (
        f'<p:sp><p:nvSpPr><p:cNvPr id="{shape_id}" name="Title {shape_id - 1}"/>'
        f'<p:cNvSpPr><a:spLocks noGrp="1"/></p:cNvSpPr><p:nvPr><p:ph type="{ph_type}"/></p:nvPr></p:nvSpPr>'
        f"{_xfrm(box)}<p:txBody><a:bodyPr/><a:lstStyle/>{paragraph}</p:txBody></p:sp>"
    )


def body_placeholder_xml(
    bullets: Iterable[Bullet],
    shape_id: int,
    idx: int,
    slide: Slide,
    lang: str = DEFAULT_LANG,
    links: Optional[Links] = None,
    half: bool = False,
) -> str:
    """Body placeholder holding *bullets*.

    Args:
        bullets: Bullets to write, in order.
        shape_id: Slide-unique shape id.
        idx: Placeholder index on the layout (1, or 2 for the right column).
        slide: The owning slide, for layout, content format and bullet style.
        lang: Language tag for the runs.
        links: Relationship ids of hyperlinks on the slide.
        half: Mark the placeholder as one of two columns.
    """
    ph = "<p:ph{}/>".format(attrs([("sz", "half" if half else None), ("idx", idx)]))
    box = _BIG_BODY_XFRM if slide.layout is SlideLayout.TITLE_AND_BIG_CONTENT else None
    fmt = slide.content_format
    paragraphs = []
    for bullet in bullets:
        if not bullet.runs and fmt != TextFormat():
            bullet = replace(bullet, runs=(fmt.run(bullet.text),))
        paragraphs.append(bullet_xml(bullet, lang, links, slide.bullet_style))
    return (
        f'<p:sp><p:nvSpPr><p:cNvPr id="{shape_id}" name="Content Placeholder {shape_id - 1}"/>'
        f'<p:cNvSpPr><a:spLocks noGrp="1"/></p:cNvSpPr><p:nvPr>{ph}</p:nvPr></p:nvSpPr>'
        f"{_xfrm(box)}<p:txBody><a:bodyPr/><a:lstStyle/>{''.join(paragraphs) or '<a:p/>'}</p:txBody></p:sp>"
    )


def split_columns(bullets: tuple[Bullet, ...]) -> tuple[tuple[Bullet, ...], tuple[Bullet, ...]]:
    """Left column takes the first ceil(n/2) bullets."""
    middle = (len(bullets) + 1) // 2
    return bullets[:middle], bullets[middle:]


def slide_xml(slide: Slide, refs: SlideRefs, lang: str = DEFAULT_LANG) -> str:
    """XML for ``ppt/slides/slideN.xml``.

    Shape ids start at 2 and follow emission order: title, body
    placeholders, shapes, tables, charts, pictures, media, connectors.
    """
    parts = []
    next_id = 2
    links = refs.links

    if slide.layout.has_title:
        parts.append(title_placeholder_xml(slide, next_id, lang))
        next_id += 1

    if slide.bullets and not slide.layout.has_body:
        logger.debug(f"Slide {slide.title!r}: {slide.layout.value} has no body placeholder; bullets not rendered")
    if slide.bullets and slide.layout.has_body:
        if slide.layout is SlideLayout.TWO_COLUMN:
            left, right = split_columns(slide.bullets)
            parts.append(body_placeholder_xml(left, next_id, 1, slide, lang, links, half=True))
            next_id += 1
            if right:
                parts.append(body_placeholder_xml(right, next_id, 2, slide, lang, links, half=True))
                next_id += 1
        else:
            parts.append(body_placeholder_xml(slide.bullets, next_id, 1, slide, lang, links))
            next_id += 1

    for shape in slide.shapes:
        parts.append(shape_xml(shape, next_id, lang, links))
        next_id += 1
    for table in slide.tables:
        parts.append(table_xml(table, next_id, lang, links))
        next_id += 1
    for chart, rid in zip(slide.charts, refs.chart_rids):
        parts.append(chart_frame_xml(chart, next_id, rid))
        next_id += 1
    for image, (loaded, rid) in zip(slide.images, refs.images):
        parts.append(picture_xml(image, loaded, next_id, rid))
        next_id += 1
    for media, (media_rid, link_rid, poster_rid) in zip(slide.media, refs.media):
        parts.append(media_xml(media, next_id, media_rid, link_rid, poster_rid))
        next_id += 1
    for connector in slide.connectors:
        parts.append(connector_xml(connector, next_id, lang))
        next_id += connector.shape_id_count

    return (
        f"{XML_DECLARATION}<p:sld {nsdecls('a', 'r', 'p')}><p:cSld><p:spTree>{SP_TREE_HEADER}"
        f"{''.join(parts)}</p:spTree></p:cSld><p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr></p:sld>"
    )


def blank_slide(title: str) -> Slide:
    """A centered-title slide showing *title*."""
    return Slide(title=title, layout=SlideLayout.CENTERED_TITLE)


def describe(slide: Slide) -> str:
    """One-line summary of a slide for logs and the ``info`` command."""
    counts = [
        (len(slide.bullets), "bullets"),
        (len(slide.shapes), "shapes"),
        (len(slide.tables), "tables"),
        (len(slide.charts), "charts"),
        (len(slide.images), "images"),
        (len(slide.media), "media"),
        (len(slide.connectors), "connectors"),
    ]
    summary = ", ".join(f"{n} {label}" for n, label in counts if n)
    return f"{slide.title or '(untitled)'} [{slide.layout.value}]" + (f": {summary}" if summary else "")
