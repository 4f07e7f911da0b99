"""Lowering parsed content onto slides.

Bullets go to the layout's body placeholder; code blocks, tables and
images are placed as free-standing elements in the content area, beside
the bullets when there are any and across the full width otherwise.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .images import Image
from .markdown_parser import ContentBlock, SlideData
from .rich_text import make_bullet, parse_bullet_line
from .shapes import Shape, ShapeType
from .slides import Slide, SlideLayout
from .tables import Table
from .text import BulletStyle, Bullet

logger = logging.getLogger(__name__)

CONTENT_LEFT = 457200
CONTENT_TOP = 1600200
CONTENT_WIDTH = 8229600
CONTENT_HEIGHT = 4525963
COLUMN_GAP = 152400
CODE_BACKGROUND = "1E1E1E"


def resolve_layout(name: Optional[str], default: SlideLayout = SlideLayout.TITLE_AND_CONTENT) -> SlideLayout:
    """Map a layout name onto a layout tag, warning and falling back to *default* when unknown."""
    if not name:
        return default
    layout = SlideLayout.from_name(str(name))
    if layout is None:
        available = ", ".join(option.value for option in SlideLayout)
        logger.warning(f"Unknown layout '{name}', using {default.value}. Available layouts: {available}")
        return default
    return layout


def content_regions(count: int, beside_text: bool) -> list[tuple[int, int, int, int]]:
    """Split the content area into *count* stacked boxes.

    With *beside_text* the boxes take the right half of the area, leaving
    the left half to the body placeholder.
    """
    if count <= 0:
        return []
    left, width = CONTENT_LEFT, CONTENT_WIDTH
    if beside_text:
        width = (CONTENT_WIDTH - COLUMN_GAP) // 2
        left = CONTENT_LEFT + width + COLUMN_GAP
    height = (CONTENT_HEIGHT - COLUMN_GAP * (count - 1)) // count
    return [(left, CONTENT_TOP + i * (height + COLUMN_GAP), width, height) for i in range(count)]


def _bullet_for(block: ContentBlock) -> Bullet:
    parsed = parse_bullet_line(block.text)
    if parsed is not None:
        level, style, text = parsed
        return make_bullet(text, level, style)
    text = block.text.strip()
    if text.startswith("#"):
        text = text.lstrip("#").strip()
        return make_bullet(f"**{text}**", 0, BulletStyle.NONE)
    return make_bullet(text, 0, BulletStyle.NONE)


def _image_for(ref: str, base_dir: Path) -> Image:
    if ref.startswith(("http://", "https://")):
        return Image.from_url(ref)
    if ref.startswith("data:"):
        return Image.from_base64(ref)
    path = Path(ref)
    if not path.is_absolute():
        path = base_dir / path
    return Image.from_file(path)


def _table_for(rows: list[list[str]], box: tuple[int, int, int, int]) -> Table:
    columns = max((len(row) for row in rows), default=1)
    padded = [row + [""] * (columns - len(row)) for row in rows]
    x, y, width, _ = box
    return Table.from_grid(padded, [width // columns] * columns).with_position(x, y)


def _code_shape(block: ContentBlock, box: tuple[int, int, int, int]) -> Shape:
    x, y, width, height = box
    return (
        Shape(ShapeType.RECTANGLE, x, y, width, height)
        .with_fill(CODE_BACKGROUND)
        .with_text(f"[{block.language}]\n{block.text}")
        .with_name(f"Code {block.language}")
    )


def build_slide(
    data: SlideData,
    base_dir: Path = Path("."),
    default_layout: SlideLayout = SlideLayout.TITLE_AND_CONTENT,
    first: bool = False,
) -> Slide:
    """Turn one parsed slide into a :class:`Slide`.

    Without an explicit layout, a slide that has nothing but a title
    becomes a centered title (first slide) or a title-only slide.

    Args:
        data: Parsed slide.
        base_dir: Directory image paths are relative to.
        default_layout: Layout for slides with body content and no layout name.
        first: Whether this is the first slide of the deck.

    Returns:
        The slide; images are referenced, not yet loaded.
    """
    if data.layout_name:
        layout = resolve_layout(data.layout_name, default_layout)
    elif not data.has_body:
        layout = SlideLayout.CENTERED_TITLE if first else SlideLayout.TITLE_ONLY
    else:
        layout = default_layout

    slide = Slide(title=data.title or "", layout=layout)
    if data.notes:
        slide = slide.set_notes(data.notes)
    style = data.options.get("bullet_style")
    if style:
        try:
            slide = slide.with_bullet_style(BulletStyle(str(style).lower()))
        except ValueError:
            logger.warning(f"Slide '{data.title}': unknown bullet style '{style}'")

    text_blocks = [b for b in data.blocks if b.kind == "text"]
    placed = [b for b in data.blocks if b.kind in ("code", "table")]
    bullets = [_bullet_for(b) for b in text_blocks]

    if bullets and not layout.has_body:
        logger.warning(
            f"Slide '{data.title}': layout {layout.value} has no body placeholder; {len(bullets)} lines dropped"
        )
    slide = slide.add_bullets(bullets)

    beside_text = bool(bullets) and layout.has_body
    regions = content_regions(len(placed) + len(data.images), beside_text)
    for block, box in zip(placed, regions):
        if block.kind == "code":
            slide = slide.add_shape(_code_shape(block, box))
        else:
            slide = slide.add_table(_table_for(block.rows, box))
    for ref, box in zip(data.images, regions[len(placed):]):
        slide = slide.add_image(_image_for(ref, base_dir).fit_within(*box))

    logger.debug(
        f"Built slide '{data.title}' ({layout.value}): {len(bullets)} bullets, "
        f"{len(placed)} blocks, {len(data.images)} images"
    )
    return slide
