"""Markdown parsing for slide content.

A deck is a Markdown document with optional document-level YAML
frontmatter, slides separated by ``---`` lines, and optional per-slide
frontmatter:

    ---
    layout: TwoColumn
    notes: "Speaker notes"
    ---

    # Slide Title
    - Bullet points...

Parsing yields :class:`SlideData` blocks; :mod:`slidepack.slide_builders`
lowers them onto slides.
"""

from __future__ import annotations

import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import PackageError

logger = logging.getLogger(__name__)

NOTES_PATTERN = re.compile(r'<!--\s*notes:\s*(.*?)\s*-->', re.DOTALL | re.IGNORECASE)
SECTION_PATTERN = re.compile(r'<!--\s*section:\s*(.+?)\s*-->')
FENCE_PATTERN = re.compile(r'^\s*(```|~~~)\s*([\w+#.-]*)\s*$')
TABLE_SEPARATOR = re.compile(r'^\s*\|?\s*:?-{3,}:?\s*(\|\s*:?-{3,}:?\s*)*\|?\s*$')
IMG_TAG_PATTERN = re.compile(r'<img[^>]+src=["\']([^"\']+)["\']', re.IGNORECASE)
MD_IMG_PATTERN = re.compile(r'!\[([^\]]*)\]\(([^)]+)\)')


@dataclass
class ContentBlock:
    """One block of slide body content.

    Attributes:
        kind: ``text`` (a line of prose or a list item), ``code``, or ``table``.
        text: The line for ``text`` blocks, the source for ``code`` blocks.
        language: Fence language of a code block.
        rows: Cell text of a table, header row first.
    """
    kind: str
    text: str = ''
    language: str = ''
    rows: list[list[str]] = field(default_factory=list)


@dataclass
class SlideData:
    """Data structure representing a parsed slide.

    Attributes:
        layout_name: Layout from frontmatter, or None to let the builder choose.
        title: Slide title, either from frontmatter or first H1/H2.
        blocks: Body content in reading order.
        images: Image paths or URLs from frontmatter and content.
        notes: Speaker notes from frontmatter or ``<!-- notes: -->`` comments.
        section_name: Optional section marker.
        options: Additional frontmatter keys.
    """
    layout_name: str | None = None
    title: str | None = None
    blocks: list[ContentBlock] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    notes: str | None = None
    section_name: str = ''
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def has_body(self) -> bool:
        return bool(self.blocks or self.images)


def _split_frontmatter(lines: list[str], delimiter: str, what: str) -> tuple[dict[str, Any], list[str]]:
    if not lines or lines[0].strip() != delimiter:
        return {}, lines

    end_idx = -1
    for i in range(1, len(lines)):
        if lines[i].strip() == delimiter:
            end_idx = i
            break
    if end_idx == -1:
        return {}, lines

    yaml_text = '\n'.join(lines[1:end_idx])
    try:
        frontmatter = yaml.safe_load(yaml_text)
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {what} YAML frontmatter: {e}")
        return {}, lines[end_idx + 1:]
    if not isinstance(frontmatter, dict):
        # not frontmatter after all, e.g. a heading between two separators
        return {}, lines
    return frontmatter, lines[end_idx + 1:]


def parse_document_frontmatter(content: str, delimiter: str = '---') -> tuple[dict[str, Any], str]:
    """Extract document-level YAML frontmatter (title, author, layout, ...).

    Returns:
        Tuple of (frontmatter_dict, remaining_content).
    """
    frontmatter, remaining = _split_frontmatter(content.split('\n'), delimiter, 'document')
    return frontmatter, '\n'.join(remaining)


def parse_slide_frontmatter(slide_content: str) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from the start of a slide.

    Returns:
        Tuple of (frontmatter_dict, content_without_frontmatter).
    """
    frontmatter, remaining = _split_frontmatter(slide_content.strip().split('\n'), '---', 'slide')
    return frontmatter, '\n'.join(remaining).strip()


def _split_into_slides(markdown_content: str, slide_separator: str = '---') -> list[str]:
    """Split markdown content into individual slide segments.

    ``---`` is both the slide separator and the frontmatter delimiter. A
    separator at the start of a slide whose next non-blank line looks like
    ``key: value`` opens frontmatter; the next ``---`` then closes it.
    Separators inside fenced code blocks are content.
    """
    lines = markdown_content.split('\n')
    slides: list[str] = []
    current: list[str] = []
    in_frontmatter = False
    in_fence = False

    def looks_like_yaml_start(line_idx: int) -> bool:
        check_idx = line_idx + 1
        while check_idx < len(lines) and not lines[check_idx].strip():
            check_idx += 1
        if check_idx >= len(lines):
            return False
        next_line = lines[check_idx].strip()
        return re.match(r'^[A-Za-z_][\w-]*\s*:', next_line) is not None

    def flush() -> None:
        slide_content = '\n'.join(current).strip()
        if slide_content:
            slides.append(slide_content)

    for i, line in enumerate(lines):
        stripped = line.strip()
        if FENCE_PATTERN.match(line):
            in_fence = not in_fence
        if stripped != slide_separator or in_fence:
            current.append(line)
            continue

        if in_frontmatter:
            current.append(line)
            in_frontmatter = False
            continue

        if any(existing.strip() for existing in current):
            flush()
        current = []
        if looks_like_yaml_start(i):
            in_frontmatter = True
            current = [line]

    flush()
    return slides


def _parse_table(lines: list[str]) -> list[list[str]]:
    rows = []
    for line in lines:
        if TABLE_SEPARATOR.match(line):
            continue
        cells = line.strip().strip('|').split('|')
        rows.append([cell.strip() for cell in cells])
    return rows


def extract_images(content: str) -> list[str]:
    """Image paths from ``<img src>`` tags and ``![alt](path)`` syntax, in order of appearance."""
    found = []
    for match in IMG_TAG_PATTERN.finditer(content):
        found.append((match.start(), match.group(1)))
    for match in MD_IMG_PATTERN.finditer(content):
        found.append((match.start(), match.group(2).strip()))
    return [path for _, path in sorted(found)]


def _parse_body(content: str) -> tuple[str | None, list[ContentBlock], str]:
    """Parse slide content into title and content blocks.

    Returns:
        Tuple of (title, blocks, section_name).
    """
    lines = content.split('\n')
    title = None
    section_name = ''
    blocks: list[ContentBlock] = []
    i = 0

    while i < len(lines):
        line = lines[i]
        stripped = line.strip()

        fence = FENCE_PATTERN.match(line)
        if fence:
            code_lines = []
            i += 1
            while i < len(lines) and not FENCE_PATTERN.match(lines[i]):
                code_lines.append(lines[i])
                i += 1
            i += 1
            blocks.append(ContentBlock('code', '\n'.join(code_lines), language=fence.group(2) or 'text'))
            continue

        if stripped.startswith('|'):
            table_lines = []
            while i < len(lines) and lines[i].strip().startswith('|'):
                table_lines.append(lines[i])
                i += 1
            blocks.append(ContentBlock('table', rows=_parse_table(table_lines)))
            continue

        i += 1
        if not stripped:
            continue

        section_match = SECTION_PATTERN.match(stripped)
        if section_match:
            section_name = section_match.group(1)
            continue

        if MD_IMG_PATTERN.fullmatch(stripped) or IMG_TAG_PATTERN.match(stripped):
            continue
        if stripped.startswith('<') and stripped.endswith('>'):
            # other HTML wrappers (e.g. <div>) carry no text
            continue

        heading = re.match(r'^(#{1,6})\s+(.*)$', stripped)
        if heading and title is None and len(heading.group(1)) <= 2:
            title = heading.group(2).strip()
            logger.debug(f"  -> Title (H{len(heading.group(1))}): {title}")
            continue

        blocks.append(ContentBlock('text', line.rstrip()))

    return title, blocks, section_name


def parse_slides(markdown_content: str, slide_separator: str = '---') -> list[SlideData]:
    """Parse markdown content (document frontmatter removed) into SlideData objects."""
    slides: list[SlideData] = []

    for idx, raw_slide in enumerate(_split_into_slides(markdown_content, slide_separator)):
        logger.debug(f"--- Parsing Slide {idx + 1} ---")
        frontmatter, content = parse_slide_frontmatter(raw_slide)

        notes = [m.group(1).strip() for m in NOTES_PATTERN.finditer(content)]
        content = NOTES_PATTERN.sub('', content)
        if frontmatter.get('notes'):
            notes.insert(0, str(frontmatter['notes']).strip())

        title_from_content, blocks, section_name = _parse_body(content)

        images = [str(p) for p in (frontmatter.get('images') or [])]
        images.extend(extract_images(content))

        slide = SlideData(
            layout_name=frontmatter.get('layout'),
            title=frontmatter.get('title') or title_from_content,
            blocks=blocks,
            images=images,
            notes='\n'.join(notes) if notes else None,
            section_name=section_name,
            options={k: v for k, v in frontmatter.items() if k not in ('layout', 'title', 'images', 'notes')},
        )
        logger.debug(
            f"Created SlideData: layout={slide.layout_name}, title={slide.title}, "
            f"blocks={len(blocks)}, images={len(images)}"
        )
        slides.append(slide)

    logger.info(f"Parsed {len(slides)} slides from markdown")
    return slides


def parse_markdown(content: str) -> tuple[dict[str, Any], list[SlideData]]:
    """Parse markdown text into document metadata and slides."""
    doc_frontmatter, remaining = parse_document_frontmatter(content)
    if doc_frontmatter:
        logger.info(f"Document frontmatter keys: {list(doc_frontmatter.keys())}")
    return doc_frontmatter, parse_slides(remaining)


def parse_markdown_file(md_file: Path) -> tuple[dict[str, Any], list[SlideData]]:
    """Parse a markdown file into document metadata and slides.

    Raises:
        PackageError: ``not_found`` or ``io`` when the file cannot be read.
    """
    try:
        with open(md_file, 'r', encoding='utf-8') as f:
            content = f.read()
    except OSError as e:
        raise PackageError.from_os_error(e, f"markdown file {md_file}") from e

    logger.info(f"Parsing markdown file: {md_file} ({len(content)} chars)")
    return parse_markdown(content)
