"""Single-file HTML rendition of a presentation for quick review in a browser."""

from __future__ import annotations

import base64
import html
import logging
from pathlib import Path
from typing import Union

from .charts import Chart
from .errors import ErrorKind, PackageError
from .fetch import HttpOptions
from .images import Image, load_image
from .presentation import Presentation
from .slides import Slide
from .tables import Table
from .text import Bullet, is_code_block

logger = logging.getLogger(__name__)

STYLE = """
body { font-family: Calibri, Arial, sans-serif; background: #f0f0f0; margin: 0; padding: 24px; }
.slide { background: #fff; max-width: 960px; margin: 0 auto 24px; padding: 32px 48px;
         box-shadow: 0 2px 6px rgba(0, 0, 0, 0.2); position: relative; }
.title-slide { text-align: center; padding: 96px 48px; }
.slide-number { position: absolute; top: 12px; right: 16px; color: #888; font-size: 12px; }
.section { color: #44546a; font-size: 12px; text-transform: uppercase; }
pre { background: #1e1e1e; color: #d4d4d4; padding: 12px; overflow-x: auto; }
table { border-collapse: collapse; margin: 12px 0; }
td, th { border: 1px solid #bbb; padding: 4px 8px; }
.image-container img { max-width: 100%; }
.notes { border-top: 1px dashed #bbb; margin-top: 16px; color: #555; font-size: 14px; }
"""


def _esc(value) -> str:
    return html.escape("" if value is None else str(value))


def _bullet_text(bullet: Bullet) -> str:
    return "".join(run.text for run in bullet.runs) if bullet.runs else bullet.text


def _render_bullets(bullets: tuple[Bullet, ...]) -> str:
    items = "".join(
        f'<li style="margin-left:{bullet.level * 24}px">{_esc(_bullet_text(bullet))}</li>' for bullet in bullets
    )
    return f"<ul>{items}</ul>\n"


def _render_table(table: Table) -> str:
    rows = []
    for index, row in enumerate(table.rows):
        tag = "th" if table.first_row and index == 0 else "td"
        cells = "".join(
            f"<{tag}"
            + (f' colspan="{cell.col_span}"' if cell.col_span > 1 else "")
            + (f' rowspan="{cell.row_span}"' if cell.row_span > 1 else "")
            + f">{_esc(cell.text)}</{tag}>"
            for cell in row.cells
            if not cell.merged
        )
        rows.append(f"<tr>{cells}</tr>")
    return f"<table>{''.join(rows)}</table>\n"


def _render_chart(chart: Chart) -> str:
    """Charts are shown as their data table under the chart title."""
    head = "".join(f"<th>{_esc(s.name)}</th>" for s in chart.series)
    labels = list(chart.categories) or [str(i + 1) for i in range(max((len(s.values) for s in chart.series), default=0))]
    rows = []
    for i, label in enumerate(labels):
        values = "".join(f"<td>{_esc(s.values[i]) if i < len(s.values) else ''}</td>" for s in chart.series)
        rows.append(f"<tr><th>{_esc(label)}</th>{values}</tr>")
    caption = _esc(chart.title or f"{chart.kind.value} chart")
    return (
        f'<figure class="chart"><figcaption>{caption}</figcaption>'
        f"<table><tr><th></th>{head}</tr>{''.join(rows)}</table></figure>\n"
    )


def _render_image(image: Image, http: HttpOptions) -> str:
    loaded = load_image(image, http)
    data = base64.b64encode(loaded.data).decode("ascii")
    alt = image.description or loaded.basename or ""
    return (
        f'<div class="image-container"><img src="data:{loaded.format.content_type};base64,{data}" '
        f'alt="{_esc(alt)}"></div>\n'
    )


def _render_slide(slide: Slide, number: int, section: str, http: HttpOptions) -> str:
    parts = [f'<div class="slide" id="slide-{number}">\n<div class="slide-number">{number}</div>\n']
    if section:
        parts.append(f'<div class="section">{_esc(section)}</div>\n')
    if slide.title:
        parts.append(f"<h2>{_esc(slide.title)}</h2>\n")
    parts.append('<div class="content">\n')
    if slide.bullets:
        parts.append(_render_bullets(slide.bullets))
    for shape in slide.shapes:
        if is_code_block(shape.text):
            code = shape.text.split("\n", 1)[1]
            parts.append(f"<pre><code>{_esc(code)}</code></pre>\n")
        elif shape.text:
            parts.append(f"<p>{_esc(shape.text)}</p>\n")
    parts.extend(_render_table(table) for table in slide.tables)
    parts.extend(_render_chart(chart) for chart in slide.charts)
    parts.extend(_render_image(image, http) for image in slide.images)
    parts.append("</div>\n")
    if slide.has_notes:
        parts.append(f'<div class="notes">{_esc(slide.notes)}</div>\n')
    parts.append("</div>\n")
    return "".join(parts)


def export_html(presentation: Presentation, http: HttpOptions = HttpOptions()) -> str:
    """Render *presentation* as one self-contained HTML page.

    A title block comes first, then one block per slide with its number,
    section, title, bullets, text and code shapes, tables, chart data and
    images (embedded as data URIs). Media and connectors are left out.

    Args:
        presentation: The presentation to render.
        http: Options for URL-backed images.

    Returns:
        The HTML document.

    Raises:
        PackageError: An image source cannot be loaded.
    """
    section_of = {}
    for section in presentation.sections:
        if section.slide_count:
            section_of[section.first_slide] = section.name

    title = _esc(presentation.title)
    body = [f'<div class="slide title-slide"><h1>{title}</h1></div>\n']
    for index, slide in enumerate(presentation.slides):
        body.append(_render_slide(slide, index + 1, section_of.get(index, ""), http))
    logger.info(f"Rendered {presentation.slide_count} slides as HTML")
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"UTF-8\">\n"
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"<title>{title}</title>\n<style>{STYLE}</style>\n</head>\n<body>\n"
        f"{''.join(body)}</body>\n</html>\n"
    )


def save_html(presentation: Presentation, path: Union[str, Path], http: HttpOptions = HttpOptions()) -> Path:
    """Write :func:`export_html` output to *path* as UTF-8.

    Raises:
        PackageError: An image cannot be loaded or the file cannot be written.
    """
    path = Path(path)
    document = export_html(presentation, http)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(document, encoding="utf-8")
    except OSError as e:
        raise PackageError(ErrorKind.IO, f"cannot write {path}: {e}") from e
    logger.info(f"Saved HTML to {path}")
    return path
