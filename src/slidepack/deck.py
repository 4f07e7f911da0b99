"""YAML deck descriptions lowered onto the slide builders.

A deck file looks like::

    title: Quarterly Review
    author: Finance
    slides:
      - title: Revenue
        layout: TitleAndContent
        bullets:
          - Up **12%** year over year
          - text: Driven by services
            level: 1
        section: Results
        notes: Mention the one-off in March.
        charts:
          - kind: column
            categories: [Q1, Q2, Q3]
            series:
              - name: 2025
                values: [10, 12, 15]
            x: 50%
            y: 1.5in

Lengths are EMU integers or strings with a unit suffix: ``in``, ``cm``,
``pt``, ``emu`` or ``%`` of the slide extent.
"""

import re
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .charts import Chart, ChartKind, Series
from .config import load_yaml_file
from .errors import ConfigError
from .images import Image
from .presentation import Presentation
from .rich_text import make_bullet
from .sections import sections_from_markers
from .shapes import Shape, ShapeType
from .slides import Slide, SlideLayout
from .tables import Table
from .text import BulletStyle
from .units import Dimension, DimensionLike

logger = logging.getLogger(__name__)

LENGTH_PATTERN = re.compile(r'^\s*(-?\d+(?:\.\d+)?)\s*(in|cm|pt|emu|%)?\s*$')


def parse_length(value: Any) -> DimensionLike:
    """Parse a deck length such as ``914400``, ``"1.5in"`` or ``"50%"``.

    Raises:
        ValueError: The value is not a number with an optional unit.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid length {value!r}")
    if isinstance(value, int):
        return value
    match = LENGTH_PATTERN.match(str(value))
    if not match:
        raise ValueError(f"invalid length {value!r}")
    number, unit = float(match.group(1)), match.group(2)
    if unit == 'in':
        return Dimension.inches(number)
    if unit == 'cm':
        return Dimension.cm(number)
    if unit == 'pt':
        return Dimension.pt(number)
    if unit == '%':
        return Dimension.ratio(number / 100)
    return int(number)


class DeckReader:
    """Converts a loaded deck mapping into a :class:`Presentation`.

    Problems are collected while reading and reported together as one
    :class:`ConfigError`.
    """

    def __init__(self, base_dir: Path = Path('.')):
        self.base_dir = Path(base_dir)
        self.issues: List[str] = []

    def _issue(self, where: str, message: str) -> None:
        self.issues.append(f"{where}: {message}")

    def _length(self, spec: Dict[str, Any], key: str, where: str, default: DimensionLike) -> DimensionLike:
        if key not in spec:
            return default
        try:
            return parse_length(spec[key])
        except ValueError as e:
            self._issue(f"{where}.{key}", str(e))
            return default

    def _box(self, spec: Dict[str, Any], where: str, default: tuple) -> tuple:
        x, y, width, height = default
        return (
            self._length(spec, 'x', where, x),
            self._length(spec, 'y', where, y),
            self._length(spec, 'width', where, width),
            self._length(spec, 'height', where, height),
        )

    def _bullets(self, slide: Slide, items: Any, where: str) -> Slide:
        if not isinstance(items, list):
            self._issue(f"{where}.bullets", "expected a list")
            return slide
        for i, item in enumerate(items):
            if isinstance(item, dict):
                style = None
                if item.get('style'):
                    try:
                        style = BulletStyle(str(item['style']).lower())
                    except ValueError:
                        self._issue(f"{where}.bullets[{i}].style", f"unknown bullet style {item['style']!r}")
                slide = slide.add_bullet(make_bullet(str(item.get('text', '')), int(item.get('level', 0)), style))
            else:
                slide = slide.add_bullet(make_bullet(str(item)))
        return slide

    def _shape(self, spec: Dict[str, Any], where: str) -> Optional[Shape]:
        try:
            shape_type = ShapeType(spec.get('type', 'rect'))
        except ValueError:
            self._issue(f"{where}.type", f"unknown shape {spec.get('type')!r}")
            return None
        shape = Shape(shape_type, *self._box(spec, where, (457200, 1600200, 1828800, 914400)))
        if spec.get('fill'):
            shape = shape.with_fill(str(spec['fill']))
        if spec.get('line'):
            shape = shape.with_line(str(spec['line']))
        if spec.get('text'):
            shape = shape.with_text(str(spec['text']))
        if spec.get('rotation') is not None:
            shape = shape.with_rotation(int(spec['rotation']))
        if spec.get('name'):
            shape = shape.with_name(str(spec['name']))
        return shape

    def _table(self, spec: Dict[str, Any], where: str) -> Optional[Table]:
        rows = spec.get('rows')
        if not isinstance(rows, list) or not rows or not all(isinstance(r, list) for r in rows):
            self._issue(f"{where}.rows", "expected a non-empty list of rows")
            return None
        widths = spec.get('column_widths')
        if widths is not None and (not isinstance(widths, list) or not all(isinstance(w, int) for w in widths)):
            self._issue(f"{where}.column_widths", "expected a list of EMU integers")
            widths = None
        table = Table.from_grid(rows, widths, header=bool(spec.get('header', True)))
        return table.with_position(self._length(spec, 'x', where, 457200), self._length(spec, 'y', where, 1600200))

    def _chart(self, spec: Dict[str, Any], where: str) -> Optional[Chart]:
        try:
            kind = ChartKind(spec.get('kind', 'column'))
        except ValueError:
            self._issue(f"{where}.kind", f"unknown chart kind {spec.get('kind')!r}")
            return None
        chart = Chart.new(kind, str(spec.get('title', '')))
        chart = chart.with_categories(spec.get('categories') or [])
        for i, series in enumerate(spec.get('series') or []):
            if not isinstance(series, dict) or not isinstance(series.get('values'), list):
                self._issue(f"{where}.series[{i}]", "expected a mapping with a values list")
                continue
            chart = chart.add_series(Series.of(
                str(series.get('name', f"Series {i + 1}")),
                series['values'],
                series.get('x_values'),
                series.get('bubble_sizes'),
            ))
        x, y, width, height = self._box(spec, where, (chart.x, chart.y, chart.width, chart.height))
        chart = chart.with_position(x, y).with_size(width, height)
        if 'legend' in spec:
            chart = chart.with_legend(bool(spec['legend']))
        return chart

    def _image(self, spec: Any, where: str) -> Optional[Image]:
        if isinstance(spec, str):
            spec = {'path': spec}
        if not isinstance(spec, dict):
            self._issue(where, "expected a path or a mapping")
            return None
        if spec.get('url'):
            image = Image.from_url(str(spec['url']))
        elif spec.get('base64'):
            image = Image.from_base64(str(spec['base64']))
        elif spec.get('path'):
            path = Path(spec['path'])
            image = Image.from_file(path if path.is_absolute() else self.base_dir / path)
        else:
            self._issue(where, "one of path, url or base64 is required")
            return None
        if 'x' in spec or 'y' in spec:
            image = image.with_position(self._length(spec, 'x', where, 0), self._length(spec, 'y', where, 0))
        if 'width' in spec and 'height' in spec:
            image = image.with_size(self._length(spec, 'width', where, 0), self._length(spec, 'height', where, 0))
        elif 'width' in spec:
            image = image.scale_to_width(self._length(spec, 'width', where, 0))
        elif 'height' in spec:
            image = image.scale_to_height(self._length(spec, 'height', where, 0))
        return image

    def _elements(self, spec: Dict[str, Any], key: str, where: str) -> List[Any]:
        items = spec.get(key) or []
        if not isinstance(items, list):
            self._issue(f"{where}.{key}", "expected a list")
            return []
        return items

    def read_slide(self, spec: Any, index: int) -> Optional[Slide]:
        where = f"slides[{index}]"
        if isinstance(spec, str):
            return Slide(title=spec)
        if not isinstance(spec, dict):
            self._issue(where, "expected a mapping")
            return None

        layout = SlideLayout.TITLE_AND_CONTENT
        if spec.get('layout'):
            found = SlideLayout.from_name(str(spec['layout']))
            if found is None:
                self._issue(f"{where}.layout", f"unknown layout {spec['layout']!r}")
            else:
                layout = found
        slide = Slide(title=str(spec.get('title', '')), layout=layout)
        if 'bullets' in spec:
            slide = self._bullets(slide, spec['bullets'], where)
        if spec.get('notes'):
            slide = slide.set_notes(str(spec['notes']))

        for i, item in enumerate(self._elements(spec, 'shapes', where)):
            shape = self._shape(item, f"{where}.shapes[{i}]") if isinstance(item, dict) else None
            if shape is not None:
                slide = slide.add_shape(shape)
        for i, item in enumerate(self._elements(spec, 'tables', where)):
            table = self._table(item, f"{where}.tables[{i}]") if isinstance(item, dict) else None
            if table is not None:
                slide = slide.add_table(table)
        for i, item in enumerate(self._elements(spec, 'charts', where)):
            chart = self._chart(item, f"{where}.charts[{i}]") if isinstance(item, dict) else None
            if chart is not None:
                slide = slide.add_chart(chart)
        for i, item in enumerate(self._elements(spec, 'images', where)):
            image = self._image(item, f"{where}.images[{i}]")
            if image is not None:
                slide = slide.add_image(image)
        return slide

    def read(self, data: Dict[str, Any]) -> Presentation:
        """Build the presentation, raising :class:`ConfigError` listing every problem found."""
        slides_spec = data.get('slides')
        if not isinstance(slides_spec, list):
            raise ConfigError(["slides: expected a list of slides"])

        slides = []
        for index, spec in enumerate(slides_spec):
            slide = self.read_slide(spec, index)
            if slide is not None:
                slides.append(slide)
        if self.issues:
            raise ConfigError(self.issues)

        markers = [spec.get('section') if isinstance(spec, dict) else None for spec in slides_spec]
        presentation = Presentation(
            title=str(data.get('title', '')),
            slides=tuple(slides),
            sections=sections_from_markers(markers),
        )
        if data.get('author'):
            presentation = presentation.with_author(str(data['author']))
        if data.get('language'):
            presentation = presentation.with_language(str(data['language']))
        logger.info(f"Read deck '{presentation.title}' with {len(slides)} slides")
        return presentation


def load_deck(path: Path) -> Presentation:
    """Load a YAML deck file; image paths resolve relative to its directory.

    Raises:
        FileNotFoundError: The deck file does not exist.
        ConfigError: The file is not valid YAML or describes invalid slides.
    """
    path = Path(path)
    return DeckReader(path.parent).read(load_yaml_file(path))


def deck_from_string(text: str, base_dir: Path = Path('.')) -> Presentation:
    """Parse a deck from YAML text."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError([f"invalid YAML: {e}"]) from e
    if not isinstance(data, dict):
        raise ConfigError(["deck: top level must be a mapping"])
    return DeckReader(base_dir).read(data)
