"""Presentation generation orchestration.

This module ties the input adapters to the package writer using the
settings of a :class:`~slidepack.config.Config`.

Pipeline flow:
    1. Read the source (Markdown file, web page or YAML deck)
    2. Lower it onto slides
    3. Apply document settings (title, author, language)
    4. Write the package
"""

import logging
from pathlib import Path
from typing import Optional

from .config import Config
from .deck import load_deck
from .markdown_parser import parse_markdown_file
from .presentation import DEFAULT_AUTHOR, Presentation, blank_presentation
from .sections import sections_from_markers
from .slide_builders import build_slide, resolve_layout
from .slides import SlideLayout, describe
from .web import DEFAULT_MAX_SLIDES, web_to_presentation

logger = logging.getLogger(__name__)


class PresentationGenerator:
    """Builds presentations from the supported sources and saves them.

    Settings that a source leaves open (author, language, the layout of
    Markdown slides) come from the configuration.
    """

    def __init__(self, config: Config):
        """Initialize the generator with configuration.

        Args:
            config: Configuration object with paths and settings.
        """
        self.config = config

    @property
    def default_layout(self) -> SlideLayout:
        return resolve_layout(self.config.default_layout)

    def _apply_settings(self, presentation: Presentation) -> Presentation:
        if presentation.author == DEFAULT_AUTHOR:
            presentation = presentation.with_author(self.config.author)
        return presentation

    def blank_to_presentation(self, title: str, slide_count: int = 1) -> Presentation:
        return self._apply_settings(blank_presentation(title, slide_count))

    def markdown_to_presentation(self, md_file: Path) -> Presentation:
        """Convert a Markdown file.

        Document frontmatter may set ``title``, ``author``, ``language`` and
        ``layout`` (the default layout for slides that do not name one).
        ``<!-- section: Name -->`` markers start slide sections.

        Raises:
            PackageError: The file cannot be read.
        """
        md_file = Path(md_file)
        doc_frontmatter, slide_data_list = parse_markdown_file(md_file)

        default_layout = self.default_layout
        if doc_frontmatter.get('layout'):
            default_layout = resolve_layout(doc_frontmatter['layout'], default_layout)

        slides = [
            build_slide(data, md_file.parent, default_layout, first=(index == 0))
            for index, data in enumerate(slide_data_list)
        ]
        title = doc_frontmatter.get('title') or next((s.title for s in slides if s.title), md_file.stem)
        presentation = Presentation(
            title=str(title),
            slides=tuple(slides),
            sections=sections_from_markers(data.section_name for data in slide_data_list),
        )
        if doc_frontmatter.get('author'):
            presentation = presentation.with_author(str(doc_frontmatter['author']))
        if doc_frontmatter.get('language'):
            presentation = presentation.with_language(str(doc_frontmatter['language']))
        for number, slide in enumerate(slides, start=1):
            logger.debug(f"  Slide {number}: {describe(slide)}")
        logger.info(f"Converted {md_file} into {len(slides)} slides")
        return self._apply_settings(presentation)

    def web_to_presentation(self, url: str, max_slides: int = DEFAULT_MAX_SLIDES) -> Presentation:
        """Convert a web page, one slide per heading.

        Raises:
            PackageError: The page cannot be fetched.
        """
        presentation = web_to_presentation(url, max_slides=max_slides, http=self.config.http_options)
        return self._apply_settings(presentation)

    def deck_to_presentation(self, deck_file: Path) -> Presentation:
        """Convert a YAML deck description.

        Raises:
            FileNotFoundError: The deck file does not exist.
            ConfigError: The deck is invalid.
        """
        return self._apply_settings(load_deck(Path(deck_file)))

    def save(self, presentation: Presentation, output: Optional[Path] = None) -> Path:
        """Write the presentation with the configured package options.

        Args:
            presentation: Presentation to write.
            output: Target path; defaults to ``paths.output`` from the config.

        Returns:
            The written path.
        """
        target = Path(output) if output is not None else self.config.output_path
        written = presentation.save(target, self.config.package_options)
        logger.info(f"Saved presentation: {written} ({presentation.slide_count} slides)")
        return written

    def generate(self) -> Path:
        """Convert ``paths.content`` and write it to ``paths.output``."""
        presentation = self.markdown_to_presentation(self.config.content_path)
        return self.save(presentation)
