"""Command-line interface for slidepack."""

import argparse
import sys
import logging
from pathlib import Path
from typing import List, Optional

from .config import Config
from .errors import ConfigError, PackageError
from .generator import PresentationGenerator
from .html_export import save_html
from .inspection import inspect_package, validate_package
from .web import DEFAULT_MAX_SLIDES


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation.

    Returns:
        Configured parser
    """
    parser = argparse.ArgumentParser(
        prog='slidepack',
        description='Write PowerPoint (.pptx) packages from Markdown, web pages or YAML decks.'
    )
    parser.add_argument(
        '--config',
        help='Path to configuration file (default: ./slidepack.yaml when present)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    create = subparsers.add_parser('create', help='Create a blank deck or one described by a YAML file')
    create.add_argument('output', help='Output .pptx path')
    create.add_argument('--title', default='Presentation', help='Deck title (default: Presentation)')
    create.add_argument('--slides', type=int, default=1, help='Number of title slides (default: 1)')
    create.add_argument('--from', dest='deck', help='YAML deck description to build from')
    create.add_argument('--html', help='Also write an HTML rendition to this path')

    md2ppt = subparsers.add_parser('md2ppt', aliases=['from-md'], help='Convert a Markdown file')
    md2ppt.add_argument('input', help='Markdown file')
    md2ppt.add_argument('output', nargs='?', help='Output .pptx path (default: input with .pptx suffix)')
    md2ppt.add_argument('--html', help='Also write an HTML rendition to this path')

    web2ppt = subparsers.add_parser('web2ppt', help='Convert a web page')
    web2ppt.add_argument('url', help='Page URL')
    web2ppt.add_argument('output', nargs='?', default='web.pptx', help='Output .pptx path (default: web.pptx)')
    web2ppt.add_argument(
        '--max-slides',
        type=int,
        default=DEFAULT_MAX_SLIDES,
        help=f'Maximum number of slides including the title slide (default: {DEFAULT_MAX_SLIDES})'
    )

    info = subparsers.add_parser('info', help='Summarize a .pptx package')
    info.add_argument('file', help='Package to inspect')

    validate = subparsers.add_parser('validate', help='Check a .pptx package for structural problems')
    validate.add_argument('file', help='Package to validate')

    return parser


def _write_html(generator: PresentationGenerator, presentation, target: Optional[str]) -> None:
    if target:
        path = save_html(presentation, Path(target), generator.config.http_options)
        print(f"Wrote HTML {path}")


def _create(generator: PresentationGenerator, args: argparse.Namespace) -> int:
    if args.deck:
        presentation = generator.deck_to_presentation(Path(args.deck))
    else:
        if args.slides < 0:
            print("Error: --slides must not be negative", file=sys.stderr)
            return 1
        presentation = generator.blank_to_presentation(args.title, args.slides)
    path = generator.save(presentation, Path(args.output))
    print(f"Created {path} ({presentation.slide_count} slides)")
    _write_html(generator, presentation, args.html)
    return 0


def _md2ppt(generator: PresentationGenerator, args: argparse.Namespace) -> int:
    source = Path(args.input)
    output = Path(args.output) if args.output else source.with_suffix('.pptx')
    presentation = generator.markdown_to_presentation(source)
    path = generator.save(presentation, output)
    print(f"Converted {source} -> {path} ({presentation.slide_count} slides)")
    _write_html(generator, presentation, args.html)
    return 0


def _web2ppt(generator: PresentationGenerator, args: argparse.Namespace) -> int:
    if args.max_slides < 1:
        print("Error: --max-slides must be at least 1", file=sys.stderr)
        return 1
    presentation = generator.web_to_presentation(args.url, args.max_slides)
    path = generator.save(presentation, Path(args.output))
    print(f"Converted {args.url} -> {path} ({presentation.slide_count} slides)")
    return 0


def _info(args: argparse.Namespace) -> int:
    summary = inspect_package(Path(args.file))
    print(f"File:     {args.file}")
    print(f"Slides:   {summary.slide_count}")
    print(f"Charts:   {summary.chart_count}")
    print(f"Media:    {summary.media_count}")
    print(f"Notes:    {summary.notes_count}")
    print(f"Parts:    {len(summary.parts)}")
    if summary.sections:
        print(f"Sections: {', '.join(summary.sections)}")
    for number, title in enumerate(summary.titles, start=1):
        print(f"  {number:>3}. {title}")
    return 0


def _validate(args: argparse.Namespace) -> int:
    problems = validate_package(Path(args.file))
    if problems:
        print(f"{args.file}: {len(problems)} problem(s)")
        for problem in problems:
            print(f"  - {problem}")
        return 1
    print(f"{args.file}: OK")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Arguments without the program name; defaults to ``sys.argv[1:]``.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = build_parser().parse_args(argv)

    # Load configuration
    try:
        config = Config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    generator = PresentationGenerator(config)
    try:
        if args.command == 'create':
            return _create(generator, args)
        if args.command in ('md2ppt', 'from-md'):
            return _md2ppt(generator, args)
        if args.command == 'web2ppt':
            return _web2ppt(generator, args)
        if args.command == 'info':
            return _info(args)
        return _validate(args)
    except (PackageError, ConfigError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logging.exception("Unexpected error")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
