"""Inline Markdown formatting to text runs."""

import re
from typing import List, Optional, Tuple

from .hyperlinks import Hyperlink
from .text import Bullet, BulletStyle, Run

CODE_FONT = "Consolas"

# Matches [text](url) links, `code`, ***text*** (bold+italic), **text** (bold), or *text* (italic)
INLINE_PATTERN = re.compile(r'(\[.*?\]\(.*?\)|`[^`]+`|\*\*\*.*?\*\*\*|\*\*.*?\*\*|\*.*?\*)')
LINK_PATTERN = re.compile(r'\[(.*?)\]\((.*?)\)')

# "- item", "* item", "1. item"; nesting by two spaces
BULLET_PATTERN = re.compile(r'^(?P<indent>\s*)(?P<marker>[-*+]|\d+[.)])\s+(?P<text>.*)$')


def parse_inline(text: str) -> List[Run]:
    """Split text with markdown formatting into runs.

    Supports **bold**, *italic*, ***bold+italic***, `code` and
    [text](url) markdown syntax.

    Args:
        text: Text with markdown formatting

    Returns:
        Runs in reading order; plain text becomes unformatted runs
    """
    runs = []
    for part in INLINE_PATTERN.split(text):
        if not part:
            continue

        if part.startswith('[') and part.endswith(')') and '](' in part:
            link_match = LINK_PATTERN.match(part)
            if link_match:
                runs.append(Run(link_match.group(1), underline=True, hyperlink=Hyperlink.url(link_match.group(2))))
            else:
                runs.append(Run(part))
        elif part.startswith('`') and part.endswith('`') and len(part) > 1:
            runs.append(Run(part[1:-1], font=CODE_FONT))
        elif part.startswith('***') and part.endswith('***') and len(part) > 6:
            runs.append(Run(part[3:-3], bold=True, italic=True))
        elif part.startswith('**') and part.endswith('**') and len(part) > 4:
            runs.append(Run(part[2:-2], bold=True))
        elif part.startswith('*') and part.endswith('*') and len(part) > 2:
            runs.append(Run(part[1:-1], italic=True))
        else:
            runs.append(Run(part))
    return runs


def plain_text(runs: List[Run]) -> str:
    return ''.join(run.text for run in runs)


def parse_bullet_line(line: str) -> Optional[Tuple[int, Optional[BulletStyle], str]]:
    """Recognize a markdown list item.

    Returns:
        ``(level, style, text)`` where level counts two-space indents and
        style is ``NUMBER`` for ordered items, or None for other lines
    """
    match = BULLET_PATTERN.match(line.rstrip())
    if not match:
        return None
    indent = len(match.group('indent').replace('\t', '  '))
    style = BulletStyle.NUMBER if match.group('marker')[0].isdigit() else None
    return indent // 2, style, match.group('text').strip()


def make_bullet(text: str, level: int = 0, style: Optional[BulletStyle] = None) -> Bullet:
    """Build a bullet, keeping runs only when the text carries formatting."""
    runs = parse_inline(text)
    if len(runs) == 1 and runs[0] == Run(runs[0].text):
        return Bullet(runs[0].text, level, style)
    return Bullet(plain_text(runs), level, style, tuple(runs))
