"""String-level XML helpers shared by every part emitter.

Parts are assembled as plain strings, the way python-pptx composes its
default chart XML, rather than through an element tree. Everything that
is interpolated into an attribute or a text node goes through
:func:`escape`.
"""

from __future__ import annotations

import os
import re
from typing import Iterable, Mapping, Optional, Tuple
from xml.sax.saxutils import escape as _sax_escape

from pptx.oxml.ns import nsdecls as _pptx_nsdecls

from .errors import ErrorKind, PackageError

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

DEFAULT_LANG = "en-US"

# prefixes python-pptx does not map
_EXTRA_NAMESPACES = {
    "cs": "http://schemas.microsoft.com/office/drawing/2012/chartStyle",
    "p14": "http://schemas.microsoft.com/office/powerpoint/2010/main",
    "vt": "http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes",
}

_ENTITIES = {'"': "&quot;", "'": "&apos;"}

_ILLEGAL_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def escape(text) -> str:
    """Escape ``& < > " '`` as named entities.

    Not idempotent: escaping an already-escaped string escapes its
    ampersands again.
    """
    return _sax_escape(str(text), _ENTITIES)


def nsdecls(*prefixes: str) -> str:
    """Namespace declarations for *prefixes*, e.g. ``nsdecls("a", "p")``."""
    decls = []
    for prefix in prefixes:
        if prefix in _EXTRA_NAMESPACES:
            decls.append(f'xmlns:{prefix}="{_EXTRA_NAMESPACES[prefix]}"')
        else:
            decls.append(_pptx_nsdecls(prefix))
    return " ".join(decls)


def namespace_uri(prefix: str) -> str:
    if prefix in _EXTRA_NAMESPACES:
        return _EXTRA_NAMESPACES[prefix]
    return _pptx_nsdecls(prefix).split('"')[1]


def attrs(pairs: Iterable[Tuple[str, object]]) -> str:
    """Render ``name="value"`` pairs, skipping ``None`` values.

    Booleans become ``1``/``0``. The result starts with a space when it
    is not empty so it can be placed directly after a tag name.
    """
    rendered = []
    for name, value in pairs:
        if value is None:
            continue
        if isinstance(value, bool):
            value = "1" if value else "0"
        rendered.append(f'{name}="{escape(value)}"')
    return "".join(f" {item}" for item in rendered)


def find_illegal_chars(text: str) -> list[str]:
    return _ILLEGAL_XML_CHARS.findall(text)


def encode_part(xml: str, part_name: str, strict: bool = False) -> bytes:
    """Encode a serialized part as UTF-8 without a byte-order mark.

    In strict mode characters that XML 1.0 forbids are an error; otherwise
    they are replaced with U+FFFD.
    """
    if _ILLEGAL_XML_CHARS.search(xml):
        if strict:
            bad = ", ".join(sorted({f"U+{ord(c):04X}" for c in find_illegal_chars(xml)}))
            raise PackageError(
                ErrorKind.INVALID_ARGUMENT,
                f"text in {part_name} contains characters not allowed in XML: {bad}",
            )
        xml = _ILLEGAL_XML_CHARS.sub("\ufffd", xml)
    return xml.encode("utf-8")


def language_tag(environ: Optional[Mapping[str, str]] = None) -> str:
    """Language tag derived from ``LC_ALL``/``LANG``.

    ``zh_CN.UTF-8`` becomes ``zh-CN``. Unset, ``C`` and ``POSIX`` locales
    map to ``en-US``.
    """
    env = os.environ if environ is None else environ
    value = ""
    for key in ("LC_ALL", "LANG"):
        value = env.get(key, "") or ""
        if value:
            break
    value = value.split(".", 1)[0].split("@", 1)[0]
    if value in ("", "C", "POSIX"):
        return DEFAULT_LANG
    return value.replace("_", "-")


def lang_attrs(lang: str = DEFAULT_LANG) -> str:
    """``lang``/``altLang`` attribute text for a run's properties."""
    if lang == DEFAULT_LANG:
        return f'lang="{escape(lang)}"'
    return f'lang="{escape(lang)}" altLang="{DEFAULT_LANG}"'
