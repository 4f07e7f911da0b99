"""Relationship parts and the ``[Content_Types].xml`` manifest."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Iterator, Optional

from pptx.opc.constants import CONTENT_TYPE as CT
from pptx.opc.constants import RELATIONSHIP_TARGET_MODE as RTM

from .xmlwriter import XML_DECLARATION, attrs

RELS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
CT_NS = "http://schemas.openxmlformats.org/package/2006/content-types"


@dataclass(frozen=True)
class Relationship:
    rid: str
    reltype: str
    target: str
    external: bool = False

    def xml(self) -> str:
        return "<Relationship{}/>".format(attrs([
            ("Id", self.rid),
            ("Type", self.reltype),
            ("Target", self.target),
            ("TargetMode", RTM.EXTERNAL if self.external else None),
        ]))


class Relationships:
    """Ordered relationships of one source part; ids are ``rId1``, ``rId2``, ... in insertion order."""

    def __init__(self, source: str):
        self.source = source
        self._rels: list[Relationship] = []

    def add(self, reltype: str, target: str, external: bool = False) -> str:
        rid = f"rId{len(self._rels) + 1}"
        self._rels.append(Relationship(rid, reltype, target, external))
        return rid

    def __iter__(self) -> Iterator[Relationship]:
        return iter(self._rels)

    def __len__(self) -> int:
        return len(self._rels)

    @property
    def part_name(self) -> str:
        """Name of the ``.rels`` part, e.g. ``ppt/slides/_rels/slide1.xml.rels``."""
        return rels_part_name(self.source)

    def of_type(self, reltype: str) -> list[Relationship]:
        return [rel for rel in self._rels if rel.reltype == reltype]

    def resolve(self, rel: Relationship) -> Optional[str]:
        """Package part targeted by *rel*, or ``None`` for external targets."""
        if rel.external:
            return None
        return resolve_target(self.source, rel.target)

    def xml(self) -> str:
        body = "".join(rel.xml() for rel in self._rels)
        return f'{XML_DECLARATION}<Relationships xmlns="{RELS_NS}">{body}</Relationships>'


def rels_part_name(source: str) -> str:
    directory, filename = posixpath.split(source)
    return posixpath.join(directory, "_rels", f"{filename}.rels")


def resolve_target(source: str, target: str) -> str:
    """Resolve a relative *target* against the directory of *source*."""
    if target.startswith("/"):
        return target.lstrip("/")
    base = posixpath.dirname(source)
    return posixpath.normpath(posixpath.join(base, target))


class ContentTypes:
    """Extension defaults plus per-part overrides.

    ``rels`` and ``xml`` defaults are always present.
    """

    def __init__(self):
        self.defaults: dict[str, str] = {"rels": CT.OPC_RELATIONSHIPS, "xml": CT.XML}
        self.overrides: dict[str, str] = {}

    def add_default(self, extension: str, content_type: str) -> None:
        self.defaults.setdefault(extension.lower(), content_type)

    def add_override(self, part_name: str, content_type: str) -> None:
        self.overrides["/" + part_name.lstrip("/")] = content_type

    def content_type_for(self, part_name: str) -> Optional[str]:
        key = "/" + part_name.lstrip("/")
        if key in self.overrides:
            return self.overrides[key]
        ext = posixpath.splitext(part_name)[1].lstrip(".").lower()
        return self.defaults.get(ext)

    def xml(self) -> str:
        defaults = "".join(
            f"<Default{attrs([('Extension', ext), ('ContentType', ct)])}/>" for ext, ct in self.defaults.items()
        )
        overrides = "".join(
            f"<Override{attrs([('PartName', name), ('ContentType', ct)])}/>" for name, ct in self.overrides.items()
        )
        return f'{XML_DECLARATION}<Types xmlns="{CT_NS}">{defaults}{overrides}</Types>'
