from __future__ import annotations

import io
import zipfile

import pytest
from lxml import etree
from PIL import Image as PILImage

from slidepack.relationships import RELS_NS


def make_png(width: int = 4, height: int = 2, color: str = "red") -> bytes:
    buffer = io.BytesIO()
    PILImage.new("RGB", (width, height), color).save(buffer, "PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def png_file(tmp_path, png_bytes):
    path = tmp_path / "photo.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture(autouse=True)
def fixed_locale(monkeypatch) -> None:
    monkeypatch.delenv("LC_ALL", raising=False)
    monkeypatch.setenv("LANG", "en_US.UTF-8")


def open_package(data: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(data))


def read_xml(archive: zipfile.ZipFile, name: str) -> etree._Element:
    return etree.fromstring(archive.read(name))


def relationships(archive: zipfile.ZipFile, rels_name: str) -> list[dict[str, str]]:
    root = read_xml(archive, rels_name)
    return [dict(rel.attrib) for rel in root.iter(f"{{{RELS_NS}}}Relationship")]
