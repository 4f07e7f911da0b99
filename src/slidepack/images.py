"""Pictures on slides.

Covers the picture model (source, placement, crop and effects), header
sniffing for the common raster formats, loading the bytes behind each
source and the ``p:pic`` element that embeds the result.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import struct
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional, Union

from PIL import Image as PILImage
from PIL import UnidentifiedImageError
from pptx.opc.constants import CONTENT_TYPE as CT

from .errors import ErrorKind, PackageError
from .fetch import HttpOptions, fetch_bytes
from .units import DimensionLike, pixels_to_emu, to_emu_x, to_emu_y
from .xmlwriter import escape

logger = logging.getLogger(__name__)

SHADOW_XML = (
    '<a:outerShdw blurRad="40000" dist="20000" dir="5400000" rotWithShape="0">'
    '<a:srgbClr val="000000"><a:alpha val="40000"/></a:srgbClr></a:outerShdw>'
)
REFLECTION_XML = (
    '<a:reflection blurRad="6350" stA="50000" endA="300" endPos="35000" dist="0" '
    'dir="5400000" sy="-100000" algn="bl" rotWithShape="0"/>'
)


class ImageFormat(str, Enum):
    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    BMP = "bmp"
    TIFF = "tiff"
    WEBP = "webp"
    SVG = "svg"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def content_type(self) -> str:
        return _IMAGE_CONTENT_TYPES[self]

    @classmethod
    def from_extension(cls, ext: str) -> Optional["ImageFormat"]:
        ext = ext.lower().lstrip(".")
        return _EXTENSION_ALIASES.get(ext)


_IMAGE_CONTENT_TYPES = {
    ImageFormat.PNG: CT.PNG,
    ImageFormat.JPEG: CT.JPEG,
    ImageFormat.GIF: CT.GIF,
    ImageFormat.BMP: CT.BMP,
    ImageFormat.TIFF: CT.TIFF,
    ImageFormat.WEBP: "image/webp",
    ImageFormat.SVG: "image/svg+xml",
}

_EXTENSION_ALIASES = {
    "png": ImageFormat.PNG,
    "jpg": ImageFormat.JPEG,
    "jpeg": ImageFormat.JPEG,
    "jpe": ImageFormat.JPEG,
    "gif": ImageFormat.GIF,
    "bmp": ImageFormat.BMP,
    "dib": ImageFormat.BMP,
    "tif": ImageFormat.TIFF,
    "tiff": ImageFormat.TIFF,
    "webp": ImageFormat.WEBP,
    "svg": ImageFormat.SVG,
}

_PIL_FORMATS = {
    "PNG": ImageFormat.PNG,
    "JPEG": ImageFormat.JPEG,
    "GIF": ImageFormat.GIF,
    "BMP": ImageFormat.BMP,
    "TIFF": ImageFormat.TIFF,
    "WEBP": ImageFormat.WEBP,
}


class ImageInfo(NamedTuple):
    format: ImageFormat
    width: int
    height: int


_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def detect_image_format(data: bytes) -> Optional[ImageInfo]:
    """Identify *data* from its header bytes.

    Returns the format and pixel dimensions, or None when the header is
    not one of PNG, JPEG, GIF, BMP or WebP. Never raises.
    """
    if data.startswith(_PNG_SIGNATURE) and len(data) >= 24:
        width, height = struct.unpack(">II", data[16:24])
        return ImageInfo(ImageFormat.PNG, width, height)
    if data.startswith(b"\xff\xd8"):
        return _jpeg_info(data)
    if data[:6] in (b"GIF87a", b"GIF89a") and len(data) >= 10:
        width, height = struct.unpack("<HH", data[6:10])
        return ImageInfo(ImageFormat.GIF, width, height)
    if data.startswith(b"BM") and len(data) >= 26:
        width, height = struct.unpack("<Ii", data[18:26])
        return ImageInfo(ImageFormat.BMP, width, abs(height))
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return _webp_info(data)
    return None


def _jpeg_info(data: bytes) -> Optional[ImageInfo]:
    pos = 2
    while pos + 4 <= len(data):
        if data[pos] != 0xFF:
            return None
        marker = data[pos + 1]
        if marker == 0xFF:
            pos += 1
            continue
        (length,) = struct.unpack(">H", data[pos + 2 : pos + 4])
        # SOF0 (baseline) and SOF2 (progressive)
        if marker in (0xC0, 0xC2):
            if pos + 9 > len(data):
                return None
            height, width = struct.unpack(">HH", data[pos + 5 : pos + 9])
            return ImageInfo(ImageFormat.JPEG, width, height)
        pos += 2 + length
    return None


def _webp_info(data: bytes) -> Optional[ImageInfo]:
    chunk = data[12:16]
    if chunk == b"VP8 " and len(data) >= 30:
        width, height = struct.unpack("<HH", data[26:30])
        return ImageInfo(ImageFormat.WEBP, width & 0x3FFF, height & 0x3FFF)
    if chunk == b"VP8L" and len(data) >= 25:
        bits = int.from_bytes(data[21:25], "little")
        return ImageInfo(ImageFormat.WEBP, (bits & 0x3FFF) + 1, ((bits >> 14) & 0x3FFF) + 1)
    if chunk == b"VP8X" and len(data) >= 30:
        width = int.from_bytes(data[24:27], "little") + 1
        height = int.from_bytes(data[27:30], "little") + 1
        return ImageInfo(ImageFormat.WEBP, width, height)
    return None


def read_image_info(data: bytes) -> Optional[ImageInfo]:
    """Header sniffing first, then Pillow for anything else it can open (TIFF)."""
    info = detect_image_format(data)
    if info is not None:
        return info
    try:
        with PILImage.open(io.BytesIO(data)) as img:
            fmt = _PIL_FORMATS.get(img.format or "")
            if fmt is None:
                return None
            width, height = img.size
    except (UnidentifiedImageError, OSError, ValueError):
        return None
    return ImageInfo(fmt, width, height)


class SourceKind(str, Enum):
    FILE = "file"
    BYTES = "bytes"
    BASE64 = "base64"
    URL = "url"


@dataclass(frozen=True)
class ImageSource:
    kind: SourceKind
    value: Union[str, bytes]

    @property
    def basename(self) -> Optional[str]:
        """Original file name for disk sources; in-memory sources get a synthesized name."""
        if self.kind is SourceKind.FILE:
            return Path(str(self.value)).name
        return None

    def describe(self) -> str:
        if self.kind in (SourceKind.FILE, SourceKind.URL):
            return f"{self.kind.value} {self.value}"
        return f"{self.kind.value} source"


class ImageEffect(str, Enum):
    SHADOW = "shadow"
    REFLECTION = "reflection"


@dataclass(frozen=True)
class Crop:
    """Insets from each edge as fractions of the picture, 0..1."""

    left: float = 0.0
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not (self.left or self.top or self.right or self.bottom)


@dataclass(frozen=True)
class Image:
    """A picture placed on a slide.

    Width and height may be left unset: a missing one follows the
    picture's aspect ratio and both missing means pixel size at 96 dpi.
    ``fit_box`` places the picture inside a box preserving aspect ratio.
    """

    source: ImageSource
    format: Optional[ImageFormat] = None
    x: DimensionLike = 0
    y: DimensionLike = 0
    width: Optional[DimensionLike] = None
    height: Optional[DimensionLike] = None
    crop: Optional[Crop] = None
    effects: tuple[ImageEffect, ...] = ()
    description: str = ""
    fit_box: Optional[tuple[DimensionLike, DimensionLike, DimensionLike, DimensionLike]] = None

    @classmethod
    def from_file(cls, path: Union[str, Path], format: Optional[ImageFormat] = None) -> "Image":
        if format is None:
            format = ImageFormat.from_extension(Path(path).suffix)
        return cls(ImageSource(SourceKind.FILE, str(path)), format)

    @classmethod
    def from_bytes(cls, data: bytes, format: Optional[ImageFormat] = None) -> "Image":
        return cls(ImageSource(SourceKind.BYTES, bytes(data)), format)

    @classmethod
    def from_base64(cls, data: str, format: Optional[ImageFormat] = None) -> "Image":
        return cls(ImageSource(SourceKind.BASE64, data), format)

    @classmethod
    def from_url(cls, url: str, format: Optional[ImageFormat] = None) -> "Image":
        return cls(ImageSource(SourceKind.URL, url), format)

    def with_position(self, x: DimensionLike, y: DimensionLike) -> "Image":
        return replace(self, x=x, y=y)

    def with_size(self, width: DimensionLike, height: DimensionLike) -> "Image":
        return replace(self, width=width, height=height, fit_box=None)

    def scale_to_width(self, width: DimensionLike) -> "Image":
        return replace(self, width=width, height=None, fit_box=None)

    def scale_to_height(self, height: DimensionLike) -> "Image":
        return replace(self, width=None, height=height, fit_box=None)

    def fit_within(self, x: DimensionLike, y: DimensionLike, width: DimensionLike, height: DimensionLike) -> "Image":
        return replace(self, fit_box=(x, y, width, height))

    def with_crop(self, left: float, top: float, right: float, bottom: float) -> "Image":
        return replace(self, crop=Crop(left, top, right, bottom))

    def with_shadow(self) -> "Image":
        return self.with_effect(ImageEffect.SHADOW)

    def with_reflection(self) -> "Image":
        return self.with_effect(ImageEffect.REFLECTION)

    def with_effect(self, effect: ImageEffect) -> "Image":
        if effect in self.effects:
            return self
        return replace(self, effects=self.effects + (ImageEffect(effect),))

    def with_description(self, text: str) -> "Image":
        return replace(self, description=text)


@dataclass(frozen=True)
class LoadedImage:
    """Bytes and resolved geometry of an :class:`Image`, ready to embed."""

    data: bytes
    format: ImageFormat
    x: int
    y: int
    cx: int
    cy: int
    basename: Optional[str] = None


def read_source(source: ImageSource, http: HttpOptions = HttpOptions()) -> bytes:
    """Fetch the raw bytes behind *source*.

    Raises:
        PackageError: ``not_found`` for missing files, ``io`` for other
            read and network failures, ``invalid_argument`` for bad base64.
    """
    if source.kind is SourceKind.BYTES:
        return bytes(source.value)
    if source.kind is SourceKind.BASE64:
        text = source.value.decode() if isinstance(source.value, bytes) else source.value
        if text.startswith("data:") and "," in text:
            text = text.split(",", 1)[1]
        try:
            return base64.b64decode(text, validate=False)
        except (binascii.Error, ValueError) as e:
            raise PackageError(ErrorKind.INVALID_ARGUMENT, f"invalid base64 image data: {e}") from e
    if source.kind is SourceKind.URL:
        return fetch_bytes(str(source.value), http)
    try:
        return Path(str(source.value)).read_bytes()
    except OSError as e:
        raise PackageError.from_os_error(e, "image") from e


def _resolve_format(image: Image, info: Optional[ImageInfo]) -> ImageFormat:
    if image.format is not None:
        if info is not None and info.format is not image.format:
            logger.warning(
                f"Image {image.source.describe()} looks like {info.format.value} "
                f"but is declared {image.format.value}; using the declared format"
            )
        if info is None:
            logger.warning(f"Unrecognized image header in {image.source.describe()}; using declared {image.format.value}")
        return image.format
    if info is None:
        raise PackageError(ErrorKind.UNSUPPORTED_FORMAT, f"unrecognized image header in {image.source.describe()}")
    return info.format


def _resolve_extent(image: Image, info: Optional[ImageInfo]) -> tuple[int, int, int, int]:
    x, y = to_emu_x(image.x), to_emu_y(image.y)
    native_cx = pixels_to_emu(info.width) if info else None
    native_cy = pixels_to_emu(info.height) if info else None

    if image.fit_box is not None:
        bx, by = to_emu_x(image.fit_box[0]), to_emu_y(image.fit_box[1])
        bw, bh = to_emu_x(image.fit_box[2]), to_emu_y(image.fit_box[3])
        if not native_cx or not native_cy:
            return bx, by, bw, bh
        # contain: constrain by the tighter side and center in the box
        ratio = native_cx / native_cy
        if ratio > bw / max(bh, 1):
            cx, cy = bw, int(bw / ratio)
        else:
            cx, cy = int(bh * ratio), bh
        return bx + (bw - cx) // 2, by + (bh - cy) // 2, cx, cy

    cx = to_emu_x(image.width) if image.width is not None else None
    cy = to_emu_y(image.height) if image.height is not None else None
    if cx is not None and cy is not None:
        return x, y, cx, cy
    if native_cx and native_cy:
        if cx is not None:
            return x, y, cx, int(cx * native_cy / native_cx)
        if cy is not None:
            return x, y, int(cy * native_cx / native_cy), cy
        return x, y, native_cx, native_cy
    # no pixel size to go on (e.g. SVG); fall back to one inch
    return x, y, cx if cx is not None else 914400, cy if cy is not None else 914400


def load_image(image: Image, http: HttpOptions = HttpOptions()) -> LoadedImage:
    """Read and measure *image*; the source is opened, read and closed here."""
    data = read_source(image.source, http)
    info = read_image_info(data)
    fmt = _resolve_format(image, info)
    x, y, cx, cy = _resolve_extent(image, info)
    logger.debug(f"Loaded {image.source.describe()}: {fmt.value} {len(data)} bytes, {cx}x{cy} EMU")
    return LoadedImage(data, fmt, x, y, cx, cy, image.source.basename)


def _crop_xml(crop: Optional[Crop]) -> str:
    if crop is None or crop.is_empty:
        return ""
    return '<a:srcRect l="{}" t="{}" r="{}" b="{}"/>'.format(
        int(round(crop.left * 100000)),
        int(round(crop.top * 100000)),
        int(round(crop.right * 100000)),
        int(round(crop.bottom * 100000)),
    )


def effects_xml(effects) -> str:
    if not effects:
        return ""
    inner = ""
    # effectLst children are ordered: outerShdw before reflection
    if ImageEffect.SHADOW in effects:
        inner += SHADOW_XML
    if ImageEffect.REFLECTION in effects:
        inner += REFLECTION_XML
    return f"<a:effectLst>{inner}</a:effectLst>"


def picture_xml(image: Image, loaded: LoadedImage, shape_id: int, rid: str) -> str:
    """``p:pic`` embedding the image relationship *rid*."""
    descr = f' descr="{escape(image.description)}"' if image.description else ""
    return (
        f'<p:pic><p:nvPicPr><p:cNvPr id="{shape_id}" name="Picture {shape_id - 1}"{descr}/>'
        '<p:cNvPicPr><a:picLocks noChangeAspect="1"/></p:cNvPicPr><p:nvPr/></p:nvPicPr>'
        f'<p:blipFill><a:blip r:embed="{rid}"/>{_crop_xml(image.crop)}<a:stretch><a:fillRect/></a:stretch></p:blipFill>'
        f'<p:spPr><a:xfrm><a:off x="{loaded.x}" y="{loaded.y}"/><a:ext cx="{loaded.cx}" cy="{loaded.cy}"/></a:xfrm>'
        f'<a:prstGeom prst="rect"><a:avLst/></a:prstGeom>{effects_xml(image.effects)}</p:spPr></p:pic>'
    )
