"""Embedded video and audio.

A media element is a picture (its poster frame) whose non-visual
properties link to the media file, plus a ``p14:media`` extension that
embeds the same file for PowerPoint 2010 and later.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .errors import ErrorKind, PackageError
from .images import ImageFormat, ImageSource, SourceKind, read_image_info, read_source
from .units import DimensionLike, to_emu_x, to_emu_y
from .xmlwriter import escape, nsdecls

logger = logging.getLogger(__name__)

MEDIA_EXT_URI = "{DAA4B4D4-6D71-4841-9C94-3DE7FCFB9230}"

# 1x1 PNG used as the poster frame when none is given
DEFAULT_POSTER = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

MediaSource = ImageSource


class MediaKind(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"


class VideoFormat(str, Enum):
    MP4 = "mp4"
    WMV = "wmv"
    AVI = "avi"
    MOV = "mov"
    MKV = "mkv"
    WEBM = "webm"
    M4V = "m4v"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def content_type(self) -> str:
        return _VIDEO_CONTENT_TYPES[self]


_VIDEO_CONTENT_TYPES = {
    VideoFormat.MP4: "video/mp4",
    VideoFormat.WMV: "video/x-ms-wmv",
    VideoFormat.AVI: "video/x-msvideo",
    VideoFormat.MOV: "video/quicktime",
    VideoFormat.MKV: "video/x-matroska",
    VideoFormat.WEBM: "video/webm",
    VideoFormat.M4V: "video/x-m4v",
}


class AudioFormat(str, Enum):
    MP3 = "mp3"
    WAV = "wav"
    WMA = "wma"
    M4A = "m4a"
    OGG = "ogg"
    FLAC = "flac"
    AAC = "aac"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def content_type(self) -> str:
        return _AUDIO_CONTENT_TYPES[self]


_AUDIO_CONTENT_TYPES = {
    AudioFormat.MP3: "audio/mpeg",
    AudioFormat.WAV: "audio/wav",
    AudioFormat.WMA: "audio/x-ms-wma",
    AudioFormat.M4A: "audio/mp4",
    AudioFormat.OGG: "audio/ogg",
    AudioFormat.FLAC: "audio/flac",
    AudioFormat.AAC: "audio/aac",
}

MediaFormat = Union[VideoFormat, AudioFormat]


def media_format_from_extension(ext: str) -> Optional[MediaFormat]:
    ext = ext.lower().lstrip(".")
    for enum in (VideoFormat, AudioFormat):
        try:
            return enum(ext)
        except ValueError:
            continue
    return None


def _format_for(path, enum):
    ext = Path(path).suffix.lower().lstrip(".")
    try:
        return enum(ext)
    except ValueError:
        raise PackageError(ErrorKind.UNSUPPORTED_FORMAT, f"unsupported {enum.__name__[:-6].lower()} format: {path}") from None


@dataclass(frozen=True)
class MediaOptions:
    """Playback options.

    Only ``start_time`` and ``end_time`` are written, as the ``p14:trim``
    of the media extension. ``auto_play``, ``loop``, ``mute``, ``volume``,
    ``play_across_slides`` and ``hide_when_stopped`` are kept on the model
    only: PowerPoint reads them from the slide timing tree, which is not
    written, so setting them does not change the package.

    Attributes:
        volume: Percent, clamped to 0..100.
        start_time: Trim start in milliseconds.
        end_time: Trim end in milliseconds.
    """

    auto_play: bool = False
    loop: bool = False
    mute: bool = False
    volume: int = 100
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    play_across_slides: bool = False
    hide_when_stopped: bool = False

    def __post_init__(self):
        object.__setattr__(self, "volume", max(0, min(100, int(self.volume))))


@dataclass(frozen=True)
class Media:
    kind: MediaKind
    source: MediaSource
    format: MediaFormat
    x: DimensionLike = 0
    y: DimensionLike = 0
    width: DimensionLike = 4572000
    height: DimensionLike = 3429000
    options: MediaOptions = field(default_factory=MediaOptions)
    poster: Optional[MediaSource] = None
    alt_text: str = ""

    @classmethod
    def video(cls, path: Union[str, Path], x=0, y=0, width=4572000, height=3429000,
              format: Optional[VideoFormat] = None) -> "Media":
        fmt = format or _format_for(path, VideoFormat)
        return cls(MediaKind.VIDEO, ImageSource(SourceKind.FILE, str(path)), fmt, x, y, width, height)

    @classmethod
    def audio(cls, path: Union[str, Path], x=0, y=0, width=914400, height=914400,
              format: Optional[AudioFormat] = None) -> "Media":
        fmt = format or _format_for(path, AudioFormat)
        return cls(MediaKind.AUDIO, ImageSource(SourceKind.FILE, str(path)), fmt, x, y, width, height)

    @classmethod
    def from_bytes(cls, data: bytes, format: MediaFormat, x=0, y=0, width=4572000, height=3429000) -> "Media":
        kind = MediaKind.VIDEO if isinstance(format, VideoFormat) else MediaKind.AUDIO
        return cls(kind, ImageSource(SourceKind.BYTES, bytes(data)), format, x, y, width, height)

    def with_position(self, x: DimensionLike, y: DimensionLike) -> "Media":
        return replace(self, x=x, y=y)

    def with_size(self, width: DimensionLike, height: DimensionLike) -> "Media":
        return replace(self, width=width, height=height)

    def with_options(self, options: MediaOptions) -> "Media":
        return replace(self, options=options)

    def with_auto_play(self, auto_play: bool = True) -> "Media":
        """Model-only, like the other playback flags; see :class:`MediaOptions`."""
        return replace(self, options=replace(self.options, auto_play=auto_play))

    def with_loop(self, loop: bool = True) -> "Media":
        return replace(self, options=replace(self.options, loop=loop))

    def with_mute(self, mute: bool = True) -> "Media":
        return replace(self, options=replace(self.options, mute=mute))

    def with_volume(self, volume: int) -> "Media":
        return replace(self, options=replace(self.options, volume=volume))

    def with_trim(self, start_ms: Optional[int] = None, end_ms: Optional[int] = None) -> "Media":
        return replace(self, options=replace(self.options, start_time=start_ms, end_time=end_ms))

    def with_play_across_slides(self, play: bool = True) -> "Media":
        return replace(self, options=replace(self.options, play_across_slides=play))

    def with_poster(self, path: Union[str, Path]) -> "Media":
        return replace(self, poster=ImageSource(SourceKind.FILE, str(path)))

    def with_poster_bytes(self, data: bytes) -> "Media":
        return replace(self, poster=ImageSource(SourceKind.BYTES, bytes(data)))

    def with_alt_text(self, text: str) -> "Media":
        return replace(self, alt_text=text)

    @property
    def relationship_type_name(self) -> str:
        return "video" if self.kind is MediaKind.VIDEO else "audio"


@dataclass(frozen=True)
class LoadedMedia:
    data: bytes
    poster: bytes
    poster_format: ImageFormat
    basename: Optional[str] = None


def load_media(media: Media) -> LoadedMedia:
    """Read the media bytes and its poster frame.

    Raises:
        PackageError: ``not_found``/``io`` from the sources, or
            ``unsupported_format`` when the poster is not a known image.
    """
    if media.source.kind not in (SourceKind.FILE, SourceKind.BYTES):
        raise PackageError(ErrorKind.INVALID_ARGUMENT, f"media must come from a file or bytes, not {media.source.kind.value}")
    data = read_source(media.source)
    poster, poster_format = DEFAULT_POSTER, ImageFormat.PNG
    if media.poster is not None:
        poster = read_source(media.poster)
        info = read_image_info(poster)
        if info is None:
            raise PackageError(ErrorKind.UNSUPPORTED_FORMAT, f"unrecognized poster image {media.poster.describe()}")
        poster_format = info.format
    logger.debug(f"Loaded {media.kind.value} {media.source.describe()}: {len(data)} bytes")
    return LoadedMedia(data, poster, poster_format, media.source.basename)


def _trim_xml(options: MediaOptions) -> str:
    if options.start_time is None and options.end_time is None:
        return ""
    start = f' st="{int(options.start_time)}"' if options.start_time is not None else ""
    end = f' end="{int(options.end_time)}"' if options.end_time is not None else ""
    return f"<p14:trim{start}{end}/>"


def media_xml(media: Media, shape_id: int, media_rid: str, link_rid: str, poster_rid: str) -> str:
    """``p:pic`` for a video or audio element.

    *link_rid* is the video/audio relationship, *media_rid* the embedded
    media relationship shared with the ``p14:media`` extension.
    """
    x, y = to_emu_x(media.x), to_emu_y(media.y)
    cx, cy = to_emu_x(media.width), to_emu_y(media.height)
    label = "Video" if media.kind is MediaKind.VIDEO else "Audio"
    file_tag = "a:videoFile" if media.kind is MediaKind.VIDEO else "a:audioFile"
    trim = _trim_xml(media.options)
    p14_media = (
        f'<p14:media {nsdecls("p14")} r:embed="{media_rid}">{trim}</p14:media>'
        if trim
        else f'<p14:media {nsdecls("p14")} r:embed="{media_rid}"/>'
    )
    return (
        f'<p:pic><p:nvPicPr><p:cNvPr id="{shape_id}" name="{label} {shape_id - 1}" descr="{escape(media.alt_text)}">'
        '<a:hlinkClick r:id="" action="ppaction://media"/></p:cNvPr>'
        '<p:cNvPicPr><a:picLocks noChangeAspect="1"/></p:cNvPicPr>'
        f'<p:nvPr><{file_tag} r:link="{link_rid}"/>'
        f'<p:extLst><p:ext uri="{MEDIA_EXT_URI}">{p14_media}</p:ext></p:extLst></p:nvPr></p:nvPicPr>'
        f'<p:blipFill><a:blip r:embed="{poster_rid}"/><a:stretch><a:fillRect/></a:stretch></p:blipFill>'
        f'<p:spPr><a:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm>'
        '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom></p:spPr></p:pic>'
    )
