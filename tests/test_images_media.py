from __future__ import annotations

import base64
import io
import logging

import pytest
from PIL import Image as PILImage

from conftest import make_png
from slidepack.errors import ErrorKind, PackageError
from slidepack.images import Image, ImageFormat, detect_image_format, load_image, picture_xml, read_image_info
from slidepack.media import AudioFormat, Media, MediaKind, VideoFormat, load_media, media_format_from_extension, media_xml


def encode(fmt: str, size: tuple[int, int] = (30, 20)) -> bytes:
    buffer = io.BytesIO()
    PILImage.new("RGB", size, "blue").save(buffer, fmt)
    return buffer.getvalue()


def test_png_header_detection_is_prefix_stable() -> None:
    data = make_png(37, 19)
    full = detect_image_format(data)
    assert full.format is ImageFormat.PNG
    assert (full.width, full.height) == (37, 19)
    for length in range(24, len(data) + 1):
        prefix = detect_image_format(data[:length])
        assert (prefix.width, prefix.height) == (37, 19)


@pytest.mark.parametrize(
    ("pil_format", "expected"),
    [("JPEG", ImageFormat.JPEG), ("GIF", ImageFormat.GIF), ("BMP", ImageFormat.BMP)],
)
def test_header_detection_of_other_formats(pil_format: str, expected: ImageFormat) -> None:
    info = detect_image_format(encode(pil_format))
    assert info.format is expected
    assert (info.width, info.height) == (30, 20)


def test_tiff_is_recognized_through_pillow() -> None:
    data = encode("TIFF")
    assert detect_image_format(data) is None
    assert read_image_info(data).format is ImageFormat.TIFF


def test_unknown_header_is_not_detected() -> None:
    assert detect_image_format(b"not an image at all, just text") is None
    assert detect_image_format(b"") is None


def test_image_defaults_to_pixel_size_at_96_dpi() -> None:
    loaded = load_image(Image.from_bytes(make_png(96, 48)))
    assert (loaded.cx, loaded.cy) == (914400, 457200)
    assert loaded.format is ImageFormat.PNG
    assert loaded.basename is None


def test_image_scaling_keeps_aspect_ratio() -> None:
    image = Image.from_bytes(make_png(200, 100))
    assert load_image(image.scale_to_width(914400)).cy == 457200
    assert load_image(image.scale_to_height(914400)).cx == 1828800


def test_fit_within_centers_the_picture() -> None:
    loaded = load_image(Image.from_bytes(make_png(100, 100)).fit_within(0, 0, 2000000, 1000000))
    assert (loaded.x, loaded.y, loaded.cx, loaded.cy) == (500000, 0, 1000000, 1000000)


def test_base64_and_data_uri_sources() -> None:
    encoded = base64.b64encode(make_png()).decode("ascii")
    assert load_image(Image.from_base64(encoded)).format is ImageFormat.PNG
    assert load_image(Image.from_base64(f"data:image/png;base64,{encoded}")).format is ImageFormat.PNG


def test_unrecognized_image_without_declared_format_is_unsupported() -> None:
    with pytest.raises(PackageError, match="unrecognized image header") as excinfo:
        load_image(Image.from_bytes(b"garbage bytes that are not an image"))
    assert excinfo.value.kind is ErrorKind.UNSUPPORTED_FORMAT


def test_declared_format_is_used_for_unknown_header(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        loaded = load_image(Image.from_bytes(b"<svg xmlns='http://www.w3.org/2000/svg'/>", ImageFormat.SVG))
    assert loaded.format is ImageFormat.SVG
    assert (loaded.cx, loaded.cy) == (914400, 914400)
    assert "Unrecognized image header" in caplog.text


def test_url_image_failure_is_io_error(monkeypatch) -> None:
    import requests

    def refuse(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", refuse)
    with pytest.raises(PackageError, match="offline") as excinfo:
        load_image(Image.from_url("https://example.com/a.png"))
    assert excinfo.value.kind is ErrorKind.IO


def test_picture_xml_effects_and_description(png_bytes) -> None:
    image = Image.from_bytes(png_bytes).with_shadow().with_reflection().with_description('Logo "A"')
    loaded = load_image(image)
    xml = picture_xml(image, loaded, 5, "rId4")
    assert 'r:embed="rId4"' in xml
    assert "<a:outerShdw" in xml
    assert "<a:reflection" in xml
    assert 'descr="Logo &quot;A&quot;"' in xml


def test_media_formats_from_extension() -> None:
    assert media_format_from_extension(".MP4") is VideoFormat.MP4
    assert media_format_from_extension("flac") is AudioFormat.FLAC
    assert media_format_from_extension("txt") is None
    assert Media.audio("song.mp3").kind is MediaKind.AUDIO


def test_unknown_video_extension_is_unsupported() -> None:
    with pytest.raises(PackageError) as excinfo:
        Media.video("clip.xyz")
    assert excinfo.value.kind is ErrorKind.UNSUPPORTED_FORMAT


def test_missing_media_file_is_not_found(tmp_path) -> None:
    with pytest.raises(PackageError) as excinfo:
        load_media(Media.video(tmp_path / "missing.mp4"))
    assert excinfo.value.kind is ErrorKind.NOT_FOUND


def test_media_uses_default_poster_and_keeps_basename(tmp_path) -> None:
    clip = tmp_path / "intro.mp4"
    clip.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    loaded = load_media(Media.video(clip))
    assert loaded.basename == "intro.mp4"
    assert loaded.poster_format is ImageFormat.PNG
    assert detect_image_format(loaded.poster).width == 1


def test_invalid_poster_is_rejected() -> None:
    media = Media.from_bytes(b"\x00" * 8, AudioFormat.MP3).with_poster_bytes(b"nope")
    with pytest.raises(PackageError, match="poster") as excinfo:
        load_media(media)
    assert excinfo.value.kind is ErrorKind.UNSUPPORTED_FORMAT


def test_media_volume_is_clamped_and_trim_is_emitted() -> None:
    media = Media.from_bytes(b"\x00", VideoFormat.MP4).with_volume(250).with_trim(1000, 5000).with_alt_text("Demo")
    assert media.options.volume == 100
    xml = media_xml(media, 3, "rId2", "rId3", "rId4")
    assert '<p14:trim st="1000" end="5000"/>' in xml
    assert 'r:embed="rId2"' in xml
    assert 'r:link="rId3"' in xml
    assert "Demo" in xml


def test_playback_flags_do_not_change_the_markup() -> None:
    plain = Media.from_bytes(b"\x00", VideoFormat.MP4)
    flagged = plain.with_auto_play().with_loop().with_mute().with_volume(40).with_play_across_slides()
    assert flagged.options.loop and flagged.options.volume == 40
    assert media_xml(flagged, 3, "rId2", "rId3", "rId4") == media_xml(plain, 3, "rId2", "rId3", "rId4")
