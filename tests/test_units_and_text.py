from __future__ import annotations

import pytest
from pptx.util import Cm, Inches, Pt

from slidepack.errors import ConfigError, ErrorKind, PackageError
from slidepack.text import (
    Bullet,
    BulletStyle,
    Paragraph,
    TextAlign,
    autofit_font_size,
    bullet_xml,
    contrast_color,
    is_code_block,
    is_dark,
    normalize_color,
    paragraph_xml,
)
from slidepack.units import Dimension, percent, pixels_to_emu, to_emu_x, to_emu_y
from slidepack.xmlwriter import escape, language_tag, lang_attrs


def test_unit_conversions_to_emu() -> None:
    assert to_emu_x(Dimension.inches(1.0)) == 914400
    assert to_emu_x(Dimension.cm(2.54)) == 914400
    assert to_emu_x(Dimension.pt(72.0)) == 914400
    assert to_emu_x(Inches(1)) == 914400
    assert to_emu_x(Cm(2.54)) == 914400
    assert to_emu_x(Pt(72)) == 914400
    assert to_emu_x(12345) == 12345


def test_ratios_resolve_per_axis() -> None:
    assert to_emu_x(Dimension.ratio(0.5)) == 4572000
    assert to_emu_y(Dimension.ratio(0.5)) == 3429000
    assert percent(25) == Dimension.ratio(0.25)
    assert pixels_to_emu(96) == 914400
    assert pixels_to_emu(150, dpi=150) == 914400


def test_escape_replaces_all_markup_characters() -> None:
    escaped = escape("a & b < c > d \" e ' f")
    assert escaped == "a &amp; b &lt; c &gt; d &quot; e &apos; f"
    stripped = escaped
    for entity in ("&amp;", "&lt;", "&gt;", "&quot;", "&apos;"):
        stripped = stripped.replace(entity, "")
    assert not set("&<>\"'") & set(stripped)


def test_escape_is_not_idempotent() -> None:
    once = escape("Q&A")
    assert escape(once) != once
    assert escape(once) == "Q&amp;amp;A"


def test_language_tag_from_environment() -> None:
    assert language_tag({"LANG": "zh_CN.UTF-8"}) == "zh-CN"
    assert language_tag({"LC_ALL": "de_DE@euro", "LANG": "fr_FR"}) == "de-DE"
    assert language_tag({"LANG": "C"}) == "en-US"
    assert language_tag({}) == "en-US"
    assert lang_attrs("en-US") == 'lang="en-US"'
    assert lang_attrs("ja-JP") == 'lang="ja-JP" altLang="en-US"'


def test_color_helpers() -> None:
    assert normalize_color("#ff00aa") == "FF00AA"
    assert is_dark("000000")
    assert is_dark("#1E1E1E")
    assert not is_dark("FFFFFF")
    assert not is_dark("FFFF00")
    assert not is_dark("nothex")
    assert not is_dark("")
    assert contrast_color("003366") == "FFFFFF"
    assert contrast_color(None) == "000000"


def test_autofit_is_clamped() -> None:
    assert autofit_font_size(9144000, 6858000, "Hi") == 4400
    assert autofit_font_size(914400, 228600, "x" * 500) == 800
    small = autofit_font_size(2743200, 914400, "a fairly long label for a box")
    assert 800 <= small < 4400


def test_code_block_detection() -> None:
    assert is_code_block("[python]\nprint(1)")
    assert not is_code_block("[not code]")
    assert not is_code_block(None)


def test_bullet_styles_and_hanging_indent() -> None:
    xml = bullet_xml(Bullet("Nested", level=1, style=BulletStyle.NUMBER))
    assert 'marL="914400"' in xml
    assert 'indent="-457200"' in xml
    assert 'lvl="1"' in xml
    assert '<a:buAutoNum type="arabicPeriod"/>' in xml

    assert "<a:buNone/>" in bullet_xml(Bullet("Plain", style=BulletStyle.NONE))
    assert "romanUcPeriod" in bullet_xml(Bullet("IV", style=BulletStyle.ROMAN))
    assert 'char="–"' in bullet_xml(Bullet("dash", style=BulletStyle.DASH))


def test_bullet_level_is_clamped() -> None:
    assert Bullet("deep", level=20).level == 8
    assert Bullet("shallow", level=-3).level == 0


def test_paragraph_alignment_and_spacing() -> None:
    paragraph = Paragraph.of("Centered", bold=True).with_align(TextAlign.CENTER).with_spacing(before=6, after=12)
    xml = paragraph_xml(paragraph)
    assert 'algn="ctr"' in xml
    assert '<a:spcBef><a:spcPts val="600"/></a:spcBef>' in xml
    assert '<a:spcAft><a:spcPts val="1200"/></a:spcAft>' in xml
    assert 'b="1"' in xml


def test_error_formatting() -> None:
    err = PackageError(ErrorKind.IO, "disk full")
    assert str(err) == "io: disk full"
    assert err.kind is ErrorKind.IO

    config_err = ConfigError(["a: bad", "", "b: worse"])
    assert config_err.issues == ["a: bad", "b: worse"]
    assert str(config_err) == "Configuration validation failed:\n- a: bad\n- b: worse"


def test_os_errors_map_to_kinds() -> None:
    missing = PackageError.from_os_error(FileNotFoundError(2, "No such file", "x.png"), "image")
    assert missing.kind is ErrorKind.NOT_FOUND
    denied = PackageError.from_os_error(PermissionError(13, "Permission denied"), "image")
    assert denied.kind is ErrorKind.IO


@pytest.mark.parametrize("value", ["", "   "])
def test_empty_color_normalizes_to_empty(value: str) -> None:
    assert normalize_color(value) == ""
