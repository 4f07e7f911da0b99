from __future__ import annotations

from pathlib import Path

import pytest

from slidepack.config import DEFAULTS, Config, load_yaml_file, merge_dicts
from slidepack.errors import ConfigError
from slidepack.package import Compression


def test_defaults_apply_without_a_file(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = Config()
    assert config.author == "slidepack"
    assert config.default_layout == "TitleAndContent"
    options = config.package_options
    assert options.compression is Compression.DEFLATE
    assert options.strict is False
    assert options.language is None
    assert options.http.timeout == 10.0


def test_working_directory_file_is_picked_up(tmp_path, monkeypatch) -> None:
    (tmp_path / "slidepack.yaml").write_text("settings:\n  author: Team Deck\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert Config().author == "Team Deck"


def test_merge_keeps_unrelated_defaults() -> None:
    config = Config.from_dict({"settings": {"package": {"compression": "store"}}})
    assert config.package_options.compression is Compression.STORE
    assert config.get("settings.package.strict") is False
    assert DEFAULTS["settings"]["package"]["compression"] == "deflate"


def test_merge_dicts_is_recursive() -> None:
    merged = merge_dicts({"a": {"b": 1, "c": 2}, "d": 3}, {"a": {"c": 4}})
    assert merged == {"a": {"b": 1, "c": 4}, "d": 3}


def test_all_validation_issues_are_reported_together() -> None:
    with pytest.raises(ConfigError) as excinfo:
        Config.from_dict({
            "settings": {
                "package": {"compression": "zstd", "strict": "yes"},
                "http": {"timeout": 0},
                "logging": {"level": "LOUD"},
            }
        })
    issues = excinfo.value.issues
    assert len(issues) == 4
    assert issues[0].startswith("settings.package.compression")
    assert any(issue.startswith("settings.http.timeout") for issue in issues)


def test_explicit_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        Config(str(tmp_path / "nope.yaml"))


def test_invalid_yaml_is_a_config_error(tmp_path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("settings: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid YAML"):
        load_yaml_file(path)


def test_non_mapping_top_level_is_rejected(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- one\n- two\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="top level must be a mapping"):
        load_yaml_file(path)
    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    assert load_yaml_file(empty) == {}


def test_paths_resolve_against_project_root(tmp_path) -> None:
    config = Config.from_dict({"paths": {"project_root": ".", "output": "out/deck.pptx"}}, tmp_path)
    assert config.output_path == tmp_path.resolve() / "out" / "deck.pptx"
    with pytest.raises(ConfigError, match="paths.content: not configured"):
        config.content_path


def test_set_creates_sections(tmp_path) -> None:
    config = Config.from_dict({}, tmp_path)
    config.set("paths.output", str(tmp_path / "x.pptx"))
    config.set("settings.extra.flag", True)
    assert config.output_path == Path(tmp_path / "x.pptx").resolve()
    assert config.get("settings.extra.flag") is True
    assert config.get("settings.missing.key", "fallback") == "fallback"
