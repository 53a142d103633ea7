from __future__ import annotations

from pathlib import Path

import pytest

from fetchxml.errors import SettingsError
from fetchxml.layout import default_width_for_type
from fetchxml.settings import load_settings


def write_toml(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")


def test_defaults_without_sources():
    settings = load_settings(environ={})
    assert settings.parser.id_prefix == "parsed_"
    assert settings.serializer.indent == 2
    assert settings.serializer.include_primary_id is False
    assert settings.layout.grid_name == "resultset"
    assert settings.layout.width_table() == {"default": 150}
    assert settings.logging.level == "WARNING"


def test_toml_then_env_then_overrides(tmp_path):
    config_path = tmp_path / "fetchxml.toml"
    write_toml(
        config_path,
        """
[serializer]
indent = 4
include_primary_id = true

[layout]
grid_name = "custom"
default_width = 120

[layout.widths]
String = 220
""",
    )
    settings = load_settings(
        config_path=config_path,
        environ={"FETCHXML_SERIALIZER__INDENT": "3", "FETCHXML_PARSER__ID_PREFIX": "env_", "OTHER": "x"},
        overrides={"parser": {"id_prefix": "override_"}},
    )
    assert settings.serializer.indent == 3
    assert settings.serializer.include_primary_id is True
    assert settings.parser.id_prefix == "override_"
    assert settings.layout.grid_name == "custom"
    assert settings.layout.width_table() == {"String": 220, "default": 120}


def test_width_overrides_from_env_are_case_insensitive():
    settings = load_settings(environ={"FETCHXML_LAYOUT__WIDTHS__STRING": "310"})
    assert settings.layout.widths == {"string": 310}
    assert default_width_for_type("String", settings.layout.width_table()) == 310


def test_unknown_keys_are_ignored(tmp_path):
    config_path = tmp_path / "fetchxml.toml"
    write_toml(config_path, "[parser]\nid_prefix = 'p_'\nunused = 1\n\n[extra]\nkey = 'value'\n")
    assert load_settings(config_path=config_path, environ={}).parser.id_prefix == "p_"


def test_missing_config_file(tmp_path):
    with pytest.raises(SettingsError):
        load_settings(config_path=tmp_path / "absent.toml", environ={})


def test_invalid_toml(tmp_path):
    config_path = tmp_path / "fetchxml.toml"
    write_toml(config_path, "[serializer\nindent = 2")
    with pytest.raises(SettingsError):
        load_settings(config_path=config_path, environ={})


def test_negative_indent_is_rejected():
    with pytest.raises(SettingsError):
        load_settings(environ={"FETCHXML_SERIALIZER__INDENT": "-1"})
