from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import SettingsError

ENV_PREFIX = "FETCHXML_"
ENV_DELIMITER = "__"


class ParserSettings(BaseModel):
    id_prefix: str = "parsed_"

    model_config = ConfigDict(extra="ignore")


class SerializerSettings(BaseModel):
    indent: int = 2
    include_primary_id: bool = False

    model_config = ConfigDict(extra="ignore")

    @field_validator("indent")
    @classmethod
    def validate_indent(cls, value: int) -> int:
        if value < 0:
            raise ValueError("serializer.indent must not be negative")
        return value


class LayoutSettings(BaseModel):
    grid_name: str = "resultset"
    default_width: int = 150
    widths: Dict[str, int] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    def width_table(self) -> Dict[str, int]:
        return {**self.widths, "default": self.default_width}


class LoggingSettings(BaseModel):
    level: str = "WARNING"
    jsonl: bool = False
    file: Path | None = None

    model_config = ConfigDict(extra="ignore")


class FetchXmlSettings(BaseModel):
    parser: ParserSettings = ParserSettings()
    serializer: SerializerSettings = SerializerSettings()
    layout: LayoutSettings = LayoutSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = ConfigDict(extra="ignore")


def _deep_update(target: Dict[str, Any], updates: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, Mapping) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value
    return target


def _load_toml(path: Path | None) -> Dict[str, Any]:
    if path is None:
        return {}
    if not path.exists():
        raise SettingsError(f"Config file not found at {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise SettingsError(f"Invalid config file {path}: {exc}") from exc


def _extract_prefixed(source: Mapping[str, str], *, prefix: str = ENV_PREFIX, delimiter: str = ENV_DELIMITER) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for key, value in source.items():
        if not key.startswith(prefix):
            continue
        path = key.removeprefix(prefix).split(delimiter)
        target = data
        for part in path[:-1]:
            target = target.setdefault(part.lower(), {})
        target[path[-1].lower()] = value
    return data


def load_settings(
    *,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Dict[str, Any] | None = None,
) -> FetchXmlSettings:
    """TOML file, then ``FETCHXML_*`` environment variables, then overrides."""

    merged: Dict[str, Any] = {}
    _deep_update(merged, _load_toml(config_path))
    _deep_update(merged, _extract_prefixed(os.environ if environ is None else environ))
    if overrides:
        _deep_update(merged, overrides)

    try:
        return FetchXmlSettings(**merged)
    except ValidationError as exc:
        raise SettingsError(str(exc)) from exc


__all__ = [
    "ENV_PREFIX",
    "FetchXmlSettings",
    "ParserSettings",
    "SerializerSettings",
    "LayoutSettings",
    "LoggingSettings",
    "load_settings",
]
