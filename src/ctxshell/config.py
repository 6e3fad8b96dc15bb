"""Shell configuration: loading, validation and path mapping."""

from __future__ import annotations

import json
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .output import OutputLevel
from .specs import ROOT_PROMPT

DEFAULT_HELP_HEADER = "Available commands:"

_STRING_FIELDS = ("prompt", "help_header", "output_level", "history_file", "log_file")
_KNOWN_FIELDS = frozenset(_STRING_FIELDS + ("extensions", "load_entry_points"))


@dataclass(frozen=True, slots=True)
class ShellConfig:
    """Engine and CLI settings; path fields are absolute when set."""

    prompt: str = ROOT_PROMPT
    help_header: str = DEFAULT_HELP_HEADER
    output_level: OutputLevel = OutputLevel.NORMAL
    history_file: str | None = None
    log_file: str | None = None
    extensions: tuple[str, ...] = ()
    load_entry_points: bool = True


def map_path(path: str, config_dir: str | None = None) -> str:
    """Resolve a path string to an absolute path string.

    ~ or ~/...  -> user home directory
    Absolute    -> used as-is
    Relative    -> resolved relative to config_dir if given, else the working directory
    """
    normalized = unicodedata.normalize("NFC", path)
    if "\0" in normalized:
        raise ConfigError("Path cannot contain NUL bytes")

    candidate = Path(normalized).expanduser()
    if candidate.is_absolute():
        return str(candidate.resolve())
    if config_dir is not None:
        return str((Path(config_dir) / candidate).resolve())
    return str(candidate.resolve())


def validate_config(raw: Any) -> None:
    """Validate the structure of a decoded configuration document.

    Raises:
        ConfigError: If any field has the wrong type or an unknown value.
    """
    if not isinstance(raw, dict):
        raise ConfigError("Config must be a JSON object")

    unknown = sorted(set(raw) - _KNOWN_FIELDS)
    if unknown:
        raise ConfigError(f"Unknown config fields: {', '.join(unknown)}")

    for name in _STRING_FIELDS:
        if name in raw and not isinstance(raw[name], str):
            raise ConfigError(f"{name} must be a string")

    if "prompt" in raw and not raw["prompt"]:
        raise ConfigError("prompt must be a non-empty string")

    if "output_level" in raw:
        try:
            OutputLevel.from_name(raw["output_level"])
        except ValueError as e:
            raise ConfigError(str(e)) from e

    extensions = raw.get("extensions", [])
    if not isinstance(extensions, list) or not all(isinstance(item, str) for item in extensions):
        raise ConfigError("extensions must be a list of strings")
    for item in extensions:
        if ":" not in item:
            raise ConfigError(f"Invalid extension reference: {item}. Expected 'module:function'")

    if "load_entry_points" in raw and not isinstance(raw["load_entry_points"], bool):
        raise ConfigError("load_entry_points must be a boolean")


def config_from_dict(raw: dict[str, Any], config_dir: str | None = None) -> ShellConfig:
    """Build a :class:`ShellConfig` from an already decoded document."""
    validate_config(raw)

    def optional_path(name: str) -> str | None:
        value = raw.get(name)
        return map_path(value, config_dir) if value else None

    return ShellConfig(
        prompt=raw.get("prompt", ROOT_PROMPT),
        help_header=raw.get("help_header") or DEFAULT_HELP_HEADER,
        output_level=OutputLevel.from_name(raw.get("output_level", "normal")),
        history_file=optional_path("history_file"),
        log_file=optional_path("log_file"),
        extensions=tuple(raw.get("extensions", [])),
        load_entry_points=raw.get("load_entry_points", True),
    )


def load_config(path: str) -> ShellConfig:
    """Load and validate a JSON config file.

    Relative paths inside the file resolve against the file's directory.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ConfigError: If the file is not valid JSON or fails validation
    """
    config_path = Path(map_path(path))
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e

    return config_from_dict(raw, str(config_path.parent))
