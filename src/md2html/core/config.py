"""Read TOML config files and lay them over a table of defaults."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Mapping, MutableMapping

__all__ = ["TomlConfigError", "load_toml", "overlay_defaults"]


class TomlConfigError(RuntimeError):
    """Raised when a config file is unreadable or does not fit the defaults."""


def load_toml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except IsADirectoryError as exc:
        raise TomlConfigError(f"Config path is a directory: {path}") from exc
    try:
        return tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise TomlConfigError(f"Config file is not UTF-8: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Failed to parse {path}: {exc}") from exc


def overlay_defaults(
    defaults: MutableMapping[str, Any], document: Mapping[str, Any]
) -> None:
    """Copy ``document`` values into ``defaults`` in place.

    Every key in ``document`` must already exist in ``defaults``; all unknown
    keys are reported together. A table in ``defaults`` may only be
    replaced by a table.
    """

    unknown: list[str] = []
    _overlay(defaults, document, prefix="", unknown=unknown)
    if unknown:
        raise TomlConfigError(
            "Unknown configuration key(s): " + ", ".join(unknown) + "."
        )


def _overlay(
    target: MutableMapping[str, Any],
    source: Mapping[str, Any],
    *,
    prefix: str,
    unknown: list[str],
) -> None:
    for key, value in source.items():
        dotted = prefix + key
        if key not in target:
            unknown.append(dotted)
        elif isinstance(target[key], MutableMapping):
            if not isinstance(value, Mapping):
                raise TomlConfigError(
                    f"'{dotted}' must be a table, got {type(value).__name__}."
                )
            _overlay(target[key], value, prefix=dotted + ".", unknown=unknown)
        else:
            target[key] = value
