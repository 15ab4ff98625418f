"""Configuration loader for the convert-html workflow."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Mapping, MutableMapping, Optional, Sequence

from md2html.core import config as core_config
from md2html.core import workspace as workspace_mod

from .models import ConversionSettings
from .session import SESSION_FILENAME

CONFIG_FILENAME = "convert_html.toml"
TEMPLATE_RESOURCE = "template.toml"
CONFIG_ENV = "MD2HTML_CONVERT_HTML_CONFIG"
ENV_PREFIX = "MD2HTML_CONVERT_HTML_"

_DEFAULT_LANG = "en"
_DEFAULT_LOG_LEVEL = "INFO"
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class ConvertHtmlConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class ConvertHtmlConfig:
    """Fully resolved configuration for a conversion run."""

    title: str
    css: Optional[str]
    lang: str
    escape_title: bool
    extensions: tuple[str, ...]
    preview: bool
    session_file: Path
    log_level: str

    def to_settings(self) -> ConversionSettings:
        return ConversionSettings(
            title_override=self.title,
            css_source=self.css,
            preview=self.preview,
            lang=self.lang,
            escape_title=self.escape_title,
        )


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options.

    ``css`` uses the empty string to mean "explicitly no stylesheet" so it
    can override a configured one; ``None`` leaves lower layers in charge.
    """

    title: Optional[str] = None
    css: Optional[str] = None
    lang: Optional[str] = None
    escape_title: Optional[bool] = None
    preview: Optional[bool] = None
    session_file: Optional[Path] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Resolved configuration plus the workspace it was loaded from."""

    config: ConvertHtmlConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise ConvertHtmlConfigError(str(exc)) from exc
    default_path = layout.path_for("config") / CONFIG_FILENAME

    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=default_path,
    )

    options = _default_table()
    loaded_path: Optional[Path] = None
    if requested_path.exists():
        loaded_path = requested_path
        try:
            core_config.overlay_defaults(
                options, core_config.load_toml(requested_path)
            )
        except core_config.TomlConfigError as exc:
            raise ConvertHtmlConfigError(str(exc)) from exc
    elif config_path is not None or _has_env_config(env_map):
        raise ConvertHtmlConfigError(
            f"Config file not found: {requested_path}"
        )

    document = options["document"]
    title = _require_str(
        _pick_first(
            overrides.title,
            _parse_env_string(env_map, "TITLE"),
            document["title"],
        ),
        "document.title",
    )
    css = _optional_str(
        _pick_first(
            overrides.css,
            _parse_env_string(env_map, "CSS"),
            document["css"],
        ),
        "document.css",
    )
    lang = _require_str(
        _pick_first(
            overrides.lang,
            _parse_env_string(env_map, "LANG"),
            document["lang"],
        ),
        "document.lang",
    ).strip()
    if not lang:
        raise ConvertHtmlConfigError("document.lang must be a non-empty string.")

    escape_title = _require_bool(
        _pick_first(
            overrides.escape_title,
            _parse_env_bool(env_map, "ESCAPE_TITLE"),
            document["escape_title"],
        ),
        "document.escape_title",
    )
    preview = _require_bool(
        _pick_first(
            overrides.preview,
            _parse_env_bool(env_map, "PREVIEW"),
            options["execution"]["preview"],
        ),
        "execution.preview",
    )
    extensions = _normalize_extensions(
        _pick_first(
            _parse_env_list(env_map, "EXTENSIONS"),
            options["markdown"]["extensions"],
        )
    )
    session_file = _resolve_session_file(
        candidate=_pick_first(
            overrides.session_file,
            _parse_env_path(env_map, "SESSION_FILE"),
            _coerce_optional_path(options["paths"]["session_file"]),
        ),
        layout=layout,
    )
    log_level = _resolve_log_level(
        _pick_first(
            overrides.log_level,
            _parse_env_string(env_map, "LOG_LEVEL"),
            options["logging"]["level"],
        )
    )

    config = ConvertHtmlConfig(
        title=title,
        css=css,
        lang=lang,
        escape_title=escape_title,
        extensions=extensions,
        preview=preview,
        session_file=session_file,
        log_level=log_level,
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def template_text() -> str:
    """Return the commented ``convert_html.toml`` shipped with the package."""

    resource = resources.files(__package__).joinpath(TEMPLATE_RESOURCE)
    return resource.read_text(encoding="utf-8")


def write_template(path: Path, *, overwrite: bool = False) -> Path:
    """Write the packaged template to ``path`` with owner-only permissions.

    An existing file is left alone unless ``overwrite`` is set.
    """

    if path.exists() and not overwrite:
        raise ConvertHtmlConfigError(f"Config already exists: {path}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(template_text(), encoding="utf-8")
        path.chmod(0o600)
    except OSError as exc:
        raise ConvertHtmlConfigError(
            f"Failed to write config {path}: {exc}"
        ) from exc
    return path


def _default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    return {
        "document": {
            "title": "",
            "css": "",
            "lang": _DEFAULT_LANG,
            "escape_title": False,
        },
        "markdown": {"extensions": []},
        "execution": {"preview": False},
        "paths": {"session_file": ""},
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = (env_map.get(CONFIG_ENV) or "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _has_env_config(env_map: Mapping[str, str]) -> bool:
    return bool((env_map.get(CONFIG_ENV) or "").strip())


def _require_str(value: object, key: str) -> str:
    if not isinstance(value, str):
        raise ConvertHtmlConfigError(f"{key} must be a string.")
    return value


def _optional_str(value: object, key: str) -> Optional[str]:
    text = _require_str(value, key).strip()
    return text or None


def _require_bool(value: object, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConvertHtmlConfigError(f"{key} must be true or false.")
    return value


def _coerce_optional_path(value: object) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, str):
        raw = value.strip()
        return Path(raw) if raw else None
    raise ConvertHtmlConfigError(
        "paths.session_file must be a string when provided."
    )


def _resolve_session_file(
    *, candidate: object, layout: workspace_mod.WorkspaceLayout
) -> Path:
    if candidate is None:
        return layout.path_for("sessions") / SESSION_FILENAME
    path = Path(candidate).expanduser()  # type: ignore[arg-type]
    if not path.is_absolute():
        return (layout.home / path).resolve()
    return path.resolve()


def _normalize_extensions(value: object) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise ConvertHtmlConfigError(
            "markdown.extensions must be a list of rule names."
        )
    seen: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ConvertHtmlConfigError(
                "markdown.extensions entries must be non-empty strings."
            )
        name = item.strip().lower()
        if name not in seen:
            seen.append(name)
    return tuple(seen)


def _resolve_log_level(candidate: object) -> str:
    if not isinstance(candidate, str):
        raise ConvertHtmlConfigError("logging.level must be a string.")
    level = candidate.strip()
    if not level:
        raise ConvertHtmlConfigError(
            "logging.level must be a non-empty string."
        )
    return level.upper()


def _parse_env_list(
    env_map: Mapping[str, str], key: str
) -> Optional[Sequence[str]]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    parts = [part for part in raw.replace(",", " ").split() if part]
    return parts or None


def _parse_env_bool(env_map: Mapping[str, str], key: str) -> Optional[bool]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConvertHtmlConfigError(
        f"{ENV_PREFIX}{key} must be a boolean (true/false), got '{raw}'."
    )


def _parse_env_path(env_map: Mapping[str, str], key: str) -> Optional[Path]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    return Path(raw).expanduser()


def _parse_env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
