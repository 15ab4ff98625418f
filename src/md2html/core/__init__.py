"""Core shared helpers for md2html subcommands."""

from __future__ import annotations

from .config import TomlConfigError, load_toml, overlay_defaults
from .files import (
    HTML_SUFFIX,
    derive_output_path,
    read_text_file,
    write_text_file,
)
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "TomlConfigError",
    "load_toml",
    "overlay_defaults",
    "HTML_SUFFIX",
    "derive_output_path",
    "read_text_file",
    "write_text_file",
    "configure_logger",
    "JsonLogFormatter",
    "ensure_workspace",
    "WorkspaceLayout",
    "WorkspaceError",
    "WORKSPACE_ENV",
]
