"""Public APIs for the Markdown-to-HTML batch converter."""

from __future__ import annotations

from .converter import (
    ConverterDependencies,
    PairResult,
    convert_pair,
    local_dependencies,
)

from .executor import run_conversion

from .models import (
    ConversionJob,
    ConversionOutcome,
    ConversionSettings,
    ConversionStage,
    OutcomeStatus,
)

from .output import (
    Stylesheet,
    StylesheetKind,
    render_document,
    resolve_stylesheet,
    resolve_title,
)

from .renderer import build_markdown_it, render_markdown

from .session import SessionError, SessionState, SessionStore

from .config import (
    ConfigOverrides,
    ConvertHtmlConfig,
    ConvertHtmlConfigError,
    LoadResult,
    load_config,
    template_text,
    write_template,
)

__all__ = [
    "ConverterDependencies",
    "PairResult",
    "convert_pair",
    "local_dependencies",
    "run_conversion",
    "ConversionJob",
    "ConversionOutcome",
    "ConversionSettings",
    "ConversionStage",
    "OutcomeStatus",
    "Stylesheet",
    "StylesheetKind",
    "render_document",
    "resolve_stylesheet",
    "resolve_title",
    "build_markdown_it",
    "render_markdown",
    "SessionError",
    "SessionState",
    "SessionStore",
    "ConfigOverrides",
    "ConvertHtmlConfig",
    "ConvertHtmlConfigError",
    "LoadResult",
    "load_config",
    "template_text",
    "write_template",
]
