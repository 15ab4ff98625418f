"""Per-pair conversion pipeline for the Markdown-to-HTML workflow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from jinja2 import Template

from md2html.core.files import read_text_file, write_text_file

from .models import ConversionSettings, ConversionStage
from .output import (
    render_document,
    resolve_stylesheet,
    resolve_title,
)
from .renderer import build_markdown_it

# Exceptions that count as "could not read/write this path". Decode errors
# are ValueErrors, so they land here too.
_IO_ERRORS: tuple[type[Exception], ...] = (OSError, ValueError)


@dataclass(frozen=True)
class ConverterDependencies:
    """Callable seams for filesystem, parser and browser access."""

    read_text: Callable[[Path], str]
    write_text: Callable[[Path, str], None]
    render_markdown: Callable[[str], str]
    open_in_browser: Optional[Callable[[Path], object]] = None


@dataclass(frozen=True)
class PairResult:
    """Result of converting one input/output pair."""

    source: Path
    target: Path
    stage: Optional[ConversionStage] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.stage is None

    @property
    def failed_path(self) -> Optional[Path]:
        if self.stage is ConversionStage.READ:
            return self.source
        if self.stage is ConversionStage.WRITE:
            return self.target
        return None


def local_dependencies(
    *,
    extensions: tuple[str, ...] = (),
    open_in_browser: Optional[Callable[[Path], object]] = None,
) -> ConverterDependencies:
    """Dependencies backed by the local disk and markdown-it-py."""

    md = build_markdown_it(extensions)
    return ConverterDependencies(
        read_text=read_text_file,
        write_text=write_text_file,
        render_markdown=md.render,
        open_in_browser=open_in_browser,
    )


def convert_pair(
    source: Path,
    target: Path,
    *,
    settings: ConversionSettings,
    dependencies: ConverterDependencies,
    logger: Optional[logging.Logger] = None,
    template: Optional[Template] = None,
) -> PairResult:
    """Read ``source``, render it to a full HTML document and write ``target``.

    Read and write problems come back as a failed :class:`PairResult`; no
    exception escapes for them.
    """

    try:
        markdown = dependencies.read_text(source)
    except _IO_ERRORS as exc:
        return PairResult(
            source=source,
            target=target,
            stage=ConversionStage.READ,
            error=exc,
        )

    body = dependencies.render_markdown(markdown)
    title = resolve_title(source, settings.title_override)
    stylesheet = resolve_stylesheet(
        settings.css_source,
        read_text=dependencies.read_text,
        logger=logger,
    )
    document = render_document(
        title=title,
        body=body,
        stylesheet=stylesheet,
        lang=settings.lang,
        escape_title=settings.escape_title,
        template=template,
    )

    try:
        dependencies.write_text(target, document)
    except _IO_ERRORS as exc:
        return PairResult(
            source=source,
            target=target,
            stage=ConversionStage.WRITE,
            error=exc,
        )

    return PairResult(source=source, target=target)


__all__ = [
    "ConverterDependencies",
    "PairResult",
    "convert_pair",
    "local_dependencies",
]
