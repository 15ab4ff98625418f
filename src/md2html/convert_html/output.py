"""HTML document assembly for converted Markdown."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from html import escape
from pathlib import Path
from typing import Callable, Optional

from jinja2 import Environment, Template

# One line with no whitespace between tags.
_DOCUMENT_TEMPLATE = (
    '<!DOCTYPE html><html lang="{{ lang }}"><head><meta charset="utf-8">'
    "<title>{{ title }}</title>"
    "{% if stylesheet %}{{ stylesheet }}{% endif %}"
    "</head><body>{{ body }}</body></html>"
)

_UNNAMED = frozenset({"", ".", ".."})


class StylesheetKind(Enum):
    """How a stylesheet is attached to the document head."""

    INLINE = "inline"
    LINK = "link"


@dataclass(frozen=True)
class Stylesheet:
    kind: StylesheetKind
    content: str

    def to_html(self) -> str:
        if self.kind is StylesheetKind.INLINE:
            return f"<style>\n{self.content}\n</style>"
        return f'<link rel="stylesheet" href="{self.content}">'


def resolve_title(source: Path, title_override: str = "") -> str:
    """Return ``title_override`` or, when empty, the file name of ``source``."""

    if title_override:
        return title_override
    name = Path(source).name
    if name in _UNNAMED:
        return ""
    return name


def resolve_stylesheet(
    css_source: Optional[str],
    *,
    read_text: Callable[[Path], str],
    logger: Optional[logging.Logger] = None,
) -> Optional[Stylesheet]:
    """Inline ``css_source`` when it reads as a local file, else link to it.

    Any read problem means the value is treated as a reference (for example
    a URL), so this never fails.
    """

    if not css_source:
        return None
    try:
        css = read_text(Path(css_source))
    except (OSError, ValueError) as exc:
        if logger is not None:
            logger.debug(
                "Stylesheet not readable locally; linking instead",
                extra={"css_source": css_source, "reason": str(exc)},
            )
        return Stylesheet(kind=StylesheetKind.LINK, content=css_source)
    return Stylesheet(kind=StylesheetKind.INLINE, content=css)


def document_template() -> Template:
    # Raw substitution: callers decide what, if anything, gets escaped.
    env = Environment(autoescape=False)
    return env.from_string(_DOCUMENT_TEMPLATE)


def render_document(
    *,
    title: str,
    body: str,
    stylesheet: Optional[Stylesheet] = None,
    lang: str = "en",
    escape_title: bool = False,
    template: Optional[Template] = None,
) -> str:
    """Assemble a complete HTML document around the ``body`` fragment."""

    tpl = template if template is not None else document_template()
    return tpl.render(
        lang=lang,
        title=escape(title) if escape_title else title,
        stylesheet=stylesheet.to_html() if stylesheet is not None else "",
        body=body,
    )


__all__ = [
    "Stylesheet",
    "StylesheetKind",
    "document_template",
    "render_document",
    "resolve_stylesheet",
    "resolve_title",
]
