"""Markdown-to-HTML fragment rendering backed by markdown-it-py."""

from __future__ import annotations

from typing import Optional, Sequence

from markdown_it import MarkdownIt

# Always on; extra rules come from configuration.
_BASE_RULES: tuple[str, ...] = ("strikethrough",)


def build_markdown_it(extensions: Sequence[str] = ()) -> MarkdownIt:
    """Return a CommonMark parser with strikethrough and ``extensions`` on.

    Unknown rule names are ignored so a stale config entry never turns into
    a conversion failure.

    The strikethrough rule follows GFM and only matches double tildes:
    ``~~gone~~`` becomes ``<s>gone</s>`` while ``~gone~`` stays literal
    text (pulldown-cmark style parsers accept the single tilde too).
    """
    md = MarkdownIt("commonmark", options_update={"html": True})
    rules = list(_BASE_RULES)
    for ext in extensions:
        name = ext.strip().lower()
        if name and name not in rules:
            rules.append(name)
    md.enable(rules, ignoreInvalid=True)
    return md


def render_markdown(text: str, md: Optional[MarkdownIt] = None) -> str:
    """Render ``text`` to an HTML body fragment."""
    parser = md if md is not None else build_markdown_it()
    return parser.render(text)


__all__ = ["build_markdown_it", "render_markdown"]
