"""File helpers shared across md2html modules."""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "HTML_SUFFIX",
    "derive_output_path",
    "read_text_file",
    "write_text_file",
]

HTML_SUFFIX = ".html"


def read_text_file(path: Path) -> str:
    """Read ``path`` as strict UTF-8.

    Undecodable content raises :class:`UnicodeDecodeError` rather than being
    replaced, so callers can treat it like any other read failure.
    """
    with Path(path).open("r", encoding="utf-8") as fh:
        return fh.read()


def write_text_file(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` as UTF-8, replacing any existing file.

    Parent directories are not created.
    """
    with Path(path).open("w", encoding="utf-8", newline="") as fh:
        fh.write(content)


def derive_output_path(source: Path) -> Path:
    """Return ``source`` with its extension swapped for ``.html``."""
    source = Path(source)
    if not source.name:
        return source
    return source.with_suffix(HTML_SUFFIX)
