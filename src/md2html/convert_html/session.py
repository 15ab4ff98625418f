"""Persisted file list and settings between md2html runs."""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from md2html.core.files import derive_output_path

from .models import ConversionJob, ConversionSettings

__all__ = [
    "SESSION_FILENAME",
    "SessionError",
    "SessionState",
    "SessionStore",
]

SESSION_FILENAME = "app_state.json"


class SessionError(RuntimeError):
    """Raised when the session record cannot be read or updated."""


@dataclass
class SessionState:
    """Input/output pairs plus shared settings remembered across runs.

    Status and progress belong to a single run and are never stored here.
    """

    input_files: list[Path] = field(default_factory=list)
    output_files: list[Path] = field(default_factory=list)
    css_path: Optional[str] = None
    title: str = ""
    preview: bool = False

    @classmethod
    def from_request(
        cls, job: ConversionJob, settings: ConversionSettings
    ) -> "SessionState":
        """Snapshot a run's files and settings with absolute paths."""

        return cls(
            input_files=[_absolute(path) for path in job.inputs],
            output_files=[_absolute(path) for path in job.outputs],
            css_path=_css_reference(settings.css_source),
            title=settings.title_override,
            preview=settings.preview,
        )

    def add_input(self, source: Path, output: Optional[Path] = None) -> None:
        """Append ``source`` paired with ``output`` (default ``.html`` sibling).

        Both are stored as absolute paths so the session replays from any
        working directory.
        """

        source = _absolute(source)
        self.input_files.append(source)
        target = output if output is not None else derive_output_path(source)
        self.output_files.append(_absolute(target))

    def remove(self, index: int) -> tuple[Path, Path]:
        """Drop the pair at ``index`` and return it."""

        if not 0 <= index < len(self.input_files):
            raise SessionError(
                f"No file at index {index}; the session has "
                f"{len(self.input_files)} input(s)."
            )
        source = self.input_files.pop(index)
        target = (
            self.output_files.pop(index)
            if index < len(self.output_files)
            else derive_output_path(source)
        )
        return source, target

    def set_css(self, css: str | Path) -> None:
        self.css_path = _css_reference(str(css))

    def clear_css(self) -> None:
        self.css_path = None

    def to_job(self) -> ConversionJob:
        return ConversionJob(
            inputs=tuple(self.input_files),
            outputs=tuple(self.output_files),
        )

    def to_settings(
        self, *, lang: str = "en", escape_title: bool = False
    ) -> ConversionSettings:
        return ConversionSettings(
            title_override=self.title,
            css_source=self.css_path or None,
            preview=self.preview,
            lang=lang,
            escape_title=escape_title,
        )

    def to_dict(self) -> MutableMapping[str, Any]:
        return {
            "input_files": [str(path) for path in self.input_files],
            "output_files": [str(path) for path in self.output_files],
            "css_path": self.css_path,
            "title": self.title,
            "preview": self.preview,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SessionState":
        """Build a state from ``payload``; missing keys take defaults."""

        if not isinstance(payload, Mapping):
            raise SessionError("Session record must be a JSON object.")
        css_path = _typed(payload, "css_path", str, None)
        return cls(
            input_files=_path_list(payload, "input_files"),
            output_files=_path_list(payload, "output_files"),
            css_path=css_path or None,
            title=_typed(payload, "title", str, ""),
            preview=_typed(payload, "preview", bool, False),
        )


class SessionStore:
    """Read and write the session record at a fixed path."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> SessionState:
        if not self.exists():
            return SessionState()
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SessionError(
                f"Failed to parse session file: {self._path}"
            ) from exc
        except OSError as exc:
            raise SessionError(
                f"Failed to read session file {self._path}: {exc}"
            ) from exc
        return SessionState.from_dict(payload)

    def save(self, state: SessionState) -> Path:
        try:
            _atomic_write_json(self._path, state.to_dict())
        except OSError as exc:
            raise SessionError(
                f"Failed to write session file {self._path}: {exc}"
            ) from exc
        return self._path

    def clear(self) -> bool:
        """Delete the record; returns whether a file was removed."""

        if not self.exists():
            return False
        self._path.unlink()
        return True


def _typed(
    payload: Mapping[str, Any], key: str, kind: type, default: Any
) -> Any:
    value = payload.get(key)
    if value is None:
        return default
    if not isinstance(value, kind):
        raise SessionError(
            f"Session field '{key}' must be a {kind.__name__}, got "
            f"{type(value).__name__}."
        )
    return value


def _absolute(path: Path | str) -> Path:
    return Path(path).expanduser().resolve()


def _css_reference(css: Optional[str]) -> Optional[str]:
    """Absolute path for a local stylesheet file; other values unchanged."""

    if not css:
        return None
    candidate = Path(css).expanduser()
    if candidate.is_file():
        return str(candidate.resolve())
    return css


def _path_list(payload: Mapping[str, Any], key: str) -> list[Path]:
    raw = payload.get(key) or []
    if not isinstance(raw, list):
        raise SessionError(f"Session field '{key}' must be a list.")
    return [Path(str(item)) for item in raw]


def _atomic_write_json(path: Path, payload: Mapping[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w",
        delete=False,
        encoding="utf-8",
        dir=str(path.parent),
        prefix=".session-",
        suffix=".tmp",
    )
    try:
        json.dump(payload, handle, indent=2)
        handle.write("\n")
        handle.flush()
        os.fsync(handle.fileno())
    finally:
        handle.close()
    os.replace(handle.name, path)
    try:
        path.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
