from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

import pytest
from rich.logging import RichHandler

from md2html.core import logging as core_logging


def _close(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def _console_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [
        handler
        for handler in logger.handlers
        if getattr(handler, "_md2html_console", False)
    ]


def test_configure_logger_writes_json_lines(tmp_path):
    log_dir = tmp_path / "logs"
    logger, log_path = core_logging.configure_logger(
        "md2html.test_json",
        log_dir=log_dir,
        filename="convert.log",
    )

    logger.info(
        "Converted document",
        extra={"input": Path("a.md"), "pairs": (1, 2), "preview": False},
    )

    class _Opaque:
        def __repr__(self):  # noqa: D401
            return "opaque"

    try:
        raise OSError("disk full")
    except OSError:
        logger.exception(
            "Conversion stopped",
            extra={"detail": {"stage": "write"}, "obj": _Opaque()},
        )
    for handler in logger.handlers:
        handler.flush()

    assert log_path == log_dir / "convert.log"
    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    first = json.loads(lines[0])
    assert first["level"] == "INFO"
    assert first["logger"] == "md2html.test_json"
    assert first["message"] == "Converted document"
    assert first["extra"] == {"input": "a.md", "pairs": [1, 2], "preview": False}
    assert "timestamp" in first

    last = json.loads(lines[-1])
    assert "disk full" in last["exception"]
    assert last["extra"]["detail"] == {"stage": "write"}
    assert last["extra"]["obj"] == "opaque"

    _close(logger)


def test_configure_logger_respects_level(tmp_path):
    logger, log_path = core_logging.configure_logger(
        "md2html.test_level",
        log_dir=tmp_path,
        level="warning",
        filename="level.log",
    )

    logger.info("hidden")
    logger.warning("shown")
    for handler in logger.handlers:
        handler.flush()

    messages = [
        json.loads(line)["message"]
        for line in log_path.read_text(encoding="utf-8").splitlines()
    ]
    assert messages == ["shown"]
    assert logger.propagate is False

    _close(logger)


def test_configure_logger_default_filename(tmp_path):
    logger, log_path = core_logging.configure_logger(
        "md2html.convert_html", log_dir=tmp_path / "logs"
    )

    assert log_path.name == "convert_html.log"

    _close(logger)


def test_verbose_adds_rich_console_handler(tmp_path):
    logger, _ = core_logging.configure_logger(
        "md2html.test_verbose",
        log_dir=tmp_path / "logs",
        verbose=True,
        filename="verbose.log",
    )

    handlers = _console_handlers(logger)
    assert len(handlers) == 1
    assert isinstance(handlers[0], RichHandler)
    assert handlers[0].level == logging.DEBUG

    _close(logger)


def test_console_handler_toggle(tmp_path):
    name = "md2html.test_toggle"
    log_dir = tmp_path / "logs"

    logger, first_path = core_logging.configure_logger(
        name, log_dir=log_dir, verbose=True, filename="toggle.log"
    )
    _, second_path = core_logging.configure_logger(
        name, log_dir=log_dir, verbose=True, filename="toggle.log"
    )

    assert len(_console_handlers(logger)) == 1
    assert first_path == second_path
    file_handlers = [
        handler
        for handler in logger.handlers
        if getattr(handler, "_md2html_file", False)
    ]
    assert len(file_handlers) == 1

    core_logging.configure_logger(
        name, log_dir=log_dir, verbose=False, filename="toggle.log"
    )
    assert _console_handlers(logger) == []

    _close(logger)


def test_new_log_dir_moves_file_handler(tmp_path):
    name = "md2html.test_move"
    first_dir = tmp_path / "one" / "logs"
    second_dir = tmp_path / "two" / "logs"

    logger, first_path = core_logging.configure_logger(
        name, log_dir=first_dir, filename="move.log"
    )
    logger.info("before")
    _, second_path = core_logging.configure_logger(
        name, log_dir=second_dir, filename="move.log"
    )
    logger.info("after")
    for handler in logger.handlers:
        handler.flush()

    assert second_path == second_dir / "move.log"
    file_handlers = [
        handler
        for handler in logger.handlers
        if getattr(handler, "_md2html_file", False)
    ]
    assert len(file_handlers) == 1
    assert file_handlers[0].baseFilename == str(second_path)

    def _messages(path: Path) -> list[str]:
        return [
            json.loads(line)["message"]
            for line in path.read_text(encoding="utf-8").splitlines()
        ]

    assert _messages(first_path) == ["before"]
    assert _messages(second_path) == ["after"]

    _close(logger)


def test_configure_logger_falls_back_when_dir_blocked(tmp_path, monkeypatch):
    blocked = tmp_path / "blocked"
    fallback = tmp_path / "fallback-logs"
    monkeypatch.setattr(core_logging, "_fallback_log_dir", lambda: fallback)
    original_mkdir = Path.mkdir

    def fake_mkdir(self, *args, **kwargs):  # noqa: ANN001
        if self == blocked:
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)

    logger, log_path = core_logging.configure_logger(
        "md2html.test_blocked", log_dir=blocked, filename="blocked.log"
    )

    assert log_path == fallback / "blocked.log"
    assert log_path.exists()

    _close(logger)


def test_configure_logger_falls_back_when_handler_fails(tmp_path, monkeypatch):
    calls = {"count": 0}
    fallback = tmp_path / "rotate-fallback"
    original_handler = core_logging.RotatingFileHandler

    def flaky_handler(path, *args, **kwargs):  # noqa: ANN001
        calls["count"] += 1
        if calls["count"] == 1:
            raise PermissionError("denied")
        return original_handler(path, *args, **kwargs)

    monkeypatch.setattr(core_logging, "RotatingFileHandler", flaky_handler)
    monkeypatch.setattr(core_logging, "_fallback_log_dir", lambda: fallback)

    logger, log_path = core_logging.configure_logger(
        "md2html.test_rotating", log_dir=tmp_path / "primary", filename="r.log"
    )

    assert log_path.parent == fallback
    assert calls["count"] == 2

    _close(logger)


def test_fallback_log_dir_uses_tempdir(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "gettempdir", lambda: str(tmp_path))

    assert core_logging._fallback_log_dir() == tmp_path / "md2html-logs"


@pytest.mark.parametrize(
    ("level", "expected"),
    [("debug", logging.DEBUG), ("ERROR", logging.ERROR), ("bogus", logging.INFO)],
)
def test_coerce_level(level, expected):
    assert core_logging._coerce_level(level) == expected
