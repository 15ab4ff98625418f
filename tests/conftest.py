from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
# Make fixtures/ and the src layout importable without an install.
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import BrowserRecorder, MemoryFS, WorkspaceBuilder  # noqa: E402

_CLI_LOGGERS = ("md2html.convert_html",)


@pytest.fixture(autouse=True)
def _isolated_workspace(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """Point the workspace at a per-test directory and drop env overrides."""

    home = tmp_path / "md2html-home"
    monkeypatch.setenv("MD2HTML_DATA_HOME", str(home))
    for key in list(os.environ):
        if key.startswith("MD2HTML_CONVERT_HTML_"):
            monkeypatch.delenv(key, raising=False)
    yield home


@pytest.fixture(autouse=True)
def _reset_cli_loggers() -> Iterator[None]:
    yield
    for name in _CLI_LOGGERS:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path / "docs")


@pytest.fixture
def memory_fs() -> MemoryFS:
    return MemoryFS()


@pytest.fixture
def browser() -> BrowserRecorder:
    return BrowserRecorder()
