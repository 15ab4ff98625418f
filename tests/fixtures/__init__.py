"""Shared testing fixtures and stubs for the md2html test suite."""

from .memory_fs import BrowserRecorder, MemoryFS  # noqa: F401
from .workspace import WorkspaceBuilder, build_tree  # noqa: F401

__all__ = [
    "BrowserRecorder",
    "MemoryFS",
    "WorkspaceBuilder",
    "build_tree",
]
