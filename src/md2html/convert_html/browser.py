"""Open converted documents in the system's default browser."""

from __future__ import annotations

import subprocess
import sys
import webbrowser
from pathlib import Path
from typing import Callable, Optional, Sequence

Spawner = Callable[[Sequence[str]], object]


def launch_command(path: Path, platform: Optional[str] = None) -> Optional[list[str]]:
    """Return the opener command for ``platform``, or ``None`` if unknown."""

    target = str(path)
    name = platform if platform is not None else sys.platform
    if name.startswith("linux") or name.startswith("freebsd"):
        return ["xdg-open", target]
    if name == "darwin":
        return ["open", target]
    if name in ("win32", "cygwin"):
        # The empty string is ``start``'s window title argument.
        return ["cmd", "/C", "start", "", target]
    return None


def open_in_browser(
    path: Path,
    *,
    platform: Optional[str] = None,
    spawn: Optional[Spawner] = None,
) -> object:
    """Start the platform opener for ``path`` without waiting on it."""

    command = launch_command(path, platform)
    if command is None:
        return webbrowser.open(Path(path).resolve().as_uri())
    runner = spawn if spawn is not None else _spawn
    return runner(command)


def _spawn(command: Sequence[str]) -> subprocess.Popen:
    return subprocess.Popen(
        list(command),
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


__all__ = ["launch_command", "open_in_browser"]
