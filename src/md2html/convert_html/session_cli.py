"""CLI for inspecting and editing the saved conversion session."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.table import Table

from .config import ConfigOverrides, ConvertHtmlConfigError, load_config
from .session import SessionError, SessionState, SessionStore


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2html session",
        description=(
            "Manage the saved list of Markdown inputs, their outputs and the "
            "shared title/stylesheet/preview settings used by "
            "`md2html convert --session`."
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML config file (defaults to the workspace config).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root.",
    )
    parser.add_argument(
        "--session-file",
        type=Path,
        help="Session record to operate on (defaults to the configured one).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("show", help="Print the saved files and settings.")

    add_parser = subparsers.add_parser(
        "add", help="Append a Markdown file and its output path."
    )
    add_parser.add_argument("input", type=Path)
    add_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output path (defaults to the input with a .html extension).",
    )

    remove_parser = subparsers.add_parser(
        "remove", help="Remove the pair at a 1-based position."
    )
    remove_parser.add_argument("index", type=int)

    set_parser = subparsers.add_parser("set", help="Change shared settings.")
    set_parser.add_argument("--title")
    css = set_parser.add_mutually_exclusive_group()
    css.add_argument("--css")
    css.add_argument("--no-css", action="store_true")
    preview = set_parser.add_mutually_exclusive_group()
    preview.add_argument(
        "--preview", dest="preview", action="store_true", default=None
    )
    preview.add_argument("--no-preview", dest="preview", action="store_false")

    subparsers.add_parser("clear", help="Delete the saved session record.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        load_result = load_config(
            config_path=args.config,
            overrides=ConfigOverrides(session_file=args.session_file),
            workspace_path=args.workspace,
        )
    except ConvertHtmlConfigError as exc:
        parser.error(str(exc))

    store = SessionStore(load_result.config.session_file)
    console = Console(highlight=False)

    if args.command == "clear":
        removed = store.clear()
        message = "Cleared session" if removed else "No session saved at"
        console.print(f"{message} {store.path}", markup=False, soft_wrap=True)
        return 0

    try:
        state = store.load()
        if args.command == "show":
            _print_state(console, state, store.path)
            return 0
        _apply(args, state, console)
        store.save(state)
    except SessionError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1
    return 0


def _apply(
    args: argparse.Namespace, state: SessionState, console: Console
) -> None:
    if args.command == "add":
        state.add_input(args.input, args.output)
        console.print(
            f"Added {state.input_files[-1]} → {state.output_files[-1]}",
            markup=False,
            soft_wrap=True,
        )
    elif args.command == "remove":
        source, target = state.remove(args.index - 1)
        console.print(
            f"Removed {source} → {target}", markup=False, soft_wrap=True
        )
    elif args.command == "set":
        if args.title is not None:
            state.title = args.title
        if args.no_css:
            state.clear_css()
        elif args.css is not None:
            state.set_css(args.css)
        if args.preview is not None:
            state.preview = args.preview
        console.print("Session settings updated.", markup=False)


def _print_state(console: Console, state: SessionState, path: Path) -> None:
    table = Table(title=f"Session: {path}", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Input")
    table.add_column("Output")
    for index, source in enumerate(state.input_files, start=1):
        target = (
            state.output_files[index - 1]
            if index - 1 < len(state.output_files)
            else "(missing)"
        )
        table.add_row(str(index), str(source), str(target))
    console.print(table)
    console.print(f"title:   {state.title or '(file name)'}", markup=False)
    console.print(f"css:     {state.css_path or '(none)'}", markup=False)
    console.print(f"preview: {'on' if state.preview else 'off'}", markup=False)


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
