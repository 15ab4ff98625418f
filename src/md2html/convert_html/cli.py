"""CLI entry point for the Markdown-to-HTML converter."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.progress import Progress

from md2html.core import workspace as workspace_mod
from md2html.core.logging import configure_logger
from md2html.core.workspace import WorkspaceError

from .browser import open_in_browser
from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    ConvertHtmlConfig,
    ConvertHtmlConfigError,
    load_config,
    write_template,
)
from .converter import ConverterDependencies, local_dependencies
from .executor import run_conversion
from .models import ConversionJob, ConversionOutcome, ConversionSettings
from .session import SessionError, SessionState, SessionStore


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2html convert",
        description=(
            "Convert Markdown files into standalone HTML documents. Each "
            "input is paired with an output; conversion stops at the first "
            "file that cannot be read or written."
        ),
        epilog=(
            "Run `md2html convert config init` to scaffold the default "
            "convert_html.toml template."
        ),
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        type=Path,
        help="Markdown files to convert, in order.",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="outputs",
        action="append",
        type=Path,
        metavar="OUTPUT",
        help=(
            "Output HTML path; repeat once per input, in the same order "
            "(defaults to each input with a .html extension)."
        ),
    )
    parser.add_argument(
        "--title",
        help="Title for every document (defaults to each input's file name).",
    )
    parser.add_argument(
        "--css",
        help=(
            "Stylesheet to embed when it is a readable local file, otherwise "
            "to reference with <link rel=\"stylesheet\">."
        ),
    )
    parser.add_argument(
        "--no-css",
        action="store_true",
        help="Ignore any configured or saved stylesheet.",
    )
    preview = parser.add_mutually_exclusive_group()
    preview.add_argument(
        "--preview",
        dest="preview",
        action="store_true",
        default=None,
        help="Open each converted file in the default browser.",
    )
    preview.add_argument(
        "--no-preview",
        dest="preview",
        action="store_false",
        help="Do not open converted files.",
    )
    parser.add_argument(
        "--escape-title",
        action="store_true",
        default=None,
        help="HTML-escape the title before inserting it.",
    )
    parser.add_argument("--lang", help="Value of the <html lang> attribute.")
    parser.add_argument(
        "--session",
        action="store_true",
        help=(
            "Use the saved session's files and settings when no inputs are "
            "given (flags still override its settings)."
        ),
    )
    save = parser.add_mutually_exclusive_group()
    save.add_argument(
        "--save-session",
        dest="save_session",
        action="store_true",
        default=None,
        help=(
            "Record this run's files and settings as the session, replacing "
            "any saved one. By default a run is recorded only with --session "
            "or when no session is saved yet."
        ),
    )
    save.add_argument(
        "--no-save-session",
        dest="save_session",
        action="store_false",
        help="Never record this run as the session.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML config file (defaults to the workspace config).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root used for config, logs and session.",
    )
    parser.add_argument(
        "--log-level",
        help="Set the file logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Also log to the console at DEBUG level.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args_list = list(argv) if argv is not None else list(sys.argv[1:])

    if args_list[:1] == ["config"]:
        return _handle_config(args_list[1:])

    parser = _build_parser()
    # Inputs may sit before, between or after repeated -o flags.
    args = parser.parse_intermixed_args(args_list)

    if args.css is not None and args.no_css:
        parser.error("--css and --no-css are mutually exclusive.")
    if args.outputs is not None and not args.inputs:
        parser.error("--output requires input files.")
    if not args.inputs and not args.session:
        parser.error("no input files given (pass files or use --session).")

    overrides = ConfigOverrides(
        title=args.title,
        css="" if args.no_css else args.css,
        lang=args.lang,
        escape_title=args.escape_title,
        preview=args.preview,
        log_level=args.log_level,
    )

    try:
        load_result = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except ConvertHtmlConfigError as exc:
        parser.error(str(exc))

    config = load_result.config
    store = SessionStore(config.session_file)
    job, settings = _resolve_request(args, config)
    if args.session and not args.inputs:
        try:
            saved = store.load()
        except SessionError as exc:
            sys.stderr.write(str(exc) + "\n")
            return 1
        job = saved.to_job()
        settings = _merge_session_settings(saved, args, config)

    logger, log_path = configure_logger(
        "md2html.convert_html",
        log_dir=load_result.layout.path_for("logs"),
        level=config.log_level,
        verbose=args.verbose,
    )
    logger.debug(
        "convert CLI invoked",
        extra={"session_file": str(config.session_file)},
    )

    console = Console(highlight=False)
    outcome = _run_with_progress(
        job,
        settings,
        dependencies=_build_dependencies(config),
        logger=logger,
        console=console,
    )

    if _should_save_session(args, store):
        _save_session(store, job, settings, logger)

    _print_outcome(console, outcome, log_path)
    return outcome.exit_code


def _resolve_request(
    args: argparse.Namespace, config: ConvertHtmlConfig
) -> tuple[ConversionJob, ConversionSettings]:
    job = ConversionJob.from_paths(args.inputs, args.outputs)
    return job, config.to_settings()


def _merge_session_settings(
    saved: SessionState,
    args: argparse.Namespace,
    config: ConvertHtmlConfig,
) -> ConversionSettings:
    """Saved session settings, with explicit command-line flags on top."""

    if args.no_css:
        css = None
    elif args.css is not None:
        css = args.css
    else:
        css = saved.css_path
    return ConversionSettings(
        title_override=args.title if args.title is not None else saved.title,
        css_source=css or None,
        preview=args.preview if args.preview is not None else saved.preview,
        lang=config.lang,
        escape_title=config.escape_title,
    )


def _build_dependencies(config: ConvertHtmlConfig) -> ConverterDependencies:
    return local_dependencies(
        extensions=config.extensions,
        open_in_browser=open_in_browser,
    )


def _run_with_progress(
    job: ConversionJob,
    settings: ConversionSettings,
    *,
    dependencies: ConverterDependencies,
    logger: logging.Logger,
    console: Console,
) -> ConversionOutcome:
    total = len(job)
    with Progress(
        console=console,
        transient=True,
        disable=not console.is_terminal,
    ) as progress:
        task = progress.add_task("Converting", total=max(total, 1))

        def _advance(fraction: float) -> None:
            progress.update(task, completed=fraction * total)

        return run_conversion(
            job,
            settings,
            dependencies=dependencies,
            logger=logger,
            on_progress=_advance,
        )


def _should_save_session(
    args: argparse.Namespace, store: SessionStore
) -> bool:
    if args.save_session is not None:
        return args.save_session
    # Ad-hoc runs must not clobber a session built with `md2html session`.
    return args.session or not store.exists()


def _save_session(
    store: SessionStore,
    job: ConversionJob,
    settings: ConversionSettings,
    logger: logging.Logger,
) -> None:
    state = SessionState.from_request(job, settings)
    try:
        store.save(state)
    except SessionError as exc:
        logger.warning("Session not saved", extra={"reason": str(exc)})
        sys.stderr.write(f"Warning: {exc}\n")


def _print_outcome(
    console: Console, outcome: ConversionOutcome, log_path: Path
) -> None:
    style = "bold green" if outcome.ok else "bold red"
    console.print(outcome.status_message, style=style, markup=False, soft_wrap=True)
    if outcome.total:
        console.print(
            f"  progress: {len(outcome.converted)}/{outcome.total} "
            f"({outcome.progress:.0%})",
            markup=False,
            soft_wrap=True,
        )
    console.print(f"  log file: {log_path}", markup=False, soft_wrap=True)


def _handle_config(argv: Sequence[str]) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(argv)
    return _handle_config_init(args)


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2html convert config",
        description="Manage configuration files for the HTML converter.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Write the default convert_html.toml template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination for the config TOML (defaults to the workspace "
            "config directory)."
        ),
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root used when resolving the default config path.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if a config already exists.",
    )
    return parser


def _handle_config_init(args: argparse.Namespace) -> int:
    try:
        target = _resolve_config_target(args.path, args.workspace)
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    try:
        written = write_template(target, overwrite=args.force)
    except ConvertHtmlConfigError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote convert_html config to {written}\n")
    return 0


def _resolve_config_target(
    path: Optional[Path], workspace: Optional[Path]
) -> Path:
    if path is not None:
        candidate = path.expanduser()
        if not candidate.is_absolute():
            candidate = (Path.cwd() / candidate).resolve()
        return candidate

    layout = workspace_mod.ensure_workspace(path=workspace)
    return layout.path_for("config") / CONFIG_FILENAME


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
