"""Sequential batch executor for convert-html runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from .converter import ConverterDependencies, convert_pair
from .models import ConversionJob, ConversionOutcome, ConversionSettings
from .output import document_template

ProgressCallback = Callable[[float], None]

_LOGGER = logging.getLogger("md2html.convert_html")


def run_conversion(
    job: ConversionJob,
    settings: ConversionSettings,
    *,
    dependencies: ConverterDependencies,
    logger: Optional[logging.Logger] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> ConversionOutcome:
    """Convert every pair of ``job`` in order, stopping at the first failure.

    Outputs written before a failure are left in place. The returned
    outcome describes either the last converted pair or the first problem.
    """

    log = logger or _LOGGER

    if not job.is_balanced:
        outcome = ConversionOutcome.mismatch(job)
        log.error(
            "Input/output count mismatch",
            extra={
                "input_count": outcome.input_count,
                "output_count": outcome.output_count,
            },
        )
        return outcome

    pairs = job.pairs()
    total = len(pairs)
    log.info(
        "Starting convert-html run",
        extra={
            "pair_count": total,
            "title_override": settings.title_override or None,
            "css_source": settings.css_source,
            "preview": settings.preview,
        },
    )

    template = document_template()
    converted: list[tuple[Path, Path]] = []
    for source, target in pairs:
        result = convert_pair(
            source,
            target,
            settings=settings,
            dependencies=dependencies,
            logger=log,
            template=template,
        )
        if not result.ok:
            outcome = ConversionOutcome.failure(
                stage=result.stage,  # type: ignore[arg-type]
                path=result.failed_path,  # type: ignore[arg-type]
                error=result.error,  # type: ignore[arg-type]
                converted=converted,
                total=total,
            )
            log.error(
                "Conversion stopped",
                extra={
                    "stage": outcome.stage.value if outcome.stage else None,
                    "path": str(outcome.path),
                    "reason": str(outcome.error),
                    "converted_count": len(converted),
                    "skipped_count": total - len(converted) - 1,
                },
            )
            return outcome

        converted.append((source, target))
        log.info(
            "Converted document",
            extra={"source": str(source), "output_path": str(target)},
        )
        if settings.preview:
            _launch_preview(target, dependencies, log)
        if on_progress is not None:
            on_progress(len(converted) / total)

    outcome = ConversionOutcome.success(converted, total=total)
    log.info(
        "Completed convert-html run",
        extra={"converted_count": len(converted)},
    )
    return outcome


def _launch_preview(
    target: Path,
    dependencies: ConverterDependencies,
    logger: logging.Logger,
) -> None:
    launcher = dependencies.open_in_browser
    if launcher is None:
        return
    try:
        launcher(target)
    except Exception as exc:
        logger.warning(
            "Preview launch failed",
            extra={"output_path": str(target), "reason": str(exc)},
        )


__all__ = [
    "ProgressCallback",
    "run_conversion",
]
