"""Value types passed into and out of the conversion engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Sequence

from md2html.core.files import derive_output_path


class ConversionStage(Enum):
    """Pipeline stage at which a pair can fail."""

    READ = "read"
    WRITE = "write"


class OutcomeStatus(Enum):
    """Terminal state of a batch run."""

    SUCCESS = "success"
    FAILED = "failed"
    MISMATCH = "mismatch"


@dataclass(frozen=True)
class ConversionJob:
    """Ordered input/output paths for one batch.

    ``inputs`` and ``outputs`` are kept as separate sequences so an unequal
    request can still be represented and rejected by the engine.
    """

    inputs: tuple[Path, ...]
    outputs: tuple[Path, ...]

    @classmethod
    def from_paths(
        cls,
        inputs: Iterable[Path | str],
        outputs: Optional[Iterable[Path | str]] = None,
    ) -> "ConversionJob":
        """Build a job, deriving ``.html`` outputs when none are given."""

        sources = tuple(Path(item) for item in inputs)
        if outputs is None:
            targets = tuple(derive_output_path(item) for item in sources)
        else:
            targets = tuple(Path(item) for item in outputs)
        return cls(inputs=sources, outputs=targets)

    @property
    def is_balanced(self) -> bool:
        return len(self.inputs) == len(self.outputs)

    def pairs(self) -> tuple[tuple[Path, Path], ...]:
        return tuple(zip(self.inputs, self.outputs))

    def __len__(self) -> int:
        return len(self.inputs)


@dataclass(frozen=True)
class ConversionSettings:
    """Options shared by every pair in a batch."""

    title_override: str = ""
    css_source: Optional[str] = None
    preview: bool = False
    lang: str = "en"
    escape_title: bool = False


@dataclass(frozen=True)
class ConversionOutcome:
    """The single result of a batch run.

    ``converted`` lists the pairs already written when the run ended. For
    failures ``stage``/``path``/``error`` describe the first problem hit;
    mismatches only carry the two counts.
    """

    status: OutcomeStatus
    total: int
    converted: tuple[tuple[Path, Path], ...] = ()
    stage: Optional[ConversionStage] = None
    path: Optional[Path] = None
    error: Optional[Exception] = None
    input_count: Optional[int] = None
    output_count: Optional[int] = None

    @classmethod
    def success(
        cls, converted: Sequence[tuple[Path, Path]], *, total: int
    ) -> "ConversionOutcome":
        return cls(
            status=OutcomeStatus.SUCCESS,
            total=total,
            converted=tuple(converted),
        )

    @classmethod
    def failure(
        cls,
        *,
        stage: ConversionStage,
        path: Path,
        error: Exception,
        converted: Sequence[tuple[Path, Path]],
        total: int,
    ) -> "ConversionOutcome":
        return cls(
            status=OutcomeStatus.FAILED,
            total=total,
            converted=tuple(converted),
            stage=stage,
            path=path,
            error=error,
        )

    @classmethod
    def mismatch(cls, job: ConversionJob) -> "ConversionOutcome":
        return cls(
            status=OutcomeStatus.MISMATCH,
            total=0,
            input_count=len(job.inputs),
            output_count=len(job.outputs),
        )

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    @property
    def input(self) -> Optional[Path]:
        if not self.converted:
            return None
        return self.converted[-1][0]

    @property
    def output(self) -> Optional[Path]:
        if not self.converted:
            return None
        return self.converted[-1][1]

    @property
    def progress(self) -> float:
        if self.total <= 0:
            return 0.0
        return len(self.converted) / self.total

    @property
    def exit_code(self) -> int:
        if self.status is OutcomeStatus.SUCCESS:
            return 0
        if self.status is OutcomeStatus.MISMATCH:
            return 2
        return 1

    @property
    def status_message(self) -> str:
        if self.status is OutcomeStatus.MISMATCH:
            return "Input/output file count mismatch."
        if self.status is OutcomeStatus.FAILED:
            verb = "read" if self.stage is ConversionStage.READ else "write"
            return f"Failed to {verb} {self.path}: {self.error}"
        if not self.converted:
            return "No files to convert."
        return f"Converted: {self.input} → {self.output}"


__all__ = [
    "ConversionJob",
    "ConversionOutcome",
    "ConversionSettings",
    "ConversionStage",
    "OutcomeStatus",
]
