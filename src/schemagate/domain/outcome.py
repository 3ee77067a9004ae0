"""Result values produced by a gate run."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final, Literal

if TYPE_CHECKING:
    from .classifier import Classification
    from .failures import Failure

EXIT_PROCEED: Final[int] = 0
EXIT_ABORT: Final[int] = 1


class GateStage(StrEnum):
    START = "start"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    ASSOCIATING = "associating"
    SYNCHRONIZING = "synchronizing"
    VERIFYING = "verifying"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    entity_name: str
    record_count: int


@dataclass(frozen=True, slots=True, kw_only=True)
class GateWarning:
    """A failure the gate decided to tolerate."""

    stage: GateStage
    failure: Failure
    entity_name: str | None = None

    def describe(self) -> str:
        subject = f" {self.entity_name}" if self.entity_name else ""
        return f"{self.stage.value}{subject}: {self.failure.kind.value}: {self.failure.message}"


class OutcomeStatus(StrEnum):
    SUCCESS = "success"
    WARNING = "warning"
    FATAL = "fatal"


@dataclass(frozen=True, slots=True, kw_only=True)
class Success:
    results: tuple[VerificationResult, ...] = ()
    status: Literal[OutcomeStatus.SUCCESS] = OutcomeStatus.SUCCESS

    @property
    def exit_status(self) -> int:
        return EXIT_PROCEED


@dataclass(frozen=True, slots=True, kw_only=True)
class SuccessWithWarnings:
    warnings: tuple[GateWarning, ...]
    results: tuple[VerificationResult, ...] = ()
    status: Literal[OutcomeStatus.WARNING] = OutcomeStatus.WARNING

    @property
    def exit_status(self) -> int:
        return EXIT_PROCEED


@dataclass(frozen=True, slots=True, kw_only=True)
class Fatal:
    stage: GateStage
    failure: Failure
    classification: Classification
    results: tuple[VerificationResult, ...] = ()
    warnings: tuple[GateWarning, ...] = ()
    status: Literal[OutcomeStatus.FATAL] = OutcomeStatus.FATAL

    @property
    def exit_status(self) -> int:
        return EXIT_ABORT


type ReconciliationOutcome = Success | SuccessWithWarnings | Fatal
