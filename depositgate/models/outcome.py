"""Validation phases, violations and the outcome of a deposit run."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ValidationPhase(str, Enum):
    """States of a single deposit validation run."""

    PARSING_MANIFEST = "parsing_manifest"
    CHECKING_COMPLETENESS = "checking_completeness"
    CHECKING_MEMBERSHIP = "checking_membership"
    VERIFYING_INTEGRITY = "verifying_integrity"
    DONE = "done"


# Every working phase may either advance or stop the run.
# DONE is terminal.
VALID_TRANSITIONS: dict[ValidationPhase, set[ValidationPhase]] = {
    ValidationPhase.PARSING_MANIFEST: {
        ValidationPhase.CHECKING_COMPLETENESS,
        ValidationPhase.DONE,
    },
    ValidationPhase.CHECKING_COMPLETENESS: {
        ValidationPhase.CHECKING_MEMBERSHIP,
        ValidationPhase.DONE,
    },
    ValidationPhase.CHECKING_MEMBERSHIP: {
        ValidationPhase.VERIFYING_INTEGRITY,
        ValidationPhase.DONE,
    },
    ValidationPhase.VERIFYING_INTEGRITY: {ValidationPhase.DONE},
    ValidationPhase.DONE: set(),
}

# Phases that do work, in execution order.
WORKING_PHASES: list[ValidationPhase] = [
    ValidationPhase.PARSING_MANIFEST,
    ValidationPhase.CHECKING_COMPLETENESS,
    ValidationPhase.CHECKING_MEMBERSHIP,
    ValidationPhase.VERIFYING_INTEGRITY,
]


class ViolationKind(str, Enum):
    """Why a deposit does not satisfy its manifest."""

    MANIFEST_PARSE_ERROR = "manifest_parse_error"
    MISSING_UPLOAD = "missing_upload"
    UNEXPECTED_UPLOAD = "unexpected_upload"
    DUPLICATE_UPLOAD = "duplicate_upload"
    SIZE_MISMATCH = "size_mismatch"
    CHECKSUM_MISMATCH = "checksum_mismatch"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    STREAM_READ_ERROR = "stream_read_error"


class Violation(BaseModel):
    """A single recorded reason the deposit was rejected."""

    model_config = ConfigDict(frozen=True)

    kind: ViolationKind
    phase: ValidationPhase
    message: str
    file_id: str | None = None


class PhaseStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class PhaseReport(BaseModel):
    """How one working phase ended in a run."""

    model_config = ConfigDict(frozen=True)

    phase: ValidationPhase
    status: PhaseStatus
    violation_count: int = 0


class PhaseTransition(BaseModel):
    """Records a single phase transition of a run."""

    model_config = ConfigDict(frozen=True)

    run_id: str
    from_phase: ValidationPhase
    to_phase: ValidationPhase
    violation_count: int = 0  # violations produced by from_phase
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


def new_run_id() -> str:
    return f"dep-{uuid.uuid4().hex[:12]}"


class ValidationOutcome(BaseModel):
    """Terminal result of one deposit validation run.

    The deposit is accepted if and only if ``violations`` is empty.
    Violations keep the order in which the phases produced them.
    """

    model_config = ConfigDict(frozen=True)

    run_id: str = Field(default_factory=new_run_id)
    violations: tuple[Violation, ...] = ()
    phase_reports: tuple[PhaseReport, ...] = ()

    @property
    def succeeded(self) -> bool:
        return not self.violations

    @property
    def messages(self) -> tuple[str, ...]:
        """Violation messages in order."""
        return tuple(v.message for v in self.violations)

    @property
    def failed_phase(self) -> ValidationPhase | None:
        """The phase that stopped the run, if any."""
        for report in self.phase_reports:
            if report.status == PhaseStatus.FAILED:
                return report.phase
        return None
