"""Depositgate data models — Pydantic v2, frozen where they hold plain data."""

from depositgate.models.deposit import ReadableStream, UploadBundle, UploadedPart
from depositgate.models.manifest import MANIFEST_PART, ManifestRecord
from depositgate.models.outcome import (
    VALID_TRANSITIONS,
    WORKING_PHASES,
    PhaseReport,
    PhaseStatus,
    PhaseTransition,
    ValidationOutcome,
    ValidationPhase,
    Violation,
    ViolationKind,
)

__all__ = [
    # manifest
    "MANIFEST_PART",
    "ManifestRecord",
    # deposit
    "ReadableStream",
    "UploadBundle",
    "UploadedPart",
    # outcome
    "ValidationPhase",
    "VALID_TRANSITIONS",
    "WORKING_PHASES",
    "ViolationKind",
    "Violation",
    "PhaseStatus",
    "PhaseReport",
    "PhaseTransition",
    "ValidationOutcome",
]
