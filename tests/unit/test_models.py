"""Tests for the data models — validation, immutability, defaults."""

from __future__ import annotations

import io

import pytest
from pydantic import ValidationError

from depositgate.models.deposit import ReadableStream, UploadBundle
from depositgate.models.manifest import MANIFEST_PART, ManifestRecord
from depositgate.models.outcome import (
    VALID_TRANSITIONS,
    PhaseReport,
    PhaseStatus,
    ValidationOutcome,
    ValidationPhase,
    Violation,
    ViolationKind,
)


class TestManifestRecord:
    def test_frozen(self, record: ManifestRecord):
        with pytest.raises(Exception):
            record.declared_size = 11

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            ManifestRecord(
                id="a", declared_size=-1, checksum_algorithm="md5", expected_checksum="00"
            )

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            ManifestRecord(
                id="", declared_size=1, checksum_algorithm="md5", expected_checksum="00"
            )


class TestPhaseModels:
    def test_phase_values(self):
        assert ValidationPhase.PARSING_MANIFEST == "parsing_manifest"
        assert ValidationPhase.DONE == "done"

    def test_done_is_terminal(self):
        assert VALID_TRANSITIONS[ValidationPhase.DONE] == set()

    def test_every_working_phase_can_end_the_run(self):
        for phase, targets in VALID_TRANSITIONS.items():
            if phase != ValidationPhase.DONE:
                assert ValidationPhase.DONE in targets


class TestValidationOutcome:
    def test_empty_outcome_succeeds(self):
        outcome = ValidationOutcome()
        assert outcome.succeeded is True
        assert outcome.messages == ()
        assert outcome.failed_phase is None
        assert outcome.run_id.startswith("dep-")

    def test_violations_mean_failure(self):
        violation = Violation(
            kind=ViolationKind.MISSING_UPLOAD,
            phase=ValidationPhase.CHECKING_COMPLETENESS,
            file_id="FILE_0001",
            message="Missing uploaded file expected from manifest: FILE_0001",
        )
        outcome = ValidationOutcome(
            violations=(violation,),
            phase_reports=(
                PhaseReport(phase=ValidationPhase.PARSING_MANIFEST, status=PhaseStatus.PASSED),
                PhaseReport(
                    phase=ValidationPhase.CHECKING_COMPLETENESS,
                    status=PhaseStatus.FAILED,
                    violation_count=1,
                ),
            ),
        )
        assert outcome.succeeded is False
        assert outcome.messages == (violation.message,)
        assert outcome.failed_phase == ValidationPhase.CHECKING_COMPLETENESS

    def test_frozen(self):
        outcome = ValidationOutcome()
        with pytest.raises(Exception):
            outcome.violations = ()


class TestUploadBundle:
    def test_keeps_submission_order_and_duplicates(self):
        bundle = UploadBundle()
        bundle.add(MANIFEST_PART, io.BytesIO(b"<m/>"))
        bundle.add("B", io.BytesIO(b"b"))
        bundle.add("A", io.BytesIO(b"a1"))
        bundle.add("A", io.BytesIO(b"a2"))

        assert list(bundle) == [MANIFEST_PART, "B", "A"]
        assert bundle.part_ids == ["B", "A"]
        assert [p.stream.read() for p in bundle.parts("A")] == [b"a1", b"a2"]
        assert len(bundle.manifest_parts) == 1
        assert "A" in bundle
        assert "C" not in bundle
        assert bundle.parts("C") == []

    def test_from_streams(self):
        bundle = UploadBundle.from_streams({"A": io.BytesIO(b"a")})
        assert bundle.part_ids == ["A"]
        assert len(bundle) == 1

    def test_bytes_io_is_a_readable_stream(self):
        assert isinstance(io.BytesIO(b""), ReadableStream)
