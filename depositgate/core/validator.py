"""Deposit validator — runs the gated validation phases for one deposit.

Phase ordering is fixed:

    parsing_manifest -> checking_completeness -> checking_membership
        -> verifying_integrity -> done

A phase reports every violation it finds, but any violation ends the run
at that phase: later phases are never computed.  Integrity checking
against parts that are missing from, or not declared in, the manifest
would be meaningless.
"""

from __future__ import annotations

import logging

from depositgate.config import GateSettings
from depositgate.core.hasher import sha256_hex
from depositgate.core.manifest_parser import (
    DefaultManifestParser,
    ManifestParseError,
    ManifestParser,
)
from depositgate.core.phase_machine import PhaseMachine
from depositgate.core.phases import (
    check_completeness,
    check_integrity,
    check_membership,
)
from depositgate.core.stream_verifier import StreamVerifier
from depositgate.models.deposit import ReadableStream, UploadBundle
from depositgate.models.manifest import MANIFEST_PART, ManifestRecord
from depositgate.models.outcome import (
    ValidationOutcome,
    ValidationPhase,
    Violation,
    ViolationKind,
    new_run_id,
)

logger = logging.getLogger(__name__)


class ViolationLog:
    """Append-only, ordered violation accumulator for one run."""

    def __init__(self) -> None:
        self._violations: list[Violation] = []

    def extend(self, violations: list[Violation]) -> int:
        """Append *violations* and return how many were added."""
        self._violations.extend(violations)
        for violation in violations:
            logger.warning("%s: %s", violation.kind.value, violation.message)
        return len(violations)

    def freeze(self) -> tuple[Violation, ...]:
        return tuple(self._violations)

    def __len__(self) -> int:
        return len(self._violations)


class DepositValidator:
    """Validates uploaded bundles against their manifests.

    The validator holds only configuration, so one instance can serve any
    number of concurrent runs.

    Parameters
    ----------
    parser:
        Manifest parser.  Defaults to ``DefaultManifestParser``.
    settings:
        Chunk size and manifest size limit come from here.  Defaults to a
        fresh ``GateSettings``.
    """

    def __init__(
        self,
        parser: ManifestParser | None = None,
        settings: GateSettings | None = None,
    ) -> None:
        self.settings = settings or GateSettings()
        self.parser = parser or DefaultManifestParser()
        self.verifier = StreamVerifier(chunk_size=self.settings.chunk_size)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def submit(self, uploads: UploadBundle) -> ValidationOutcome:
        """Validate a deposit whose manifest travels as the ``manifest`` part."""
        manifest_parts = uploads.manifest_parts
        if len(manifest_parts) != 1:
            error = (
                "No manifest was uploaded"
                if not manifest_parts
                else f"Expected exactly one manifest, got {len(manifest_parts)}"
            )
            return self._rejected_manifest(new_run_id(), error)
        return self.validate(manifest_parts[0].stream, uploads)

    def validate(
        self, manifest: bytes | ReadableStream, uploads: UploadBundle
    ) -> ValidationOutcome:
        """Run every phase the deposit gets to and return the outcome."""
        run_id = new_run_id()
        machine = PhaseMachine(run_id)
        log = ViolationLog()

        # Phase 0: manifest
        try:
            records = self._parse_manifest(run_id, manifest)
        except ManifestParseError as exc:
            return self._rejected_manifest(run_id, str(exc))
        machine.advance(0)

        # Phase 1: every manifest record was uploaded
        added = log.extend(check_completeness(records, uploads))
        if machine.advance(added) == ValidationPhase.DONE:
            return self._finish(machine, log)

        # Phase 2: every upload is declared in the manifest
        added = log.extend(check_membership(records, uploads))
        if machine.advance(added) == ValidationPhase.DONE:
            return self._finish(machine, log)

        # Phase 3: sizes and checksums
        added = log.extend(check_integrity(records, uploads, self.verifier))
        machine.advance(added)
        return self._finish(machine, log)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _parse_manifest(
        self, run_id: str, manifest: bytes | ReadableStream
    ) -> list[ManifestRecord]:
        if isinstance(manifest, (bytes, bytearray)):
            data = bytes(manifest)
        else:
            data = self._read_manifest(manifest)

        if len(data) > self.settings.max_manifest_bytes:
            raise ManifestParseError(
                f"Manifest exceeds {self.settings.max_manifest_bytes} bytes"
            )

        logger.info(
            "Run %s: manifest %d bytes sha256=%s",
            run_id,
            len(data),
            sha256_hex(data)[:12],
        )
        records = self.parser.parse(data)
        self._check_record_ids(records)
        return records

    @staticmethod
    def _check_record_ids(records: list[ManifestRecord]) -> None:
        """Reject ids a pluggable parser let through that would make a part be read twice."""
        seen: set[str] = set()
        for record in records:
            if record.id == MANIFEST_PART:
                raise ManifestParseError(
                    f"Manifest object id is reserved: {MANIFEST_PART}"
                )
            if record.id in seen:
                raise ManifestParseError(
                    f"Duplicate object id in manifest: {record.id}"
                )
            seen.add(record.id)

    def _read_manifest(self, stream: ReadableStream) -> bytes:
        # One byte past the limit is enough to know the limit was exceeded.
        limit = self.settings.max_manifest_bytes + 1
        chunks: list[bytes] = []
        total = 0
        try:
            while total < limit:
                chunk = stream.read(min(self.settings.chunk_size, limit - total))
                if not chunk:
                    break
                chunks.append(chunk)
                total += len(chunk)
        except OSError as exc:
            raise ManifestParseError(f"Failed to read manifest: {exc}") from exc
        return b"".join(chunks)

    @staticmethod
    def _rejected_manifest(run_id: str, error: str) -> ValidationOutcome:
        machine = PhaseMachine(run_id)
        log = ViolationLog()
        added = log.extend([
            Violation(
                kind=ViolationKind.MANIFEST_PARSE_ERROR,
                phase=ValidationPhase.PARSING_MANIFEST,
                file_id=MANIFEST_PART,
                message=error,
            )
        ])
        machine.advance(added)
        return DepositValidator._finish(machine, log)

    @staticmethod
    def _finish(machine: PhaseMachine, log: ViolationLog) -> ValidationOutcome:
        outcome = ValidationOutcome(
            run_id=machine.run_id,
            violations=log.freeze(),
            phase_reports=tuple(machine.phase_reports()),
        )
        logger.info(
            "Run %s finished: %s (%d violations)",
            machine.run_id,
            "accepted" if outcome.succeeded else "rejected",
            len(outcome.violations),
        )
        return outcome
