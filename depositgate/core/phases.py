"""The three deposit checks: completeness, membership, integrity.

Each check compares the manifest records with the uploaded parts and
returns every violation it finds; none of them stops at the first
problem.  Deciding whether a later check runs at all is the validator's
job.
"""

from __future__ import annotations

import logging

from depositgate.core.hasher import UnsupportedAlgorithmError, normalize_hex
from depositgate.core.stream_verifier import StreamReadError, StreamVerifier
from depositgate.models.deposit import ReadableStream, UploadBundle
from depositgate.models.manifest import ManifestRecord
from depositgate.models.outcome import ValidationPhase, Violation, ViolationKind

logger = logging.getLogger(__name__)


def check_completeness(
    records: list[ManifestRecord], uploads: UploadBundle
) -> list[Violation]:
    """Every manifest record must have an upload (reported in manifest order)."""
    return [
        Violation(
            kind=ViolationKind.MISSING_UPLOAD,
            phase=ValidationPhase.CHECKING_COMPLETENESS,
            file_id=record.id,
            message=f"Missing uploaded file expected from manifest: {record.id}",
        )
        for record in records
        if record.id not in uploads
    ]


def check_membership(
    records: list[ManifestRecord], uploads: UploadBundle
) -> list[Violation]:
    """Every uploaded part except the manifest must be declared (submission order)."""
    declared = {record.id for record in records}
    return [
        Violation(
            kind=ViolationKind.UNEXPECTED_UPLOAD,
            phase=ValidationPhase.CHECKING_MEMBERSHIP,
            file_id=part_id,
            message=f"Uploaded file is missing from manifest: {part_id}",
        )
        for part_id in uploads.part_ids
        if part_id not in declared
    ]


def verify_part(
    record: ManifestRecord, stream: ReadableStream, verifier: StreamVerifier
) -> list[Violation]:
    """Measure one uploaded stream and compare it with its manifest record.

    Size and checksum are compared independently, so a single file can
    yield both violations.  An unsupported algorithm or a failing stream
    yields one violation and no comparison.
    """
    phase = ValidationPhase.VERIFYING_INTEGRITY

    try:
        digest = verifier.measure(stream, record.checksum_algorithm)
    except UnsupportedAlgorithmError:
        return [
            Violation(
                kind=ViolationKind.UNSUPPORTED_ALGORITHM,
                phase=phase,
                file_id=record.id,
                message=(
                    f"Checksum algorithm not supported for file: {record.id}, "
                    f"{record.checksum_algorithm}"
                ),
            )
        ]
    except StreamReadError as exc:
        logger.error("Reading %s failed: %s", record.id, exc)
        return [
            Violation(
                kind=ViolationKind.STREAM_READ_ERROR,
                phase=phase,
                file_id=record.id,
                message=f"Failed to process file: {record.id}, {exc}",
            )
        ]

    violations: list[Violation] = []
    if digest.byte_count != record.declared_size:
        violations.append(
            Violation(
                kind=ViolationKind.SIZE_MISMATCH,
                phase=phase,
                file_id=record.id,
                message=(
                    f"Byte count mismatch with manifest for file {record.id} "
                    f"(expected={record.declared_size}, actual={digest.byte_count})"
                ),
            )
        )
    if normalize_hex(record.expected_checksum) != digest.checksum:
        violations.append(
            Violation(
                kind=ViolationKind.CHECKSUM_MISMATCH,
                phase=phase,
                file_id=record.id,
                message=(
                    f"Checksum mismatch with manifest for file {record.id} "
                    f"(expected={record.expected_checksum}, actual={digest.checksum})"
                ),
            )
        )

    logger.debug(
        "Verified %s: %d bytes, %s=%s, %d violations",
        record.id,
        digest.byte_count,
        digest.algorithm,
        digest.checksum,
        len(violations),
    )
    return violations


def check_integrity(
    records: list[ManifestRecord],
    uploads: UploadBundle,
    verifier: StreamVerifier,
) -> list[Violation]:
    """Verify size and checksum of every upload, in manifest order.

    Only meaningful once completeness and membership passed, i.e. the
    uploaded part names and the manifest ids are the same set.  A part
    name with more than one stream is reported and not verified.
    """
    violations: list[Violation] = []

    for record in records:
        parts = uploads.parts(record.id)
        if not parts:
            # Reported by the completeness phase.
            continue
        if len(parts) > 1:
            violations.append(
                Violation(
                    kind=ViolationKind.DUPLICATE_UPLOAD,
                    phase=ValidationPhase.VERIFYING_INTEGRITY,
                    file_id=record.id,
                    message=(
                        f"File upload entry {record.id} contains {len(parts)} "
                        "files, expected is 1"
                    ),
                )
            )
            continue

        violations.extend(verify_part(record, parts[0].stream, verifier))

    return violations
