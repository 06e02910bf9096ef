"""Shared test fixtures for Depositgate."""

from __future__ import annotations

import hashlib
import io
from collections.abc import Callable
from typing import Any

import pytest

from depositgate.config import GateSettings
from depositgate.core.stream_verifier import StreamVerifier
from depositgate.core.validator import DepositValidator
from depositgate.models.deposit import UploadBundle
from depositgate.models.manifest import MANIFEST_PART, ManifestRecord

PAGE_ONE = b"0123456789"  # 10 bytes


def sha256_of(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def xml_manifest(files: list[dict[str, Any]]) -> bytes:
    """Build a METS-style XML manifest from file dicts.

    Keys: id, size, checksum, checksum_type (default SHA-256), location.
    """
    entries = []
    for f in files:
        location = f.get("location")
        flocat = (
            f'<mets:FLocat xlink:href="{location}"/>' if location else ""
        )
        entries.append(
            f'<mets:file ID="{f["id"]}" SIZE="{f["size"]}" '
            f'CHECKSUMTYPE="{f.get("checksum_type", "SHA-256")}" '
            f'CHECKSUM="{f["checksum"]}">{flocat}</mets:file>'
        )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<mets:mets xmlns:mets="http://www.loc.gov/METS/" '
        'xmlns:xlink="http://www.w3.org/1999/xlink">'
        '<mets:fileSec><mets:fileGrp USE="DISPLAY">'
        + "".join(entries)
        + "</mets:fileGrp></mets:fileSec></mets:mets>"
    ).encode("utf-8")


def file_entry(file_id: str, data: bytes, **overrides: Any) -> dict[str, Any]:
    """A manifest file dict that correctly describes *data*."""
    entry: dict[str, Any] = {
        "id": file_id,
        "size": len(data),
        "checksum": sha256_of(data),
        "checksum_type": "SHA-256",
    }
    entry.update(overrides)
    return entry


@pytest.fixture
def make_manifest() -> Callable[[list[dict[str, Any]]], bytes]:
    """Factory fixture: XML manifest bytes from file dicts."""
    return xml_manifest


@pytest.fixture
def make_entry() -> Callable[..., dict[str, Any]]:
    """Factory fixture: a manifest file dict that correctly describes some bytes."""
    return file_entry


@pytest.fixture
def digest() -> Callable[[bytes], str]:
    """SHA-256 hex digest helper."""
    return sha256_of


@pytest.fixture
def settings() -> GateSettings:
    """Settings with a small chunk size so tests exercise multi-chunk reads."""
    return GateSettings(chunk_size=4)


@pytest.fixture
def validator(settings: GateSettings) -> DepositValidator:
    """Provide a DepositValidator with the default manifest parser."""
    return DepositValidator(settings=settings)


@pytest.fixture
def verifier() -> StreamVerifier:
    return StreamVerifier(chunk_size=4)


@pytest.fixture
def page_one() -> bytes:
    """The 10-byte payload described by the ``record`` fixture."""
    return PAGE_ONE


@pytest.fixture
def record() -> ManifestRecord:
    """A record that correctly describes PAGE_ONE."""
    return ManifestRecord(
        id="FILE_0001",
        declared_size=len(PAGE_ONE),
        checksum_algorithm="SHA-256",
        expected_checksum=sha256_of(PAGE_ONE),
    )


# ---------------------------------------------------------------------------
# Bundle factory shared across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def make_bundle() -> Callable[..., UploadBundle]:
    """Factory fixture: build an UploadBundle from (id, bytes) pairs.

    Pass ``manifest=`` to include the manifest part first, as a client
    would submit it.
    """

    def _factory(
        *parts: tuple[str, bytes], manifest: bytes | None = None
    ) -> UploadBundle:
        bundle = UploadBundle()
        if manifest is not None:
            bundle.add(MANIFEST_PART, io.BytesIO(manifest))
        for part_id, data in parts:
            bundle.add(part_id, io.BytesIO(data))
        return bundle

    return _factory
