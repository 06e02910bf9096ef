"""Manifest record model — one expected object of a deposit."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Upload field that carries the manifest document itself.  It is never
# compared against the manifest's own records.
MANIFEST_PART = "manifest"


class ManifestRecord(BaseModel):
    """A single object the manifest expects to be uploaded.

    Records are produced by a ``ManifestParser`` and consumed read-only by
    the validation phases.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    declared_size: int = Field(ge=0)
    checksum_algorithm: str
    expected_checksum: str
    location: str | None = None  # e.g. "file://./resources/page-001.jpg"
