"""Checksum algorithm registry and digest helpers.

Manifests name algorithms the way their producers do ("MD5", "SHA-256",
"sha256", "SHA3_512" ...).  Names are normalized by dropping case, dashes
and underscores before being matched against the algorithms hashlib
guarantees on every platform.
"""

from __future__ import annotations

import hashlib
from typing import Any


class UnsupportedAlgorithmError(RuntimeError):
    """Raised when a checksum algorithm name is not recognized."""

    def __init__(self, algorithm: str) -> None:
        super().__init__(f"Unsupported checksum algorithm: {algorithm}")
        self.algorithm = algorithm


def _normalize_name(name: str) -> str:
    return name.strip().lower().replace("-", "").replace("_", "")


# SHAKE digests need an explicit output length and cannot back a
# fixed-size manifest checksum.
SUPPORTED_ALGORITHMS: dict[str, str] = {
    _normalize_name(name): name
    for name in sorted(hashlib.algorithms_guaranteed)
    if not name.startswith("shake")
}


def resolve_algorithm(algorithm: str) -> str:
    """Map a manifest algorithm name to its hashlib name.

    Raises ``UnsupportedAlgorithmError`` for unknown names.
    """
    try:
        return SUPPORTED_ALGORITHMS[_normalize_name(algorithm)]
    except KeyError:
        raise UnsupportedAlgorithmError(algorithm) from None


def is_supported(algorithm: str) -> bool:
    return _normalize_name(algorithm) in SUPPORTED_ALGORITHMS


def new_hasher(algorithm: str) -> Any:
    """Return a fresh hashlib object for a manifest algorithm name."""
    return hashlib.new(resolve_algorithm(algorithm))


def normalize_hex(checksum: str) -> str:
    """Canonical form for comparing hex digests: stripped, lowercase."""
    return checksum.strip().lower()


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()
