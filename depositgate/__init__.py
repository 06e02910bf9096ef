"""Depositgate: gated validation of archival deposit packages.

A deposit is a manifest plus a bundle of uploaded files.  It is accepted
only if every declared file was uploaded, nothing undeclared was uploaded,
and every file has its declared byte size and checksum:
  - Completeness, membership and integrity phases, fail-fast between phases
  - Single-pass streaming verification (byte count + checksum via a tee)
  - XML (METS-style) and JSON manifests
  - FastAPI ``POST /deposit`` endpoint and a Typer/Rich CLI
"""

__version__ = "0.1.0"
__description__ = "Gated validation of archival deposit packages"

from depositgate.core.validator import DepositValidator
from depositgate.models.deposit import UploadBundle
from depositgate.models.outcome import ValidationOutcome

__all__ = ["DepositValidator", "UploadBundle", "ValidationOutcome", "__version__"]
