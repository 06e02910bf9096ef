"""Manifest parsing — bytes in, ``ManifestRecord`` list out.

The validator only depends on the ``ManifestParser`` protocol.  The default
parser understands two document shapes, chosen by the first significant
byte of the document:

XML (METS style)::

    <mets:fileSec>
      <mets:file ID="FILE_0001" SIZE="10" CHECKSUMTYPE="SHA-256"
                 CHECKSUM="...">
        <mets:FLocat xlink:href="file://./resources/page-001.jpg"/>
      </mets:file>
    </mets:fileSec>

Every element whose local name is ``file`` becomes one record, whatever
its namespace or depth.

JSON::

    {"files": [{"id": "FILE_0001", "size": 10, "checksum_type": "sha256",
                "checksum": "...", "location": "resources/page-001.jpg"}]}

A bare JSON list of file objects is accepted as well.
"""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import Iterator
from typing import Any, Protocol, runtime_checkable
from xml.etree import ElementTree

from pydantic import ValidationError

from depositgate.models.manifest import MANIFEST_PART, ManifestRecord

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("id", "size", "checksum_type", "checksum")
# Byte counts up to 2**64 fit in 20 digits.
_MAX_SIZE_DIGITS = 20


class ManifestParseError(RuntimeError):
    """Raised when a manifest document cannot be turned into records.

    The message is reported to the depositor verbatim.
    """


@runtime_checkable
class ManifestParser(Protocol):
    """Protocol for manifest parsers.

    Implementations return the records in document order and raise
    ``ManifestParseError`` for any malformed document.
    """

    def parse(self, data: bytes) -> list[ManifestRecord]:
        ...


def _local_name(tag: str) -> str:
    """Strip an ElementTree ``{namespace}`` prefix."""
    return tag.rsplit("}", 1)[-1]


class DefaultManifestParser:
    """Parses XML (METS-style ``file`` elements) and JSON manifests."""

    def parse(self, data: bytes) -> list[ManifestRecord]:
        body = data.removeprefix(codecs.BOM_UTF8).lstrip()
        if not body:
            raise ManifestParseError("Manifest document is empty")

        head = body[:1]
        if head == b"<":
            entries = list(self._xml_entries(body))
        elif head in (b"{", b"["):
            entries = self._json_entries(body)
        else:
            raise ManifestParseError(
                "Unrecognized manifest format: expected an XML or JSON document"
            )

        records = self._build_records(entries)
        logger.debug("Parsed manifest with %d records", len(records))
        return records

    # ------------------------------------------------------------------
    # Document shapes
    # ------------------------------------------------------------------

    @staticmethod
    def _xml_entries(body: bytes) -> Iterator[dict[str, Any]]:
        try:
            root = ElementTree.fromstring(body)
        except ElementTree.ParseError as exc:
            raise ManifestParseError(f"Malformed XML manifest: {exc}") from exc

        for element in root.iter():
            if _local_name(element.tag) != "file":
                continue
            attrs = {_local_name(k).upper(): v for k, v in element.attrib.items()}

            location = None
            for child in element:
                if _local_name(child.tag).lower() != "flocat":
                    continue
                for key, value in child.attrib.items():
                    if _local_name(key) == "href":
                        location = value

            yield {
                "id": attrs.get("ID"),
                "size": attrs.get("SIZE"),
                "checksum_type": attrs.get("CHECKSUMTYPE"),
                "checksum": attrs.get("CHECKSUM"),
                "location": location,
            }

    @staticmethod
    def _json_entries(body: bytes) -> list[dict[str, Any]]:
        try:
            document = json.loads(body)
        except (ValueError, RecursionError) as exc:
            raise ManifestParseError(f"Malformed JSON manifest: {exc}") from exc

        if isinstance(document, dict):
            document = document.get("files")
        if not isinstance(document, list):
            raise ManifestParseError(
                "JSON manifest must be a list of files or an object with a 'files' list"
            )

        for index, entry in enumerate(document, start=1):
            if not isinstance(entry, dict):
                raise ManifestParseError(
                    f"Manifest entry {index} must be an object"
                )
        return document

    # ------------------------------------------------------------------
    # Record construction
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_size(raw: Any, index: int) -> int:
        if isinstance(raw, bool):
            raise ManifestParseError(f"Manifest entry {index} has an invalid size: {raw}")
        if isinstance(raw, int):
            size = raw
        elif isinstance(raw, str) and raw.strip().isdecimal():
            if len(raw.strip()) > _MAX_SIZE_DIGITS:
                raise ManifestParseError(
                    f"Manifest entry {index} has an invalid size: too many digits"
                )
            size = int(raw.strip())
        else:
            raise ManifestParseError(f"Manifest entry {index} has an invalid size: {raw}")
        if size < 0:
            raise ManifestParseError(f"Manifest entry {index} has a negative size: {size}")
        return size

    def _build_records(self, entries: list[dict[str, Any]]) -> list[ManifestRecord]:
        records: list[ManifestRecord] = []
        seen: set[str] = set()

        for index, entry in enumerate(entries, start=1):
            missing = [f for f in _REQUIRED_FIELDS if entry.get(f) in (None, "")]
            if missing:
                raise ManifestParseError(
                    f"Manifest entry {index} is missing: {', '.join(missing)}"
                )

            record_id = entry["id"]
            if not isinstance(record_id, str):
                raise ManifestParseError(
                    f"Manifest entry {index} has a non-string id: {record_id!r}"
                )
            if record_id == MANIFEST_PART:
                raise ManifestParseError(
                    f"Manifest object id is reserved: {MANIFEST_PART}"
                )
            if record_id in seen:
                raise ManifestParseError(
                    f"Duplicate object id in manifest: {record_id}"
                )
            seen.add(record_id)

            try:
                record = ManifestRecord(
                    id=record_id,
                    declared_size=self._parse_size(entry["size"], index),
                    checksum_algorithm=str(entry["checksum_type"]),
                    expected_checksum=str(entry["checksum"]),
                    location=entry.get("location"),
                )
            except ValidationError as exc:
                raise ManifestParseError(
                    f"Manifest entry {index} is invalid: {exc.errors()[0]['msg']}"
                ) from exc
            records.append(record)

        return records
