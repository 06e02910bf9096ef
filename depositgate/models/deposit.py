"""Uploaded parts of a deposit.

Parts carry live byte streams, so unlike the other models they are plain
classes rather than frozen pydantic models.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from depositgate.models.manifest import MANIFEST_PART


@runtime_checkable
class ReadableStream(Protocol):
    """Anything with a ``read(size) -> bytes`` method.

    Open files, ``io.BytesIO`` and the spooled files behind multipart
    uploads all satisfy this protocol.
    """

    def read(self, size: int = -1, /) -> bytes:
        ...


class UploadedPart:
    """One submitted stream under a part name."""

    __slots__ = ("id", "stream")

    def __init__(self, id: str, stream: ReadableStream) -> None:
        self.id = id
        self.stream = stream

    def __repr__(self) -> str:
        return f"<UploadedPart id={self.id!r}>"


class UploadBundle:
    """Ordered multimap of part name -> submitted streams.

    Part names keep the order in which they were first submitted, and
    streams under the same name keep submission order.  More than one
    stream under a name is a duplicate upload; the bundle records it
    rather than rejecting it so that the integrity phase can report it.
    """

    def __init__(self, parts: list[UploadedPart] | None = None) -> None:
        self._parts: dict[str, list[UploadedPart]] = {}
        for part in parts or []:
            self._parts.setdefault(part.id, []).append(part)

    @classmethod
    def from_streams(cls, streams: dict[str, ReadableStream]) -> UploadBundle:
        """Build a bundle with exactly one stream per part name."""
        return cls([UploadedPart(name, stream) for name, stream in streams.items()])

    def add(self, id: str, stream: ReadableStream) -> UploadedPart:
        part = UploadedPart(id, stream)
        self._parts.setdefault(id, []).append(part)
        return part

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def __contains__(self, id: object) -> bool:
        return id in self._parts

    def __iter__(self) -> Iterator[str]:
        return iter(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def parts(self, id: str) -> list[UploadedPart]:
        """Return every stream submitted under *id* (empty if none)."""
        return list(self._parts.get(id, []))

    @property
    def part_ids(self) -> list[str]:
        """All part names except the manifest, in submission order."""
        return [name for name in self._parts if name != MANIFEST_PART]

    @property
    def manifest_parts(self) -> list[UploadedPart]:
        return self.parts(MANIFEST_PART)
