"""Single-pass stream verification.

An uploaded stream is read exactly once.  ``TeeReader`` forwards every
chunk it reads to a set of sinks (a byte counter and a hashlib object), so
byte count and checksum are known at end-of-stream without ever holding
more than one chunk in memory.
"""

from __future__ import annotations

import logging
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from depositgate.core.hasher import new_hasher, resolve_algorithm
from depositgate.models.deposit import ReadableStream

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class StreamReadError(RuntimeError):
    """Raised when the underlying stream fails while being read."""


class ChunkSink(Protocol):
    """Receives every chunk read through a ``TeeReader``.

    hashlib objects satisfy this protocol as-is.
    """

    def update(self, chunk: bytes, /) -> None:
        ...


class ByteCounter:
    """Running byte count over the chunks it is fed."""

    def __init__(self) -> None:
        self.byte_count = 0

    def update(self, chunk: bytes, /) -> None:
        self.byte_count += len(chunk)


class TeeReader:
    """Read-through stream decorator that fans each chunk out to sinks.

    Parameters
    ----------
    source:
        The stream to read from.
    sinks:
        Objects with an ``update(bytes)`` method, fed in order.
    """

    def __init__(self, source: ReadableStream, *sinks: ChunkSink) -> None:
        self._source = source
        self._sinks = sinks
        self.exhausted = False

    def read(self, size: int = -1, /) -> bytes:
        try:
            chunk = self._source.read(size)
        except OSError as exc:
            raise StreamReadError(str(exc) or type(exc).__name__) from exc
        if not chunk:
            self.exhausted = True
            return b""
        for sink in self._sinks:
            sink.update(chunk)
        return chunk

    def drain(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """Read the source to exhaustion, discarding the data."""
        while self.read(chunk_size):
            pass


class StreamDigest(BaseModel):
    """What a single pass over a stream measured."""

    model_config = ConfigDict(frozen=True)

    algorithm: str  # hashlib name
    byte_count: int
    checksum: str  # lowercase hex


class StreamVerifier:
    """Measures byte count and checksum of a stream in one pass.

    The verifier holds no per-stream state and can be shared between
    concurrent validation runs.

    Parameters
    ----------
    chunk_size:
        Maximum number of bytes requested from the stream per read.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    def measure(self, stream: ReadableStream, algorithm: str) -> StreamDigest:
        """Read *stream* once and return its byte count and hex digest.

        The algorithm is resolved before the first read, so an unsupported
        algorithm leaves the stream untouched.

        Raises
        ------
        UnsupportedAlgorithmError
            If *algorithm* is not recognized.
        StreamReadError
            If reading the stream fails part way.
        """
        hashlib_name = resolve_algorithm(algorithm)
        counter = ByteCounter()
        hasher = new_hasher(hashlib_name)

        TeeReader(stream, counter, hasher).drain(self.chunk_size)
        logger.debug(
            "Measured %d bytes with %s", counter.byte_count, hashlib_name
        )

        return StreamDigest(
            algorithm=hashlib_name,
            byte_count=counter.byte_count,
            checksum=hasher.hexdigest().lower(),
        )
