"""Streaming content hash: digest bytes as they flow to a backend."""

from __future__ import annotations

import hashlib
from collections.abc import AsyncIterator


class StreamingHasher:
    """Pass-through stream that computes a digest of every chunk it yields.

    Iterate it in place of the source; the downstream writer sees identical
    bytes. Only one chunk is held at a time. ``hexdigest()`` is available
    once the source is exhausted.
    """

    def __init__(self, source: AsyncIterator[bytes], algorithm: str = "md5") -> None:
        self._source = source
        self._hash = hashlib.new(algorithm)
        self.algorithm = algorithm
        self.bytes_hashed = 0
        self.finished = False
        self._started = False

    def __aiter__(self) -> AsyncIterator[bytes]:
        if self._started:
            raise RuntimeError("StreamingHasher can only be consumed once")
        self._started = True
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        async for chunk in self._source:
            self._hash.update(chunk)
            self.bytes_hashed += len(chunk)
            yield chunk
        self.finished = True

    def hexdigest(self) -> str:
        """Final digest. Raises RuntimeError if the stream was not fully consumed."""
        if not self.finished:
            raise RuntimeError("Digest requested before the stream was fully consumed")
        return self._hash.hexdigest()
