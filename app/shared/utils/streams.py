"""Async byte-stream helpers: chunk iteration, size guard, and fan-out.

All streams are ``AsyncIterator[bytes]``. Nothing here holds more than a
bounded number of chunks in memory.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import BinaryIO

from app.domain.exceptions import PayloadTooLargeException

DEFAULT_CHUNK_SIZE = 64 * 1024


async def iter_binary_chunks(
    file_data: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """Yield chunks from a blocking file object, reading in a worker thread."""
    while chunk := await asyncio.to_thread(file_data.read, chunk_size):
        yield chunk


async def iter_bytes(
    data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """Yield an in-memory payload in chunks."""
    view = memoryview(data)
    for start in range(0, len(view), chunk_size):
        yield bytes(view[start : start + chunk_size])


class SizeLimitedStream:
    """Pass-through stream that fails once more than ``max_bytes`` have flowed.

    ``exceeded`` stays True after the limit was hit, so callers can report
    413 even if a backend SDK wrapped the exception.
    """

    def __init__(self, source: AsyncIterator[bytes], max_bytes: int) -> None:
        self._source = source
        self.max_bytes = max_bytes
        self.bytes_read = 0
        self.exceeded = False

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        async for chunk in self._source:
            self.bytes_read += len(chunk)
            if self.bytes_read > self.max_bytes:
                self.exceeded = True
                raise PayloadTooLargeException(self.max_bytes, self.bytes_read)
            yield chunk


_END = object()
_DETACHED = object()


class StreamDetachedError(RuntimeError):
    """Raised when a tee branch is read after it was detached before its end."""


class _Failure:
    __slots__ = ("error",)

    def __init__(self, error: BaseException) -> None:
        self.error = error


class TeeBranch:
    """One consumer side of a StreamTee.

    Iterate it like any byte stream. Call ``aclose()`` when the consumer is
    done (success or failure) so the tee stops feeding it. Reading a branch
    that was detached before its end raises StreamDetachedError.
    """

    def __init__(self, tee: StreamTee, maxsize: int) -> None:
        self._tee = tee
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=maxsize)
        self.detached = False
        self._finished = False

    def __aiter__(self) -> TeeBranch:
        return self

    async def __anext__(self) -> bytes:
        if self._finished:
            raise StopAsyncIteration
        if self.detached:
            raise StreamDetachedError("stream detached before end of data")
        self._tee._ensure_started()
        item = await self._queue.get()
        if item is _END:
            self._finished = True
            raise StopAsyncIteration
        if item is _DETACHED or self.detached:
            raise StreamDetachedError("stream detached before end of data")
        if isinstance(item, _Failure):
            self._finished = True
            raise item.error
        return item  # type: ignore[return-value]

    async def _put(self, item: object) -> None:
        if not self.detached:
            await self._queue.put(item)

    async def aclose(self) -> None:
        """Detach this branch; unblocks the pump if it waits on this queue.

        A reader still waiting on the branch is woken with StreamDetachedError.
        An empty queue means the pump cannot be blocked on it, so the marker
        always fits.
        """
        if self.detached:
            return
        self.detached = True
        reader_may_wait = self._queue.empty()
        while not self._queue.empty():
            self._queue.get_nowait()
        if reader_may_wait and not self._finished:
            self._queue.put_nowait(_DETACHED)
        self._tee._on_detach()


class StreamTee:
    """Duplicate one byte stream into several independently consumed branches.

    A single pump task reads the source and puts each chunk into every live
    branch queue. Queues are bounded, so the fastest consumer can be at most
    ``max_buffered_chunks`` ahead of the slowest. A detached branch is
    skipped; when all branches are detached the pump stops reading.
    """

    def __init__(
        self,
        source: AsyncIterator[bytes],
        branches: int = 2,
        max_buffered_chunks: int = 4,
    ) -> None:
        if branches < 1:
            raise ValueError("StreamTee needs at least one branch")
        self._source = source
        self.branches = [TeeBranch(self, max_buffered_chunks) for _ in range(branches)]
        self._pump_task: asyncio.Task[None] | None = None

    def _ensure_started(self) -> None:
        if self._pump_task is None:
            self._pump_task = asyncio.create_task(self._pump())

    def _live(self) -> list[TeeBranch]:
        return [b for b in self.branches if not b.detached]

    def _on_detach(self) -> None:
        if not self._live() and self._pump_task is not None and not self._pump_task.done():
            self._pump_task.cancel()

    async def _pump(self) -> None:
        try:
            async for chunk in self._source:
                live = self._live()
                if not live:
                    return
                for branch in live:
                    await branch._put(chunk)
        except Exception as e:
            for branch in self._live():
                await branch._put(_Failure(e))
            return
        for branch in self._live():
            await branch._put(_END)

    async def aclose(self) -> None:
        """Detach every branch and wait for the pump to stop."""
        for branch in self.branches:
            await branch.aclose()
        if self._pump_task is not None:
            await asyncio.gather(self._pump_task, return_exceptions=True)
