"""Storage placement: pick backend(s) for an upload and write with fallback.

Policy, first match wins:

1. Declared size over the limit is rejected before any write; the realized
   size is guarded while streaming.
2. An explicit backend is honored exactly. Any failure is surfaced.
3. Optimized images go to the chunked store.
4. Large uploads go to the bucket and the chunked store at once; the
   bucket copy wins when it succeeds.
5. A configured non-local default backend gets a single write.
6. Everything else goes to the local filesystem, with an opportunistic
   blob CDN copy that wins when it succeeds.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping, Sequence

from app.application.dtos.files import PlacementRequest, PlacementResult
from app.application.interfaces.storage import IStorageBackend
from app.application.services.hash_service import StreamingHasher
from app.application.use_cases.files.deletion import release_locations
from app.domain.enums import StorageBackend
from app.domain.exceptions import PayloadTooLargeException, StorageBackendException
from app.domain.value_objects.core import Location
from app.shared.utils.streams import SizeLimitedStream, StreamTee

logger = logging.getLogger(__name__)

_Outcome = Location | BaseException


class StorageRouter:
    """Executes the placement policy against a registry of backend adapters."""

    def __init__(
        self,
        backends: Mapping[StorageBackend, IStorageBackend],
        max_bytes: int,
        dual_threshold_bytes: int,
        default_backend: StorageBackend | None = None,
        retain_fallback_copies: bool = True,
        tee_buffer_chunks: int = 4,
    ) -> None:
        self.backends = backends
        self.max_bytes = max_bytes
        self.dual_threshold_bytes = dual_threshold_bytes
        self.default_backend = default_backend
        self.retain_fallback_copies = retain_fallback_copies
        self.tee_buffer_chunks = tee_buffer_chunks

    async def place(self, request: PlacementRequest) -> PlacementResult:
        """Write the request's stream and report where it landed.

        Raises:
            PayloadTooLargeException: declared or realized size over the limit.
            StorageBackendException: the backend(s) that had to succeed failed.
        """
        if request.declared_size is not None and request.declared_size > self.max_bytes:
            raise PayloadTooLargeException(self.max_bytes, request.declared_size)

        limited = SizeLimitedStream(request.stream, self.max_bytes)
        hasher = None if request.client_checksum else StreamingHasher(limited)
        source = hasher if hasher is not None else limited

        try:
            location, extras = await self._dispatch(request, source)
        except PayloadTooLargeException:
            raise
        except Exception as e:
            if limited.exceeded:
                raise PayloadTooLargeException(self.max_bytes, limited.bytes_read) from e
            raise

        checksum = request.client_checksum or hasher.hexdigest()
        replicas = tuple(extras)
        if replicas and not self.retain_fallback_copies:
            await release_locations(self.backends, replicas)
            replicas = ()
        logger.info(
            "Stored %s on %s (%d bytes%s)",
            request.object_name,
            location.backend.value,
            limited.bytes_read,
            f", replicas: {', '.join(r.backend.value for r in replicas)}" if replicas else "",
        )
        return PlacementResult(
            location=location,
            checksum=checksum,
            size=limited.bytes_read,
            replicas=replicas,
        )

    async def _dispatch(
        self, request: PlacementRequest, source: AsyncIterator[bytes]
    ) -> tuple[Location, list[Location]]:
        if request.explicit_backend:
            backend = StorageBackend.parse(request.explicit_backend)
            if backend is None:
                raise StorageBackendException(
                    [request.explicit_backend], "unknown storage backend"
                )
            return await self._write_one(backend, request, source), []
        if request.optimized:
            return await self._write_one(StorageBackend.CHUNKED_STORE, request, source), []
        if (
            request.declared_size is not None
            and request.declared_size > self.dual_threshold_bytes
        ):
            return await self._write_large(request, source)
        if self.default_backend is not None and self.default_backend is not StorageBackend.LOCAL:
            return await self._write_one(self.default_backend, request, source), []
        return await self._write_small(request, source)

    async def _store(
        self,
        backend: StorageBackend,
        request: PlacementRequest,
        stream: AsyncIterator[bytes],
    ) -> Location:
        adapter = self.backends.get(backend)
        if adapter is None:
            raise StorageBackendException([backend.value], "backend not available")
        return await adapter.store(
            request.object_name,
            stream,
            request.content_type,
            request.original_name,
        )

    async def _write_one(
        self,
        backend: StorageBackend,
        request: PlacementRequest,
        source: AsyncIterator[bytes],
    ) -> Location:
        try:
            return await self._store(backend, request, source)
        except (PayloadTooLargeException, StorageBackendException):
            raise
        except Exception as e:
            raise StorageBackendException([backend.value], str(e)) from e

    async def _write_concurrently(
        self,
        backends: Sequence[StorageBackend],
        request: PlacementRequest,
        source: AsyncIterator[bytes],
    ) -> list[_Outcome]:
        """Run one store per backend over a tee of source; never raises for a store failure."""
        tee = StreamTee(source, branches=len(backends), max_buffered_chunks=self.tee_buffer_chunks)

        async def _run(backend: StorageBackend, branch: AsyncIterator[bytes]) -> Location:
            try:
                return await self._store(backend, request, branch)
            finally:
                await branch.aclose()

        try:
            return await asyncio.gather(
                *(_run(b, branch) for b, branch in zip(backends, tee.branches)),
                return_exceptions=True,
            )
        finally:
            await tee.aclose()

    async def _write_large(
        self, request: PlacementRequest, source: AsyncIterator[bytes]
    ) -> tuple[Location, list[Location]]:
        bucket = self.backends.get(StorageBackend.BUCKET)
        if bucket is None or not bucket.is_configured:
            logger.info("Bucket not configured; %s goes to the chunked store only", request.object_name)
            return await self._write_one(StorageBackend.CHUNKED_STORE, request, source), []

        bucket_result, chunked_result = await self._write_concurrently(
            [StorageBackend.BUCKET, StorageBackend.CHUNKED_STORE], request, source
        )
        if not isinstance(bucket_result, BaseException):
            if isinstance(chunked_result, BaseException):
                logger.warning("mongodb fallback copy failed for %s: %s", request.object_name, chunked_result)
                return bucket_result, []
            return bucket_result, [chunked_result]

        logger.warning("r2 upload failed for %s, falling back to mongodb: %s", request.object_name, bucket_result)
        if not isinstance(chunked_result, BaseException):
            return chunked_result, []
        raise StorageBackendException(
            [StorageBackend.BUCKET.value, StorageBackend.CHUNKED_STORE.value],
            f"{bucket_result}; {chunked_result}",
        ) from chunked_result

    async def _write_small(
        self, request: PlacementRequest, source: AsyncIterator[bytes]
    ) -> tuple[Location, list[Location]]:
        blob = self.backends.get(StorageBackend.BLOB_CDN)
        if blob is None or not blob.is_configured:
            return await self._write_one(StorageBackend.LOCAL, request, source), []

        local_result, blob_result = await self._write_concurrently(
            [StorageBackend.LOCAL, StorageBackend.BLOB_CDN], request, source
        )
        if isinstance(blob_result, BaseException):
            logger.warning("blob upload failed for %s (using fs only): %s", request.object_name, blob_result)
            if isinstance(local_result, BaseException):
                raise StorageBackendException(
                    [StorageBackend.LOCAL.value], str(local_result)
                ) from local_result
            return local_result, []
        if isinstance(local_result, BaseException):
            logger.warning("fs write failed for %s; blob copy is authoritative: %s", request.object_name, local_result)
            return blob_result, []
        return blob_result, [local_result]
