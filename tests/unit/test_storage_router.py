"""Tests for StorageRouter placement policy and fallback behavior."""

import asyncio
import hashlib
import threading
import time

import pytest

from app.application.dtos.files import PlacementRequest
from app.application.use_cases.files import StorageRouter
from app.domain.enums import StorageBackend
from app.domain.exceptions import PayloadTooLargeException, StorageBackendException
from app.domain.value_objects.core import (
    BlobLocation,
    BucketLocation,
    ChunkedStoreLocation,
    LocalLocation,
)
from app.infrastructure.exceptions import StorageUploadError
from app.infrastructure.external.storage import S3StorageService
from app.shared.utils.streams import StreamDetachedError, iter_bytes

MAX_BYTES = 1000
DUAL_THRESHOLD = 100

FS = StorageBackend.LOCAL
MONGO = StorageBackend.CHUNKED_STORE
BLOB = StorageBackend.BLOB_CDN
R2 = StorageBackend.BUCKET


def _router(backends, **kwargs) -> StorageRouter:
    return StorageRouter(
        backends=backends,
        max_bytes=MAX_BYTES,
        dual_threshold_bytes=DUAL_THRESHOLD,
        **kwargs,
    )


def _request(payload: bytes, declared: int | None = -1, **kwargs) -> PlacementRequest:
    return PlacementRequest(
        object_name="abc123.bin",
        stream=iter_bytes(payload, 16),
        content_type="application/octet-stream",
        declared_size=len(payload) if declared == -1 else declared,
        original_name="file.bin",
        **kwargs,
    )


def _fail(backend: StorageBackend) -> StorageUploadError:
    return StorageUploadError(backend.value, "abc123.bin", "boom")


class TestSizeLimit:
    """Declared and realized sizes over the maximum answer 413."""

    async def test_declared_size_rejected_before_any_write(self, backends) -> None:
        with pytest.raises(PayloadTooLargeException):
            await _router(backends).place(_request(b"x", declared=MAX_BYTES + 1))
        assert all(b.store_calls == 0 for b in backends.values())

    async def test_realized_size_rejected_when_undeclared(self, backends) -> None:
        backends[BLOB].configured = False
        with pytest.raises(PayloadTooLargeException):
            await _router(backends).place(_request(b"x" * (MAX_BYTES + 1), declared=None))
        assert backends[FS].objects == {}

    async def test_realized_size_rejected_during_dual_write(self, backends) -> None:
        with pytest.raises(PayloadTooLargeException):
            await _router(backends).place(_request(b"x" * (MAX_BYTES + 1), declared=None))

    async def test_exactly_max_is_accepted(self, backends) -> None:
        result = await _router(backends).place(
            _request(b"x" * MAX_BYTES, declared=None, explicit_backend="fs")
        )
        assert result.size == MAX_BYTES


class TestExplicitBackend:
    """An explicit storage tag is honored exactly, with no fallback."""

    async def test_alias_is_accepted(self, backends) -> None:
        result = await _router(backends).place(_request(b"data", explicit_backend="gridfs"))
        assert isinstance(result.location, ChunkedStoreLocation)
        assert result.replicas == ()
        assert backends[FS].store_calls == 0

    async def test_explicit_fs_skips_blob(self, backends) -> None:
        result = await _router(backends).place(_request(b"data", explicit_backend="fs"))
        assert isinstance(result.location, LocalLocation)
        assert backends[BLOB].store_calls == 0

    async def test_unknown_tag_names_it(self, backends) -> None:
        with pytest.raises(StorageBackendException, match="ftp"):
            await _router(backends).place(_request(b"data", explicit_backend="ftp"))

    async def test_unconfigured_backend_fails_loudly(self, backends) -> None:
        backends[R2].configured = False
        with pytest.raises(StorageBackendException, match="r2"):
            await _router(backends).place(_request(b"data", explicit_backend="r2"))
        assert backends[MONGO].store_calls == 0

    async def test_failure_is_not_retried_elsewhere(self, backends) -> None:
        backends[BLOB].fail_store = _fail(BLOB)
        with pytest.raises(StorageBackendException, match="blob"):
            await _router(backends).place(_request(b"data", explicit_backend="blob"))
        assert backends[FS].store_calls == 0


class TestOptimizedImages:
    """Converted images go to the chunked store regardless of size."""

    async def test_optimized_goes_to_mongodb(self, backends) -> None:
        result = await _router(backends).place(_request(b"webp" * 100, optimized=True))
        assert result.backend is MONGO
        assert backends[R2].store_calls == 0


class TestLargeUploads:
    """Above the dual threshold: bucket and chunked store in parallel."""

    async def test_bucket_wins_and_chunked_is_replica(self, backends) -> None:
        payload = b"L" * (DUAL_THRESHOLD + 1)
        result = await _router(backends).place(_request(payload))
        assert isinstance(result.location, BucketLocation)
        assert [r.backend for r in result.replicas] == [MONGO]
        assert backends[R2].objects["abc123.bin"] == payload
        assert backends[MONGO].objects["abc123.bin"] == payload

    async def test_bucket_failure_falls_back_to_chunked(self, backends) -> None:
        backends[R2].fail_store = _fail(R2)
        result = await _router(backends).place(_request(b"L" * (DUAL_THRESHOLD + 1)))
        assert result.backend is MONGO
        assert result.replicas == ()

    async def test_both_failing_names_both(self, backends) -> None:
        backends[R2].fail_store = _fail(R2)
        backends[MONGO].fail_store = _fail(MONGO)
        with pytest.raises(StorageBackendException) as exc_info:
            await _router(backends).place(_request(b"L" * (DUAL_THRESHOLD + 1)))
        assert exc_info.value.details["backends"] == ["r2", "mongodb"]

    async def test_unconfigured_bucket_means_chunked_only(self, backends) -> None:
        backends[R2].configured = False
        result = await _router(backends).place(_request(b"L" * (DUAL_THRESHOLD + 1)))
        assert result.backend is MONGO
        assert backends[R2].store_calls == 0

    async def test_chunked_failure_keeps_bucket_without_replica(self, backends) -> None:
        backends[MONGO].fail_store = _fail(MONGO)
        result = await _router(backends).place(_request(b"L" * (DUAL_THRESHOLD + 1)))
        assert result.backend is R2
        assert result.replicas == ()


class TestSmallUploads:
    """Default path: local filesystem plus an opportunistic blob copy."""

    async def test_blob_wins_and_fs_is_replica(self, backends) -> None:
        result = await _router(backends).place(_request(b"small"))
        assert isinstance(result.location, BlobLocation)
        assert [r.backend for r in result.replicas] == [FS]

    async def test_blob_failure_keeps_fs(self, backends) -> None:
        backends[BLOB].fail_store = _fail(BLOB)
        result = await _router(backends).place(_request(b"small"))
        assert result.backend is FS
        assert result.replicas == ()

    async def test_fs_failure_keeps_blob(self, backends) -> None:
        backends[FS].fail_store = _fail(FS)
        result = await _router(backends).place(_request(b"small"))
        assert result.backend is BLOB

    async def test_both_failing_raises(self, backends) -> None:
        backends[FS].fail_store = _fail(FS)
        backends[BLOB].fail_store = _fail(BLOB)
        with pytest.raises(StorageBackendException, match="fs"):
            await _router(backends).place(_request(b"small"))

    async def test_unconfigured_blob_means_fs_only(self, backends) -> None:
        backends[BLOB].configured = False
        result = await _router(backends).place(_request(b"small"))
        assert result.backend is FS
        assert backends[BLOB].store_calls == 0

    async def test_non_local_default_gets_single_write(self, backends) -> None:
        result = await _router(backends, default_backend=R2).place(_request(b"small"))
        assert result.backend is R2
        assert backends[FS].store_calls == 0

    async def test_local_default_keeps_dual_write(self, backends) -> None:
        result = await _router(backends, default_backend=FS).place(_request(b"small"))
        assert result.backend is BLOB


class TestPlacementResult:
    """Checksum, size and replica retention."""

    async def test_md5_of_stored_bytes(self, backends) -> None:
        payload = b"checksum me"
        result = await _router(backends).place(_request(payload))
        assert result.checksum == hashlib.md5(payload).hexdigest()
        assert result.size == len(payload)

    async def test_client_checksum_is_kept_verbatim(self, backends) -> None:
        result = await _router(backends).place(_request(b"abc", client_checksum="client-value"))
        assert result.checksum == "client-value"

    async def test_replicas_released_when_not_retained(self, backends) -> None:
        result = await _router(backends, retain_fallback_copies=False).place(_request(b"small"))
        assert result.backend is BLOB
        assert result.replicas == ()
        assert len(backends[FS].deleted) == 1
        assert backends[FS].objects == {}


class _SlowS3Client:
    """boto3 stand-in whose managed upload reads slowly and commits only a complete body."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.error: Exception | None = None
        self.done = threading.Event()

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None) -> None:
        data = bytearray()
        try:
            while chunk := fileobj.read(64):
                data.extend(chunk)
                time.sleep(0.02)
        except Exception as e:
            self.error = e
            raise
        else:
            self.objects[(bucket, key)] = bytes(data)
        finally:
            self.done.set()


class TestCancellation:
    """An aborted request never leaves a truncated object behind."""

    async def test_cancelled_dual_write_aborts_bucket_upload(self, backends) -> None:
        client = _SlowS3Client()
        backends[R2] = S3StorageService(
            endpoint_url="https://r2.test",
            bucket="media",
            access_key="key",
            secret_key="secret",
            client=client,
        )
        router = StorageRouter(backends=backends, max_bytes=10_000, dual_threshold_bytes=DUAL_THRESHOLD)
        task = asyncio.create_task(router.place(_request(b"C" * 4000)))
        await asyncio.sleep(0.2)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert await asyncio.to_thread(client.done.wait, 5) is True
        assert client.objects == {}
        assert isinstance(client.error, StreamDetachedError)
        assert "abc123.bin" not in backends[MONGO].objects
