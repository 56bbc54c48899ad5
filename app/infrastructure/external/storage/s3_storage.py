"""S3-compatible bucket storage (Cloudflare R2, AWS S3, MinIO)."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.domain.enums import StorageBackend
from app.domain.value_objects.core import BucketLocation, Location
from app.infrastructure.exceptions import (
    StorageConfigurationError,
    StorageDeleteError,
    StorageDownloadError,
    StorageNotFoundError,
    StorageUploadError,
)
from app.shared.utils.streams import DEFAULT_CHUNK_SIZE

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


class _AsyncStreamReader:
    """Blocking file-like view over an async byte stream.

    boto3's managed transfer reads from a worker thread; each ``read`` hops
    back to the event loop for the next chunk. A stream error is raised from
    every later ``read`` so the transfer aborts rather than completing short.
    """

    def __init__(self, stream: AsyncIterator[bytes], loop: asyncio.AbstractEventLoop) -> None:
        self._iterator = stream.__aiter__()
        self._loop = loop
        self._buffer = bytearray()
        self._eof = False
        self._error: Exception | None = None

    def _next_chunk(self) -> bytes | None:
        if self._error is not None:
            raise self._error
        try:
            future = asyncio.run_coroutine_threadsafe(self._anext(), self._loop)
            return future.result()
        except Exception as e:
            self._error = e
            raise

    async def _anext(self) -> bytes | None:
        try:
            return await self._iterator.__anext__()
        except StopAsyncIteration:
            return None

    def read(self, size: int = -1) -> bytes:
        while not self._eof and (size < 0 or len(self._buffer) < size):
            chunk = self._next_chunk()
            if chunk is None:
                self._eof = True
            else:
                self._buffer.extend(chunk)
        if size < 0:
            size = len(self._buffer)
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data


class S3StorageService:
    """S3-compatible storage.

    Uses boto3 (sync) via asyncio.to_thread for async API. R2 needs region
    ``auto`` and path-style addressing. Missing settings are reported before
    any network call.
    """

    backend = StorageBackend.BUCKET

    def __init__(
        self,
        endpoint_url: str | None,
        bucket: str | None,
        access_key: str | None,
        secret_key: str | None,
        region: str = "auto",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        client: Any | None = None,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.bucket = bucket
        self.region = region
        self.chunk_size = chunk_size
        self._access_key = access_key
        self._secret_key = secret_key
        self._client = client

    @property
    def has_credentials(self) -> bool:
        """Endpoint and keys are set; enough to read or delete a recorded object."""
        return bool(self.endpoint_url and self._access_key and self._secret_key)

    @property
    def is_configured(self) -> bool:
        return self.has_credentials and bool(self.bucket)

    def _missing(self, need_bucket: bool) -> str:
        names = {
            "R2_ENDPOINT": self.endpoint_url,
            "R2_ACCESS_KEY_ID": self._access_key,
            "R2_SECRET_ACCESS_KEY": self._secret_key,
        }
        if need_bucket:
            names["R2_BUCKET"] = self.bucket
        return ", ".join(name for name, value in names.items() if not value)

    def _get_client(self, need_bucket: bool = True) -> Any:
        ready = self.is_configured if need_bucket else self.has_credentials
        if not ready:
            raise StorageConfigurationError(self.backend.value, self._missing(need_bucket))
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self.region,
                endpoint_url=self.endpoint_url,
                aws_access_key_id=self._access_key,
                aws_secret_access_key=self._secret_key,
                config=Config(s3={"addressing_style": "path"}),
            )
        return self._client

    @staticmethod
    def _bucket_location(location: Location) -> BucketLocation:
        if not isinstance(location, BucketLocation):
            raise TypeError(f"S3StorageService cannot handle {type(location).__name__}")
        return location

    async def store(
        self,
        object_name: str,
        stream: AsyncIterator[bytes],
        content_type: str,
        original_name: str | None = None,
    ) -> BucketLocation:
        """Stream into ``bucket/object_name`` with a managed (multipart) upload."""
        client = self._get_client()
        reader = _AsyncStreamReader(stream, asyncio.get_running_loop())
        try:
            await asyncio.to_thread(
                client.upload_fileobj,
                reader,
                self.bucket,
                object_name,
                ExtraArgs={"ContentType": content_type},
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageUploadError(self.backend.value, object_name, str(e)) from e
        return BucketLocation(bucket=self.bucket, key=object_name)

    async def retrieve(self, location: Location) -> AsyncIterator[bytes]:
        loc = self._bucket_location(location)
        client = self._get_client(need_bucket=False)
        try:
            resp = await asyncio.to_thread(client.get_object, Bucket=loc.bucket, Key=loc.key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
                raise StorageNotFoundError(self.backend.value, loc.uri) from e
            raise StorageDownloadError(self.backend.value, loc.uri, str(e)) from e
        except BotoCoreError as e:
            raise StorageDownloadError(self.backend.value, loc.uri, str(e)) from e
        return self._read_chunks(resp["Body"])

    async def _read_chunks(self, body: Any) -> AsyncIterator[bytes]:
        try:
            while chunk := await asyncio.to_thread(body.read, self.chunk_size):
                yield chunk
        finally:
            body.close()

    async def delete(self, location: Location) -> None:
        """Delete object. S3 reports success for a missing key."""
        loc = self._bucket_location(location)
        client = self._get_client(need_bucket=False)
        try:
            await asyncio.to_thread(client.delete_object, Bucket=loc.bucket, Key=loc.key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
                return
            raise StorageDeleteError(self.backend.value, loc.uri, str(e)) from e
        except BotoCoreError as e:
            raise StorageDeleteError(self.backend.value, loc.uri, str(e)) from e
