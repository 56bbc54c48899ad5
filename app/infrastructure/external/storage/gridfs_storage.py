"""Chunked object store on MongoDB GridFS (async pymongo driver)."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from bson import ObjectId
from bson.errors import InvalidId
from gridfs import AsyncGridFSBucket
from gridfs.errors import NoFile
from pymongo.errors import PyMongoError

from app.domain.enums import StorageBackend
from app.domain.value_objects.core import ChunkedStoreLocation, Location
from app.infrastructure.exceptions import (
    StorageConfigurationError,
    StorageDeleteError,
    StorageDownloadError,
    StorageNotFoundError,
    StorageUploadError,
)

if TYPE_CHECKING:
    from pymongo.asynchronous.database import AsyncDatabase


class GridFSStorageService:
    """GridFS bucket storage. Bytes are split into chunks by the driver.

    Each file carries ``{originalName, contentType}`` metadata so the bucket
    stays inspectable without the files collection.
    """

    backend = StorageBackend.CHUNKED_STORE

    def __init__(
        self,
        database: AsyncDatabase[Any] | None,
        bucket_name: str = "uploads",
    ) -> None:
        self.bucket_name = bucket_name
        self._bucket = (
            AsyncGridFSBucket(database, bucket_name=bucket_name)
            if database is not None
            else None
        )

    @property
    def is_configured(self) -> bool:
        return self._bucket is not None

    def _require_bucket(self) -> AsyncGridFSBucket:
        if self._bucket is None:
            raise StorageConfigurationError(self.backend.value, "MONGODB_URI")
        return self._bucket

    @staticmethod
    def _object_id(location: Location) -> ObjectId:
        if not isinstance(location, ChunkedStoreLocation):
            raise TypeError(f"GridFSStorageService cannot handle {type(location).__name__}")
        try:
            return ObjectId(location.file_id)
        except (InvalidId, TypeError) as e:
            raise StorageNotFoundError(StorageBackend.CHUNKED_STORE.value, location.file_id) from e

    async def store(
        self,
        object_name: str,
        stream: AsyncIterator[bytes],
        content_type: str,
        original_name: str | None = None,
    ) -> ChunkedStoreLocation:
        """Open an upload session, pipe the stream in, abort on any failure."""
        bucket = self._require_bucket()
        grid_in = bucket.open_upload_stream(
            object_name,
            metadata={
                "originalName": original_name or object_name,
                "contentType": content_type,
            },
        )
        try:
            async for chunk in stream:
                await grid_in.write(chunk)
            await grid_in.close()
        except BaseException as e:
            await grid_in.abort()
            if isinstance(e, PyMongoError):
                raise StorageUploadError(self.backend.value, object_name, str(e)) from e
            raise
        return ChunkedStoreLocation(
            file_id=str(grid_in._id),
            bucket_name=self.bucket_name,
            filename=object_name,
        )

    async def retrieve(self, location: Location) -> AsyncIterator[bytes]:
        bucket = self._require_bucket()
        oid = self._object_id(location)
        try:
            grid_out = await bucket.open_download_stream(oid)
        except NoFile as e:
            raise StorageNotFoundError(self.backend.value, str(oid)) from e
        except PyMongoError as e:
            raise StorageDownloadError(self.backend.value, str(oid), str(e)) from e
        return self._read_chunks(grid_out)

    @staticmethod
    async def _read_chunks(grid_out) -> AsyncIterator[bytes]:
        try:
            while chunk := await grid_out.readchunk():
                yield chunk
        finally:
            await grid_out.close()

    async def delete(self, location: Location) -> None:
        """Delete the file document and its chunks. Missing is not an error."""
        bucket = self._require_bucket()
        oid = self._object_id(location)
        try:
            await bucket.delete(oid)
        except NoFile:
            return
        except PyMongoError as e:
            raise StorageDeleteError(self.backend.value, str(oid), str(e)) from e
