"""Storage registry factory: one adapter per backend tag, built from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from app.application.interfaces.storage import IStorageBackend
from app.domain.enums import StorageBackend
from app.infrastructure.external.storage.blob_storage import BlobStorageService
from app.infrastructure.external.storage.gridfs_storage import GridFSStorageService
from app.infrastructure.external.storage.local_storage import LocalStorageService
from app.infrastructure.external.storage.s3_storage import S3StorageService

if TYPE_CHECKING:
    from pymongo.asynchronous.database import AsyncDatabase

    from app.core.config import Settings


def _secret(value: Any) -> str | None:
    return value.get_secret_value() if value is not None else None


class StorageFactory:
    """Factory for the backend registry used by the router and resolver."""

    @staticmethod
    def create_backends(
        settings: "Settings",
        http_client: httpx.AsyncClient,
        database: "AsyncDatabase[Any] | None" = None,
    ) -> dict[StorageBackend, IStorageBackend]:
        """Build every adapter. Unconfigured ones are still registered.

        An unconfigured adapter reports ``is_configured == False`` and raises
        StorageConfigurationError when called, so a record pointing at it
        fails loudly instead of disappearing from the registry.
        """
        return {
            StorageBackend.LOCAL: LocalStorageService(
                files_dir=settings.files_dir,
                chunk_size=settings.stream_chunk_size,
            ),
            StorageBackend.CHUNKED_STORE: GridFSStorageService(
                database=database,
                bucket_name=settings.mongodb_bucket,
            ),
            StorageBackend.BLOB_CDN: BlobStorageService(
                http_client=http_client,
                token=_secret(settings.blob_read_write_token),
                api_url=settings.blob_api_url,
                timeout=settings.blob_timeout_seconds,
            ),
            StorageBackend.BUCKET: S3StorageService(
                endpoint_url=settings.r2_endpoint,
                bucket=settings.r2_bucket,
                access_key=settings.r2_access_key_id,
                secret_key=_secret(settings.r2_secret_access_key),
                chunk_size=settings.stream_chunk_size,
            ),
        }
