"""Storage adapters: local filesystem, GridFS, Vercel Blob, S3-compatible bucket.

StorageFactory builds the registry keyed by backend tag. Every adapter
implements IStorageBackend (store, retrieve, delete, is_configured).
"""

from app.infrastructure.external.storage.blob_storage import BlobStorageService
from app.infrastructure.external.storage.factory import StorageFactory
from app.infrastructure.external.storage.gridfs_storage import GridFSStorageService
from app.infrastructure.external.storage.local_storage import LocalStorageService
from app.infrastructure.external.storage.s3_storage import S3StorageService

__all__ = [
    "BlobStorageService",
    "GridFSStorageService",
    "LocalStorageService",
    "S3StorageService",
    "StorageFactory",
]
