"""Domain value objects for the uploader.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.

Locations form a tagged union: one frozen dataclass per storage backend,
each carrying only the fields that backend needs to find the bytes again.
"""

from dataclasses import dataclass
from typing import ClassVar

from app.domain.enums import StorageBackend


@dataclass(frozen=True)
class LocalLocation:
    """Object stored on the local filesystem."""

    backend: ClassVar[StorageBackend] = StorageBackend.LOCAL

    path: str

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("Local location requires a path")


@dataclass(frozen=True)
class ChunkedStoreLocation:
    """Object stored in a GridFS bucket (file_id is the ObjectId hex string)."""

    backend: ClassVar[StorageBackend] = StorageBackend.CHUNKED_STORE

    file_id: str
    bucket_name: str
    filename: str

    def __post_init__(self) -> None:
        if not self.file_id:
            raise ValueError("Chunked-store location requires a file_id")

    @property
    def uri(self) -> str:
        return f"gridfs://{self.bucket_name}/{self.filename}"


@dataclass(frozen=True)
class BlobLocation:
    """Object stored on the blob CDN: public url for reads, pathname for deletes."""

    backend: ClassVar[StorageBackend] = StorageBackend.BLOB_CDN

    url: str
    pathname: str

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("Blob location requires a url")


@dataclass(frozen=True)
class BucketLocation:
    """Object stored in an S3-compatible bucket."""

    backend: ClassVar[StorageBackend] = StorageBackend.BUCKET

    bucket: str
    key: str

    def __post_init__(self) -> None:
        if not self.bucket or not self.key:
            raise ValueError("Bucket location requires bucket and key")

    @property
    def uri(self) -> str:
        return f"r2://{self.bucket}/{self.key}"


Location = LocalLocation | ChunkedStoreLocation | BlobLocation | BucketLocation


@dataclass(frozen=True)
class PasswordLock:
    """Salted password hash guarding a private object. Both parts are always set."""

    salt: str
    hash: str

    def __post_init__(self) -> None:
        if not self.salt or not self.hash:
            raise ValueError("Password lock requires both salt and hash")
