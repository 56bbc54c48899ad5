"""Domain enumerations for the uploader.

Enums represent fixed sets of domain values (e.g. storage backend tags).
"""

from enum import Enum


class StorageBackend(str, Enum):
    """Physical backend holding an object's bytes.

    Values are the tags persisted in metadata records and accepted from
    clients as the explicit ``storage`` selector.
    """

    LOCAL = "fs"
    CHUNKED_STORE = "mongodb"
    BLOB_CDN = "blob"
    BUCKET = "r2"

    @classmethod
    def parse(cls, raw: str) -> "StorageBackend | None":
        """Return the backend for a tag or one of its aliases; None if unknown.

        Args:
            raw: Client- or config-supplied tag (case-insensitive).
        """
        return _ALIASES.get(raw.strip().lower())


_ALIASES: dict[str, StorageBackend] = {
    "fs": StorageBackend.LOCAL,
    "local": StorageBackend.LOCAL,
    "mongodb": StorageBackend.CHUNKED_STORE,
    "gridfs": StorageBackend.CHUNKED_STORE,
    "chunked-store": StorageBackend.CHUNKED_STORE,
    "blob": StorageBackend.BLOB_CDN,
    "blob-cdn": StorageBackend.BLOB_CDN,
    "r2": StorageBackend.BUCKET,
    "s3": StorageBackend.BUCKET,
    "bucket": StorageBackend.BUCKET,
}


class Visibility(str, Enum):
    """Who may read an object."""

    PUBLIC = "public"
    PRIVATE = "private"
