"""Domain value objects (immutable, self-validating)."""

from app.domain.value_objects.core import (
    BlobLocation,
    BucketLocation,
    ChunkedStoreLocation,
    LocalLocation,
    Location,
    PasswordLock,
)

__all__ = [
    "BlobLocation",
    "BucketLocation",
    "ChunkedStoreLocation",
    "LocalLocation",
    "Location",
    "PasswordLock",
]
