"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import StoredObject
from app.domain.enums import StorageBackend, Visibility
from app.domain.exceptions import (
    AuthenticationException,
    ForbiddenException,
    MetadataDeletionException,
    PayloadTooLargeException,
    ResourceNotFoundException,
    StorageBackendException,
    UploaderException,
    ValidationException,
)
from app.domain.value_objects import (
    BlobLocation,
    BucketLocation,
    ChunkedStoreLocation,
    LocalLocation,
    Location,
    PasswordLock,
)

__all__ = [
    # Entities
    "StoredObject",
    # Enums
    "StorageBackend",
    "Visibility",
    # Exceptions
    "AuthenticationException",
    "ForbiddenException",
    "MetadataDeletionException",
    "PayloadTooLargeException",
    "ResourceNotFoundException",
    "StorageBackendException",
    "UploaderException",
    "ValidationException",
    # Value objects
    "BlobLocation",
    "BucketLocation",
    "ChunkedStoreLocation",
    "LocalLocation",
    "Location",
    "PasswordLock",
]
