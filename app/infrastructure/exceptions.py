"""Infrastructure exceptions for storage and external operations.

Storage errors extend UploaderException so presentation can map them
to HTTP responses consistently. Every storage error carries the backend
tag it came from.
"""

from app.domain.exceptions import UploaderException


class StorageException(UploaderException):
    """Base exception for storage operations."""

    def __init__(
        self,
        message: str,
        error_code: str,
        backend: str,
        details: dict | None = None,
    ) -> None:
        self.backend = backend
        super().__init__(message, error_code, {"backend": backend, **(details or {})})


class StorageNotFoundError(StorageException):
    """Object not found in storage."""

    def __init__(self, backend: str, locator: str) -> None:
        super().__init__(
            "File not found",
            "STORAGE_NOT_FOUND",
            backend,
            {"locator": locator},
        )


class StorageConfigurationError(StorageException):
    """Backend credentials or settings are missing; the call was not attempted."""

    def __init__(self, backend: str, missing: str) -> None:
        super().__init__(
            f"Missing {backend} configuration: {missing}",
            "STORAGE_CONFIGURATION_ERROR",
            backend,
            {"missing": missing},
        )


class StorageUploadError(StorageException):
    """Writing an object failed."""

    def __init__(self, backend: str, object_name: str, reason: str) -> None:
        super().__init__(
            f"{backend} upload failed: {reason}",
            "STORAGE_UPLOAD_ERROR",
            backend,
            {"object_name": object_name, "reason": reason},
        )


class StorageDownloadError(StorageException):
    """Reading an object failed for a reason other than absence."""

    def __init__(self, backend: str, locator: str, reason: str) -> None:
        super().__init__(
            f"{backend} download failed: {reason}",
            "STORAGE_DOWNLOAD_ERROR",
            backend,
            {"locator": locator, "reason": reason},
        )


class StorageDeleteError(StorageException):
    """Deleting an object failed (a missing object is not an error)."""

    def __init__(self, backend: str, locator: str, reason: str) -> None:
        super().__init__(
            f"{backend} delete failed: {reason}",
            "STORAGE_DELETE_ERROR",
            backend,
            {"locator": locator, "reason": reason},
        )


class StoragePermissionError(StorageException):
    """Path escapes the storage root."""

    def __init__(self, backend: str, locator: str, operation: str) -> None:
        super().__init__(
            f"Permission denied for {operation} on {locator}",
            "STORAGE_PERMISSION_ERROR",
            backend,
            {"locator": locator, "operation": operation},
        )
