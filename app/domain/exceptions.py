"""Domain exceptions for the uploader.

Defines domain-level exceptions that represent rule violations. These
exceptions are independent of infrastructure concerns. Presentation layer
maps them to HTTP responses in exception handlers.
"""

from typing import Any


class UploaderException(Exception):
    """Base exception for all uploader errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(UploaderException):
    """Raised when input validation fails (e.g. missing field or password)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(UploaderException):
    """Raised when the API token is missing or wrong."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class ForbiddenException(UploaderException):
    """Raised when a private object is requested without the right password."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, "FORBIDDEN")


class ResourceNotFoundException(UploaderException):
    """Raised when a requested object is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'file').
            resource_id: The id or key that was not found.
        """
        super().__init__(
            "File not found" if resource_type == "file" else f"{resource_type} not found",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class PayloadTooLargeException(UploaderException):
    """Raised when an upload is larger than the configured maximum."""

    def __init__(self, max_bytes: int, actual: int | None = None) -> None:
        details: dict[str, Any] = {"max_bytes": max_bytes}
        if actual is not None:
            details["size"] = actual
        super().__init__(
            f"File too large (max {max_bytes} bytes)",
            "PAYLOAD_TOO_LARGE",
            details,
        )


class StorageBackendException(UploaderException):
    """Raised when the backend(s) an upload was routed to all failed.

    The message names every backend that was tried so operators can tell
    an unconfigured explicit request apart from a failed fallback chain.
    """

    def __init__(self, backends: list[str], reason: str) -> None:
        """Initialize with the attempted backends and the last failure reason.

        Args:
            backends: Backend tags tried, in order (e.g. ['r2', 'mongodb']).
            reason: Human-readable reason from the failing adapter(s).
        """
        names = " & ".join(backends) if backends else "storage"
        super().__init__(
            f"Upload failed ({names}): {reason}",
            "STORAGE_BACKEND_ERROR",
            {"backends": list(backends), "reason": reason},
        )


class MetadataDeletionException(UploaderException):
    """Raised when backend bytes were released but the metadata record could not be removed.

    The only deletion failure surfaced to callers; the record needs manual
    follow-up because its bytes may already be gone.
    """

    def __init__(self, object_id: str, reason: str) -> None:
        super().__init__(
            "Failed deleting file",
            "METADATA_DELETE_ERROR",
            {"id": object_id, "reason": reason},
        )
