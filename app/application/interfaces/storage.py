"""Storage backend port (DIP). Implementations live in app.infrastructure.external.storage."""

from collections.abc import AsyncIterator
from typing import Protocol

from app.domain.enums import StorageBackend
from app.domain.value_objects.core import Location


class IStorageBackend(Protocol):
    """Uniform store/retrieve/delete contract over one physical backend.

    Every method is driven by async byte streams so a hasher or tee can sit
    between the client and the backend without materializing the payload.
    """

    backend: StorageBackend

    @property
    def is_configured(self) -> bool:
        """False when required credentials or settings are missing."""
        ...

    async def store(
        self,
        object_name: str,
        stream: AsyncIterator[bytes],
        content_type: str,
        original_name: str | None = None,
    ) -> Location:
        """Write the whole stream under object_name; return where it landed.

        Raises StorageConfigurationError without attempting the call when
        unconfigured, StorageUploadError on failure. A failed write leaves
        no partial object behind.
        """
        ...

    async def retrieve(self, location: Location) -> AsyncIterator[bytes]:
        """Open the object and return its byte stream.

        Opening is eager: StorageNotFoundError is raised here, before the
        first chunk, so callers can still answer 404.
        """
        ...

    async def delete(self, location: Location) -> None:
        """Delete the object. Idempotent: a missing object is not an error."""
        ...
