"""DTOs for file use cases (no dependency on HTTP or persistence)."""

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import BinaryIO

from app.domain.enums import StorageBackend
from app.domain.value_objects.core import Location


@dataclass(frozen=True)
class UploadCommand:
    """Input for the upload use case, as parsed from the multipart form."""

    file_data: BinaryIO
    filename: str
    content_type: str
    declared_size: int | None = None
    private: bool = False
    password: str | None = None
    storage: str | None = None
    checksum: str | None = None


@dataclass(frozen=True)
class PlacementRequest:
    """Input for the storage router: one stream and what is known about it."""

    object_name: str
    stream: AsyncIterator[bytes]
    content_type: str
    declared_size: int | None = None
    original_name: str | None = None
    explicit_backend: str | None = None
    client_checksum: str | None = None
    optimized: bool = False


@dataclass(frozen=True)
class PlacementResult:
    """Where the bytes landed: authoritative location plus retained copies."""

    location: Location
    checksum: str
    size: int
    replicas: tuple[Location, ...] = field(default_factory=tuple)

    @property
    def backend(self) -> StorageBackend:
        return self.location.backend


@dataclass(frozen=True)
class UploadResult:
    """Upload response payload (origin is added by the HTTP layer)."""

    id: str
    ext: str
    content_type: str
    checksum: str
    key: str
    private: bool
    storage: StorageBackend


@dataclass(frozen=True)
class DownloadResult:
    """Opened object stream plus the headers needed to serve it."""

    stream: AsyncIterator[bytes]
    content_type: str
    filename: str
    size: int


@dataclass(frozen=True)
class BackendFailure:
    """One location that could not be released."""

    backend: StorageBackend
    reason: str


@dataclass(frozen=True)
class DeletionReport:
    """Outcome of a delete: the record is gone; listed copies may remain."""

    object_id: str
    released: int
    failures: tuple[BackendFailure, ...] = field(default_factory=tuple)

    @property
    def clean(self) -> bool:
        return not self.failures
