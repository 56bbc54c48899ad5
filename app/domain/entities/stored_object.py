"""Stored object domain entity.

One record per uploaded file, independent of persistence. Immutable after
creation: the only lifecycle transition is full deletion.
"""

from dataclasses import dataclass, field
from datetime import datetime

from app.domain.enums import StorageBackend, Visibility
from app.domain.exceptions import ValidationException
from app.domain.value_objects.core import Location, PasswordLock


@dataclass(frozen=True)
class StoredObject:
    """Domain entity for an uploaded file.

    ``location`` is the authoritative copy used for retrieval. ``replicas``
    are other copies of the same bytes left by dual writes; they are only
    consulted on deletion.
    """

    id: str
    key: str
    name: str
    ext: str
    content_type: str
    size: int
    checksum: str
    created_at: datetime
    location: Location
    replicas: tuple[Location, ...] = field(default_factory=tuple)
    password: PasswordLock | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate stored object rules. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("File id is required", field="id")
        if not self.key:
            raise ValidationException("Deletion key is required", field="key")
        if self.size < 0:
            raise ValidationException("Size must not be negative", field="size")
        if any(r == self.location for r in self.replicas):
            raise ValidationException(
                "Replica duplicates the authoritative location", field="replicas"
            )

    @property
    def backend(self) -> StorageBackend:
        """Tag of the authoritative backend."""
        return self.location.backend

    @property
    def is_private(self) -> bool:
        return self.password is not None

    @property
    def visibility(self) -> Visibility:
        return Visibility.PRIVATE if self.is_private else Visibility.PUBLIC

    @property
    def locations(self) -> tuple[Location, ...]:
        """Every location holding this object's bytes, authoritative first."""
        return (self.location, *self.replicas)

    @property
    def download_name(self) -> str:
        return self.name or f"{self.id}{self.ext}"
