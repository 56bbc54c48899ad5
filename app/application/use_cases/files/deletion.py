"""Best-effort multi-backend deletion, then metadata removal."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping

from app.application.dtos.files import BackendFailure, DeletionReport
from app.application.interfaces.repositories import IStoredObjectRepository
from app.application.interfaces.storage import IStorageBackend
from app.domain.entities.stored_object import StoredObject
from app.domain.enums import StorageBackend
from app.domain.exceptions import (
    MetadataDeletionException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.value_objects.core import Location

logger = logging.getLogger(__name__)


async def _release_one(
    backends: Mapping[StorageBackend, IStorageBackend], location: Location
) -> BackendFailure | None:
    adapter = backends.get(location.backend)
    if adapter is None:
        logger.warning("No %s adapter registered; copy left in place", location.backend.value)
        return BackendFailure(location.backend, "no adapter registered")
    try:
        await adapter.delete(location)
    except Exception as e:
        logger.warning("Failed releasing %s copy: %s", location.backend.value, e)
        return BackendFailure(location.backend, str(e))
    return None


async def release_locations(
    backends: Mapping[StorageBackend, IStorageBackend],
    locations: Iterable[Location],
) -> list[BackendFailure]:
    """Delete every location concurrently; collect failures instead of raising.

    One failing backend never prevents attempts on the others.
    """
    results = await asyncio.gather(*(_release_one(backends, loc) for loc in locations))
    return [r for r in results if r is not None]


class DeletionCoordinator:
    """Releases every copy of an object, then removes its record.

    Backend failures are logged and reported, never raised. Only a failed
    metadata removal is an error, since the bytes may already be gone.
    """

    def __init__(
        self,
        backends: Mapping[StorageBackend, IStorageBackend],
        repo: IStoredObjectRepository,
    ) -> None:
        self.backends = backends
        self.repo = repo

    async def delete(self, obj: StoredObject) -> DeletionReport:
        locations = obj.locations
        failures = await release_locations(self.backends, locations)
        try:
            await self.repo.delete(obj.id)
        except Exception as e:
            logger.error("Metadata removal failed for %s", obj.id, exc_info=True)
            raise MetadataDeletionException(obj.id, str(e)) from e
        if failures:
            logger.warning(
                "Deleted %s with %d copy(ies) left behind: %s",
                obj.id,
                len(failures),
                ", ".join(f.backend.value for f in failures),
            )
        return DeletionReport(
            object_id=obj.id,
            released=len(locations) - len(failures),
            failures=tuple(failures),
        )


class DeleteFileUseCase:
    """Delete an object by its deletion key."""

    def __init__(self, repo: IStoredObjectRepository, coordinator: DeletionCoordinator) -> None:
        self.repo = repo
        self.coordinator = coordinator

    async def execute(self, key: str | None) -> DeletionReport:
        if not key:
            raise ValidationException('Missing query param "key"', field="key")
        obj = await self.repo.get_by_key(key)
        if obj is None:
            raise ResourceNotFoundException("file", key)
        return await self.coordinator.delete(obj)
