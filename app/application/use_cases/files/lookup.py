"""Object metadata lookup by public id or deletion key."""

from app.application.interfaces.repositories import IStoredObjectRepository
from app.domain.entities.stored_object import StoredObject
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.shared.utils.sanitization import strip_extension


class LookupFileUseCase:
    """Single responsibility: return the record for an id or key."""

    def __init__(self, repo: IStoredObjectRepository) -> None:
        self.repo = repo

    async def execute(self, object_id: str | None = None, key: str | None = None) -> StoredObject:
        """Id wins when both are given. Raises ValidationException when neither is."""
        if object_id:
            object_id = strip_extension(object_id)
            obj = await self.repo.get_by_id(object_id)
            missing = object_id
        elif key:
            obj = await self.repo.get_by_key(key)
            missing = key
        else:
            raise ValidationException('Missing query param "id" or "key"', field="id")
        if obj is None:
            raise ResourceNotFoundException("file", missing)
        return obj
