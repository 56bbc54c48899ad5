"""MongoDB-backed stored object repository (implements IStoredObjectRepository)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from app.domain.entities.stored_object import StoredObject
from app.infrastructure.persistence.documents import from_document, to_document

if TYPE_CHECKING:
    from pymongo.asynchronous.collection import AsyncCollection

_PROJECTION = {"_id": False}


class MongoStoredObjectRepository:
    """Stored object records in the ``files`` collection, one document per object.

    Lookups by ``id`` and ``key`` rely on the unique indexes created by
    scripts/create_indexes.py.
    """

    def __init__(self, collection: AsyncCollection[Any], bucket_name: str = "uploads") -> None:
        self._coll = collection
        self._bucket_name = bucket_name

    async def get_by_id(self, object_id: str) -> StoredObject | None:
        """Return object by public id."""
        doc = await self._coll.find_one({"id": object_id}, _PROJECTION)
        return from_document(doc, self._bucket_name) if doc else None

    async def get_by_key(self, key: str) -> StoredObject | None:
        """Return object by deletion key."""
        doc = await self._coll.find_one({"key": key}, _PROJECTION)
        return from_document(doc, self._bucket_name) if doc else None

    async def exists(self, object_id: str) -> bool:
        return await self._coll.count_documents({"id": object_id}, limit=1) > 0

    async def save(self, stored_object: StoredObject) -> None:
        await self._coll.insert_one(to_document(stored_object))

    async def delete(self, object_id: str) -> bool:
        result = await self._coll.delete_one({"id": object_id})
        return result.deleted_count > 0
