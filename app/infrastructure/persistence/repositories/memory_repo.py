"""In-memory stored object repository for development and tests.

Records live in the process and are lost on restart. Documents go through
the same codec as MongoDB so both repositories accept the same records.
"""

from __future__ import annotations

import asyncio
from typing import Any

from app.domain.entities.stored_object import StoredObject
from app.infrastructure.persistence.documents import from_document, to_document


class InMemoryStoredObjectRepository:
    """Dict-backed repository. Same contract as MongoStoredObjectRepository."""

    def __init__(self, bucket_name: str = "uploads") -> None:
        self._docs: dict[str, dict[str, Any]] = {}
        self._bucket_name = bucket_name
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._docs)

    async def get_by_id(self, object_id: str) -> StoredObject | None:
        doc = self._docs.get(object_id)
        return from_document(doc, self._bucket_name) if doc else None

    async def get_by_key(self, key: str) -> StoredObject | None:
        for doc in self._docs.values():
            if doc["key"] == key:
                return from_document(doc, self._bucket_name)
        return None

    async def exists(self, object_id: str) -> bool:
        return object_id in self._docs

    async def save(self, stored_object: StoredObject) -> None:
        """Insert; duplicate id or key raises ValueError like a unique index would."""
        doc = to_document(stored_object)
        async with self._lock:
            if doc["id"] in self._docs:
                raise ValueError(f"Duplicate id: {doc['id']}")
            if any(d["key"] == doc["key"] for d in self._docs.values()):
                raise ValueError("Duplicate key")
            self._docs[doc["id"]] = doc

    async def delete(self, object_id: str) -> bool:
        async with self._lock:
            return self._docs.pop(object_id, None) is not None
