"""Repository interfaces (ports) for the application layer.

Protocols define contracts for persistence implementations (DIP). The
metadata store is a single-record key-value contract: no cross-record
transactions.
"""

from __future__ import annotations

from typing import Protocol

from app.domain.entities.stored_object import StoredObject


class IStoredObjectRepository(Protocol):
    """Protocol for the stored object metadata repository."""

    async def get_by_id(self, object_id: str) -> StoredObject | None:
        """Return object by public id."""

    async def get_by_key(self, key: str) -> StoredObject | None:
        """Return object by deletion key."""

    async def exists(self, object_id: str) -> bool:
        """Return True if a record with this public id exists."""

    async def save(self, stored_object: StoredObject) -> None:
        """Insert a new record. Records are never updated."""

    async def delete(self, object_id: str) -> bool:
        """Remove the record. Returns False if it was already gone."""
