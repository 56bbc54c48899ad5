"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.memory_repo import (
    InMemoryStoredObjectRepository,
)
from app.infrastructure.persistence.repositories.stored_object_repo import (
    MongoStoredObjectRepository,
)

__all__ = [
    "InMemoryStoredObjectRepository",
    "MongoStoredObjectRepository",
]
