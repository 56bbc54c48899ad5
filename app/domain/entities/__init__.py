"""Domain entities and aggregates.

Pure domain models; no persistence concerns.
"""

from app.domain.entities.stored_object import StoredObject

__all__ = [
    "StoredObject",
]
