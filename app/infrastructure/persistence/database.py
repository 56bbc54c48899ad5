"""Persistence: async MongoDB client for the metadata store and GridFS.

The client is created by the lifespan (not at import time) so importing
the app does not trigger Settings validation or a connection attempt.
When metadata_backend is 'memory' no client is created unless MONGODB_URI
is set, in which case GridFS is still available to the storage layer.
"""

import logging
from typing import Any

from pymongo import ASCENDING, AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from app.core.config import Settings

logger = logging.getLogger(__name__)


def create_mongo_client(settings: Settings) -> AsyncMongoClient[Any] | None:
    """Return a client for MONGODB_URI, or None when it is not set.

    The driver connects lazily on the first operation.
    """
    if not settings.mongodb_uri:
        return None
    return AsyncMongoClient(settings.mongodb_uri, appname=settings.app_name)


def get_database(client: AsyncMongoClient[Any] | None, settings: Settings) -> AsyncDatabase[Any] | None:
    """Return the configured database handle, or None without a client."""
    if client is None:
        return None
    return client[settings.mongodb_db]


async def ensure_indexes(database: AsyncDatabase[Any], collection_name: str = "files") -> list[str]:
    """Create the unique ``id`` and ``key`` indexes. Idempotent."""
    coll = database[collection_name]
    names = [
        await coll.create_index([("id", ASCENDING)], unique=True, name="id_unique"),
        await coll.create_index([("key", ASCENDING)], unique=True, name="key_unique"),
    ]
    logger.info("Indexes ensured on %s: %s", collection_name, ", ".join(names))
    return names
