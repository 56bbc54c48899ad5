"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (Mongo client,
shared HTTP client, storage registry, metadata repository).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.external.storage import StorageFactory
from app.infrastructure.persistence.database import create_mongo_client, get_database
from app.infrastructure.persistence.repositories import (
    InMemoryStoredObjectRepository,
    MongoStoredObjectRepository,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: Mongo client (if MONGODB_URI), shared HTTP client,
    storage registry, metadata repository. Shutdown closes the HTTP client,
    then the Mongo client.
    """
    settings = get_settings()

    # ---- Startup ----
    mongo_client = create_mongo_client(settings)
    database = get_database(mongo_client, settings)
    app.state.mongo_client = mongo_client

    # Shared HTTP client for blob CDN calls (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=settings.blob_timeout_seconds)

    app.state.backends = StorageFactory.create_backends(
        settings, app.state.http_client, database
    )
    configured = [tag.value for tag, adapter in app.state.backends.items() if adapter.is_configured]
    logger.info("Storage backends configured: %s", ", ".join(configured))

    if settings.metadata_backend == "mongodb" and database is not None:
        app.state.stored_object_repo = MongoStoredObjectRepository(
            database[settings.mongodb_collection],
            bucket_name=settings.mongodb_bucket,
        )
    else:
        logger.warning("Using in-memory metadata store; records are lost on restart")
        app.state.stored_object_repo = InMemoryStoredObjectRepository(
            bucket_name=settings.mongodb_bucket
        )

    yield

    # ---- Shutdown ----
    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("HTTP client closed")

    if getattr(app.state, "mongo_client", None) is not None:
        await app.state.mongo_client.close()
        app.state.mongo_client = None
        logger.info("MongoDB client closed")
