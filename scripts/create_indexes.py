"""Create the unique ``id`` and ``key`` indexes on the metadata collection.

Usage:
    uv run python -m scripts.create_indexes
Reads MONGODB_URI, MONGODB_DB and MONGODB_COLLECTION from the environment.
Safe to run repeatedly.
All imports use app.*.
"""

import asyncio
import sys

from app.core.config import get_settings
from app.infrastructure.persistence.database import (
    create_mongo_client,
    ensure_indexes,
    get_database,
)


async def main() -> None:
    settings = get_settings()
    client = create_mongo_client(settings)
    database = get_database(client, settings)
    if client is None or database is None:
        print("MONGODB_URI is not set", file=sys.stderr)
        sys.exit(1)
    try:
        names = await ensure_indexes(database, settings.mongodb_collection)
    finally:
        await client.close()
    print(f"Indexes on {settings.mongodb_db}.{settings.mongodb_collection}: {', '.join(names)}")


if __name__ == "__main__":
    asyncio.run(main())
