"""Router aggregation.

``api_router`` is mounted under ``/api``. ``public_router`` is mounted at
the root and must be included last: its ``/{file_id}`` route matches any
single path segment.
"""

from fastapi import APIRouter

from app.api.endpoints import delete, files, health, objects, sharex, upload

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(upload.router, prefix="/upload", tags=["files"])
api_router.include_router(delete.router, prefix="/delete", tags=["files"])
api_router.include_router(objects.router, prefix="/object", tags=["files"])

public_router = APIRouter()

public_router.include_router(sharex.router, tags=["sharex"])
public_router.include_router(files.router, tags=["downloads"])
