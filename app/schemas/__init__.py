"""API request/response schemas (Pydantic)."""

from app.schemas.files import (
    DeleteResponse,
    ObjectChecksums,
    ObjectInfoResponse,
    UploadResponse,
)
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

__all__ = [
    "DeleteResponse",
    "HealthResponse",
    "ObjectChecksums",
    "ObjectInfoResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "UploadResponse",
]
