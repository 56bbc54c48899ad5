"""Health check endpoints for liveness and readiness probes."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from app.core.config import get_settings
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Metadata store unreachable", "model": ReadinessErrorResponse}},
)
async def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 if ready; 503 if the MongoDB ping fails.

    Lists the storage backends whose settings are present. With the
    in-memory metadata store there is nothing to ping.
    """
    settings = get_settings()
    state = request.app.state
    backends = getattr(state, "backends", {})
    storage = sorted(tag.value for tag, adapter in backends.items() if adapter.is_configured)

    mongo_client = getattr(state, "mongo_client", None)
    if mongo_client is not None:
        try:
            await mongo_client.admin.command("ping")
        except PyMongoError as e:
            logger.warning("Readiness ping failed: %s", e)
            return JSONResponse(
                status_code=503,
                content=ReadinessErrorResponse(
                    status="not_ready",
                    message=f"MongoDB ping failed: {e}",
                ).model_dump(),
            )
    return ReadinessResponse(metadata=settings.metadata_backend, storage=storage)
