"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready when ready."""

    status: str = Field(default="ok", description="Readiness status")
    metadata: str = Field(..., description="Metadata backend in use (mongodb or memory)")
    storage: list[str] = Field(default_factory=list, description="Configured storage backends")


class ReadinessErrorResponse(BaseModel):
    """Response for GET /health/ready when the metadata store is unreachable (503)."""

    status: str = Field(default="not_ready", description="Readiness status")
    message: str = Field(..., description="Reason (e.g. MongoDB ping failed)")
