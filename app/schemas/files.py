"""File API schemas."""

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Response for POST /api/upload."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    ext: str = Field(..., description="Extension including the dot, or empty")
    type: str = Field(..., description="Stored content type")
    checksum: str = Field(..., description="MD5 hex of stored bytes, or the client-supplied value")
    key: str = Field(..., description="Deletion key; shown only once")
    origin: str
    private: bool
    storage: str = Field(..., description="Authoritative backend tag (fs, mongodb, blob, r2)")


class DeleteResponse(BaseModel):
    """Response for POST /api/delete."""

    success: bool = True


class ObjectChecksums(BaseModel):
    md5: str


class ObjectInfoResponse(BaseModel):
    """Response for GET /api/object."""

    id: str
    type: str
    date: int = Field(..., description="Upload time, epoch milliseconds")
    size: int
    checksums: ObjectChecksums
    name: str
