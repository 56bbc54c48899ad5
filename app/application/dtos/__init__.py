"""Application DTOs: inputs and results of the file use cases."""

from app.application.dtos.files import (
    BackendFailure,
    DeletionReport,
    DownloadResult,
    PlacementRequest,
    PlacementResult,
    UploadCommand,
    UploadResult,
)

__all__ = [
    "BackendFailure",
    "DeletionReport",
    "DownloadResult",
    "PlacementRequest",
    "PlacementResult",
    "UploadCommand",
    "UploadResult",
]
