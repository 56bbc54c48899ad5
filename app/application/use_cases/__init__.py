"""Application use cases: one entry point per workflow."""

from app.application.use_cases.files import (
    DeleteFileUseCase,
    DownloadFileUseCase,
    LookupFileUseCase,
    UploadFileUseCase,
)

__all__ = [
    "DeleteFileUseCase",
    "DownloadFileUseCase",
    "LookupFileUseCase",
    "UploadFileUseCase",
]
