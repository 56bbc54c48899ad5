"""File use cases: upload, download, lookup, delete."""

from app.application.use_cases.files.deletion import (
    DeleteFileUseCase,
    DeletionCoordinator,
    release_locations,
)
from app.application.use_cases.files.lookup import LookupFileUseCase
from app.application.use_cases.files.retrieval import DownloadFileUseCase, RetrievalResolver
from app.application.use_cases.files.storage_router import StorageRouter
from app.application.use_cases.files.upload import UploadFileUseCase

__all__ = [
    "DeleteFileUseCase",
    "DeletionCoordinator",
    "DownloadFileUseCase",
    "LookupFileUseCase",
    "RetrievalResolver",
    "StorageRouter",
    "UploadFileUseCase",
    "release_locations",
]
