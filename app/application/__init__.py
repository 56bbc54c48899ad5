"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (metadata repository, storage adapters).
"""

from app.application.interfaces import (
    IImageOptimizer,
    IStorageBackend,
    IStoredObjectRepository,
)
from app.application.services import IdAllocator, ImageOptimizer, StreamingHasher
from app.application.use_cases import (
    DeleteFileUseCase,
    DownloadFileUseCase,
    LookupFileUseCase,
    UploadFileUseCase,
)

__all__ = [
    "DeleteFileUseCase",
    "DownloadFileUseCase",
    "IImageOptimizer",
    "IStorageBackend",
    "IStoredObjectRepository",
    "IdAllocator",
    "ImageOptimizer",
    "LookupFileUseCase",
    "StreamingHasher",
    "UploadFileUseCase",
]
