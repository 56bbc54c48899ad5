"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the metadata repository, the storage
registry and the file use cases. Infrastructure instances are created by
the lifespan and read from ``app.state``; tests override get_backends and
get_stored_object_repo to inject fakes.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated

from fastapi import Depends, Request

from app.application.interfaces.repositories import IStoredObjectRepository
from app.application.interfaces.storage import IStorageBackend
from app.application.services.id_allocator import IdAllocator
from app.application.services.image_optimizer import ImageOptimizer
from app.application.use_cases.files import (
    DeleteFileUseCase,
    DeletionCoordinator,
    DownloadFileUseCase,
    LookupFileUseCase,
    RetrievalResolver,
    StorageRouter,
    UploadFileUseCase,
)
from app.core.config import Settings, get_settings
from app.domain.enums import StorageBackend


def get_backends(request: Request) -> Mapping[StorageBackend, IStorageBackend]:
    """Storage registry built at startup."""
    return request.app.state.backends


def get_stored_object_repo(request: Request) -> IStoredObjectRepository:
    """Metadata repository built at startup."""
    return request.app.state.stored_object_repo


Backends = Annotated[Mapping[StorageBackend, IStorageBackend], Depends(get_backends)]
Repo = Annotated[IStoredObjectRepository, Depends(get_stored_object_repo)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_storage_router(backends: Backends, settings: AppSettings) -> StorageRouter:
    default = (
        StorageBackend.parse(settings.uploader_storage_default)
        if settings.uploader_storage_default
        else None
    )
    return StorageRouter(
        backends=backends,
        max_bytes=settings.uploader_max_bytes,
        dual_threshold_bytes=settings.uploader_dual_threshold_bytes,
        default_backend=default,
        retain_fallback_copies=settings.retain_fallback_copies,
        tee_buffer_chunks=settings.tee_buffer_chunks,
    )


def get_upload_use_case(
    repo: Repo,
    router: Annotated[StorageRouter, Depends(get_storage_router)],
    settings: AppSettings,
) -> UploadFileUseCase:
    """Build UploadFileUseCase (allocator + router + optional image optimizer)."""
    optimizer = ImageOptimizer(
        threshold_bytes=settings.optimization_threshold_bytes,
        quality=settings.webp_quality,
        enabled=settings.optimize_images,
    )
    return UploadFileUseCase(
        repo=repo,
        allocator=IdAllocator(repo),
        router=router,
        optimizer=optimizer,
        chunk_size=settings.stream_chunk_size,
    )


def get_download_use_case(repo: Repo, backends: Backends) -> DownloadFileUseCase:
    return DownloadFileUseCase(repo=repo, resolver=RetrievalResolver(backends))


def get_delete_use_case(repo: Repo, backends: Backends) -> DeleteFileUseCase:
    return DeleteFileUseCase(repo=repo, coordinator=DeletionCoordinator(backends, repo))


def get_lookup_use_case(repo: Repo) -> LookupFileUseCase:
    return LookupFileUseCase(repo=repo)
