"""Upload: allocate id, optionally optimize, place bytes, then persist the record."""

from __future__ import annotations

import logging

from app.application.dtos.files import PlacementRequest, UploadCommand, UploadResult
from app.application.interfaces.repositories import IStoredObjectRepository
from app.application.interfaces.services import IImageOptimizer
from app.application.services.id_allocator import IdAllocator
from app.application.use_cases.files.deletion import release_locations
from app.application.use_cases.files.storage_router import StorageRouter
from app.core.constants import DEFAULT_CONTENT_TYPE, OPTIMIZED_CONTENT_TYPE
from app.domain.entities.stored_object import StoredObject
from app.domain.exceptions import PayloadTooLargeException, ValidationException
from app.application.services.password_service import create_password_lock
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_deletion_key
from app.shared.utils.sanitization import safe_extension
from app.shared.utils.streams import DEFAULT_CHUNK_SIZE, iter_binary_chunks, iter_bytes

logger = logging.getLogger(__name__)


class UploadFileUseCase:
    """Single responsibility: turn an uploaded file into a stored object.

    The record is saved only after the router reports success. If saving
    fails, the bytes that were just written are released best-effort and
    the error propagates.
    """

    def __init__(
        self,
        repo: IStoredObjectRepository,
        allocator: IdAllocator,
        router: StorageRouter,
        optimizer: IImageOptimizer | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.repo = repo
        self.allocator = allocator
        self.router = router
        self.optimizer = optimizer
        self.chunk_size = chunk_size

    async def execute(self, command: UploadCommand) -> UploadResult:
        password = (command.password or "").strip()
        if command.private and not password:
            raise ValidationException("Password is required for private files", field="password")
        if command.declared_size is not None and command.declared_size > self.router.max_bytes:
            raise PayloadTooLargeException(self.router.max_bytes, command.declared_size)

        object_id = await self.allocator.allocate()
        filename = command.filename or object_id
        content_type = command.content_type or DEFAULT_CONTENT_TYPE
        size = command.declared_size

        optimized = None
        if self.optimizer is not None and size is not None:
            optimized = await self.optimizer.optimize(command.file_data, filename, content_type, size)
        if optimized is not None:
            converted = content_type != OPTIMIZED_CONTENT_TYPE
            filename = optimized.filename
            content_type = optimized.content_type
            size = len(optimized.data)
            stream = iter_bytes(optimized.data, self.chunk_size)
        else:
            converted = False
            stream = iter_binary_chunks(command.file_data, self.chunk_size)

        ext = safe_extension(filename)
        client_checksum = (command.checksum or "").strip() or None
        placement = await self.router.place(
            PlacementRequest(
                object_name=f"{object_id}{ext}",
                stream=stream,
                content_type=content_type,
                declared_size=size,
                original_name=filename,
                explicit_backend=(command.storage or "").strip() or None,
                client_checksum=client_checksum,
                optimized=converted,
            )
        )

        stored = StoredObject(
            id=object_id,
            key=generate_deletion_key(),
            name=filename,
            ext=ext,
            content_type=content_type,
            size=placement.size,
            checksum=placement.checksum,
            created_at=utc_now(),
            location=placement.location,
            replicas=placement.replicas,
            password=create_password_lock(password) if command.private else None,
        )
        try:
            await self.repo.save(stored)
        except Exception:
            logger.error("Saving metadata for %s failed; releasing written copies", object_id)
            await release_locations(self.router.backends, stored.locations)
            raise

        return UploadResult(
            id=stored.id,
            ext=stored.ext,
            content_type=stored.content_type,
            checksum=stored.checksum,
            key=stored.key,
            private=stored.is_private,
            storage=stored.backend,
        )
