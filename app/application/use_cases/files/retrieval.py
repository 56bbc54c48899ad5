"""Retrieval: password gate, then dispatch on the authoritative backend tag."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping

from app.application.dtos.files import DownloadResult
from app.application.interfaces.repositories import IStoredObjectRepository
from app.application.interfaces.storage import IStorageBackend
from app.domain.entities.stored_object import StoredObject
from app.domain.enums import StorageBackend
from app.domain.exceptions import ForbiddenException, ResourceNotFoundException
from app.application.services.password_service import verify_password
from app.shared.utils.sanitization import strip_extension


class RetrievalResolver:
    """Opens the byte stream for a stored object.

    The gate runs before any backend call, so a private object answers 403
    the same way whether or not its bytes still exist.
    """

    def __init__(self, backends: Mapping[StorageBackend, IStorageBackend]) -> None:
        self.backends = backends

    @staticmethod
    def check_access(obj: StoredObject, password: str | None) -> None:
        """Raise ForbiddenException unless obj is public or password matches."""
        if obj.password is not None and not verify_password(obj.password, password):
            raise ForbiddenException()

    async def resolve(self, obj: StoredObject, password: str | None = None) -> AsyncIterator[bytes]:
        """Gate, then open the authoritative copy.

        Raises:
            ForbiddenException: private object, missing or wrong password.
            StorageNotFoundError: the backend no longer has the bytes.
            StorageConfigurationError: the backend is missing settings.
        """
        self.check_access(obj, password)
        adapter = self.backends.get(obj.backend)
        if adapter is None:
            raise ResourceNotFoundException("file", obj.id)
        return await adapter.retrieve(obj.location)


class DownloadFileUseCase:
    """Look up by public id (extension ignored) and open the stream."""

    def __init__(self, repo: IStoredObjectRepository, resolver: RetrievalResolver) -> None:
        self.repo = repo
        self.resolver = resolver

    async def _get(self, identifier: str) -> StoredObject:
        object_id = strip_extension(identifier)
        obj = await self.repo.get_by_id(object_id) if object_id else None
        if obj is None:
            raise ResourceNotFoundException("file", object_id)
        return obj

    async def execute(self, identifier: str, password: str | None = None) -> DownloadResult:
        obj = await self._get(identifier)
        stream = await self.resolver.resolve(obj, password)
        return DownloadResult(
            stream=stream,
            content_type=obj.content_type,
            filename=obj.download_name,
            size=obj.size,
        )

    async def thumbnail(self, identifier: str, password: str | None = None) -> DownloadResult:
        """Same as execute, for image objects only; anything else is not found."""
        obj = await self._get(identifier)
        if not obj.content_type.startswith("image/"):
            raise ResourceNotFoundException("file", obj.id)
        stream = await self.resolver.resolve(obj, password)
        return DownloadResult(
            stream=stream,
            content_type=obj.content_type,
            filename=obj.download_name,
            size=obj.size,
        )
