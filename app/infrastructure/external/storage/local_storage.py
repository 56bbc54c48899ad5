"""Local filesystem storage with path validation and atomic writes."""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path

import aiofiles
import aiofiles.os

from app.domain.enums import StorageBackend
from app.domain.value_objects.core import LocalLocation, Location
from app.infrastructure.exceptions import (
    StorageDeleteError,
    StorageDownloadError,
    StorageException,
    StorageNotFoundError,
    StoragePermissionError,
    StorageUploadError,
)
from app.shared.utils.streams import DEFAULT_CHUNK_SIZE


class LocalStorageService:
    """Local filesystem storage with atomic writes and path traversal protection.

    Objects live flat under ``files_dir`` as ``<id><ext>``. Writes go to a
    temp file in the same directory and are renamed into place, so a failed
    write leaves nothing behind.
    """

    backend = StorageBackend.LOCAL

    def __init__(self, files_dir: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.files_dir = Path(files_dir).resolve()
        self.chunk_size = chunk_size

    @property
    def is_configured(self) -> bool:
        return True

    def _get_full_path(self, object_name: str) -> Path:
        """Resolve and validate path under files_dir. Raises StoragePermissionError if traversal."""
        full_path = (self.files_dir / object_name).resolve()
        try:
            full_path.relative_to(self.files_dir)
        except ValueError as e:
            raise StoragePermissionError(self.backend.value, object_name, "path_validation") from e
        if full_path == self.files_dir:
            raise StoragePermissionError(self.backend.value, object_name, "path_validation")
        return full_path

    def _location_path(self, location: Location) -> Path:
        if not isinstance(location, LocalLocation):
            raise TypeError(f"LocalStorageService cannot handle {type(location).__name__}")
        full_path = Path(location.path).resolve()
        try:
            full_path.relative_to(self.files_dir)
        except ValueError as e:
            raise StoragePermissionError(self.backend.value, location.path, "path_validation") from e
        return full_path

    async def store(
        self,
        object_name: str,
        stream: AsyncIterator[bytes],
        content_type: str,
        original_name: str | None = None,
    ) -> LocalLocation:
        """Stream into a temp file, then rename to ``files_dir/object_name``."""
        target_path = self._get_full_path(object_name)
        await aiofiles.os.makedirs(target_path.parent, exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(
            dir=target_path.parent,
            prefix=".tmp_",
            suffix=target_path.suffix,
        )
        os.close(temp_fd)
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in stream:
                    await f.write(chunk)
            await aiofiles.os.replace(temp_path, target_path)
        except StorageException:
            raise
        except OSError as e:
            raise StorageUploadError(self.backend.value, object_name, str(e)) from e
        finally:
            if await aiofiles.os.path.exists(temp_path):
                await aiofiles.os.remove(temp_path)
        return LocalLocation(path=str(target_path))

    async def retrieve(self, location: Location) -> AsyncIterator[bytes]:
        """Open the file now; stream its content later."""
        file_path = self._location_path(location)
        try:
            f = await aiofiles.open(file_path, "rb")
        except FileNotFoundError as e:
            raise StorageNotFoundError(self.backend.value, str(file_path)) from e
        except OSError as e:
            raise StorageDownloadError(self.backend.value, str(file_path), str(e)) from e
        return self._read_chunks(f)

    async def _read_chunks(self, f) -> AsyncIterator[bytes]:
        try:
            while chunk := await f.read(self.chunk_size):
                yield chunk
        finally:
            await f.close()

    async def delete(self, location: Location) -> None:
        """Delete file. A missing file is not an error."""
        file_path = self._location_path(location)
        try:
            await aiofiles.os.remove(file_path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageDeleteError(self.backend.value, str(file_path), str(e)) from e
