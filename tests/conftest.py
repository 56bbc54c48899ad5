"""Pytest configuration and fixtures for the uploader.

Uses app.main:app for HTTP tests with the storage registry and metadata
repository replaced by in-process fakes. Environment is set before the app
is imported so Settings validation never needs MongoDB.
All imports use app.*.
"""

import os
import tempfile
from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

os.environ["METADATA_BACKEND"] = "memory"
os.environ["MONGODB_URI"] = ""
os.environ["UPLOADER_DATA_DIR"] = tempfile.mkdtemp(prefix="uploader-tests-")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("UPLOADER_API_TOKEN", None)
os.environ.pop("UPLOADER_STORAGE_DEFAULT", None)

from app.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from app.api.dependencies import get_backends, get_stored_object_repo  # noqa: E402
from app.domain.enums import StorageBackend  # noqa: E402
from app.domain.value_objects.core import (  # noqa: E402
    BlobLocation,
    BucketLocation,
    ChunkedStoreLocation,
    LocalLocation,
    Location,
)
from app.infrastructure.exceptions import (  # noqa: E402
    StorageConfigurationError,
    StorageNotFoundError,
)
from app.infrastructure.persistence.repositories import (  # noqa: E402
    InMemoryStoredObjectRepository,
)
from app.main import app  # noqa: E402


class FakeStorageBackend:
    """In-memory storage adapter with switchable failures.

    ``fail_store`` / ``fail_delete`` hold an exception to raise; ``configured``
    mirrors a backend whose settings are missing.
    """

    def __init__(self, backend: StorageBackend, configured: bool = True) -> None:
        self.backend = backend
        self.configured = configured
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.fail_store: Exception | None = None
        self.fail_delete: Exception | None = None
        self.store_calls = 0
        self.deleted: list[Location] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def _check(self) -> None:
        if not self.configured:
            raise StorageConfigurationError(self.backend.value, "TEST_SETTING")

    def location_for(self, name: str) -> Location:
        if self.backend is StorageBackend.LOCAL:
            return LocalLocation(path=f"/fake/files/{name}")
        if self.backend is StorageBackend.CHUNKED_STORE:
            return ChunkedStoreLocation(file_id=f"oid-{name}", bucket_name="uploads", filename=name)
        if self.backend is StorageBackend.BLOB_CDN:
            return BlobLocation(url=f"https://blob.test/{name}", pathname=name)
        return BucketLocation(bucket="test-bucket", key=name)

    @staticmethod
    def name_of(location: Location) -> str:
        if isinstance(location, LocalLocation):
            return location.path.rsplit("/", 1)[-1]
        if isinstance(location, ChunkedStoreLocation):
            return location.filename
        if isinstance(location, BlobLocation):
            return location.pathname
        return location.key

    async def store(
        self,
        object_name: str,
        stream: AsyncIterator[bytes],
        content_type: str,
        original_name: str | None = None,
    ) -> Location:
        self._check()
        self.store_calls += 1
        if self.fail_store is not None:
            raise self.fail_store
        data = bytearray()
        async for chunk in stream:
            data.extend(chunk)
        self.objects[object_name] = bytes(data)
        self.content_types[object_name] = content_type
        return self.location_for(object_name)

    async def retrieve(self, location: Location) -> AsyncIterator[bytes]:
        self._check()
        name = self.name_of(location)
        if name not in self.objects:
            raise StorageNotFoundError(self.backend.value, name)
        return self._chunks(self.objects[name])

    @staticmethod
    async def _chunks(data: bytes) -> AsyncIterator[bytes]:
        for start in range(0, len(data), 4):
            yield data[start : start + 4]

    async def delete(self, location: Location) -> None:
        self._check()
        if self.fail_delete is not None:
            raise self.fail_delete
        self.deleted.append(location)
        self.objects.pop(self.name_of(location), None)


@pytest.fixture
def backends() -> dict[StorageBackend, FakeStorageBackend]:
    """One fake adapter per backend tag, all configured."""
    return {tag: FakeStorageBackend(tag) for tag in StorageBackend}


@pytest.fixture
def repo() -> InMemoryStoredObjectRepository:
    """Empty in-memory metadata repository."""
    return InMemoryStoredObjectRepository()


@pytest.fixture
async def client(
    backends: dict[StorageBackend, FakeStorageBackend],
    repo: InMemoryStoredObjectRepository,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI) with fake storage and metadata."""
    app.dependency_overrides[get_backends] = lambda: backends
    app.dependency_overrides[get_stored_object_repo] = lambda: repo
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
