"""Tests for the blob CDN (httpx MockTransport) and S3-compatible (fake client) adapters."""

import io
import json

import httpx
import pytest
from botocore.exceptions import ClientError

from app.domain.value_objects.core import BlobLocation, BucketLocation
from app.infrastructure.exceptions import (
    StorageConfigurationError,
    StorageNotFoundError,
    StorageUploadError,
)
from app.infrastructure.external.storage import (
    BlobStorageService,
    GridFSStorageService,
    S3StorageService,
)
from app.shared.utils.streams import iter_bytes

API_URL = "https://blob.test"


async def _read(stream) -> bytes:
    return b"".join([chunk async for chunk in stream])


class _BlobApi:
    """Records requests and answers like the blob REST API."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail_put = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "PUT":
            if self.fail_put:
                return httpx.Response(500, json={"error": "internal"})
            pathname = request.url.path.lstrip("/")
            return httpx.Response(
                200, json={"url": f"https://cdn.test/{pathname}", "pathname": pathname}
            )
        if request.method == "GET":
            if request.url.path == "/missing.txt":
                return httpx.Response(404)
            return httpx.Response(200, content=b"cdn bytes")
        if request.method == "POST" and request.url.path == "/delete":
            return httpx.Response(200, json={})
        return httpx.Response(405)


class _FakeS3Client:
    """Implements the three boto3 calls the adapter uses."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], tuple[bytes, dict]] = {}

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None) -> None:
        data = bytearray()
        while chunk := fileobj.read(5):
            data.extend(chunk)
        self.objects[(bucket, key)] = (bytes(data), ExtraArgs or {})

    def get_object(self, Bucket, Key) -> dict:
        if (Bucket, Key) not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)][0])}

    def delete_object(self, Bucket, Key) -> None:
        self.objects.pop((Bucket, Key), None)


@pytest.fixture
def blob_api() -> _BlobApi:
    return _BlobApi()


@pytest.fixture
async def http_client(blob_api: _BlobApi):
    async with httpx.AsyncClient(transport=httpx.MockTransport(blob_api)) as client:
        yield client


class TestBlobStorageService:
    """PUT upload without random suffix, public GET, POST delete."""

    async def test_store_sends_token_and_content(self, http_client, blob_api) -> None:
        storage = BlobStorageService(http_client, token="tok", api_url=API_URL)
        location = await storage.store("abc123.txt", iter_bytes(b"hello", 2), "text/plain")
        assert location == BlobLocation(url="https://cdn.test/abc123.txt", pathname="abc123.txt")
        request = blob_api.requests[0]
        assert request.method == "PUT"
        assert request.headers["authorization"] == "Bearer tok"
        assert request.headers["x-add-random-suffix"] == "0"
        assert request.headers["x-content-type"] == "text/plain"
        assert request.content == b"hello"

    async def test_unconfigured_makes_no_request(self, http_client, blob_api) -> None:
        storage = BlobStorageService(http_client, token=None, api_url=API_URL)
        assert storage.is_configured is False
        with pytest.raises(StorageConfigurationError, match="BLOB_READ_WRITE_TOKEN"):
            await storage.store("abc123.txt", iter_bytes(b"x"), "text/plain")
        assert blob_api.requests == []

    async def test_store_error_status(self, http_client, blob_api) -> None:
        blob_api.fail_put = True
        storage = BlobStorageService(http_client, token="tok", api_url=API_URL)
        with pytest.raises(StorageUploadError):
            await storage.store("abc123.txt", iter_bytes(b"x"), "text/plain")

    async def test_retrieve(self, http_client) -> None:
        storage = BlobStorageService(http_client, token="tok", api_url=API_URL)
        stream = await storage.retrieve(BlobLocation(url="https://cdn.test/a.txt", pathname="a.txt"))
        assert await _read(stream) == b"cdn bytes"

    async def test_retrieve_non_success_is_not_found(self, http_client) -> None:
        storage = BlobStorageService(http_client, token="tok", api_url=API_URL)
        with pytest.raises(StorageNotFoundError):
            await storage.retrieve(
                BlobLocation(url="https://cdn.test/missing.txt", pathname="missing.txt")
            )

    async def test_delete_posts_url(self, http_client, blob_api) -> None:
        storage = BlobStorageService(http_client, token="tok", api_url=API_URL)
        await storage.delete(BlobLocation(url="https://cdn.test/a.txt", pathname="a.txt"))
        request = blob_api.requests[-1]
        assert str(request.url) == f"{API_URL}/delete"
        assert json.loads(request.content) == {"urls": ["https://cdn.test/a.txt"]}


class TestS3StorageService:
    """Managed upload from an async stream, chunked reads, idempotent delete."""

    def _storage(self, client: _FakeS3Client) -> S3StorageService:
        return S3StorageService(
            endpoint_url="https://r2.test",
            bucket="media",
            access_key="key",
            secret_key="secret",
            chunk_size=4,
            client=client,
        )

    async def test_store_then_retrieve(self) -> None:
        client = _FakeS3Client()
        storage = self._storage(client)
        payload = b"bucket payload " * 10
        location = await storage.store("big.bin", iter_bytes(payload, 7), "application/zip")
        assert location == BucketLocation(bucket="media", key="big.bin")
        assert client.objects[("media", "big.bin")] == (payload, {"ContentType": "application/zip"})
        assert await _read(await storage.retrieve(location)) == payload

    async def test_missing_object(self) -> None:
        storage = self._storage(_FakeS3Client())
        with pytest.raises(StorageNotFoundError):
            await storage.retrieve(BucketLocation(bucket="media", key="nope"))

    async def test_delete_missing_is_ok(self) -> None:
        storage = self._storage(_FakeS3Client())
        await storage.delete(BucketLocation(bucket="media", key="nope"))

    async def test_unconfigured_names_missing_settings(self) -> None:
        storage = S3StorageService(endpoint_url=None, bucket="media", access_key="k", secret_key=None)
        assert storage.is_configured is False
        with pytest.raises(StorageConfigurationError) as exc_info:
            await storage.store("x", iter_bytes(b"x"), "text/plain")
        assert "R2_ENDPOINT" in exc_info.value.message
        assert "R2_SECRET_ACCESS_KEY" in exc_info.value.message

    async def test_read_and_delete_need_only_credentials(self) -> None:
        client = _FakeS3Client()
        client.objects[("media", "old.bin")] = (b"recorded", {})
        storage = S3StorageService(
            endpoint_url="https://r2.test",
            bucket=None,
            access_key="key",
            secret_key="secret",
            client=client,
        )
        assert storage.is_configured is False
        location = BucketLocation(bucket="media", key="old.bin")
        assert await _read(await storage.retrieve(location)) == b"recorded"
        await storage.delete(location)
        assert client.objects == {}
        with pytest.raises(StorageConfigurationError, match="R2_BUCKET"):
            await storage.store("x", iter_bytes(b"x"), "text/plain")

    async def test_retrieve_without_credentials_is_configuration_error(self) -> None:
        storage = S3StorageService(endpoint_url="https://r2.test", bucket="media", access_key=None, secret_key=None)
        with pytest.raises(StorageConfigurationError) as exc_info:
            await storage.retrieve(BucketLocation(bucket="media", key="a.bin"))
        assert exc_info.value.message == "Missing r2 configuration: R2_ACCESS_KEY_ID, R2_SECRET_ACCESS_KEY"


class _FakeGridOut:
    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = list(chunks)
        self.closed = False

    async def readchunk(self) -> bytes:
        return self._chunks.pop(0) if self._chunks else b""

    async def close(self) -> None:
        self.closed = True


class TestGridFSChunkReader:
    """The download stream is closed however the reader stops."""

    async def test_closed_after_full_read(self) -> None:
        grid_out = _FakeGridOut([b"ab", b"cd"])
        assert await _read(GridFSStorageService._read_chunks(grid_out)) == b"abcd"
        assert grid_out.closed is True

    async def test_closed_when_reader_stops_early(self) -> None:
        grid_out = _FakeGridOut([b"ab", b"cd"])
        stream = GridFSStorageService._read_chunks(grid_out)
        assert await stream.__anext__() == b"ab"
        await stream.aclose()
        assert grid_out.closed is True
