"""Blob CDN storage over the Vercel Blob REST API (httpx).

Objects are public: reads go straight to the CDN url returned on upload;
writes and deletes need the read/write token.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from urllib.parse import quote

import httpx

from app.domain.enums import StorageBackend
from app.domain.value_objects.core import BlobLocation, Location
from app.infrastructure.exceptions import (
    StorageConfigurationError,
    StorageDeleteError,
    StorageDownloadError,
    StorageNotFoundError,
    StorageUploadError,
)

_API_VERSION = "7"


class BlobStorageService:
    """Vercel Blob storage. Pathnames are stored verbatim (no random suffix)."""

    backend = StorageBackend.BLOB_CDN

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token: str | None,
        api_url: str = "https://blob.vercel-storage.com",
        timeout: float = 60.0,
    ) -> None:
        self._http = http_client
        self._token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self._token)

    def _headers(self) -> dict[str, str]:
        if not self._token:
            raise StorageConfigurationError(self.backend.value, "BLOB_READ_WRITE_TOKEN")
        return {
            "authorization": f"Bearer {self._token}",
            "x-api-version": _API_VERSION,
        }

    async def store(
        self,
        object_name: str,
        stream: AsyncIterator[bytes],
        content_type: str,
        original_name: str | None = None,
    ) -> BlobLocation:
        """PUT the stream as a public blob named object_name."""
        headers = self._headers()
        headers.update(
            {
                "x-add-random-suffix": "0",
                "x-content-type": content_type,
            }
        )
        url = f"{self.api_url}/{quote(object_name)}"
        try:
            resp = await self._http.put(
                url, content=stream, headers=headers, timeout=self.timeout
            )
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as e:
            raise StorageUploadError(self.backend.value, object_name, str(e)) from e
        except ValueError as e:
            raise StorageUploadError(
                self.backend.value, object_name, "invalid response body"
            ) from e
        blob_url = body.get("url")
        if not blob_url:
            raise StorageUploadError(self.backend.value, object_name, "response has no url")
        return BlobLocation(url=blob_url, pathname=body.get("pathname") or object_name)

    async def retrieve(self, location: Location) -> AsyncIterator[bytes]:
        """GET the public url. Any non-2xx answer counts as not found."""
        if not isinstance(location, BlobLocation):
            raise TypeError(f"BlobStorageService cannot handle {type(location).__name__}")
        request = self._http.build_request("GET", location.url, timeout=self.timeout)
        try:
            resp = await self._http.send(request, stream=True)
        except httpx.HTTPError as e:
            raise StorageDownloadError(self.backend.value, location.url, str(e)) from e
        if not resp.is_success:
            await resp.aclose()
            raise StorageNotFoundError(self.backend.value, location.url)
        return self._read_chunks(resp)

    @staticmethod
    async def _read_chunks(resp: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in resp.aiter_bytes():
                yield chunk
        finally:
            await resp.aclose()

    async def delete(self, location: Location) -> None:
        """Delete by url. Deleting a missing blob succeeds on the API side."""
        if not isinstance(location, BlobLocation):
            raise TypeError(f"BlobStorageService cannot handle {type(location).__name__}")
        headers = self._headers()
        try:
            resp = await self._http.post(
                f"{self.api_url}/delete",
                json={"urls": [location.url]},
                headers=headers,
                timeout=self.timeout,
            )
            if resp.status_code == 404:
                return
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise StorageDeleteError(self.backend.value, location.url, str(e)) from e
