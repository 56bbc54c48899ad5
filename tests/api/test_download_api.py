"""Download API tests: GET /{id}, GET /t/{id}, password gate and response headers."""

import io

from httpx import AsyncClient
from PIL import Image

from app.core.constants import DOWNLOAD_CACHE_CONTROL
from app.domain.enums import StorageBackend


async def _upload(client: AsyncClient, name: str, content: bytes, content_type: str, **form) -> dict:
    response = await client.post("/api/upload", files={"file": (name, content, content_type)}, data=form)
    assert response.status_code == 200, response.text
    return response.json()


def _png() -> bytes:
    out = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 10, 10)).save(out, format="PNG")
    return out.getvalue()


async def test_download_streams_bytes_with_headers(client: AsyncClient) -> None:
    """GET /{id}{ext} returns the bytes, content type, cache and disposition headers."""
    uploaded = await _upload(client, "notes.txt", b"some notes", "text/plain")
    response = await client.get(f"/{uploaded['id']}{uploaded['ext']}")
    assert response.status_code == 200
    assert response.content == b"some notes"
    assert response.headers["content-type"].startswith("text/plain")
    assert response.headers["cache-control"] == DOWNLOAD_CACHE_CONTROL
    assert response.headers["content-disposition"].startswith('inline; filename="notes.txt"')


async def test_skip_cd_omits_disposition(client: AsyncClient) -> None:
    """?skip-cd=true drops the content-disposition header."""
    uploaded = await _upload(client, "notes.txt", b"x", "text/plain")
    response = await client.get(f"/{uploaded['id']}?skip-cd=true")
    assert response.status_code == 200
    assert "content-disposition" not in response.headers


async def test_unknown_id_is_404(client: AsyncClient) -> None:
    """Unknown ids answer 404 with the error body shape."""
    response = await client.get("/zzzzzz")
    assert response.status_code == 404
    assert response.json() == {"error": 404, "message": "File not found"}


async def test_private_download_needs_password(client: AsyncClient) -> None:
    """Private objects: 403 without or with a wrong password; 200 via ?pw= or the header."""
    uploaded = await _upload(
        client, "secret.txt", b"top secret", "text/plain", visibility="private", password="pw"
    )
    path = f"/{uploaded['id']}"
    assert (await client.get(path)).status_code == 403
    assert (await client.get(f"{path}?pw=wrong")).status_code == 403
    by_query = await client.get(f"{path}?pw=pw")
    assert by_query.status_code == 200
    assert by_query.content == b"top secret"
    by_header = await client.get(path, headers={"x-file-password": "pw"})
    assert by_header.status_code == 200


async def test_thumbnail_for_images_only(client: AsyncClient) -> None:
    """GET /t/{id} serves images inline without disposition; other types are 404."""
    image = await _upload(client, "dot.png", _png(), "image/png")
    text = await _upload(client, "a.txt", b"a", "text/plain")
    response = await client.get(f"/t/{image['id']}")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert "content-disposition" not in response.headers
    assert (await client.get(f"/t/{text['id']}")).status_code == 404


async def test_missing_bytes_is_404(client: AsyncClient, backends) -> None:
    """A record whose bytes vanished from the backend answers 404."""
    uploaded = await _upload(client, "a.txt", b"gone soon", "text/plain")
    for backend in backends.values():
        backend.objects.clear()
    response = await client.get(f"/{uploaded['id']}")
    assert response.status_code == 404


async def test_security_headers_and_request_id(client: AsyncClient) -> None:
    """Downloads are sandboxed and carry the forwarded request id."""
    uploaded = await _upload(client, "a.html", b"<script>alert(1)</script>", "text/html")
    response = await client.get(f"/{uploaded['id']}", headers={"X-Request-ID": "req-123"})
    assert response.headers["x-content-type-options"] == "nosniff"
    assert "sandbox" in response.headers["content-security-policy"]
    assert response.headers["x-request-id"] == "req-123"


async def test_unconfigured_bucket_is_500_not_404(client: AsyncClient, backends) -> None:
    """A bucket record with missing credentials is a server error, not a missing file."""
    uploaded = await _upload(client, "big.bin", b"bucket bytes", "application/octet-stream", storage="r2")
    assert uploaded["storage"] == "r2"
    backends[StorageBackend.BUCKET].configured = False
    response = await client.get(f"/{uploaded['id']}")
    assert response.status_code == 500
    assert response.json() == {"error": 500, "message": "Missing r2 configuration: TEST_SETTING"}
