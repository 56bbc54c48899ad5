"""Request body size limit middleware.

Rejects uploads whose body cannot fit the configured maximum before any
of it reaches the router. Declared bodies (Content-Length) are checked
up front; chunked bodies are counted while being collected. The limit is
the file limit plus room for multipart framing and form fields, so the
exact per-file limit is still enforced by the upload use case.
Uses raw ASGI (no BaseHTTPMiddleware).
"""

import json
from typing import Callable

from app.middleware.request_id import get_header

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


async def _send_413(send: Callable, max_bytes: int) -> None:
    """Send 413 with the uploader's error body shape."""
    body = json.dumps(
        {"error": 413, "message": f"Request body too large (max {max_bytes} bytes)"}
    ).encode()
    await send({
        "type": "http.response.start",
        "status": 413,
        "headers": [
            (b"content-type", b"application/json"),
            (b"content-length", str(len(body)).encode()),
        ],
    })
    await send({"type": "http.response.body", "body": body, "more_body": False})


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    """Reject request bodies over max_bytes (Content-Length or chunked). Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http" or scope.get("method") not in _BODY_METHODS:
            await app(scope, receive, send)
            return

        content_length = get_header(scope, "content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                declared = -1
            if declared > max_bytes:
                await _send_413(send, max_bytes)
                return
            await app(scope, receive, send)
            return

        if (get_header(scope, "transfer-encoding") or "").lower() != "chunked":
            await app(scope, receive, send)
            return

        # Chunked: collect (bounded by max_bytes) and replay as one message.
        chunks: list[bytes] = []
        total = 0
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            if message["type"] != "http.request":
                continue
            body = message.get("body", b"")
            total += len(body)
            if total > max_bytes:
                await _send_413(send, max_bytes)
                return
            chunks.append(body)
            if not message.get("more_body", False):
                break

        collected = b"".join(chunks)
        replayed = False

        async def replay_receive() -> dict:
            nonlocal replayed
            if replayed:
                return await receive()
            replayed = True
            return {"type": "http.request", "body": collected, "more_body": False}

        await app(scope, replay_receive, send)

    return asgi_app
