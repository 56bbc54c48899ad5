"""API token dependency.

When UPLOADER_API_TOKEN is set, upload, delete and object routes require it
as ``Authorization: Bearer <token>``, ``x-api-key: <token>`` or
``?token=<token>``. Without it those routes are open.
"""

from __future__ import annotations

import hmac
from typing import Annotated

from fastapi import Depends, Request

from app.core.config import Settings, get_settings
from app.domain.exceptions import AuthenticationException


def _presented_tokens(request: Request) -> list[str]:
    tokens: list[str] = []
    authorization = request.headers.get("authorization") or ""
    if authorization.startswith("Bearer "):
        tokens.append(authorization[len("Bearer ") :])
    if api_key := request.headers.get("x-api-key"):
        tokens.append(api_key)
    if query_token := request.query_params.get("token"):
        tokens.append(query_token)
    return tokens


async def require_api_token(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Raise AuthenticationException (401) unless a configured token was presented."""
    if settings.uploader_api_token is None:
        return
    expected = settings.uploader_api_token.get_secret_value().encode()
    if not expected:
        return
    for presented in _presented_tokens(request):
        if hmac.compare_digest(presented.encode(), expected):
            return
    raise AuthenticationException()
