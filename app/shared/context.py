"""Request context management using contextvars.

Provides async-safe storage for request-scoped data (the request id) so
log records emitted anywhere during a request can carry it.

Usage:
    token = set_request_id("abc")
    get_request_id()  # "abc"
    reset_request_id(token)
"""

from contextvars import ContextVar, Token

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(request_id: str | None) -> Token[str | None]:
    """Set the request id for the current task; returns a token for reset."""
    return _request_id.set(request_id)


def get_request_id() -> str | None:
    return _request_id.get()


def reset_request_id(token: Token[str | None]) -> None:
    _request_id.reset(token)
