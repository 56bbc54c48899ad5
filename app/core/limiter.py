"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. Limits are per client IP and kept in
process memory. create_app() toggles ``limiter.enabled`` from settings.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

UPLOAD_LIMIT = "20/minute"
DELETE_LIMIT = "60/minute"
OBJECT_LIMIT = "120/minute"


def client_ip(request: Request) -> str:
    """First hop of x-forwarded-for, then the single-ip proxy headers, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return (
        request.headers.get("x-real-ip")
        or request.headers.get("cf-connecting-ip")
        or request.headers.get("true-client-ip")
        or get_remote_address(request)
    )


limiter = Limiter(key_func=client_ip)

limit_upload = limiter.limit(UPLOAD_LIMIT)
limit_delete = limiter.limit(DELETE_LIMIT)
limit_object = limiter.limit(OBJECT_LIMIT)
