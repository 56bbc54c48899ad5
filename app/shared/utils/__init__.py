"""Shared utilities: datetime, generators, sanitization, streams."""

from app.shared.utils.datetime import (
    ensure_utc,
    from_timestamp_ms_utc,
    to_timestamp_ms,
    utc_now,
)
from app.shared.utils.generators import (
    generate_deletion_key,
    generate_fallback_id,
    generate_public_id,
    generate_salt,
)
from app.shared.utils.sanitization import (
    content_disposition,
    replace_extension,
    safe_extension,
    strip_extension,
)

__all__ = [
    "content_disposition",
    "ensure_utc",
    "from_timestamp_ms_utc",
    "generate_deletion_key",
    "generate_fallback_id",
    "generate_public_id",
    "generate_salt",
    "replace_extension",
    "safe_extension",
    "strip_extension",
    "to_timestamp_ms",
    "utc_now",
]
