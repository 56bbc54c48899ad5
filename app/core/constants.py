"""Core constants: shared literal values for uploads and downloads.

Single source of truth for values used by both the use cases and the
HTTP layer (DRY).
"""

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Public ids: fixed length over a fixed alphabet; hex fallback after MAX_ID_ATTEMPTS collisions.
ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
ID_LENGTH = 6
MAX_ID_ATTEMPTS = 10
FALLBACK_ID_BYTES = 6

DELETION_KEY_BYTES = 24
PASSWORD_SALT_BYTES = 16

MAX_EXTENSION_LENGTH = 16

# Downloads are immutable once uploaded.
DOWNLOAD_CACHE_CONTROL = "public, max-age=31536000, immutable"
PASSWORD_HEADER = "x-file-password"

OPTIMIZABLE_IMAGE_TYPES = frozenset(
    {"image/jpeg", "image/png", "image/webp", "image/tiff", "image/heic"}
)
OPTIMIZED_CONTENT_TYPE = "image/webp"
