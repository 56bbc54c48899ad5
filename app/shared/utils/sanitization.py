"""Filename sanitization for storage keys and response headers."""

import os
import re
from urllib.parse import quote

from app.core.constants import MAX_EXTENSION_LENGTH

_EXTENSION_PATTERN = re.compile(r"^\.[a-zA-Z0-9]+$")
_HEADER_UNSAFE = re.compile(r'[\r\n"]')


def safe_extension(filename: str | None) -> str:
    """Return the lowercase extension (with dot) if it is plain alphanumeric, else "".

    The extension (dot included) is cut to MAX_EXTENSION_LENGTH characters
    before validation.
    """
    ext = os.path.splitext(filename or "")[1][:MAX_EXTENSION_LENGTH]
    if not ext or ext == ".":
        return ""
    if not _EXTENSION_PATTERN.match(ext):
        return ""
    return ext.lower()


def replace_extension(filename: str, ext: str) -> str:
    """Swap the extension of ``filename`` for ``ext`` (appended when there is none)."""
    dot = filename.rfind(".")
    if dot == -1:
        return filename + ext
    return filename[:dot] + ext


def strip_extension(identifier: str) -> str:
    """``abc123.png`` -> ``abc123``: public ids never contain a dot."""
    return identifier.split(".", 1)[0]


def content_disposition(filename: str, disposition: str = "inline") -> str:
    """Build a Content-Disposition value with an ASCII fallback and RFC 5987 name.

    Header values must be latin-1 encodable, so the plain ``filename=`` part
    replaces anything outside ASCII with underscores.
    """
    cleaned = _HEADER_UNSAFE.sub("_", filename)
    ascii_name = cleaned.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return (
        f'{disposition}; filename="{ascii_name}"; '
        f"filename*=UTF-8''{quote(cleaned, safe='')}"
    )
