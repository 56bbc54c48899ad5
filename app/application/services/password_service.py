"""Password gate for private files (salted SHA-256).

Records store ``passwordSalt`` and ``passwordHash`` = sha256(salt + password)
as hex. Verification recomputes the hash and compares the hex strings
exactly, in constant time.
"""

import hashlib
import hmac

from app.domain.value_objects.core import PasswordLock
from app.shared.utils.generators import generate_salt


def hash_password(salt: str, password: str) -> str:
    """Return hex sha256 of salt followed by password."""
    return hashlib.sha256(f"{salt}{password}".encode("utf-8")).hexdigest()


def create_password_lock(password: str) -> PasswordLock:
    """Return a new lock for password with a fresh random salt."""
    salt = generate_salt()
    return PasswordLock(salt=salt, hash=hash_password(salt, password))


def verify_password(lock: PasswordLock, provided: str | None) -> bool:
    """Return True if provided matches the lock. Empty or missing never matches."""
    if not provided:
        return False
    computed = hash_password(lock.salt, provided)
    return hmac.compare_digest(computed, lock.hash)
