"""ID and secret generators.

All values come from the ``secrets`` module (cryptographically strong).
"""

import secrets

from app.core.constants import (
    DELETION_KEY_BYTES,
    FALLBACK_ID_BYTES,
    ID_ALPHABET,
    ID_LENGTH,
    PASSWORD_SALT_BYTES,
)


def generate_public_id(length: int = ID_LENGTH, alphabet: str = ID_ALPHABET) -> str:
    """Generate a short public identifier over a fixed alphabet.

    Returns:
        A string of ``length`` characters drawn uniformly from ``alphabet``.
    """
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_fallback_id() -> str:
    """Longer hex identifier used when short ids keep colliding."""
    return secrets.token_hex(FALLBACK_ID_BYTES)


def generate_deletion_key() -> str:
    """Long random secret that authorizes deleting one object."""
    return secrets.token_hex(DELETION_KEY_BYTES)


def generate_salt() -> str:
    return secrets.token_hex(PASSWORD_SALT_BYTES)
