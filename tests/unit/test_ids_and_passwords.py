"""Tests for id allocation, generators and the password gate."""

import hashlib
import string

from app.application.services.id_allocator import IdAllocator
from app.application.services.password_service import (
    create_password_lock,
    hash_password,
    verify_password,
)
from app.core.constants import ID_ALPHABET, ID_LENGTH
from app.domain.value_objects.core import PasswordLock
from app.shared.utils.generators import (
    generate_deletion_key,
    generate_fallback_id,
    generate_public_id,
)


class _Repo:
    """Minimal repository double for allocator tests."""

    def __init__(self, taken: bool = False, error: Exception | None = None) -> None:
        self.taken = taken
        self.error = error
        self.calls = 0

    async def exists(self, object_id: str) -> bool:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.taken


class TestGenerators:
    """Ids and keys have the documented shape."""

    def test_public_id_shape(self) -> None:
        value = generate_public_id()
        assert len(value) == ID_LENGTH
        assert set(value) <= set(ID_ALPHABET)

    def test_fallback_id_is_longer_hex(self) -> None:
        value = generate_fallback_id()
        assert len(value) > ID_LENGTH
        assert set(value) <= set(string.hexdigits.lower())

    def test_deletion_keys_are_unique(self) -> None:
        keys = {generate_deletion_key() for _ in range(50)}
        assert len(keys) == 50
        assert all(len(k) == 48 for k in keys)


class TestIdAllocator:
    """Short id when free; hex fallback after collisions or lookup errors."""

    async def test_first_free_candidate(self) -> None:
        repo = _Repo(taken=False)
        object_id = await IdAllocator(repo).allocate()
        assert len(object_id) == ID_LENGTH
        assert repo.calls == 1

    async def test_fallback_after_max_attempts(self) -> None:
        repo = _Repo(taken=True)
        object_id = await IdAllocator(repo, max_attempts=3).allocate()
        assert repo.calls == 3
        assert len(object_id) == 12

    async def test_lookup_error_uses_fallback(self) -> None:
        repo = _Repo(error=ConnectionError("db down"))
        object_id = await IdAllocator(repo).allocate()
        assert repo.calls == 1
        assert len(object_id) == 12


class TestPasswordGate:
    """sha256(salt + password) hex, compared exactly."""

    def test_hash_matches_sha256_of_salt_then_password(self) -> None:
        expected = hashlib.sha256(b"s4ltsecret").hexdigest()
        assert hash_password("s4lt", "secret") == expected

    def test_lock_verifies_only_right_password(self) -> None:
        lock = create_password_lock("hunter2")
        assert verify_password(lock, "hunter2") is True
        assert verify_password(lock, "hunter3") is False
        assert verify_password(lock, "") is False
        assert verify_password(lock, None) is False

    def test_fresh_salt_per_lock(self) -> None:
        assert create_password_lock("x").salt != create_password_lock("x").salt

    def test_existing_record_lock(self) -> None:
        lock = PasswordLock(salt="abc", hash=hashlib.sha256(b"abcpw").hexdigest())
        assert verify_password(lock, "pw") is True
