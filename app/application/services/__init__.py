"""Application services: id allocation, streaming hash, image optimization, password gate."""

from app.application.services.hash_service import StreamingHasher
from app.application.services.id_allocator import IdAllocator
from app.application.services.image_optimizer import ImageOptimizer
from app.application.services.password_service import (
    create_password_lock,
    hash_password,
    verify_password,
)

__all__ = [
    "IdAllocator",
    "ImageOptimizer",
    "StreamingHasher",
    "create_password_lock",
    "hash_password",
    "verify_password",
]
