"""Application interfaces (ports): repository, storage and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import IStoredObjectRepository
from app.application.interfaces.services import IImageOptimizer, OptimizedImage
from app.application.interfaces.storage import IStorageBackend

__all__ = [
    "IImageOptimizer",
    "IStorageBackend",
    "IStoredObjectRepository",
    "OptimizedImage",
]
