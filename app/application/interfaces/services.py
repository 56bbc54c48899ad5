"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Protocol


@dataclass(frozen=True)
class OptimizedImage:
    """Re-encoded image that replaces the upload's bytes, name and type."""

    data: bytes
    content_type: str
    filename: str


class IImageOptimizer(Protocol):
    """Protocol for optional image re-encoding before storage."""

    async def optimize(
        self,
        file_data: BinaryIO,
        filename: str,
        content_type: str,
        size: int,
    ) -> OptimizedImage | None:
        """Return a smaller re-encoding, or None to keep the original.

        Must not raise: failures fall back to the original.
        """
