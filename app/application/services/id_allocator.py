"""Public identifier allocation with collision checks against the metadata store."""

import logging

from app.application.interfaces.repositories import IStoredObjectRepository
from app.core.constants import MAX_ID_ATTEMPTS
from app.shared.utils.generators import generate_fallback_id, generate_public_id

logger = logging.getLogger(__name__)


class IdAllocator:
    """Hands out short ids; switches to a longer hex id after repeated collisions.

    Never fails. A metadata lookup error ends the probing and the hex
    fallback is returned, relying on its much larger space for uniqueness.
    """

    def __init__(
        self,
        repo: IStoredObjectRepository,
        max_attempts: int = MAX_ID_ATTEMPTS,
    ) -> None:
        self.repo = repo
        self.max_attempts = max_attempts

    async def allocate(self) -> str:
        for _ in range(self.max_attempts):
            candidate = generate_public_id()
            try:
                taken = await self.repo.exists(candidate)
            except Exception:
                logger.warning("Id lookup failed; using hex fallback id", exc_info=True)
                return generate_fallback_id()
            if not taken:
                return candidate
        logger.info("No free short id after %d attempts; using hex fallback id", self.max_attempts)
        return generate_fallback_id()
