"""
Discard stale fetch results.

Each fetch started for a role takes the next generation number for that
role. When it completes, its result is accepted only if no newer fetch was
started for the same role in the meantime; arrival order does not matter.
"""

import logging
from typing import Any, Awaitable, Dict, Tuple

logger = logging.getLogger(__name__)


class FetchGuard:

    def __init__(self):
        self._generations: Dict[str, int] = {}

    def begin(self, role) -> int:
        """Start a fetch for ``role`` and return its generation tag."""
        key = getattr(role, "value", role)
        generation = self._generations.get(key, 0) + 1
        self._generations[key] = generation
        return generation

    def invalidate(self, role):
        """Make every fetch in flight for ``role`` stale."""
        self.begin(role)

    def is_current(self, role, generation: int) -> bool:
        return self._generations.get(getattr(role, "value", role)) == generation

    def accept(self, role, generation: int) -> bool:
        if self.is_current(role, generation):
            return True
        logger.debug(f"Discarding stale result for {getattr(role, 'value', role)} (generation {generation})")
        return False

    async def run(self, role, fetch: Awaitable) -> Tuple[bool, Any]:
        """
        Await ``fetch`` under a new generation for ``role``.

        Returns ``(True, result)`` when the result is still current and
        ``(False, None)`` when a newer fetch superseded it. A superseded
        fetch that fails is discarded the same way; a current one re-raises.
        """
        generation = self.begin(role)
        try:
            result = await fetch
        except Exception as e:
            if self.is_current(role, generation):
                raise
            logger.debug(f"Discarding stale failure for {getattr(role, 'value', role)} (generation {generation}): {e}")
            return False, None
        if self.accept(role, generation):
            return True, result
        return False, None
