"""
Time-bounded cache of PatternIndex objects, one slot per stack.

Rebuilds are demand-driven: the request that finds a stale slot pays for
the rebuild. Two concurrent rebuilds of the same stack both write the slot
(last write wins); neither corrupts it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional

from .builder import build_index
from .models import PatternIndex

logger = logging.getLogger(__name__)

IndexBuilder = Callable[[Path, str, int], Awaitable[PatternIndex]]


@dataclass(frozen=True)
class CacheSlot:
    index: PatternIndex
    built_at_ms: float


class IndexCache:
    """Caches built indexes per stack for ``cache_ttl_seconds``."""

    def __init__(
        self,
        root: Path,
        cache_ttl_seconds: int,
        clock: Callable[[], float] = time.time,
        builder: IndexBuilder = build_index,
    ):
        """Initialize the cache.

        Args:
            root: Content repository root
            cache_ttl_seconds: Age after which a slot is rebuilt
            clock: Returns the current time in seconds
            builder: Coroutine building an index for (root, stack, ttl)
        """
        self.root = Path(root)
        self.cache_ttl_seconds = cache_ttl_seconds
        self._clock = clock
        self._builder = builder
        self._slots: Dict[str, CacheSlot] = {}

    async def get_index(self, stack: str) -> PatternIndex:
        """Return the cached index for ``stack``, rebuilding it when stale."""
        now_ms = self._clock() * 1000
        slot = self._slots.get(stack)

        if slot is not None:
            age_seconds = (now_ms - slot.built_at_ms) / 1000
            if age_seconds < self.cache_ttl_seconds:
                logger.debug(f"Index cache hit for {stack} (age {age_seconds:.1f}s)")
                return slot.index

        index = await self._builder(self.root, stack, self.cache_ttl_seconds)
        self._slots[stack] = CacheSlot(index=index, built_at_ms=now_ms)
        return index

    def clear(self, stack: Optional[str] = None) -> None:
        """Evict one stack, or every stack when ``stack`` is None."""
        if stack is None:
            self._slots.clear()
        else:
            self._slots.pop(stack, None)

    def cached_stacks(self):
        return sorted(self._slots)
