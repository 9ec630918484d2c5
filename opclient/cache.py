"""
Single-flight query cache.

At most one task exists per key for the lifetime of the cache. Concurrent
callers asking for the same key attach to the task that is already running;
later callers get its result without spawning anything. Safe without a lock
because asyncio is single-threaded and the check-and-insert below never
yields to the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class QueryCache:
    """Process-lifetime memo of in-flight and resolved query results."""

    def __init__(self) -> None:
        self._entries: dict[Hashable, asyncio.Future[Any]] = {}
        self.hits = 0
        self.misses = 0

    async def resolve(self, key: Hashable, factory: Callable[[], Awaitable[T]]) -> T:
        """Return the result for ``key``, running ``factory`` only on first use.

        Failed or cancelled results are evicted so the next caller retries.
        """
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            logger.debug("Cache miss: %s", key[0] if isinstance(key, tuple) else key)
            entry = asyncio.ensure_future(factory())
            self._entries[key] = entry
            entry.add_done_callback(lambda fut: self._evict_failed(key, fut))
        else:
            self.hits += 1

        # shield: one caller giving up must not cancel the shared task
        return await asyncio.shield(entry)

    def _evict_failed(self, key: Hashable, fut: asyncio.Future[Any]) -> None:
        if not fut.cancelled() and fut.exception() is None:
            return
        if self._entries.get(key) is fut:
            del self._entries[key]

    def clear(self) -> None:
        """Forget every entry. Tasks already running are left to finish."""
        self._entries.clear()

    def stats(self) -> dict[str, int]:
        return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses}

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
