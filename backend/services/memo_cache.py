"""
Bounded single-flight memoizing cache for asyncio code.

One lock covers both the lookup and the whole population, so at most one
loader runs per cache instance at any time and every other caller (same key
or not) waits for it. Entries are evicted least-recently-used.
"""
from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Awaitable, Callable, Dict, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Loader = Callable[[K], Awaitable[V]]


def _retrieve_exception(task: "asyncio.Future") -> None:
    # The caller may have gone away; keep asyncio from reporting the error as unhandled.
    if not task.cancelled():
        task.exception()


class MemoCache(Generic[K, V]):
    """
    LRU cache whose misses are filled by an async loader.

    Values are shared with every caller and must be treated as immutable.
    A failed load stores nothing, so the next caller retries from scratch.
    """

    def __init__(self, capacity: int, name: str = "cache") -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.name = name
        self._entries: "OrderedDict[K, V]" = OrderedDict()
        self._lock = asyncio.Lock()
        self._stats: Dict[str, int] = {
            "hits": 0,
            "misses": 0,
            "evictions": 0,
            "errors": 0,
        }

    async def get_or_load(self, key: K, loader: Loader) -> V:
        """
        Return the cached value for ``key``, loading it on a miss.

        The lookup and load run in their own task: if the caller is cancelled
        (client disconnect) a load that already started still finishes and
        populates the cache for whoever asks next.
        """
        task = asyncio.ensure_future(self._get_or_load(key, loader))
        task.add_done_callback(_retrieve_exception)
        return await asyncio.shield(task)

    async def _get_or_load(self, key: K, loader: Loader) -> V:
        async with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                self._stats["hits"] += 1
                return self._entries[key]

            self._stats["misses"] += 1
            logger.debug("%s: miss for %s", self.name, key)
            try:
                value = await loader(key)
            except Exception:
                self._stats["errors"] += 1
                raise

            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                self._stats["evictions"] += 1
                logger.debug("%s: evicted %s", self.name, evicted)
            return value

    def clear(self) -> None:
        """
        Drop every entry.

        Deliberately does not wait for the lock: a load in progress completes
        and lands in the emptied table.
        """
        count = len(self._entries)
        self._entries.clear()
        logger.debug("%s: cleared %d entries", self.name, count)

    def __contains__(self, key: object) -> bool:
        """Membership test that does not count as a use."""
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> Dict[str, int]:
        return {**self._stats, "size": len(self._entries), "capacity": self.capacity}
