"""
Cache Store

In-memory image cache shared by every request of the process:
- One asyncio lock guards all access, including the remote fetch on a miss
- No TTL and no access tracking, entries are raw bytes keyed by name
- Trimming removes entries in dict iteration order, not by recency

The store may hold more than `max_entries` between an insert and the next
trim. Callers schedule `trim()` after responding; it takes the lock itself.
"""

import asyncio
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class CacheStore:
    """
    Bounded name -> bytes mapping behind a single exclusive lock.

    Usage:
        async with store.lock:
            data = store.lookup(name)
            if data is None:
                store.insert(name, await fetch(name))
        ...
        await store.trim()
    """

    def __init__(self, max_entries: int = 2):
        self.max_entries = max_entries
        self._entries: Dict[str, bytes] = {}
        self._lock = asyncio.Lock()

    @property
    def lock(self) -> asyncio.Lock:
        """The exclusive lock every read and write must hold."""
        return self._lock

    def _check_locked(self) -> None:
        if not self._lock.locked():
            raise RuntimeError("CacheStore accessed without holding its lock")

    def lookup(self, name: str) -> Optional[bytes]:
        """Return cached bytes for `name`, or None. Caller holds the lock."""
        self._check_locked()
        return self._entries.get(name)

    def insert(self, name: str, data: bytes) -> None:
        """Add or overwrite an entry. Caller holds the lock."""
        self._check_locked()
        self._entries[name] = data

    async def trim(self, max_entries: Optional[int] = None) -> int:
        """
        Shrink the store to `max_entries` (default: the configured capacity).

        Entries are dropped in whatever order the dict yields them, which may
        well be the ones cached most recently.

        Returns:
            Number of entries removed.
        """
        limit = self.max_entries if max_entries is None else max_entries
        async with self._lock:
            size = len(self._entries)
            victims = []
            for name in self._entries:
                if size <= limit:
                    break
                victims.append(name)
                size -= 1
            for name in victims:
                del self._entries[name]
            stats = self._stats()

        if victims:
            logger.debug(
                f"[CacheStore] Trimmed {len(victims)} entries, "
                f"{stats['total_entries']} left ({stats['total_size_bytes']} bytes)"
            )
        return len(victims)

    def __len__(self) -> int:
        return len(self._entries)

    def _stats(self) -> dict:
        """Entry count and payload size (internal, assumes lock held)."""
        total = sum(len(v) for v in self._entries.values())
        return {
            "total_entries": len(self._entries),
            "max_entries": self.max_entries,
            "total_size_bytes": total,
            "total_size_mb": round(total / (1024 * 1024), 2),
        }

    async def stats(self) -> dict:
        """Entry count and payload size."""
        async with self._lock:
            return self._stats()
