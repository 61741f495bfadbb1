"""Keyed asyncio locks."""

import asyncio
from collections.abc import Hashable


class KeyedLock:
    """Lazily created ``asyncio.Lock`` per key.

    Used for the per-segment store gate and the per-path transcript lock.
    Locks are never evicted; the key space (segments, media files) is small.

    Example:
        locks = KeyedLock()
        async with locks("alice"):
            ...
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}

    def get(self, key: Hashable) -> asyncio.Lock:
        """Return the lock for ``key``, creating it on first use."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def __call__(self, key: Hashable) -> asyncio.Lock:
        return self.get(key)

    def __len__(self) -> int:
        return len(self._locks)
