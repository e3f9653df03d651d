"""
In-Memory Secret Store
======================
Process-local store with lazy per-key expiry for development and testing.
"""

import asyncio
import math
import time
from typing import Callable, Dict, Optional, Tuple

from ..exceptions import SecretStoreError
from .base import BaseSecretStore, TTL_MISSING, TTL_PERSISTENT


class InMemorySecretStore(BaseSecretStore):
    """
    Simple in-memory secret store.

    For development and testing only.
    Use RedisSecretStore in production.
    """

    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            clock: Time source in seconds; tests pass a fake to skip ahead
        """
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self._lock = asyncio.Lock()

    def _live(self, key: str) -> Optional[Tuple[str, Optional[float]]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        return entry

    async def set(self, key: str, value: str, ttl: int) -> None:
        expires_at = self._clock() + ttl if ttl > 0 else None
        self._data[key] = (str(value), expires_at)

    async def get(self, key: str) -> Optional[str]:
        entry = self._live(key)
        return entry[0] if entry else None

    async def get_and_delete(self, key: str) -> Optional[str]:
        async with self._lock:
            entry = self._live(key)
            if entry is None:
                return None
            del self._data[key]
            return entry[0]

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def incr(self, key: str) -> int:
        async with self._lock:
            entry = self._live(key)
            if entry is None:
                self._data[key] = ("1", None)
                return 1
            value, expires_at = entry
            try:
                count = int(value) + 1
            except ValueError as e:
                raise SecretStoreError("incr", key=key, cause=e) from e
            self._data[key] = (str(count), expires_at)
            return count

    async def expire(self, key: str, ttl: int) -> None:
        entry = self._live(key)
        if entry is None:
            return
        if ttl <= 0:
            del self._data[key]
            return
        self._data[key] = (entry[0], self._clock() + ttl)

    async def ttl(self, key: str) -> int:
        entry = self._live(key)
        if entry is None:
            return TTL_MISSING
        expires_at = entry[1]
        if expires_at is None:
            return TTL_PERSISTENT
        return math.ceil(expires_at - self._clock())

    def keys(self):
        """Live keys, for inspection in tests."""
        return [k for k in list(self._data) if self._live(k) is not None]
