"""
Secret Store Contract
=====================
Abstract key-value store with per-key TTL, atomic increment and TTL
introspection. Both engines talk to the store only through this interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

# Redis TTL sentinels, mirrored by every adapter.
TTL_MISSING = -2
TTL_PERSISTENT = -1


class BaseSecretStore(ABC):
    """
    Abstract base class for secret stores.

    ``get`` returns None for an absent key; ``ttl`` returns a value <= 0
    instead of raising. Transport failures raise SecretStoreError.
    """

    name: str = "base"

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int) -> None:
        """Write ``value`` with a TTL in seconds. ``ttl <= 0`` means no expiry."""
        ...

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key. Deleting an absent key is not an error."""
        ...

    @abstractmethod
    async def incr(self, key: str) -> int:
        """Atomically increment, creating the key at 1."""
        ...

    @abstractmethod
    async def expire(self, key: str, ttl: int) -> None:
        ...

    @abstractmethod
    async def ttl(self, key: str) -> int:
        """Remaining seconds, TTL_MISSING if absent, TTL_PERSISTENT if no expiry."""
        ...

    async def incr_window(self, key: str, ttl: int) -> int:
        """
        Increment a windowed counter.

        The TTL is attached only on the first increment so the window is not
        extended by later hits. Two racing callers may both see count 1; setting
        the TTL twice is harmless.

        Args:
            key: Counter key
            ttl: Window length in seconds

        Returns:
            Counter value after the increment
        """
        count = await self.incr(key)
        if count == 1 and ttl > 0:
            await self.expire(key, ttl)
        return count

    async def get_and_delete(self, key: str) -> Optional[str]:
        """
        Read a value and remove it in one step.

        Adapters override this with an atomic primitive; this fallback is a
        plain get followed by delete.
        """
        value = await self.get(key)
        if value is not None:
            await self.delete(key)
        return value

    async def close(self) -> None:
        """Release connections held by the adapter."""
        pass
