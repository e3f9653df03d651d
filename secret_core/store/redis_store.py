"""
Redis Secret Store
==================
Production store backed by ``redis.asyncio``.
"""

from typing import Optional

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..exceptions import SecretStoreError
from .base import BaseSecretStore

logger = structlog.get_logger(__name__)


def _decode(value) -> Optional[str]:
    if value is None:
        return None
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


class RedisSecretStore(BaseSecretStore):
    """
    Redis-backed secret store.

    INCR is atomic server-side, which is the only concurrency guarantee the
    engines rely on.
    """

    name = "redis"

    def __init__(self, redis: Redis):
        """
        Args:
            redis: Async Redis client
        """
        self.redis = redis

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisSecretStore":
        """Create a store with its own connection pool."""
        return cls(Redis.from_url(url, decode_responses=True, **kwargs))

    async def set(self, key: str, value: str, ttl: int) -> None:
        try:
            if ttl > 0:
                await self.redis.set(key, value, ex=ttl)
            else:
                await self.redis.set(key, value)
        except RedisError as e:
            raise SecretStoreError("set", key=key, cause=e) from e

    async def get(self, key: str) -> Optional[str]:
        try:
            return _decode(await self.redis.get(key))
        except RedisError as e:
            raise SecretStoreError("get", key=key, cause=e) from e

    async def get_and_delete(self, key: str) -> Optional[str]:
        """GETDEL, so only one caller ever sees the value."""
        try:
            return _decode(await self.redis.getdel(key))
        except RedisError as e:
            raise SecretStoreError("getdel", key=key, cause=e) from e

    async def delete(self, key: str) -> None:
        try:
            await self.redis.delete(key)
        except RedisError as e:
            raise SecretStoreError("delete", key=key, cause=e) from e

    async def incr(self, key: str) -> int:
        try:
            return int(await self.redis.incr(key))
        except RedisError as e:
            raise SecretStoreError("incr", key=key, cause=e) from e

    async def expire(self, key: str, ttl: int) -> None:
        try:
            await self.redis.expire(key, ttl)
        except RedisError as e:
            raise SecretStoreError("expire", key=key, cause=e) from e

    async def ttl(self, key: str) -> int:
        try:
            return int(await self.redis.ttl(key))
        except RedisError as e:
            raise SecretStoreError("ttl", key=key, cause=e) from e

    async def close(self) -> None:
        await self.redis.aclose()
        logger.info("Secret store closed", store=self.name)
