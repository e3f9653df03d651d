"""
Secret Store
============
Expiring key-value store contract and its Redis and in-memory adapters.
"""

from .base import BaseSecretStore, TTL_MISSING, TTL_PERSISTENT
from .in_memory import InMemorySecretStore
from .redis_store import RedisSecretStore

__all__ = [
    "BaseSecretStore",
    "TTL_MISSING",
    "TTL_PERSISTENT",
    "InMemorySecretStore",
    "RedisSecretStore",
]
