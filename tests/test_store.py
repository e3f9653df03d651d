"""
Unit Tests for Secret Stores
============================
"""

import pytest
from unittest.mock import AsyncMock
from redis.exceptions import ConnectionError as RedisConnectionError


class TestInMemoryStore:
    """Tests for the in-memory adapter."""

    @pytest.mark.asyncio
    async def test_set_get_delete(self, store):
        """Should round-trip a value and delete idempotently."""
        await store.set("k", "v", 60)
        assert await store.get("k") == "v"

        await store.delete("k")
        await store.delete("k")
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_values_expire(self, store, clock):
        """Values should vanish once the TTL passes."""
        await store.set("k", "v", 10)

        clock.advance(9)
        assert await store.get("k") == "v"

        clock.advance(1)
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_ttl_on_absent_key(self, store):
        """TTL of a missing key should be non-positive, not an error."""
        assert await store.ttl("missing") <= 0

    @pytest.mark.asyncio
    async def test_ttl_counts_down(self, store, clock):
        """TTL should report remaining seconds."""
        await store.set("k", "1", 60)
        clock.advance(15)

        assert await store.ttl("k") == 45

    @pytest.mark.asyncio
    async def test_incr_creates_at_one(self, store):
        """First increment should create the key at 1."""
        assert await store.incr("c") == 1
        assert await store.incr("c") == 2

    @pytest.mark.asyncio
    async def test_incr_window_sets_ttl_once(self, store, clock):
        """TTL should be attached on the first increment only."""
        assert await store.incr_window("c", 60) == 1
        clock.advance(30)
        assert await store.incr_window("c", 60) == 2

        assert await store.ttl("c") == 30

        clock.advance(30)
        assert await store.incr_window("c", 60) == 1

    @pytest.mark.asyncio
    async def test_concurrent_incr(self, store):
        """Concurrent increments should all be counted."""
        import asyncio

        results = await asyncio.gather(*(store.incr("c") for _ in range(20)))

        assert sorted(results) == list(range(1, 21))

    @pytest.mark.asyncio
    async def test_get_and_delete(self, store, clock):
        """Should return the value once and treat expired keys as absent."""
        await store.set("k", "v", 10)

        assert await store.get_and_delete("k") == "v"
        assert await store.get_and_delete("k") is None

        await store.set("k", "v", 10)
        clock.advance(10)
        assert await store.get_and_delete("k") is None


class TestRedisStore:
    """Tests for the Redis adapter against a mocked client."""

    def _store(self):
        from secret_core.store import RedisSecretStore

        client = AsyncMock()
        return RedisSecretStore(client), client

    @pytest.mark.asyncio
    async def test_set_uses_expiry(self):
        """Should pass the TTL as EX."""
        store, client = self._store()

        await store.set("otp:register:a@b.c", "hash", 300)

        client.set.assert_awaited_once_with("otp:register:a@b.c", "hash", ex=300)

    @pytest.mark.asyncio
    async def test_get_decodes_bytes(self):
        """Should return str for bytes responses and None for misses."""
        store, client = self._store()

        client.get.return_value = b"user@test.com"
        assert await store.get("k") == "user@test.com"

        client.get.return_value = None
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_incr_window_expires_on_first(self):
        """Should call EXPIRE only when the counter is new."""
        store, client = self._store()

        client.incr.return_value = 1
        await store.incr_window("otp:rate:a@b.c", 60)
        client.expire.assert_awaited_once_with("otp:rate:a@b.c", 60)

        client.expire.reset_mock()
        client.incr.return_value = 2
        await store.incr_window("otp:rate:a@b.c", 60)
        client.expire.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transport_error_is_wrapped(self):
        """Redis errors should surface as SecretStoreError with the operation."""
        from secret_core.exceptions import SecretStoreError

        store, client = self._store()
        client.get.side_effect = RedisConnectionError("connection refused")

        with pytest.raises(SecretStoreError) as exc_info:
            await store.get("k")

        assert exc_info.value.operation == "get"
        assert isinstance(exc_info.value.__cause__, RedisConnectionError)

    @pytest.mark.asyncio
    async def test_cancellation_is_not_wrapped(self):
        """Cancellation should propagate untouched."""
        import asyncio

        store, client = self._store()
        client.ttl.side_effect = asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await store.ttl("k")

    @pytest.mark.asyncio
    async def test_get_and_delete_uses_getdel(self):
        """Should consume with a single GETDEL and wrap its errors."""
        from secret_core.exceptions import SecretStoreError

        store, client = self._store()

        client.getdel.return_value = b"user@test.com"
        assert await store.get_and_delete("reset:token:h") == "user@test.com"
        client.getdel.assert_awaited_once_with("reset:token:h")
        client.get.assert_not_awaited()

        client.getdel.side_effect = RedisConnectionError("connection refused")
        with pytest.raises(SecretStoreError) as exc_info:
            await store.get_and_delete("reset:token:h")

        assert exc_info.value.operation == "getdel"


class TestBaseStore:
    """Tests for the default store helpers."""

    @pytest.mark.asyncio
    async def test_get_and_delete_fallback(self):
        """Adapters without an atomic primitive should get then delete."""
        from secret_core.store import BaseSecretStore

        class DictStore(BaseSecretStore):
            def __init__(self):
                self.data = {}

            async def set(self, key, value, ttl):
                self.data[key] = value

            async def get(self, key):
                return self.data.get(key)

            async def delete(self, key):
                self.data.pop(key, None)

            async def incr(self, key):
                self.data[key] = str(int(self.data.get(key, "0")) + 1)
                return int(self.data[key])

            async def expire(self, key, ttl):
                pass

            async def ttl(self, key):
                return -2

        store = DictStore()
        await store.set("k", "v", 60)

        assert await store.get_and_delete("k") == "v"
        assert store.data == {}
        assert await store.get_and_delete("k") is None
