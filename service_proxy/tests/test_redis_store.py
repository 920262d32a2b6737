"""
Unit tests for the Redis token store.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
import redis.asyncio as redis

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_proxy.app.caching.stores import RedisTokenStore
from shared.errors import CacheUnavailableError


class TestRedisTokenStore:
    """Test cases for RedisTokenStore."""

    @pytest.fixture
    def redis_client(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=None)
        client.setex = AsyncMock()
        client.delete = AsyncMock()
        client.ping = AsyncMock(return_value=True)
        client.aclose = AsyncMock()
        return client

    @pytest.fixture
    def store(self, redis_client):
        """Store wired to a mocked Redis client."""
        store = RedisTokenStore("redis://localhost:6379/0")
        store.redis = redis_client
        return store

    @pytest.mark.asyncio
    async def test_get(self, store, redis_client):
        redis_client.get.return_value = '{"access_token": "T"}'

        assert await store.get("bc_access_token") == '{"access_token": "T"}'
        redis_client.get.assert_awaited_once_with("bc_access_token")

    @pytest.mark.asyncio
    async def test_set_uses_setex(self, store, redis_client):
        await store.set("bc_access_token", "payload", 3300)
        redis_client.setex.assert_awaited_once_with("bc_access_token", 3300, "payload")

    @pytest.mark.asyncio
    async def test_delete(self, store, redis_client):
        await store.delete("bc_access_token")
        redis_client.delete.assert_awaited_once_with("bc_access_token")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation, args", [
        ("get", ("bc_access_token",)),
        ("set", ("bc_access_token", "payload", 60)),
        ("delete", ("bc_access_token",)),
    ])
    async def test_redis_errors_become_cache_unavailable(self, store, redis_client, operation, args):
        failure = redis.ConnectionError("Connection refused")
        redis_client.get.side_effect = failure
        redis_client.setex.side_effect = failure
        redis_client.delete.side_effect = failure

        with pytest.raises(CacheUnavailableError):
            await getattr(store, operation)(*args)

    @pytest.mark.asyncio
    async def test_start_tolerates_unreachable_server(self, store, redis_client):
        redis_client.ping.side_effect = redis.ConnectionError("Connection refused")

        await store.start()

        assert store.redis is redis_client

    @pytest.mark.asyncio
    async def test_stop_closes_connection(self, store, redis_client):
        await store.stop()

        redis_client.aclose.assert_awaited_once()
        assert store.redis is None

    @pytest.mark.asyncio
    async def test_health_check(self, store, redis_client):
        assert await store.health_check() is True

        redis_client.ping.side_effect = redis.ConnectionError("down")
        assert await store.health_check() is False

    def test_client_created_lazily(self):
        with patch('service_proxy.app.caching.stores.redis.from_url') as from_url:
            store = RedisTokenStore("redis://cache:6379/1")
            from_url.assert_not_called()

            store._get_redis()
            store._get_redis()

            from_url.assert_called_once()
            assert from_url.call_args.args == ("redis://cache:6379/1",)
