"""Unit tests for RedisCacheProvider."""

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from pkglikes.providers.cache import RedisCacheProvider
from pkglikes.providers.exceptions import CacheError


@pytest.fixture
def mock_redis_client():
    """Create a mock asyncio Redis client."""
    client = AsyncMock()
    client.get.return_value = None
    client.ping.return_value = True
    return client


@pytest.fixture
def redis_cache(mock_redis_client):
    """Create a Redis cache provider over the mock client."""
    return RedisCacheProvider(key_prefix="pkglikes", client=mock_redis_client)


class TestRedisCacheProvider:
    """Test Redis cache provider."""

    def test_init_without_url_or_client_raises(self):
        """Test that a Redis URL or client is required."""
        with pytest.raises(CacheError, match="Redis URL is required"):
            RedisCacheProvider()

    def test_init_from_url(self):
        """Test creating a client from a URL (no connection is made)."""
        cache = RedisCacheProvider(redis_url="redis://localhost:6379/0")

        assert cache.get_backend_name() == "redis"

    @pytest.mark.asyncio
    async def test_get_hit(self, redis_cache, mock_redis_client):
        """Test cache hit decodes JSON from the prefixed key."""
        mock_redis_client.get.return_value = json.dumps(5)

        assert await redis_cache.get("likes:vue:total") == 5
        mock_redis_client.get.assert_awaited_once_with("pkglikes:likes:vue:total")

    @pytest.mark.asyncio
    async def test_get_miss(self, redis_cache):
        """Test cache miss."""
        assert await redis_cache.get("likes:vue:total") is None

    @pytest.mark.asyncio
    async def test_get_false_value_is_returned(self, redis_cache, mock_redis_client):
        """Test that a stored false is a hit."""
        mock_redis_client.get.return_value = "false"

        assert await redis_cache.get("liked") is False

    @pytest.mark.asyncio
    async def test_get_never_raises(self, redis_cache, mock_redis_client):
        """Test that backend errors read as a miss."""
        mock_redis_client.get.side_effect = RedisConnectionError("refused")

        assert await redis_cache.get("likes:vue:total") is None

    @pytest.mark.asyncio
    async def test_get_corrupt_value_reads_as_miss(self, redis_cache, mock_redis_client):
        """Test that undecodable values read as a miss."""
        mock_redis_client.get.return_value = "{not json"

        assert await redis_cache.get("likes:vue:total") is None

    @pytest.mark.asyncio
    async def test_set_with_ttl_delegates_expiry(self, redis_cache, mock_redis_client):
        """Test that TTL is handed to Redis."""
        await redis_cache.set("likes:vue:total", 6, 300)

        mock_redis_client.set.assert_awaited_once_with("pkglikes:likes:vue:total", "6", ex=300)

    @pytest.mark.asyncio
    async def test_set_without_ttl(self, redis_cache, mock_redis_client):
        """Test storing without expiry."""
        await redis_cache.set("key", {"a": 1})

        mock_redis_client.set.assert_awaited_once_with("pkglikes:key", '{"a": 1}')

    @pytest.mark.asyncio
    async def test_set_error_is_logged_not_raised(self, redis_cache, mock_redis_client, caplog):
        """Test that write errors do not propagate."""
        mock_redis_client.set.side_effect = RedisConnectionError("refused")

        await redis_cache.set("key", 1, 300)

        assert "Failed to set key pkglikes:key" in caplog.text

    @pytest.mark.asyncio
    async def test_delete(self, redis_cache, mock_redis_client):
        """Test delete uses the prefixed key."""
        await redis_cache.delete("likes:vue:users:did:plc:a:shadow")

        mock_redis_client.delete.assert_awaited_once_with("pkglikes:likes:vue:users:did:plc:a:shadow")

    @pytest.mark.asyncio
    async def test_key_without_prefix(self, mock_redis_client):
        """Test keys are used as-is without a prefix."""
        cache = RedisCacheProvider(client=mock_redis_client)
        await cache.delete("likes:vue:total")

        mock_redis_client.delete.assert_awaited_once_with("likes:vue:total")

    @pytest.mark.asyncio
    async def test_health_check(self, redis_cache, mock_redis_client):
        """Test health check success and failure."""
        assert await redis_cache.health_check() is True

        mock_redis_client.ping.side_effect = RedisConnectionError("refused")
        assert await redis_cache.health_check() is False

    @pytest.mark.asyncio
    async def test_close(self, redis_cache, mock_redis_client):
        """Test close releases the client."""
        await redis_cache.close()

        mock_redis_client.aclose.assert_awaited_once()
