"""Redis cache provider implementation."""

import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ...core.interfaces import CacheStore
from ..exceptions import CacheError

logger = logging.getLogger(__name__)


class RedisCacheProvider(CacheStore):
    """Redis backend provider. Entry expiry is delegated to Redis TTLs."""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        key_prefix: str = "",
        client: Optional[redis.Redis] = None,
    ):
        """
        Initialize Redis cache provider.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            key_prefix: Namespace prepended to every key
            client: Existing Redis client to use instead of redis_url

        Raises:
            CacheError: If neither a URL nor a client is given, or the URL is invalid
        """
        self.key_prefix = key_prefix

        if client is not None:
            self._redis = client
        elif redis_url:
            try:
                self._redis = redis.from_url(redis_url, decode_responses=True)
            except ValueError as e:
                raise CacheError(f"Invalid Redis URL: {e}") from e
        else:
            raise CacheError("Redis URL is required for the Redis cache provider")

        logger.debug("Redis cache provider initialized")

    def _format_key(self, key: str) -> str:
        """Get namespaced Redis key."""
        if self.key_prefix:
            return f"{self.key_prefix}:{key}"
        return key

    async def get(self, key: str) -> Optional[Any]:
        formatted_key = self._format_key(key)
        try:
            raw = await self._redis.get(formatted_key)
            if raw is None:
                return None
            return json.loads(raw)
        except (RedisError, ValueError) as e:
            logger.warning(f"Failed to get key {formatted_key} from Redis: {e}")
            return None

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        formatted_key = self._format_key(key)
        try:
            raw = json.dumps(value)
            if ttl_seconds:
                await self._redis.set(formatted_key, raw, ex=ttl_seconds)
            else:
                await self._redis.set(formatted_key, raw)
        except RedisError as e:
            logger.error(f"Failed to set key {formatted_key} in Redis: {e}")

    async def delete(self, key: str) -> None:
        formatted_key = self._format_key(key)
        try:
            await self._redis.delete(formatted_key)
        except RedisError as e:
            logger.warning(f"Failed to delete key {formatted_key} from Redis: {e}")

    async def health_check(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    def get_backend_name(self) -> str:
        return "redis"

    async def close(self) -> None:
        await self._redis.aclose()
