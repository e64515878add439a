"""Service factory for creating provider instances based on configuration."""

import logging
from typing import Optional

from pkglikes.config import Config
from pkglikes.core.interfaces import BacklinkIndex, CacheStore, RecordStore
from pkglikes.core.subject import SubjectRefBuilder
from pkglikes.core.usecases import LikeCoordinator
from pkglikes.providers.cache import MemoryCacheProvider, RedisCacheProvider
from pkglikes.providers.index import ConstellationIndex, MemoryBacklinkIndex
from pkglikes.providers.records import AtprotoRecordStore, MemoryRecordStore


logger = logging.getLogger(__name__)


class ServiceFactoryError(Exception):
    """Exception raised by ServiceFactory."""
    pass


class ServiceFactory:
    """Factory for creating service instances based on configuration.

    Backends are chosen here, once, so the like coordinator never looks at
    the environment.
    """

    def __init__(self, config: Config):
        """
        Initialize service factory with configuration.

        Args:
            config: Application configuration
        """
        self.config = config
        self._memory_record_store: Optional[MemoryRecordStore] = None

    def _get_memory_record_store(self) -> MemoryRecordStore:
        """Memory index and memory record store must share one instance."""
        if self._memory_record_store is None:
            self._memory_record_store = MemoryRecordStore()
        return self._memory_record_store

    def create_cache_store(self) -> CacheStore:
        """
        Create cache store based on configuration.

        Returns:
            CacheStore instance

        Raises:
            ServiceFactoryError: If provider creation fails
        """
        cache_type = self.config.cache.type.lower()
        logger.debug(f"Creating cache store: {cache_type}")

        if cache_type == "auto":
            if self.config.is_production and self.config.redis_url:
                cache_type = "redis"
            else:
                cache_type = "memory"
            logger.info(f"Cache backend resolved to {cache_type} in {self.config.environment} environment")

        try:
            if cache_type == "redis":
                if not self.config.redis_url:
                    raise ServiceFactoryError("Redis URL not configured")
                return RedisCacheProvider(
                    redis_url=self.config.redis_url,
                    key_prefix=self.config.cache.key_prefix,
                )
            elif cache_type == "memory":
                return MemoryCacheProvider()
            else:
                raise ServiceFactoryError(f"Unknown cache type: {self.config.cache.type}")

        except ServiceFactoryError:
            raise
        except Exception as e:
            raise ServiceFactoryError(f"Failed to create cache store: {e}") from e

    def create_backlink_index(self) -> BacklinkIndex:
        """
        Create backlink index provider based on configuration.

        Returns:
            BacklinkIndex instance

        Raises:
            ServiceFactoryError: If provider creation fails
        """
        index_type = self.config.backlink_index.type.lower()
        index_config = self.config.backlink_index.config
        logger.debug(f"Creating backlink index: {index_type}")

        try:
            if index_type == "constellation":
                return ConstellationIndex(
                    base_url=self.config.constellation_base_url,
                    timeout_seconds=index_config.get("timeout_seconds", 10),
                    max_retries=index_config.get("max_retries", 1),
                    retry_delay=index_config.get("retry_delay", 0.5),
                    records_limit=index_config.get("records_limit", 16),
                    user_agent=index_config.get("user_agent"),
                )
            elif index_type == "memory":
                return MemoryBacklinkIndex(self._get_memory_record_store())
            else:
                raise ServiceFactoryError(f"Unknown backlink index type: {self.config.backlink_index.type}")

        except ServiceFactoryError:
            raise
        except Exception as e:
            raise ServiceFactoryError(f"Failed to create backlink index: {e}") from e

    def create_record_store(self) -> RecordStore:
        """
        Create record store based on configuration.

        Returns:
            RecordStore instance

        Raises:
            ServiceFactoryError: If provider creation fails
        """
        store_type = self.config.record_store.type.lower()
        logger.debug(f"Creating record store: {store_type}")

        try:
            if store_type == "atproto":
                if not self.config.atproto_service_url:
                    raise ServiceFactoryError("AT Protocol service URL not configured")
                return AtprotoRecordStore(
                    service_url=self.config.atproto_service_url,
                    access_token=self.config.atproto_access_token,
                    timeout_seconds=self.config.record_store.config.get("timeout_seconds", 15),
                )
            elif store_type == "memory":
                return self._get_memory_record_store()
            else:
                raise ServiceFactoryError(f"Unknown record store type: {self.config.record_store.type}")

        except ServiceFactoryError:
            raise
        except Exception as e:
            raise ServiceFactoryError(f"Failed to create record store: {e}") from e

    def create_like_coordinator(
        self,
        cache: CacheStore,
        index: BacklinkIndex,
        record_store: RecordStore,
    ) -> LikeCoordinator:
        """
        Create the like coordinator wired to the given services.

        Args:
            cache: Cache store
            index: Backlink index
            record_store: Record store

        Returns:
            LikeCoordinator instance
        """
        likes = self.config.likes
        return LikeCoordinator(
            cache=cache,
            index=index,
            record_store=record_store,
            collection=likes.collection,
            path_field=likes.path_field,
            subject_ref=SubjectRefBuilder(likes.subject_base_url),
            cache_ttl_seconds=likes.cache_ttl_seconds,
            serialize_writes=likes.serialize_writes,
        )
