"""
Factory for creating URL storage instances.
"""

import logging
from enum import Enum

import redis.asyncio as redis

from .strategies import URLStorage, InMemoryURLStorage, RedisURLStorage, SQLURLStorage
from redirection_service.config import Settings
from redirection_service.database.connection import create_session_factory

logger = logging.getLogger(__name__)


class StorageBackend(Enum):
    """Available URL storage backends"""
    REDIS = "redis"
    SQL = "sql"
    MEMORY = "memory"


class StorageFactory:
    """
    Simple factory for creating URL storage instances.

    The returned instance is not connected yet; the caller awaits
    ``connect()`` during startup.
    """

    @classmethod
    def create(cls, backend: StorageBackend, settings: Settings) -> URLStorage:
        """
        Create a storage instance.

        Args:
            backend: Type of storage backend (from enum)
            settings: Resolved process configuration

        Returns:
            URLStorage instance
        """
        if backend == StorageBackend.REDIS:
            redis_client = redis.from_url(
                settings.redis_url,
                decode_responses=False,
                socket_connect_timeout=settings.redis_timeout,
                socket_timeout=settings.redis_timeout,
            )
            instance = RedisURLStorage(
                redis_client,
                key_prefix=settings.storage_key_prefix,
                ttl=settings.url_ttl_seconds or None,
            )

        elif backend == StorageBackend.SQL:
            instance = SQLURLStorage(
                create_session_factory(settings.database_url),
                ttl=settings.url_ttl_seconds or None,
            )

        elif backend == StorageBackend.MEMORY:
            instance = InMemoryURLStorage()

        else:
            raise ValueError(f"Unknown storage backend: {backend}")

        logger.info("URL storage created: %s", backend.value)
        return instance
