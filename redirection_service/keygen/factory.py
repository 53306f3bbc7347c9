"""
Factory for creating key generators.
"""

import logging
from enum import Enum

import redis.asyncio as redis

from redirection_service.config import Settings
from redirection_service.keygen.strategies import (
    KeyGenerator,
    HTTPKeyGenerator,
    InMemoryCounterKeyGenerator,
    RandomKeyGenerator,
    RedisCounterKeyGenerator,
)

logger = logging.getLogger(__name__)


class KeyGeneratorBackend(Enum):
    """Available key generation backends"""
    HTTP = "http"
    REDIS_COUNTER = "redis_counter"
    MEMORY_COUNTER = "memory_counter"
    RANDOM = "random"


class KeyGeneratorFactory:
    """Factory for creating key generators from settings"""

    @classmethod
    def create(cls, backend: KeyGeneratorBackend, settings: Settings) -> KeyGenerator:
        """
        Create a key generator.

        Args:
            backend: Type of generator to create
            settings: Resolved process configuration

        Returns:
            KeyGenerator instance

        Raises:
            ValueError: If backend is unknown
        """
        if backend == KeyGeneratorBackend.HTTP:
            instance = HTTPKeyGenerator(
                settings.key_generator_url,
                timeout=settings.key_generator_timeout,
            )
        elif backend == KeyGeneratorBackend.REDIS_COUNTER:
            redis_client = redis.from_url(
                settings.redis_url,
                socket_connect_timeout=settings.redis_timeout,
                socket_timeout=settings.redis_timeout,
            )
            instance = RedisCounterKeyGenerator(
                redis_client,
                counter_name=settings.key_counter_name,
                salt=settings.key_salt,
                max_length=settings.key_length,
            )
        elif backend == KeyGeneratorBackend.MEMORY_COUNTER:
            instance = InMemoryCounterKeyGenerator(
                salt=settings.key_salt,
                max_length=settings.key_length,
            )
        elif backend == KeyGeneratorBackend.RANDOM:
            instance = RandomKeyGenerator(length=settings.key_length)
        else:
            raise ValueError(f"Unknown key generator backend: {backend}")

        logger.info("Key generator created: %s", backend.value)
        return instance
