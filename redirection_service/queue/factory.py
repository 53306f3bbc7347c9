"""
Factory for creating visit event dispatchers.
"""

import logging
from enum import Enum

import redis.asyncio as redis

from .dispatcher import EventDispatcher, TransportDispatcher
from .transports import ByteTransport, InMemoryTransport, RedisStreamTransport
from redirection_service.config import Settings

logger = logging.getLogger(__name__)


class DispatchBackend(Enum):
    """Available dispatch transports"""
    REDIS_STREAMS = "redis_streams"
    MEMORY = "memory"


class DispatcherFactory:
    """
    Simple factory for creating dispatchers.

    Builds the byte transport for the backend and wraps it in a
    TransportDispatcher bound to the configured routing key.
    """

    @classmethod
    def create(cls, backend: DispatchBackend, settings: Settings) -> EventDispatcher:
        """
        Create a dispatcher.

        Args:
            backend: Type of dispatch transport (from enum)
            settings: Resolved process configuration

        Returns:
            EventDispatcher instance
        """
        transport = cls.create_transport(backend, settings)
        logger.info(
            "Visit dispatcher created: %s -> %s", backend.value, settings.dispatch_routing_key
        )
        return TransportDispatcher(transport, settings.dispatch_routing_key)

    @classmethod
    def create_transport(cls, backend: DispatchBackend, settings: Settings) -> ByteTransport:
        if backend == DispatchBackend.REDIS_STREAMS:
            redis_client = redis.from_url(
                settings.redis_url,
                decode_responses=False,
                socket_connect_timeout=settings.redis_timeout,
                socket_timeout=settings.redis_timeout,
            )
            return RedisStreamTransport(redis_client, maxlen=settings.dispatch_stream_maxlen)

        if backend == DispatchBackend.MEMORY:
            return InMemoryTransport()

        raise ValueError(f"Unknown dispatch backend: {backend}")
