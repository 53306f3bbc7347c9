"""
Byte transports for visit events.
Allows switching between different brokers (Redis Streams, In-Memory).

A transport only moves opaque bytes under a routing key; serialization is
done by the dispatcher in front of it.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Dict, List, Optional

from redis import exceptions as redis_exceptions

from redirection_service.errors import DispatchError

logger = logging.getLogger(__name__)


class ByteTransport(ABC):
    """
    Abstract base class for byte transports.

    Delivery guarantees (persistence, redelivery) belong to the broker behind
    the transport, never to the caller.
    """

    async def connect(self) -> None:
        """Verify the broker at startup."""

    async def close(self) -> None:
        """Release broker resources at shutdown."""

    @abstractmethod
    async def send(self, routing_key: str, payload: bytes) -> None:
        """
        Send one message.

        Args:
            routing_key: Destination (stream, subject, queue name)
            payload: Serialized message

        Raises:
            DispatchError: The broker did not accept the message
        """
        pass


class RedisStreamTransport(ByteTransport):
    """
    Redis Streams transport.

    Redis Streams fit this use case:
    - Persistent (messages survive restarts)
    - Consumer groups (multiple workers downstream)
    - Built into Redis (no extra infrastructure)

    Each message is appended with XADD as a single ``data`` field.
    """

    def __init__(self, redis_client, maxlen: Optional[int] = None):
        """
        Initialize Redis Streams transport.

        Args:
            redis_client: Async Redis client instance (redis.asyncio.Redis)
            maxlen: Approximate stream length cap (None keeps everything)
        """
        self.redis = redis_client
        self.maxlen = maxlen

    async def connect(self) -> None:
        try:
            await self.redis.ping()
        except redis_exceptions.RedisError as e:
            raise DispatchError(f"Redis stream transport unavailable: {e}") from e

    async def close(self) -> None:
        await self.redis.aclose()

    async def send(self, routing_key: str, payload: bytes) -> None:
        try:
            await self.redis.xadd(
                routing_key,
                {"data": payload},
                maxlen=self.maxlen,
                approximate=True,
            )
        except redis_exceptions.RedisError as e:
            raise DispatchError(f"Redis publish to '{routing_key}' failed: {e}") from e


class InMemoryTransport(ByteTransport):
    """
    In-memory transport using Python deques.

    Pros:
    - Simple (no external dependencies)
    - Good for development and testing

    Cons:
    - Not persistent (lost on restart)
    - Not distributed (each process has its own queues)
    """

    def __init__(self):
        self._queues: Dict[str, Deque[bytes]] = {}

    def _get_queue(self, routing_key: str) -> Deque[bytes]:
        if routing_key not in self._queues:
            self._queues[routing_key] = deque()
        return self._queues[routing_key]

    async def send(self, routing_key: str, payload: bytes) -> None:
        self._get_queue(routing_key).append(payload)

    def drain(self, routing_key: str) -> List[bytes]:
        """Remove and return every pending message for a routing key"""
        queue = self._get_queue(routing_key)
        messages = list(queue)
        queue.clear()
        return messages

    def __len__(self) -> int:
        return sum(len(queue) for queue in self._queues.values())
