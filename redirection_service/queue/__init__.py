"""
Visit event dispatch module.
Implements Strategy Pattern for flexible transport backends.
"""

from .dispatcher import EventDispatcher, TransportDispatcher
from .transports import ByteTransport, RedisStreamTransport, InMemoryTransport
from .factory import DispatcherFactory, DispatchBackend
from .models import Timestamp, VisitEvent, VisitTask

__all__ = [
    "EventDispatcher",
    "TransportDispatcher",
    "ByteTransport",
    "RedisStreamTransport",
    "InMemoryTransport",
    "DispatcherFactory",
    "DispatchBackend",
    "Timestamp",
    "VisitEvent",
    "VisitTask",
]
