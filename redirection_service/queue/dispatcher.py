"""
Visit event dispatchers.
"""

from abc import ABC, abstractmethod

from redirection_service.errors import DispatchError
from redirection_service.queue.models import VisitEvent, VisitTask
from redirection_service.queue.transports import ByteTransport


class EventDispatcher(ABC):
    """
    Abstract base class for visit event dispatch.

    Fire-and-forget from the caller's side: a failure raises DispatchError,
    which the caller only logs. Nothing is retried here.
    """

    async def connect(self) -> None:
        """Prepare the dispatcher at startup."""

    async def close(self) -> None:
        """Release dispatcher resources at shutdown."""

    @abstractmethod
    async def dispatch(self, event: VisitEvent) -> None:
        """
        Hand a visit event to the external consumer.

        Raises:
            DispatchError: The event could not be delivered to the transport
        """
        pass


class TransportDispatcher(EventDispatcher):
    """
    Dispatcher that serializes events and sends the bytes over a transport.
    """

    def __init__(self, transport: ByteTransport, routing_key: str):
        self.transport = transport
        self.routing_key = routing_key

    async def connect(self) -> None:
        await self.transport.connect()

    async def close(self) -> None:
        await self.transport.close()

    async def dispatch(self, event: VisitEvent) -> None:
        try:
            payload = VisitTask(insert_record=event).encode()
        except ValueError as e:
            raise DispatchError(f"Could not encode visit event: {e}") from e
        await self.transport.send(self.routing_key, payload)
