"""
Service state: the immutable composition of the three capabilities.

Built once at startup and handed to every request handler. Handlers hold no
other state, and nothing reassigns a capability after construction.
"""

import logging
from dataclasses import dataclass

from redirection_service.config import Settings
from redirection_service.keygen.factory import KeyGeneratorBackend, KeyGeneratorFactory
from redirection_service.keygen.strategies import KeyGenerator
from redirection_service.queue.dispatcher import EventDispatcher
from redirection_service.queue.factory import DispatchBackend, DispatcherFactory
from redirection_service.storage.factory import StorageBackend, StorageFactory
from redirection_service.storage.strategies import URLStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceState:
    storage: URLStorage
    key_generator: KeyGenerator
    dispatcher: EventDispatcher
    detach_dispatch: bool = True

    async def aclose(self) -> None:
        """Close every capability, logging failures so the others still close."""
        for name in ("dispatcher", "key_generator", "storage"):
            try:
                await getattr(self, name).close()
            except Exception:
                logger.exception("Failed to close %s", name)


async def build_service_state(settings: Settings) -> ServiceState:
    """
    Construct and connect every capability from settings.

    Any failure here is fatal: it propagates out of application startup
    before a single request is accepted.
    """
    storage = StorageFactory.create(StorageBackend(settings.storage_backend), settings)
    key_generator = KeyGeneratorFactory.create(
        KeyGeneratorBackend(settings.key_generator_backend), settings
    )
    dispatcher = DispatcherFactory.create(DispatchBackend(settings.dispatch_backend), settings)

    logger.debug("Connecting to storage")
    await storage.connect()
    logger.debug("Connecting to key generator")
    await key_generator.connect()
    logger.debug("Connecting to visit dispatcher")
    await dispatcher.connect()

    return ServiceState(
        storage=storage,
        key_generator=key_generator,
        dispatcher=dispatcher,
        detach_dispatch=settings.detach_visit_dispatch,
    )
