"""
Test configuration and fixtures for the redirection service.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient

from redirection_service.app import create_app
from redirection_service.config import Settings
from redirection_service.errors import DispatchError
from redirection_service.keygen.strategies import InMemoryCounterKeyGenerator, KeyGenerator
from redirection_service.queue.dispatcher import EventDispatcher
from redirection_service.state import ServiceState
from redirection_service.storage.strategies import InMemoryURLStorage, URLStorage

ROUTING_KEY = "tasks.visit"


class SpyStorage(InMemoryURLStorage):
    """In-memory storage that counts calls"""

    def __init__(self):
        super().__init__()
        self.gets = 0
        self.puts = 0

    async def get(self, key: str) -> str:
        self.gets += 1
        return await super().get(key)

    async def put(self, key: str, url: str) -> None:
        self.puts += 1
        await super().put(key, url)


class FailingStorage(URLStorage):
    def __init__(self, error: Exception):
        self.error = error
        self.puts = 0

    async def get(self, key: str) -> str:
        raise self.error

    async def put(self, key: str, url: str) -> None:
        self.puts += 1
        raise self.error


class StaticKeyGenerator(KeyGenerator):
    """Always returns the same key and counts calls"""

    def __init__(self, key: str = "12345678"):
        self.key = key
        self.calls = 0

    async def generate(self) -> str:
        self.calls += 1
        return self.key


class FailingKeyGenerator(KeyGenerator):
    def __init__(self, error: Exception):
        self.error = error
        self.calls = 0

    async def generate(self) -> str:
        self.calls += 1
        raise self.error


class RecordingDispatcher(EventDispatcher):
    def __init__(self):
        self.events = []

    async def dispatch(self, event) -> None:
        self.events.append(event)


class FailingDispatcher(EventDispatcher):
    def __init__(self):
        self.attempts = 0

    async def dispatch(self, event) -> None:
        self.attempts += 1
        raise DispatchError("Error while sending task")


@pytest.fixture
def test_settings():
    """Settings using in-memory backends only, ignoring any .env file"""
    return Settings(
        _env_file=None,
        storage_backend="memory",
        key_generator_backend="memory_counter",
        dispatch_backend="memory",
        detach_visit_dispatch=False,
    )


@pytest.fixture
def storage():
    return SpyStorage()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def key_generator():
    return InMemoryCounterKeyGenerator()


@pytest.fixture
def state(storage, key_generator, dispatcher):
    return ServiceState(
        storage=storage,
        key_generator=key_generator,
        dispatcher=dispatcher,
        detach_dispatch=False,
    )


@pytest.fixture
def client_for(test_settings):
    """
    Factory fixture: build a test client around a given service state.
    The lifespan runs, so shutdown hooks are exercised too.
    """
    clients = []

    def _make(service_state: ServiceState) -> TestClient:
        client = TestClient(create_app(test_settings, state=service_state))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(client_for, state):
    """Test client over in-memory storage, counter keys and a recording dispatcher"""
    return client_for(state)
