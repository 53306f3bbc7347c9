"""
Tests for key generation strategies.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import httpx
import pytest
from redis import exceptions as redis_exceptions

from redirection_service.config import Settings
from redirection_service.errors import (
    GeneratorNotFoundError,
    KeyGeneratorBadRequestError,
    KeyGeneratorConnectionError,
    KeyGeneratorPermissionError,
    KeyGeneratorUnknownError,
)
from redirection_service.keygen.factory import KeyGeneratorBackend, KeyGeneratorFactory
from redirection_service.keygen.strategies import (
    HTTPKeyGenerator,
    InMemoryCounterKeyGenerator,
    RandomKeyGenerator,
    RedisCounterKeyGenerator,
)


class TestBase62Encoding:
    """Test Base62 counter encoding"""

    def test_same_counter_same_key(self):
        """Test that same counter generates same key (deterministic)"""
        generator = InMemoryCounterKeyGenerator(salt=1000, max_length=8)

        assert generator.encode(123) == generator.encode(123)

    def test_obfuscation_with_salt(self):
        """Test that salt obfuscates the sequence"""
        no_salt = InMemoryCounterKeyGenerator(salt=0, max_length=8)
        with_salt = InMemoryCounterKeyGenerator(salt=1000, max_length=8)

        assert no_salt.encode(1) != with_salt.encode(1)

    def test_known_values(self):
        generator = InMemoryCounterKeyGenerator(salt=0, max_length=8)

        assert generator.encode(0) == "0"
        assert generator.encode(61) == "Z"
        assert generator.encode(62) == "10"

    def test_exceeding_max_length_is_an_error(self):
        """Keys are never truncated; that would produce duplicates"""
        generator = InMemoryCounterKeyGenerator(salt=0, max_length=2)

        assert len(generator.encode(62 ** 2 - 1)) == 2
        with pytest.raises(KeyGeneratorUnknownError):
            generator.encode(62 ** 2)

    def test_capacity_at_default_length(self):
        generator = InMemoryCounterKeyGenerator(salt=1256, max_length=8)

        assert len(generator.encode(62 ** 8 - 1257)) == 8


class TestInMemoryCounterGenerator:

    def test_early_keys_are_unique(self):
        generator = InMemoryCounterKeyGenerator(salt=1256, max_length=8)

        async def generate_many():
            return [await generator.generate() for _ in range(1000)]

        keys = asyncio.run(generate_many())

        assert len(set(keys)) == 1000
        assert all(key.isalnum() and len(key) <= 8 for key in keys)


class TestRandomGenerator:

    def test_length_and_alphabet(self):
        generator = RandomKeyGenerator(length=8)

        key = asyncio.run(generator.generate())

        assert len(key) == 8
        assert key.isalnum()


class TestRedisCounterGenerator:
    """Redis counter against a mocked async client"""

    def test_encodes_incremented_counter(self):
        client = AsyncMock()
        client.incr.return_value = 1
        generator = RedisCounterKeyGenerator(client, counter_name="c", salt=1256)

        key = asyncio.run(generator.generate())

        assert key == generator.encode(1)
        client.incr.assert_awaited_once_with("c")

    @pytest.mark.parametrize("error, expected", [
        (redis_exceptions.ConnectionError("refused"), KeyGeneratorConnectionError),
        (redis_exceptions.TimeoutError("timeout"), KeyGeneratorConnectionError),
        (redis_exceptions.AuthenticationError("invalid password"), KeyGeneratorPermissionError),
        (redis_exceptions.NoPermissionError("NOPERM"), KeyGeneratorPermissionError),
        (redis_exceptions.ResponseError("value is not an integer"), KeyGeneratorUnknownError),
    ])
    def test_redis_errors_are_classified(self, error, expected):
        client = AsyncMock()
        client.incr.side_effect = error
        generator = RedisCounterKeyGenerator(client)

        with pytest.raises(expected):
            asyncio.run(generator.generate())


class TestHTTPGenerator:
    """HTTP key generator against httpx.MockTransport"""

    @staticmethod
    def make_generator(handler) -> HTTPKeyGenerator:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://keygen")
        return HTTPKeyGenerator("http://keygen", client=client)

    def test_returns_generated_key(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"key": "12345678"})

        generator = self.make_generator(handler)

        assert asyncio.run(generator.generate()) == "12345678"
        assert requests[0].method == "POST"
        assert requests[0].url.path == "/api/v1/generate"

    @pytest.mark.parametrize("status_code, expected", [
        (400, KeyGeneratorBadRequestError),
        (422, KeyGeneratorBadRequestError),
        (401, KeyGeneratorPermissionError),
        (403, KeyGeneratorPermissionError),
        (404, GeneratorNotFoundError),
        (502, KeyGeneratorConnectionError),
        (503, KeyGeneratorConnectionError),
        (504, KeyGeneratorConnectionError),
        (500, KeyGeneratorUnknownError),
        (418, KeyGeneratorUnknownError),
    ])
    def test_status_codes_are_classified(self, status_code, expected):
        generator = self.make_generator(lambda request: httpx.Response(status_code))

        with pytest.raises(expected):
            asyncio.run(generator.generate())

    @pytest.mark.parametrize("error", [
        httpx.ConnectError("connection refused"),
        httpx.ReadTimeout("timed out"),
    ])
    def test_network_errors_are_connection_errors(self, error):
        def handler(request):
            raise error

        generator = self.make_generator(handler)

        with pytest.raises(KeyGeneratorConnectionError):
            asyncio.run(generator.generate())

    @pytest.mark.parametrize("response", [
        httpx.Response(200, json={}),
        httpx.Response(200, json={"key": ""}),
        httpx.Response(200, json={"key": 42}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, content=json.dumps(["12345678"]).encode()),
    ])
    def test_response_without_key_is_unknown(self, response):
        generator = self.make_generator(lambda request: response)

        with pytest.raises(KeyGeneratorUnknownError):
            asyncio.run(generator.generate())


class TestKeyGeneratorFactory:
    """Test generator factory"""

    @pytest.mark.parametrize("backend, expected", [
        (KeyGeneratorBackend.HTTP, HTTPKeyGenerator),
        (KeyGeneratorBackend.REDIS_COUNTER, RedisCounterKeyGenerator),
        (KeyGeneratorBackend.MEMORY_COUNTER, InMemoryCounterKeyGenerator),
        (KeyGeneratorBackend.RANDOM, RandomKeyGenerator),
    ])
    def test_creates_each_backend(self, backend, expected):
        generator = KeyGeneratorFactory.create(backend, Settings(_env_file=None))
        assert isinstance(generator, expected)

    def test_uses_key_settings(self):
        settings = Settings(_env_file=None, key_length=6, key_salt=7)

        generator = KeyGeneratorFactory.create(KeyGeneratorBackend.MEMORY_COUNTER, settings)

        assert generator.max_length == 6
        assert generator.salt == 7
