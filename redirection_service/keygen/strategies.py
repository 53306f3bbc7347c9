"""
Key generation strategies for the redirection service.
Uses Strategy Pattern to allow different generation backends.
"""

import itertools
import logging
import secrets
import string
from abc import ABC, abstractmethod

import httpx
from redis import exceptions as redis_exceptions

from redirection_service.errors import (
    GeneratorNotFoundError,
    KeyGeneratorBadRequestError,
    KeyGeneratorConnectionError,
    KeyGeneratorPermissionError,
    KeyGeneratorUnknownError,
)

logger = logging.getLogger(__name__)


class KeyGenerator(ABC):
    """
    Abstract base class for key generators.

    Every generated key must be unused by any stored mapping; the generator
    alone owns that guarantee. Calls are independent: callers keep no session
    or sequence between them.
    """

    async def connect(self) -> None:
        """Prepare the generator at startup."""

    async def close(self) -> None:
        """Release generator resources at shutdown."""

    @abstractmethod
    async def generate(self) -> str:
        """
        Generate a new key.

        Returns:
            A unique, non-empty key string

        Raises:
            KeyGenerationError: One of the key generation error kinds
        """
        pass


class HTTPKeyGenerator(KeyGenerator):
    """
    Client for an external key generation service.

    One ``httpx.AsyncClient`` is created and reused for every call; it
    manages its own connection pool.

    Protocol: ``POST {base_url}/api/v1/generate`` answers ``{"key": "..."}``.
    """

    GENERATE_PATH = "/api/v1/generate"

    def __init__(self, base_url: str, timeout: float = 2.0, client: httpx.AsyncClient = None):
        self.base_url = base_url
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def close(self) -> None:
        await self.client.aclose()

    async def generate(self) -> str:
        try:
            response = await self.client.post(self.GENERATE_PATH)
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            logger.warning("Key generator unreachable at %s: %s", self.base_url, e)
            raise KeyGeneratorConnectionError() from e
        except httpx.HTTPError as e:
            raise KeyGeneratorUnknownError(str(e)) from e

        self._raise_for_status(response)

        try:
            key = response.json().get("key")
        except (ValueError, AttributeError) as e:
            raise KeyGeneratorUnknownError(f"Malformed key generator response: {e}") from e

        if not isinstance(key, str) or not key:
            raise KeyGeneratorUnknownError("Key generator returned no key")
        return key

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        code = response.status_code
        if code < 400:
            return
        if code in (400, 422):
            raise KeyGeneratorBadRequestError()
        if code in (401, 403):
            raise KeyGeneratorPermissionError()
        if code == 404:
            raise GeneratorNotFoundError()
        if code in (502, 503, 504):
            raise KeyGeneratorConnectionError()
        raise KeyGeneratorUnknownError(f"Key generator responded {code}: {response.text}")


class Base62KeyGenerator(KeyGenerator):
    """
    Base62 encoding of a monotonically increasing counter, with a salt offset.

    Pros: No collisions, short keys
    Cons: Predictable if salt is known (but obfuscated)

    Subclasses decide where the counter lives.
    """

    BASE62_CHARS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

    def __init__(self, salt: int = 1256, max_length: int = 8):
        self.salt = salt
        self.max_length = max_length

    @abstractmethod
    async def _next_id(self) -> int:
        pass

    async def generate(self) -> str:
        return self.encode(await self._next_id())

    def encode(self, counter: int) -> str:
        """
        Encode a counter value as a key.

        Raises KeyGeneratorUnknownError when the key would exceed
        ``max_length``; truncating would produce duplicates.
        """
        encoded = self._base62_encode(counter + self.salt)
        if len(encoded) > self.max_length:
            raise KeyGeneratorUnknownError(
                f"Generated key '{encoded}' exceeds max length {self.max_length} "
                f"(counter {counter}, salt {self.salt})"
            )
        return encoded

    def _base62_encode(self, number: int) -> str:
        if number == 0:
            return self.BASE62_CHARS[0]

        result = ""
        while number > 0:
            result = self.BASE62_CHARS[number % 62] + result
            number //= 62

        return result


class InMemoryCounterKeyGenerator(Base62KeyGenerator):
    """Base62 keys over an in-process counter. Unique within one process only."""

    def __init__(self, salt: int = 1256, max_length: int = 8, start: int = 1):
        super().__init__(salt=salt, max_length=max_length)
        self._counter = itertools.count(start)

    async def _next_id(self) -> int:
        return next(self._counter)


class RedisCounterKeyGenerator(Base62KeyGenerator):
    """
    Base62 keys over an atomic Redis ``INCR`` counter.

    Unique across every process sharing the counter.
    """

    def __init__(self, redis_client, counter_name: str = "keygen:counter", salt: int = 1256, max_length: int = 8):
        super().__init__(salt=salt, max_length=max_length)
        self.redis = redis_client
        self.counter_name = counter_name

    async def connect(self) -> None:
        try:
            await self.redis.ping()
        except redis_exceptions.RedisError as e:
            raise self._classify(e) from e

    async def close(self) -> None:
        await self.redis.aclose()

    async def _next_id(self) -> int:
        try:
            return int(await self.redis.incr(self.counter_name))
        except redis_exceptions.RedisError as e:
            raise self._classify(e) from e

    @staticmethod
    def _classify(error: redis_exceptions.RedisError):
        # AuthenticationError subclasses ConnectionError, so it is checked first
        if isinstance(error, (redis_exceptions.AuthenticationError, redis_exceptions.NoPermissionError)):
            return KeyGeneratorPermissionError()
        if isinstance(error, (redis_exceptions.ConnectionError, redis_exceptions.TimeoutError)):
            logger.warning("Redis key counter unavailable: %s", error)
            return KeyGeneratorConnectionError()
        return KeyGeneratorUnknownError(str(error))


class RandomKeyGenerator(KeyGenerator):
    """
    Random base62 keys.

    Pros: Simple, unpredictable, no external service
    Cons: Uniqueness is only probabilistic (62^length keyspace); development only
    """

    def __init__(self, length: int = 8):
        self.length = length
        self.characters = string.digits + string.ascii_letters

    async def generate(self) -> str:
        return ''.join(secrets.choice(self.characters) for _ in range(self.length))
