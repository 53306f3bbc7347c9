"""
URL storage strategies using Strategy Pattern.

Allows switching between different key-value backends for key -> URL mappings:
- Memory: Development/testing
- Redis: Production key-value store with native TTL
- SQL: Any SQLAlchemy database (SQLite, PostgreSQL, ...)

Every backend classifies its own failures into the storage error kinds, so
request handlers never see a raw backend exception.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from redis import exceptions as redis_exceptions
from sqlalchemy import exc as sa_exc, or_
from sqlalchemy.orm import sessionmaker
from fastapi.concurrency import run_in_threadpool

from redirection_service.database.connection import Base
from redirection_service.errors import (
    KeyNotFoundError,
    StorageUnavailableError,
    StorageUnknownError,
)
from redirection_service.models.url import URLMapping

logger = logging.getLogger(__name__)


class URLStorage(ABC):
    """
    Abstract base class for URL storage strategies.

    The contract is append-only: mappings are inserted once and read many
    times. There is no update or delete.

    All methods are async because storage operations involve network I/O.
    """

    async def connect(self) -> None:
        """Prepare the backend at startup (verify connectivity, create schema)."""

    async def close(self) -> None:
        """Release backend resources at shutdown."""

    @abstractmethod
    async def get(self, key: str) -> str:
        """
        Get the target URL stored for a key.

        Args:
            key: Short key

        Returns:
            The stored URL

        Raises:
            KeyNotFoundError: No mapping exists for the key
            StorageUnavailableError: Backend unreachable or timed out
            StorageUnknownError: Any other backend condition
        """
        pass

    @abstractmethod
    async def put(self, key: str, url: str) -> None:
        """
        Store a new mapping.

        Keys are unique by construction (see key generation), so this is a
        plain insert: no deduplication and no conditional write.

        Raises:
            StorageUnavailableError: Backend unreachable or timed out
            StorageUnknownError: Any other backend condition
        """
        pass


class InMemoryURLStorage(URLStorage):
    """
    In-memory storage using a Python dict.

    Pros:
    - No external dependencies
    - Good for development and testing

    Cons:
    - Not persistent (lost on restart)
    - Not shared between processes
    - No expiry
    """

    def __init__(self):
        self._mappings: Dict[str, str] = {}

    async def get(self, key: str) -> str:
        try:
            return self._mappings[key]
        except KeyError:
            raise KeyNotFoundError(key) from None

    async def put(self, key: str, url: str) -> None:
        self._mappings[key] = url

    def __len__(self) -> int:
        return len(self._mappings)


class RedisURLStorage(URLStorage):
    """
    Redis implementation of URL storage.

    Mappings are plain string keys (``<prefix><key>``) written with an expiry,
    so Redis owns the mapping lifetime.
    """

    def __init__(self, redis_client, key_prefix: str = "url:", ttl: Optional[int] = None):
        """
        Initialize Redis storage.

        Args:
            redis_client: Async Redis client instance (redis.asyncio.Redis)
            key_prefix: Prefix prepended to every stored key
            ttl: Mapping lifetime in seconds (None means no expiry)
        """
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.ttl = ttl

    def _redis_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def connect(self) -> None:
        try:
            await self.redis.ping()
        except redis_exceptions.RedisError as e:
            raise self._classify(e) from e

    async def close(self) -> None:
        await self.redis.aclose()

    async def get(self, key: str) -> str:
        try:
            value = await self.redis.get(self._redis_key(key))
        except redis_exceptions.RedisError as e:
            raise self._classify(e) from e

        if value is None:
            raise KeyNotFoundError(key)
        return value.decode("utf-8") if isinstance(value, bytes) else value

    async def put(self, key: str, url: str) -> None:
        try:
            await self.redis.set(self._redis_key(key), url, ex=self.ttl)
        except redis_exceptions.RedisError as e:
            raise self._classify(e) from e

    @staticmethod
    def _classify(error: redis_exceptions.RedisError):
        if isinstance(error, (redis_exceptions.ConnectionError, redis_exceptions.TimeoutError)):
            logger.warning("Redis storage unavailable: %s", error)
            return StorageUnavailableError(str(error) or type(error).__name__)
        logger.error("Redis storage error: %s", error)
        return StorageUnknownError(str(error) or type(error).__name__)


class SQLURLStorage(URLStorage):
    """
    SQLAlchemy implementation of URL storage.

    Uses the synchronous ORM; every query runs in the threadpool so the event
    loop is never blocked. Expiry is emulated with an ``expires_at`` column.
    """

    def __init__(self, session_factory: sessionmaker, ttl: Optional[int] = None):
        """
        Initialize SQL storage.

        Args:
            session_factory: Session factory bound to the target engine
            ttl: Mapping lifetime in seconds (None means no expiry)
        """
        self.session_factory = session_factory
        self.ttl = ttl

    @staticmethod
    def _utcnow() -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)

    async def connect(self) -> None:
        engine = self.session_factory.kw["bind"]
        try:
            await run_in_threadpool(Base.metadata.create_all, bind=engine)
        except sa_exc.SQLAlchemyError as e:
            raise self._classify(e) from e

    async def close(self) -> None:
        await run_in_threadpool(self.session_factory.kw["bind"].dispose)

    async def get(self, key: str) -> str:
        try:
            url = await run_in_threadpool(self._select, key)
        except sa_exc.SQLAlchemyError as e:
            raise self._classify(e) from e

        if url is None:
            raise KeyNotFoundError(key)
        return url

    async def put(self, key: str, url: str) -> None:
        try:
            await run_in_threadpool(self._insert, key, url)
        except sa_exc.SQLAlchemyError as e:
            raise self._classify(e) from e

    def _select(self, key: str) -> Optional[str]:
        with self.session_factory() as db:
            mapping = db.query(URLMapping).filter(
                URLMapping.url_key == key,
                or_(URLMapping.expires_at.is_(None), URLMapping.expires_at > self._utcnow()),
            ).first()
            return mapping.url_redirect if mapping else None

    def _insert(self, key: str, url: str) -> None:
        expires_at = None
        if self.ttl:
            expires_at = self._utcnow() + timedelta(seconds=self.ttl)

        with self.session_factory() as db:
            db.add(URLMapping(url_key=key, url_redirect=url, expires_at=expires_at))
            db.commit()

    @staticmethod
    def _classify(error: sa_exc.SQLAlchemyError):
        # sa_exc.TimeoutError is raised when the connection pool is exhausted
        if isinstance(error, (sa_exc.OperationalError, sa_exc.TimeoutError, sa_exc.DisconnectionError)):
            logger.warning("SQL storage unavailable: %s", error)
            return StorageUnavailableError(str(error))
        logger.error("SQL storage error: %s", error)
        return StorageUnknownError(str(error))
