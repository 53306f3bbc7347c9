"""
URL storage module.

This module implements the Strategy Pattern for pluggable key -> URL storage.
"""

from .strategies import URLStorage, InMemoryURLStorage, RedisURLStorage, SQLURLStorage
from .factory import StorageFactory, StorageBackend

__all__ = [
    "URLStorage",
    "InMemoryURLStorage",
    "RedisURLStorage",
    "SQLURLStorage",
    "StorageFactory",
    "StorageBackend",
]
