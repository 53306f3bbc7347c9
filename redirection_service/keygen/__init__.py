"""
Key generation module.
Implements Strategy Pattern for flexible key generation backends.
"""

from .strategies import (
    KeyGenerator,
    HTTPKeyGenerator,
    Base62KeyGenerator,
    InMemoryCounterKeyGenerator,
    RedisCounterKeyGenerator,
    RandomKeyGenerator,
)
from .factory import KeyGeneratorFactory, KeyGeneratorBackend

__all__ = [
    "KeyGenerator",
    "HTTPKeyGenerator",
    "Base62KeyGenerator",
    "InMemoryCounterKeyGenerator",
    "RedisCounterKeyGenerator",
    "RandomKeyGenerator",
    "KeyGeneratorFactory",
    "KeyGeneratorBackend",
]
