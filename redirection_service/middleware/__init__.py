"""
HTTP middleware.
"""

from .logging import LoggingMiddleware, add_logging_middleware

__all__ = [
    "LoggingMiddleware",
    "add_logging_middleware",
]
