"""
Database models for the SQL storage backend.

Visit events are not stored here; they are handed to the dispatch transport
and consumed downstream.
"""

from .url import URLMapping

__all__ = ["URLMapping"]
