"""
SQLAlchemy engine and session setup for the SQL storage backend.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def create_session_factory(database_url: str, **engine_kwargs) -> sessionmaker:
    """
    Build an engine for ``database_url`` and return a session factory bound to it.

    SQLite connections are shared across threadpool workers, and an in-memory
    SQLite database is pinned to a single connection so every session sees
    the same data.
    """
    if database_url.startswith("sqlite"):
        engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite+pysqlite://"):
            engine_kwargs.setdefault("poolclass", StaticPool)
    else:
        engine_kwargs.setdefault("pool_pre_ping", True)

    engine = create_engine(database_url, **engine_kwargs)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
