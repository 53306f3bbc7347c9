import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = False

    # Application
    app_name: str = "Redirection Service"
    app_version: str = "1.0.0"

    # Server
    host: str = "0.0.0.0"
    port: int = 8081
    log_level: str = "INFO"

    # Storage (key -> URL mappings)
    storage_backend: str = "redis"  # Options: "redis", "sql", "memory"
    redis_url: str = "redis://localhost:6379/0"
    redis_timeout: float = 2.0  # Socket timeouts for every redis client
    storage_key_prefix: str = "url:"
    url_ttl_seconds: int = 2592000  # 30 days
    database_url: str = "sqlite:///./redirection.db"

    # Key generation
    key_generator_backend: str = "http"  # Options: "http", "redis_counter", "memory_counter", "random"
    key_generator_url: str = "http://localhost:8080"
    key_generator_timeout: float = 2.0
    key_length: int = 8
    key_salt: int = 1256
    key_counter_name: str = "keygen:counter"

    # Visit event dispatch
    dispatch_backend: str = "redis_streams"  # Options: "redis_streams", "memory"
    dispatch_routing_key: str = "tasks.visit"
    dispatch_stream_maxlen: Optional[int] = None
    detach_visit_dispatch: bool = True
    shutdown_drain_timeout: float = 1.0

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


def load_settings() -> Settings:
    """Resolve the process configuration once, at startup."""
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
