"""
Application factory.

Wires the routers, the error handler and the lifespan that builds the
service state once per process.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from redirection_service.api.v1 import create, redirect
from redirection_service.config import Settings, load_settings
from redirection_service.errors import ServiceError
from redirection_service.middleware.logging import add_logging_middleware
from redirection_service.services.visits import wait_for_pending_visits
from redirection_service.state import ServiceState, build_service_state

logger = logging.getLogger(__name__)

# Every auxiliary route lives under this prefix so that no single-segment
# path other than "/" is taken away from redirect keys
API_PREFIX = "/api/v1"


async def service_error_handler(request: Request, exc: ServiceError) -> PlainTextResponse:
    """Render any capability error as its mapped status and message."""
    status_code, detail = exc.to_response()
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return PlainTextResponse(detail, status_code=status_code)


def create_app(settings: Optional[Settings] = None, state: Optional[ServiceState] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Resolved configuration (loaded from the environment if None)
        state: Pre-built service state; when None it is built from settings
               at startup, and any construction failure aborts startup
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = state if state is not None else await build_service_state(settings)
        app.state.service = service
        logger.info(
            "%s %s started (storage=%s, key generator=%s, dispatch=%s)",
            settings.app_name,
            settings.app_version,
            type(service.storage).__name__,
            type(service.key_generator).__name__,
            type(service.dispatcher).__name__,
        )
        try:
            yield
        finally:
            await wait_for_pending_visits(settings.shutdown_drain_timeout)
            await service.aclose()
            logger.info("%s stopped", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="URL redirection service: create short keys and redirect them",
        debug=settings.debug,
        lifespan=lifespan,
        docs_url=f"{API_PREFIX}/docs",
        redoc_url=None,
        openapi_url=f"{API_PREFIX}/openapi.json",
    )

    add_logging_middleware(app)
    app.add_exception_handler(ServiceError, service_error_handler)

    # Declared before the catch-all redirect route; "/" can never be a key
    @app.get("/")
    def read_root():
        """Root endpoint with API information"""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "docs": app.docs_url,
        }

    @app.get(f"{API_PREFIX}/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "environment": settings.environment}

    ######## Include routers
    app.include_router(create.router, prefix=API_PREFIX)
    app.include_router(redirect.router)

    return app
