"""
FastAPI dependencies for dependency injection.

The service state is built once in the application lifespan and stored on
``app.state``; every handler receives it through ``get_service_state``.

Pattern: Dependency Injection
- Loose coupling between handlers and backends
- Easy to test (override with a state built from fakes)
- Flexible (swap implementations via config)
"""

from fastapi import Request

from redirection_service.state import ServiceState


def get_service_state(request: Request) -> ServiceState:
    """
    Get the service state built at startup.

    Returns:
        The process-wide ServiceState
    """
    return request.app.state.service
