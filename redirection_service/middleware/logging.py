"""
Logging middleware for request/response logging.

Logs method, path, status code, processing time and client address for
every request, and exposes the processing time as ``X-Process-Time``.
"""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("redirection_service.access")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses."""

    async def dispatch(self, request: Request, call_next):
        client_ip = self._get_client_ip(request)
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        # Format: METHOD PATH STATUS_CODE PROCESS_TIME_MS CLIENT_IP
        logger.info(
            "%s %s %s %.2fms IP:%s",
            request.method,
            request.url.path,
            response.status_code,
            process_time * 1000,
            client_ip,
        )
        response.headers["X-Process-Time"] = str(process_time)
        return response

    @staticmethod
    def _get_client_ip(request: Request) -> str:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # X-Forwarded-For can contain multiple IPs, take the first one
            return forwarded_for.split(",")[0].strip()
        return request.client.host if request.client else "unknown"


def add_logging_middleware(app):
    app.add_middleware(LoggingMiddleware)
