"""
Request logging middleware.
Logs method, path, status and duration of every request.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("tuitiondesk.access")

# Probes and docs are logged at debug level only
QUIET_PATHS = {
    "/", "/docs", "/redoc", "/openapi.json", "/api/health",
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        path = request.url.path
        level = logging.DEBUG if path in QUIET_PATHS or request.method == "OPTIONS" else logging.INFO
        if response.status_code >= 500:
            level = logging.ERROR
        logger.log(
            level,
            "%s %s -> %s (%.1f ms)",
            request.method, path, response.status_code, elapsed_ms,
        )
        return response
