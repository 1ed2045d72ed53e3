"""
Employee Directory Backend - Request Logging Middleware
=========================================================

What:  One access-log line per request: method, path, status, duration.
Why:   Replaces uvicorn's access log with request-ID correlation and a
       level that follows the status class.

Example line:
    GET /api/employees 200 4.2ms [1a2b3c4d] from 127.0.0.1

What we log vs what we DON'T log:
    ✅ method, path, query string, status, duration, client IP, request ID
    ❌ request bodies (names, emails and phone numbers are personal data)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from employee_directory.middleware.request_id import request_id_var

logger = logging.getLogger("employee_directory.access")

# Probes hit these every few seconds
QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each HTTP request after the response is produced.

    Registered inside RequestIDMiddleware so the request ID is already set
    when this runs.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        target = f"{path}?{request.url.query}" if request.url.query else path
        status = response.status_code

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            target,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
