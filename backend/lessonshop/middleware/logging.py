"""
LessonShop Backend - Request Logging Middleware
=================================================

What:  One access-log line per HTTP request, including requests that a later
       interceptor rejects (missing images) or a handler answers with 4xx/5xx.
How:   Times the downstream call and logs method, path, status, duration,
       request id and client address on the `lessonshop.access` logger.
When:  After RequestIDMiddleware, before the image check and the router.

Log line:
    PUT /lessons/3 200 4.2ms [a1b2c3d4] from 127.0.0.1

Request bodies are never logged (orders carry names and phone numbers).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from lessonshop.middleware.request_id import request_id_var

logger = logging.getLogger("lessonshop.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    Level by status class: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        # request.client is None under some test transports
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
