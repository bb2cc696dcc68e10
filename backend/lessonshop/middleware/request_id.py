"""
LessonShop Backend - Request ID Middleware
============================================

What:  Tags each request with a short correlation id and echoes it back.
How:   Uses the client's X-Request-ID header when present, otherwise the first
       8 characters of a UUID4. The id is stored in a ContextVar (read by the
       access log and error handlers) and in request.state.
When:  Outermost interceptor; runs before logging.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a request id and adds it to the X-Request-ID response header."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
