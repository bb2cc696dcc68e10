"""
LessonShop Backend - Health Check Routes
==========================================

What:  GET /health (JSON probe) and, when no frontend bundle is configured,
       GET / (plaintext liveness string).
How:   /health runs SELECT 1 against the store and reports the result.

Status levels:
    - healthy:   store answered (HTTP 200)
    - unhealthy: store did not answer (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse

from lessonshop import __version__
from lessonshop.database import DocumentStore
from lessonshop.schemas.lesson import HealthResponse

logger = logging.getLogger(__name__)

ROOT_MESSAGE = "Server and database are running fine!"

# Module load time, for uptime reporting
_start_time = time.time()


def build_router(store: DocumentStore, serve_root: bool = True) -> APIRouter:
    """Create the health router; `serve_root` adds the plaintext GET /."""
    router = APIRouter(tags=["Health"])

    if serve_root:
        @router.get("/", response_class=PlainTextResponse, include_in_schema=False)
        async def root() -> str:
            return ROOT_MESSAGE

    @router.get(
        "/health",
        response_model=HealthResponse,
        responses={503: {"description": "Store unreachable", "model": HealthResponse}},
        summary="Service health check",
    )
    async def health_check():
        db_status = "connected"
        overall = "healthy"

        try:
            await store.ping()
        except Exception as e:
            db_status = "disconnected"
            overall = "unhealthy"
            logger.warning("Health check: database unreachable: %s", str(e))

        body = HealthResponse(
            status=overall,
            version=__version__,
            database=db_status,
            uptime_seconds=round(time.time() - _start_time, 2),
        )
        if overall != "healthy":
            return JSONResponse(status_code=503, content=body.model_dump())
        return body

    return router
