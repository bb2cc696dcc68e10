"""
LessonShop Backend - FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the store handle and services, registers the
       interceptor pipeline, exception handlers, routers and static mounts.
Who:   The CLI (`python -m lessonshop serve`) and uvicorn's factory mode
       (`uvicorn lessonshop.main:create_app --factory`); tests pass their own
       Settings and DocumentStore.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Interceptors (outermost first):                         │
    │  Request ID → Logging → CORS → Image Existence           │
    │                                                          │
    │  Routes:                                                 │
    │  GET /lessons   GET /search   PUT /lessons/{id}          │
    │  POST /orders   GET /health   GET / (text or frontend)   │
    │                                                          │
    │  Static mounts: /images (StaticFiles), / (frontend)      │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ValidationError→400 │ NotFoundError→404 │ Database→500  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, images dir, store ping (abort on failure), optional schema
    Shutdown: dispose the engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from lessonshop import __version__
from lessonshop.config import Settings, get_settings
from lessonshop.database import DocumentStore
from lessonshop.exceptions import (
    DatabaseError,
    LessonShopError,
    NotFoundError,
    StartupError,
    ValidationError,
)
from lessonshop.middleware.image_guard import ImageExistenceMiddleware
from lessonshop.middleware.logging import RequestLoggingMiddleware
from lessonshop.middleware.request_id import RequestIDMiddleware, request_id_var
from lessonshop.routes import health, lessons, orders
from lessonshop.services.lesson_service import LessonService
from lessonshop.services.order_service import OrderService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] lessonshop.access: GET /lessons 200 3.1ms [a1b2c3d4] from 127.0.0.1
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

def build_lifespan(settings: Settings, store: DocumentStore):
    """Lifespan bound to this app's settings and store handle."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # ── Startup ───────────────────────────────────────────────────────
        setup_logging(settings.log_level)
        logger.info("LessonShop Backend %s starting up...", __version__)

        Path(settings.images_dir).mkdir(parents=True, exist_ok=True)
        logger.info("Images directory: %s", Path(settings.images_dir).resolve())

        # One attempt, no reconnect loop
        try:
            await store.ping()
        except Exception as e:
            logger.error("Error starting the server: database unreachable: %s", str(e))
            await store.dispose()
            raise StartupError(
                message="Could not connect to the database",
                context={"error_type": type(e).__name__},
            ) from e
        logger.info("Connected to database %s", settings.db_name)

        if settings.db_create_schema:
            await store.create_schema()

        logger.info("Server running on http://%s:%d", settings.host, settings.port)

        yield

        # ── Shutdown ──────────────────────────────────────────────────────
        logger.info("LessonShop Backend shutting down...")
        await store.dispose()
        logger.info("Shutdown complete.")

    return lifespan


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(exc: LessonShopError, include_details: bool = True) -> dict:
    body = {
        "error": exc.error_code,
        "message": exc.message,
        "request_id": request_id_var.get(""),
    }
    if include_details and exc.context:
        body["details"] = exc.context
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map error types to HTTP status codes and one JSON body shape.

    Handler hierarchy:
        ValidationError         → 400 Bad Request
        RequestValidationError  → 400 Bad Request (malformed JSON, bad path id)
        NotFoundError           → 404 Not Found
        DatabaseError           → 500 (generic message, details logged)
        LessonShopError (base)  → its status_code
        Exception (fallback)    → 500
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        """Client sent invalid input."""
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """FastAPI could not parse the request (body or path parameters)."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(
            str(part) for part in first.get("loc", ()) if part != "body" and not isinstance(part, int)
        ) or None
        message = f"Invalid request: {first.get('msg', 'malformed input')}"
        wrapped = ValidationError(message=message, field=field)
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), message)
        return JSONResponse(status_code=400, content=_error_body(wrapped))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        """Requested resource doesn't exist."""
        return JSONResponse(status_code=404, content=_error_body(exc, include_details=False))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Store failure: generic message to the client, context to the log."""
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(LessonShopError)
    async def handle_app_error(request: Request, exc: LessonShopError):
        logger.error("[%s] %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc, include_details=exc.status_code < 500),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all; the stack trace goes to the log only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Defaults to get_settings() (environment). Missing required
                  variables raise pydantic.ValidationError here.
        store:    Defaults to a DocumentStore on settings.store_url.
    """
    settings = settings or get_settings()
    store = store or DocumentStore(settings.store_url, echo=settings.db_echo)

    lesson_service = LessonService(store)
    order_service = OrderService(store)

    app = FastAPI(
        title="LessonShop API",
        description="Lesson listing, search, booking and lesson updates for the storefront.",
        version=__version__,
        lifespan=build_lifespan(settings, store),
    )
    app.state.settings = settings

    # ── Interceptors ──────────────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → CORS → ImageExistence
    app.add_middleware(ImageExistenceMiddleware, images_dir=settings.images_dir)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes & Static Mounts ────────────────────────────────────────────
    frontend_index = Path(settings.frontend_dir) / "index.html" if settings.frontend_dir else None
    serve_frontend = frontend_index is not None and frontend_index.is_file()

    app.include_router(lessons.build_router(lesson_service))
    app.include_router(orders.build_router(order_service))
    app.include_router(health.build_router(store, serve_root=not serve_frontend))

    app.mount(
        "/images",
        StaticFiles(directory=settings.images_dir, check_dir=False),
        name="images",
    )
    if serve_frontend:
        # Catch-all mount; must come after every router
        app.mount("/", StaticFiles(directory=settings.frontend_dir, html=True), name="frontend")

    return app
