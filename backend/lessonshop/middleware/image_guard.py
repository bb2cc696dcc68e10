"""
LessonShop Backend - Image Existence Middleware
=================================================

What:  Answers GET /images/<path> with a JSON 404 when the file is absent.
How:   Resolves the requested path inside the images directory and checks it
       with aiofiles before the request reaches the StaticFiles mount.
       Existing files fall through to StaticFiles, which streams the bytes.
When:  After request logging, before routing.

Response for a missing image:
    404 {"error": "not_found", "message": "image with ID 'x.png' was not found",
         "request_id": "a1b2c3d4"}

Paths resolving outside the images directory (../ tricks) count as missing.
"""

import logging
from pathlib import Path

from aiofiles import os as aio_os
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from lessonshop.exceptions import NotFoundError
from lessonshop.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

IMAGES_PREFIX = "/images/"


class ImageExistenceMiddleware(BaseHTTPMiddleware):
    """Short-circuits requests for missing images; passes everything else on."""

    def __init__(self, app: ASGIApp, images_dir: str) -> None:
        super().__init__(app)
        self.images_root = Path(images_dir).resolve()

    def resolve(self, url_path: str) -> Path | None:
        """Map /images/<rel> to a path under images_root, or None if it escapes."""
        # url_path is already percent-decoded by the ASGI server
        relative = url_path[len(IMAGES_PREFIX):]
        candidate = (self.images_root / relative).resolve()
        if candidate != self.images_root and self.images_root not in candidate.parents:
            return None
        return candidate

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if request.method not in ("GET", "HEAD") or not path.startswith(IMAGES_PREFIX):
            return await call_next(request)

        target = self.resolve(path)
        if target is None or not await aio_os.path.isfile(target):
            filename = path[len(IMAGES_PREFIX):]
            exc = NotFoundError(resource="image", resource_id=filename)
            logger.info("Image not found: %s", filename)
            return JSONResponse(
                status_code=404,
                content={
                    "error": exc.error_code,
                    "message": exc.message,
                    "request_id": request_id_var.get(""),
                },
            )

        return await call_next(request)
