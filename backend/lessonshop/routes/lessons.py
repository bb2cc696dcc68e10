"""
LessonShop Backend - Lesson Route Handlers
============================================

What:  GET /lessons, GET /search and PUT /lessons/{lesson_id}.
How:   build_router() closes over a LessonService; each handler awaits one
       service call and unwraps its result. Errors are raised from unwrap()
       and rendered by the exception handlers registered in main.py.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Query

from lessonshop.results import unwrap
from lessonshop.schemas.lesson import ErrorResponse, LessonUpdatedResponse
from lessonshop.services.lesson_service import LessonService

logger = logging.getLogger(__name__)


def build_router(lesson_service: LessonService) -> APIRouter:
    """Create the lesson router bound to `lesson_service`."""
    router = APIRouter(tags=["Lessons"])

    @router.get(
        "/lessons",
        response_model=List[Dict[str, Any]],
        responses={500: {"description": "Server error", "model": ErrorResponse}},
        summary="List all lessons",
    )
    async def list_lessons() -> List[Dict[str, Any]]:
        """Every lesson, in store order."""
        return unwrap(await lesson_service.list_lessons())

    @router.get(
        "/search",
        response_model=List[Dict[str, Any]],
        responses={500: {"description": "Server error", "model": ErrorResponse}},
        summary="Search lessons by subject or location",
        description=(
            "Case-insensitive substring match on subject OR location. "
            "The query is matched literally; an empty query returns every lesson."
        ),
    )
    async def search_lessons(
        q: Optional[str] = Query(default=None, description="Free-text search term"),
    ) -> List[Dict[str, Any]]:
        return unwrap(await lesson_service.search_lessons(q))

    @router.put(
        "/lessons/{lesson_id}",
        response_model=LessonUpdatedResponse,
        responses={
            400: {"description": "Empty or invalid body", "model": ErrorResponse},
            404: {"description": "Lesson not found", "model": ErrorResponse},
            500: {"description": "Server error", "model": ErrorResponse},
        },
        summary="Partially update a lesson",
    )
    async def update_lesson(
        lesson_id: int,
        fields: Optional[Dict[str, Any]] = Body(default=None),
    ) -> LessonUpdatedResponse:
        """
        Merge the body's fields into the lesson. Fields not named are untouched.

        updatedCount is 0 when the body matches the stored values.
        """
        updated = unwrap(await lesson_service.update_lesson(lesson_id, fields))
        return LessonUpdatedResponse(updatedCount=updated)

    return router
