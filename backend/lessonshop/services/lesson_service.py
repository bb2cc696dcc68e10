"""
LessonShop Backend - Lesson Service
=====================================

What:  List, search and partially update lessons.
How:   Each operation opens one session on the injected DocumentStore, runs
       one statement, and returns an Ok/Err result. Store failures are logged
       here and surfaced as DatabaseError; there are no retries.
Who:   Called by the /lessons and /search route handlers.

Search semantics:
    The query is trimmed. Empty means "match everything". Otherwise it is a
    case-insensitive substring match on subject OR location, with every
    character of the query matched literally: SQL wildcards (% _) and the
    escape character are escaped by `autoescape`, and no regex engine is
    involved, so . * + ? ^ $ { } ( ) | [ ] \\ have no special meaning.

    Case folding is done by the database's lower(). PostgreSQL folds Unicode
    letters; SQLite folds ASCII only, so on a SQLite store "ZÜRICH" does not
    match "Zürich" (while "zürich" and "ZüRICH" do).
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_, select
from sqlalchemy.sql.elements import ColumnElement

from lessonshop.database import DocumentStore
from lessonshop.exceptions import DatabaseError, NotFoundError, ValidationError
from lessonshop.models.lesson import Lesson
from lessonshop.results import Err, Ok, Result
from lessonshop.schemas.lesson import LessonUpdate

logger = logging.getLogger(__name__)


def build_search_filter(query: Optional[str]) -> Optional[ColumnElement[bool]]:
    """
    Translate a free-text query into a WHERE clause.

    Returns None for an absent or blank query (unrestricted).
    """
    term = (query or "").strip()
    if not term:
        return None
    return or_(
        Lesson.subject.icontains(term, autoescape=True),
        Lesson.location.icontains(term, autoescape=True),
    )


def _as_lesson_id(value: Any) -> Optional[int]:
    """An id echoed in an update body: an integer or a string of digits."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value)
    return None


class LessonService:
    """
    Lesson operations bound to one store handle.

    Error Handling Strategy:
        Client mistakes become ValidationError / NotFoundError; anything
        raised by the store becomes DatabaseError with the driver error
        type in its context.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def list_lessons(self) -> Result[List[Dict[str, Any]]]:
        """All lessons, in the order the store yields them."""
        return await self._find(None)

    async def search_lessons(self, query: Optional[str]) -> Result[List[Dict[str, Any]]]:
        """Lessons whose subject or location contains `query` (case-insensitive)."""
        return await self._find(build_search_filter(query))

    async def _find(self, criteria: Optional[ColumnElement[bool]]) -> Result[List[Dict[str, Any]]]:
        stmt = select(Lesson)
        if criteria is not None:
            stmt = stmt.where(criteria)
        try:
            async with self.store.session() as db:
                result = await db.execute(stmt)
                lessons = result.scalars().all()
        except Exception as e:
            logger.error("Database error fetching lessons: %s", str(e), exc_info=True)
            return Err(DatabaseError(
                message="Could not retrieve lessons. Please try again.",
                context={"error_type": type(e).__name__},
            ))
        return Ok([lesson.to_document() for lesson in lessons])

    async def update_lesson(
        self, lesson_id: int, fields: Optional[Dict[str, Any]]
    ) -> Result[int]:
        """
        Merge `fields` into lesson `lesson_id`.

        Returns:
            Ok(n) with n the number of lessons actually modified (0 or 1)

        Errors:
            ValidationError: body empty/absent, wrong field types, id change
            NotFoundError:   no lesson with this id
            DatabaseError:   the store failed
        """
        if not fields:
            return Err(ValidationError(message="Update body must not be empty"))

        changes = dict(fields)
        if "id" in changes:
            body_id = _as_lesson_id(changes.pop("id"))
            if body_id is None:
                return Err(ValidationError(message="Lesson id must be an integer", field="id"))
            if body_id != lesson_id:
                return Err(ValidationError(message="Lesson id cannot be changed", field="id"))
            if not changes:
                return Err(ValidationError(message="Update body must not be empty"))

        try:
            update = LessonUpdate.model_validate(changes)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or None
            return Err(ValidationError(
                message=f"Invalid value for '{field}': {first['msg']}",
                field=field,
            ))
        # Only the fields the client sent; explicit nulls are kept
        merged = {key: value for key, value in update.model_dump().items() if key in changes}
        for required in ("subject", "location"):
            if required in merged and merged[required] is None:
                return Err(ValidationError(message=f"'{required}' cannot be null", field=required))

        try:
            async with self.store.session() as db:
                lesson = await db.get(Lesson, lesson_id, with_for_update=True)
                if lesson is None:
                    return Err(NotFoundError(resource="lesson", resource_id=str(lesson_id)))
                modified = 1 if lesson.merge(merged) else 0
        except Exception as e:
            logger.error("Database error updating lesson %s: %s", lesson_id, str(e), exc_info=True)
            return Err(DatabaseError(
                message="Could not update the lesson. Please try again.",
                context={"lesson_id": lesson_id, "error_type": type(e).__name__},
            ))

        logger.info("Lesson %s updated: fields=%s modified=%d", lesson_id, sorted(merged), modified)
        return Ok(modified)
