"""
LessonShop Backend - Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the API contract between storefront and backend.
How:   Services validate raw JSON bodies against the input models; routes use
       the response models for serialization and OpenAPI docs.

Lessons are open documents, so list/search responses are plain JSON objects
(see Lesson.to_document) rather than a fixed model.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Input Models
# ══════════════════════════════════════════════════════════════════════════


class LessonUpdate(BaseModel):
    """
    Partial update for a lesson.

    Known fields are type-checked; unknown fields pass through untouched and
    are merged into the lesson's extra attributes. JSON booleans are not
    accepted where a number is expected.
    """

    model_config = ConfigDict(extra="allow")

    subject: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    spaces: Optional[StrictInt] = Field(default=None, ge=0)
    image: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def reject_bool_price(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("price must be a number")
        return value


class OrderCreate(BaseModel):
    """
    Order payload, validated after the required-field checks in OrderService.

    Field names follow the storefront's JSON (`lessonIDs`).
    """

    model_config = ConfigDict(populate_by_name=True)

    name: StrictStr = Field(min_length=1)
    phone: StrictStr = Field(min_length=1)
    lesson_ids: List[StrictInt] = Field(alias="lessonIDs", min_length=1)
    spaces: Optional[StrictInt] = Field(default=None, ge=1)
    items: Optional[Any] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class OrderCreatedResponse(BaseModel):
    """Returned by POST /orders with HTTP 201 Created."""

    message: str = Field(default="Order created successfully")
    orderId: str = Field(description="Server-assigned order identifier (UUID)")


class LessonUpdatedResponse(BaseModel):
    """Returned by PUT /lessons/{id}."""

    message: str = Field(default="Lesson updated successfully")
    updatedCount: int = Field(
        description="Documents actually modified: 0 when the update changed nothing"
    )


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Field 'name' is required",
            "details": {"field": "name"},
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
