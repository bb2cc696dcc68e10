"""
LessonShop Backend - Custom Exception Hierarchy
=================================================

What:  Application-specific error types, one per HTTP status family.
How:   Each error carries a user-facing message and an optional context dict.
       Services return them inside Err results (see lessonshop.results);
       the route boundary raises them and the handlers registered in
       main.py turn them into JSON responses.

Exception Hierarchy:
    LessonShopError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── NotFoundError     → 404 Not Found
    ├── DatabaseError     → 500 Internal Server Error
    └── StartupError      → process refuses to start
"""

from typing import Any, Dict, Optional


class LessonShopError(Exception):
    """
    Base exception for all LessonShop application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for 4xx errors)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(LessonShopError):
    """
    Raised when client input fails validation.

    When:    Missing name/phone, empty lessonIDs, empty update body.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(LessonShopError):
    """
    Raised when a requested resource does not exist.

    When:    PUT /lessons/{id} for an unknown id, GET /images/<missing file>.
    HTTP:    404 Not Found
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(LessonShopError):
    """
    Raised when a store operation fails.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. The driver error
    is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StartupError(LessonShopError):
    """
    Raised when the store cannot be reached while the app starts.

    There is no reconnect loop: the lifespan handler logs the cause and
    re-raises, and uvicorn aborts startup.
    """

    def __init__(
        self,
        message: str = "Could not connect to the database",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
