"""
LessonShop Backend - Operation Results
========================================

What:  Explicit success/failure values returned by every service operation.
How:   A service returns Ok(value) or Err(error); the route calls unwrap()
       exactly once, which either hands back the value or raises the tagged
       error for the exception handlers in main.py to map onto a status code.

Example:
    result = await lesson_service.update_lesson(7, {"spaces": 3})
    if result.is_ok:
        print(result.value)
    else:
        print(result.error.status_code)   # 400, 404 or 500
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from lessonshop.exceptions import LessonShopError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: LessonShopError

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def unwrap(result: "Result[T]") -> T:
    """Return the success value, or raise the carried error."""
    if isinstance(result, Err):
        raise result.error
    return result.value
