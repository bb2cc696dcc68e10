"""
LessonShop Backend - Order Service
====================================

What:  Validates and persists customer orders.
How:   Required fields are checked in a fixed order before the store is
       touched; the payload is then type-checked with OrderCreate and written
       with exactly one INSERT.
Who:   Called by POST /orders.

Validation order (first failure wins, nothing is written):
    1. name       missing or falsy
    2. phone      missing or falsy
    3. lessonIDs  missing, not an array, or empty
    4. types      OrderCreate (name/phone strings, integer lesson ids, spaces >= 1)

There is no idempotency key: the same payload posted twice yields two orders.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from lessonshop.database import DocumentStore
from lessonshop.exceptions import DatabaseError, ValidationError
from lessonshop.models.order import Order
from lessonshop.results import Err, Ok, Result
from lessonshop.schemas.lesson import OrderCreate

logger = logging.getLogger(__name__)


def validate_order(payload: Optional[Dict[str, Any]]) -> Result[OrderCreate]:
    """Check an order payload without touching the store."""
    payload = payload or {}

    for field in ("name", "phone"):
        if not payload.get(field):
            return Err(ValidationError(message=f"Field '{field}' is required", field=field))

    lesson_ids = payload.get("lessonIDs")
    if not isinstance(lesson_ids, list) or not lesson_ids:
        return Err(ValidationError(
            message="Field 'lessonIDs' must be a non-empty array",
            field="lessonIDs",
        ))

    try:
        return Ok(OrderCreate.model_validate(payload))
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        return Err(ValidationError(
            message=f"Invalid value for '{field}': {first['msg']}",
            field=field,
        ))


class OrderService:
    """Order intake bound to one store handle."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def create_order(self, payload: Optional[Dict[str, Any]]) -> Result[str]:
        """
        Validate and insert one order.

        Returns:
            Ok(order_id) for the newly inserted row

        Errors:
            ValidationError: payload rejected (no insert happened)
            DatabaseError:   the insert failed
        """
        checked = validate_order(payload)
        if isinstance(checked, Err):
            return checked
        data = checked.value

        order = Order(
            name=data.name,
            phone=data.phone,
            lesson_ids=data.lesson_ids,
            spaces=data.spaces,
            items=data.items,
        )
        try:
            async with self.store.session() as db:
                db.add(order)
                await db.flush()  # assigns id and created_at defaults
        except Exception as e:
            logger.error("Database error creating order: %s", str(e), exc_info=True)
            return Err(DatabaseError(
                message="Could not place the order. Please try again.",
                context={"error_type": type(e).__name__},
            ))

        logger.info("Order %s created for lessons %s", order.id, order.lesson_ids)
        return Ok(order.id)
