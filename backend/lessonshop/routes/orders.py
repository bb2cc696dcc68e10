"""
LessonShop Backend - Order Route Handler
==========================================

What:  POST /orders.
How:   The raw JSON object is handed to OrderService, which validates the
       required fields before writing. A successful insert answers 201 with
       the new order id.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, status

from lessonshop.results import unwrap
from lessonshop.schemas.lesson import ErrorResponse, OrderCreatedResponse
from lessonshop.services.order_service import OrderService


def build_router(order_service: OrderService) -> APIRouter:
    """Create the order router bound to `order_service`."""
    router = APIRouter(tags=["Orders"])

    @router.post(
        "/orders",
        status_code=status.HTTP_201_CREATED,
        response_model=OrderCreatedResponse,
        responses={
            400: {"description": "Invalid order payload", "model": ErrorResponse},
            500: {"description": "Server error", "model": ErrorResponse},
        },
        summary="Place an order for one or more lessons",
        description=(
            "Body: {name, phone, lessonIDs[], spaces?, items?}. "
            "Requests are not deduplicated; posting twice creates two orders."
        ),
    )
    async def create_order(
        payload: Optional[Dict[str, Any]] = Body(default=None),
    ) -> OrderCreatedResponse:
        order_id = unwrap(await order_service.create_order(payload))
        return OrderCreatedResponse(orderId=order_id)

    return router
