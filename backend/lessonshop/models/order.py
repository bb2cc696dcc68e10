"""
LessonShop Backend - Order ORM Model
======================================

What:  The `orders` table. One row per accepted POST /orders request.
How:   UUID string primary key and UTC creation timestamp are assigned
       server-side. Lesson references are stored as a JSON array of lesson
       ids; no foreign key is enforced.

Lifecycle:
    Created exactly once per request; never updated or deleted.
    Retried client requests create duplicate rows (no idempotency key).
"""

import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from lessonshop.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    """A customer's booking of one or more lessons."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(64), nullable=False)

    lesson_ids: Mapped[List[int]] = mapped_column(JSON, nullable=False)
    spaces: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Opaque cart payload from the storefront, stored as-is
    items: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, name='{self.name}', lessons={self.lesson_ids})>"
