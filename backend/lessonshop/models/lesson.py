"""
LessonShop Backend - Lesson ORM Model
=======================================

What:  The `lessons` table. One row per bookable lesson.
How:   Fixed columns for the fields the storefront queries and displays,
       plus an `attributes` JSON document holding any other field a lesson
       was seeded or updated with. Clients see one flat JSON object.

Lifecycle:
    1. Seeded out of band (migration, SQL, `python -m lessonshop seed`)
    2. Mutated only by PUT /lessons/{id} (partial field merge)
    3. Never deleted by the application

Query Patterns:
    - List all:        SELECT * FROM lessons
    - Search:          WHERE subject ILIKE :q OR location ILIKE :q  (escaped)
    - Update target:   WHERE id = :id  → primary key lookup
"""

from typing import Any, Dict, Optional

from sqlalchemy import JSON, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from lessonshop.database import Base

# Fields stored as real columns; everything else lives in `attributes`
COLUMN_FIELDS = ("subject", "location", "price", "spaces", "image")

_MISSING = object()


class Lesson(Base):
    """A lesson offered by the storefront."""

    __tablename__ = "lessons"

    # Numeric, stable identifier; the key used by updates and orders
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)

    subject: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    spaces: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    attributes: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def to_document(self) -> Dict[str, Any]:
        """Flat JSON representation: fixed fields first, then extra attributes."""
        doc: Dict[str, Any] = {"id": self.id, "subject": self.subject, "location": self.location}
        for name in ("price", "spaces", "image"):
            value = getattr(self, name)
            if value is not None:
                doc[name] = value
        for key, value in (self.attributes or {}).items():
            doc.setdefault(key, value)
        return doc

    def merge(self, fields: Dict[str, Any]) -> bool:
        """
        Apply a partial update in place.

        Only the named fields change. Returns True when at least one stored
        value actually differs afterwards (a no-op update returns False).
        """
        changed = False
        extra = dict(self.attributes or {})

        for key, value in fields.items():
            if key in COLUMN_FIELDS:
                if getattr(self, key) != value:
                    setattr(self, key, value)
                    changed = True
            elif extra.get(key, _MISSING) != value:
                extra[key] = value
                changed = True

        if extra != (self.attributes or {}):
            # New dict object so the JSON column is flagged dirty
            self.attributes = extra
        return changed

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Lesson":
        """Build a Lesson from a flat seed document."""
        data = dict(doc)
        lesson = cls(
            id=int(data.pop("id")),
            subject=data.pop("subject"),
            location=data.pop("location"),
            price=data.pop("price", None),
            spaces=data.pop("spaces", None),
            image=data.pop("image", None),
        )
        lesson.attributes = data
        return lesson

    def __repr__(self) -> str:
        return f"<Lesson(id={self.id}, subject='{self.subject}', location='{self.location}')>"
