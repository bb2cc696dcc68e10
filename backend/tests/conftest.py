"""
LessonShop Backend - Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite file (aiosqlite) under tmp_path, an
       images directory, and an app built by create_app() around an explicit
       DocumentStore. No external database is needed.

Fixture Hierarchy (all function-scoped):
    ├── settings:       Settings pointing at tmp_path
    ├── store:          DocumentStore with the schema created, empty tables
    ├── seeded_store:   store + SAMPLE_LESSONS
    ├── images_dir:     images directory holding SAMPLE_IMAGE_BYTES as math.png
    └── test_client:    HTTPX AsyncClient talking to the app over ASGITransport
"""

import os
from typing import Any, Dict, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

# Required variables for code paths that read the environment
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./")
os.environ.setdefault("DB_NAME", "lessonshop_test.db")
os.environ.setdefault("PORT", "8000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from lessonshop.config import Settings  # noqa: E402
from lessonshop.database import DocumentStore  # noqa: E402
from lessonshop.main import create_app  # noqa: E402
from lessonshop.models.lesson import Lesson  # noqa: E402
from lessonshop.models.order import Order  # noqa: E402


SAMPLE_LESSONS: List[Dict[str, Any]] = [
    {"id": 1, "subject": "Math", "location": "London", "price": 100, "spaces": 5, "image": "math.png"},
    {"id": 2, "subject": "English", "location": "Oxford", "price": 80, "spaces": 5},
    {"id": 3, "subject": "Music", "location": "St. Albans", "price": 90, "spaces": 2,
     "level": "beginner"},
    {"id": 4, "subject": "C++ (advanced)", "location": "Room [2]", "price": 120, "spaces": 4},
    {"id": 5, "subject": "Art", "location": "Bristol", "price": 60, "spaces": 0},
]

# Minimal PNG signature plus a few bytes; the server never decodes it
SAMPLE_IMAGE_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01fake-image"


@pytest.fixture
def images_dir(tmp_path):
    directory = tmp_path / "images"
    directory.mkdir()
    (directory / "math.png").write_bytes(SAMPLE_IMAGE_BYTES)
    return directory


@pytest.fixture
def settings(tmp_path, images_dir):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path}/",
        db_name="lessonshop.db",
        port=8000,
        images_dir=str(images_dir),
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def store(settings):
    """Empty store with both tables created."""
    document_store = DocumentStore(settings.store_url)
    await document_store.create_schema()
    yield document_store
    await document_store.dispose()


@pytest_asyncio.fixture
async def seeded_store(store):
    async with store.session() as db:
        for doc in SAMPLE_LESSONS:
            db.add(Lesson.from_document(doc))
    return store


@pytest_asyncio.fixture
async def test_client(settings, seeded_store):
    """
    Async HTTP client for the app, backed by the seeded store.

    Usage:
        async def test_lessons(test_client):
            response = await test_client.get("/lessons")
            assert response.status_code == 200
    """
    app = create_app(settings=settings, store=seeded_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ── Helpers ───────────────────────────────────────────────────────────────

async def count_orders(store: DocumentStore) -> int:
    async with store.session() as db:
        return (await db.execute(select(func.count(Order.id)))).scalar_one()


async def fetch_lesson(store: DocumentStore, lesson_id: int) -> Dict[str, Any]:
    async with store.session() as db:
        lesson = await db.get(Lesson, lesson_id)
        return lesson.to_document()
