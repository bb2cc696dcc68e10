"""
LessonShop Backend - Management Commands
==========================================

    python -m lessonshop serve          run the API with uvicorn on HOST:PORT
    python -m lessonshop init-db        create the lessons/orders tables
    python -m lessonshop seed FILE      load lessons from a JSON array file

Every command reads the same environment as the server; a missing
DATABASE_URL, DB_NAME or PORT stops the command with exit code 1.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
import uvicorn
from pydantic import ValidationError as SettingsValidationError

from lessonshop.config import Settings, get_settings
from lessonshop.database import DocumentStore
from lessonshop.main import setup_logging
from lessonshop.models.lesson import Lesson

logger = logging.getLogger("lessonshop.cli")

cli = typer.Typer(add_completion=False, help="LessonShop backend management commands")


def _load_settings() -> Settings:
    try:
        settings = get_settings()
    except SettingsValidationError as error:
        missing = ", ".join(
            str(err["loc"][0]).upper() for err in error.errors() if err.get("loc")
        )
        typer.echo(f"Configuration error: missing or invalid {missing}", err=True)
        raise typer.Exit(code=1) from error
    setup_logging(settings.log_level)
    return settings


@cli.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Override HOST"),
    port: Optional[int] = typer.Option(None, help="Override PORT"),
) -> None:
    """Start the HTTP server."""
    settings = _load_settings()
    uvicorn.run(
        "lessonshop.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )


async def _init_db(store: DocumentStore) -> None:
    try:
        await store.create_schema()
    finally:
        await store.dispose()


@cli.command("init-db")
def init_db() -> None:
    """Create missing tables."""
    settings = _load_settings()
    asyncio.run(_init_db(DocumentStore(settings.store_url, echo=settings.db_echo)))
    typer.echo("Schema ready.")


def read_seed_file(path: Path) -> List[Dict[str, Any]]:
    """Parse a seed file: a JSON array of lesson objects with id, subject and location."""
    documents = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(documents, list):
        raise ValueError("Seed file must contain a JSON array of lessons")
    for index, doc in enumerate(documents):
        if not isinstance(doc, dict):
            raise ValueError(f"Lesson #{index} must be a JSON object")
        missing = [key for key in ("id", "subject", "location") if key not in doc]
        if missing:
            raise ValueError(f"Lesson #{index} is missing {', '.join(missing)}")
    return documents


async def seed_lessons(store: DocumentStore, documents: List[Dict[str, Any]]) -> int:
    """Insert or replace lessons by id. Returns the number written."""
    await store.create_schema()
    async with store.session() as db:
        for doc in documents:
            await db.merge(Lesson.from_document(doc))
    return len(documents)


async def _seed(store: DocumentStore, documents: List[Dict[str, Any]]) -> int:
    try:
        return await seed_lessons(store, documents)
    finally:
        await store.dispose()


@cli.command()
def seed(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON array of lessons"),
) -> None:
    """Load lessons from a JSON file (out-of-band seeding)."""
    settings = _load_settings()
    try:
        documents = read_seed_file(file)
    except (ValueError, json.JSONDecodeError) as error:
        typer.echo(f"Invalid seed file: {error}", err=True)
        raise typer.Exit(code=1) from error

    count = asyncio.run(_seed(DocumentStore(settings.store_url, echo=settings.db_echo), documents))
    typer.echo(f"Seeded {count} lessons.")
