"""
LessonShop Backend - Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and exposes a cached `Settings` object.
Who:   create_app(), the CLI entry point and the Alembic environment.
When:  Built once at startup via get_settings().

Required variables:
    DATABASE_URL  async SQLAlchemy URL (postgresql+asyncpg://..., sqlite+aiosqlite:///...)
    DB_NAME       database name; replaces the database part of DATABASE_URL
    PORT          listening port

    A missing required variable raises pydantic.ValidationError from
    get_settings(). The server does not start without them.
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The three connection settings have no defaults. Everything else has a
    development-friendly default.
    """

    # ── Database ──────────────────────────────────────────────────────────
    database_url: str = Field(description="Async SQLAlchemy connection URL")
    db_name: str = Field(min_length=1, description="Database name inside the server")

    # Echo SQL statements; independent of log_level so DEBUG logs stay readable
    db_echo: bool = Field(default=False)

    # Create missing tables on startup. Alembic is the production path.
    db_create_schema: bool = Field(default=False)

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(ge=1, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Static Assets ─────────────────────────────────────────────────────
    # Served under /images; missing files answer with a JSON 404
    images_dir: str = Field(default="./images")

    # Frontend bundle served at /. Empty means "plaintext health string at /"
    frontend_dir: str = Field(default="")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins; "*" allows any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def store_url(self) -> str:
        """
        DATABASE_URL with its database component replaced by DB_NAME.

        postgresql+asyncpg://u:p@host:5432/postgres + DB_NAME=lessons
            -> postgresql+asyncpg://u:p@host:5432/lessons
        sqlite+aiosqlite:///./data/ + DB_NAME=lessons.db
            -> sqlite+aiosqlite:///./data/lessons.db
        """
        url = make_url(self.database_url)
        if url.get_backend_name() == "sqlite":
            base = url.database or ""
            if base and not base.endswith("/"):
                # A full file path was given; DB_NAME names the file next to it
                base = base.rsplit("/", 1)[0] + "/" if "/" in base else ""
            return url.set(database=f"{base}{self.db_name}").render_as_string(hide_password=False)
        return url.set(database=self.db_name).render_as_string(hide_password=False)

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # DATABASE_URL and database_url both work
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Build the settings once per process.

    Raises:
        pydantic.ValidationError: a required variable is missing or invalid.
    """
    return Settings()
