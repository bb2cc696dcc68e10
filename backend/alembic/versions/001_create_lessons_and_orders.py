"""Create lessons and orders tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates `lessons` (seeded out of band) and `orders` (written by POST /orders).
How:   Portable column types only (JSON, DateTime with timezone), so the same
       migration runs on PostgreSQL and SQLite.

Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "lessons",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column("spaces", sa.Integer(), nullable=True),
        sa.Column("image", sa.String(255), nullable=True, comment="File name under IMAGES_DIR"),
        sa.Column(
            "attributes",
            sa.JSON(),
            nullable=False,
            comment="Additional lesson fields beyond the fixed columns",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_lessons_subject", "lessons", ["subject"])
    op.create_index("ix_lessons_location", "lessons", ["location"])

    op.create_table(
        "orders",
        sa.Column("id", sa.String(36), nullable=False, comment="UUID assigned by the server"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(64), nullable=False),
        sa.Column("lesson_ids", sa.JSON(), nullable=False, comment="Booked lesson ids"),
        sa.Column("spaces", sa.Integer(), nullable=True),
        sa.Column("items", sa.JSON(), nullable=True, comment="Opaque cart payload"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_orders_created_at", "orders", ["created_at"])


def downgrade() -> None:
    """WARNING: destroys all lesson and order data."""
    op.drop_index("ix_orders_created_at", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_lessons_location", table_name="lessons")
    op.drop_index("ix_lessons_subject", table_name="lessons")
    op.drop_table("lessons")
