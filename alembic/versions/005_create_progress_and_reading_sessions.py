"""create progress and reading_sessions; one open session per user and book

Revision ID: 005
Revises: 004
Create Date: 2025-08-18

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy import text

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "progress",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("book_id", sa.String(36), sa.ForeignKey("books.id"), nullable=False, index=True),
        sa.Column("percent_complete", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_reading_time", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_read_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "book_id", name="uq_progress_user_book"),
    )
    op.create_table(
        "reading_sessions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("book_id", sa.String(36), sa.ForeignKey("books.id"), nullable=False, index=True),
        sa.Column("start_time", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("total_seconds", sa.Integer(), nullable=True),
    )
    # Partial unique index: only open sessions (end_time IS NULL) are constrained
    op.create_index(
        "ix_reading_sessions_user_book_open",
        "reading_sessions",
        ["user_id", "book_id"],
        unique=True,
        postgresql_where=text("end_time IS NULL"),
        sqlite_where=text("end_time IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("ix_reading_sessions_user_book_open", table_name="reading_sessions")
    op.drop_table("reading_sessions")
    op.drop_table("progress")
