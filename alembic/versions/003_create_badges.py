"""create badges, book_badges and earned_badges

Revision ID: 003
Revises: 002
Create Date: 2025-08-11

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "badges",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("icon_url", sa.String(512), nullable=True),
        sa.Column("is_generic", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "book_badges",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("book_id", sa.String(36), sa.ForeignKey("books.id"), nullable=False, index=True),
        sa.Column("badge_id", sa.String(36), sa.ForeignKey("badges.id"), nullable=False, index=True),
        sa.Column("award_method", sa.String(32), nullable=False, server_default="auto_on_book_complete"),
        sa.Column("completion_threshold", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("book_id", "badge_id", name="uq_book_badges_book_badge"),
    )
    op.create_table(
        "earned_badges",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("badge_id", sa.String(36), sa.ForeignKey("badges.id"), nullable=False, index=True),
        sa.Column("book_id", sa.String(36), sa.ForeignKey("books.id"), nullable=True, index=True),
        sa.Column("awarded_by_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("awarded_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "badge_id", "book_id", name="uq_earned_badges_user_badge_book"),
    )


def downgrade() -> None:
    op.drop_table("earned_badges")
    op.drop_table("book_badges")
    op.drop_table("badges")
