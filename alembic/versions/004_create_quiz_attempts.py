"""create quiz_attempts

Revision ID: 004
Revises: 003
Create Date: 2025-08-18

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "quiz_attempts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("book_id", sa.String(36), sa.ForeignKey("books.id"), nullable=False, index=True),
        sa.Column("page_id", sa.String(36), sa.ForeignKey("pages.id"), nullable=True),
        sa.Column("score_correct", sa.Integer(), nullable=False),
        sa.Column("score_total", sa.Integer(), nullable=False),
        sa.Column("percentage", sa.Integer(), nullable=False),
        sa.Column("mode", sa.String(20), nullable=False, server_default="retry"),
        sa.Column("attempt_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("duration_sec", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now(), index=True),
        sa.CheckConstraint("score_total > 0", name="ck_quiz_attempts_total_positive"),
        sa.CheckConstraint(
            "score_correct >= 0 AND score_correct <= score_total",
            name="ck_quiz_attempts_correct_in_range",
        ),
        sa.UniqueConstraint(
            "user_id", "book_id", "page_id", "attempt_number",
            name="uq_quiz_attempts_attempt_number",
        ),
    )


def downgrade() -> None:
    op.drop_table("quiz_attempts")
