"""unique attempt numbers without a page, unique book-less earned badges

NULL columns never collide in the existing composite unique constraints.

Revision ID: 007
Revises: 006
Create Date: 2025-09-08

"""
from typing import Sequence, Union
from alembic import op
from sqlalchemy import text

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_index(
        "ix_quiz_attempts_attempt_number_no_page",
        "quiz_attempts",
        ["user_id", "book_id", "attempt_number"],
        unique=True,
        postgresql_where=text("page_id IS NULL"),
        sqlite_where=text("page_id IS NULL"),
    )
    op.create_index(
        "ix_earned_badges_user_badge_no_book",
        "earned_badges",
        ["user_id", "badge_id"],
        unique=True,
        postgresql_where=text("book_id IS NULL"),
        sqlite_where=text("book_id IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("ix_earned_badges_user_badge_no_book", table_name="earned_badges")
    op.drop_index("ix_quiz_attempts_attempt_number_no_page", table_name="quiz_attempts")
