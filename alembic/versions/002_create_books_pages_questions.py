"""create books, pages and questions

Revision ID: 002
Revises: 001
Create Date: 2025-08-04

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "books",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("slug", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("type", sa.String(20), nullable=False, server_default="storybook"),
        sa.Column("subject", sa.String(100), nullable=True),
        sa.Column("grade", sa.String(20), nullable=True),
        sa.Column("cover_image", sa.String(512), nullable=True),
        sa.Column("music_url", sa.String(512), nullable=True),
        sa.Column("quiz_mode", sa.String(20), nullable=False, server_default="retry"),
        sa.Column("added_by_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "pages",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("book_id", sa.String(36), sa.ForeignKey("books.id"), nullable=False, index=True),
        sa.Column("page_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False, server_default=""),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("image_url", sa.String(512), nullable=False, server_default=""),
        sa.Column("shuffle_questions", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("book_id", "page_number", name="uq_pages_book_page_number"),
    )
    op.create_table(
        "questions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("page_id", sa.String(36), sa.ForeignKey("pages.id"), nullable=False, index=True),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("answer_type", sa.String(32), nullable=False, server_default="text"),
        sa.Column("correct_answer", sa.Text(), nullable=False, server_default=""),
        sa.Column("options", sa.Text(), nullable=False, server_default=""),
    )


def downgrade() -> None:
    op.drop_table("questions")
    op.drop_table("pages")
    op.drop_table("books")
