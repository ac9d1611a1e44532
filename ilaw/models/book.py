import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, ForeignKey, UniqueConstraint
from ilaw.database import Base


class BookType(str, enum.Enum):
    STORYBOOK = "storybook"
    EDUCATIONAL = "educational"


class QuizMode(str, enum.Enum):
    RETRY = "retry"
    STRAIGHT = "straight"


class Book(Base):
    __tablename__ = "books"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    slug = Column(String(255), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(String(20), nullable=False, default=BookType.STORYBOOK.value)
    subject = Column(String(100), nullable=True)  # only for educational books
    grade = Column(String(20), nullable=True)
    cover_image = Column(String(512), nullable=True)  # external URL
    music_url = Column(String(512), nullable=True)
    quiz_mode = Column(String(20), nullable=False, default=QuizMode.RETRY.value)
    added_by_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class Page(Base):
    __tablename__ = "pages"
    __table_args__ = (UniqueConstraint("book_id", "page_number", name="uq_pages_book_page_number"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    book_id = Column(String(36), ForeignKey("books.id"), nullable=False, index=True)
    page_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False, default="")
    content = Column(Text, nullable=False)
    image_url = Column(String(512), nullable=False, default="")
    shuffle_questions = Column(Boolean, nullable=False, default=False)


class Question(Base):
    __tablename__ = "questions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    page_id = Column(String(36), ForeignKey("pages.id"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    answer_type = Column(String(32), nullable=False, default="text")  # "text" | "multiple_choice"
    correct_answer = Column(Text, nullable=False, default="")
    options = Column(Text, nullable=False, default="")  # newline-separated choices
