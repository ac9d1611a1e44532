import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Index, UniqueConstraint, text
from ilaw.database import Base


class Progress(Base):
    """Per (user, book) completion and cumulative reading time (seconds)."""
    __tablename__ = "progress"
    __table_args__ = (UniqueConstraint("user_id", "book_id", name="uq_progress_user_book"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(String(36), ForeignKey("books.id"), nullable=False, index=True)
    percent_complete = Column(Integer, nullable=False, default=0)
    total_reading_time = Column(Integer, nullable=False, default=0)
    last_read_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class ReadingSession(Base):
    __tablename__ = "reading_sessions"
    __table_args__ = (
        # At most one open session per user and book
        Index(
            "ix_reading_sessions_user_book_open",
            "user_id",
            "book_id",
            unique=True,
            sqlite_where=text("end_time IS NULL"),
            postgresql_where=text("end_time IS NULL"),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(String(36), ForeignKey("books.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False, default=datetime.utcnow)
    end_time = Column(DateTime, nullable=True)
    total_seconds = Column(Integer, nullable=True)
