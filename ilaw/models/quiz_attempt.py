import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, CheckConstraint, Index, UniqueConstraint, text
from ilaw.database import Base


class QuizAttempt(Base):
    """One submission of a quiz question set. Never updated after insert."""
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        CheckConstraint("score_total > 0", name="ck_quiz_attempts_total_positive"),
        CheckConstraint(
            "score_correct >= 0 AND score_correct <= score_total",
            name="ck_quiz_attempts_correct_in_range",
        ),
        UniqueConstraint(
            "user_id", "book_id", "page_id", "attempt_number",
            name="uq_quiz_attempts_attempt_number",
        ),
        # NULL page_id never collides in the constraint above
        Index(
            "ix_quiz_attempts_attempt_number_no_page",
            "user_id", "book_id", "attempt_number",
            unique=True,
            sqlite_where=text("page_id IS NULL"),
            postgresql_where=text("page_id IS NULL"),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(String(36), ForeignKey("books.id"), nullable=False, index=True)
    page_id = Column(String(36), ForeignKey("pages.id"), nullable=True)
    score_correct = Column(Integer, nullable=False)
    score_total = Column(Integer, nullable=False)
    percentage = Column(Integer, nullable=False)  # 0..100
    mode = Column(String(20), nullable=False, default="retry")  # "retry" | "straight"
    attempt_number = Column(Integer, nullable=False, default=1)
    duration_sec = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
