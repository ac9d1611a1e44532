import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, ForeignKey, Index, UniqueConstraint, text
from ilaw.database import Base


class AwardMethod(str, enum.Enum):
    AUTO_ON_BOOK_COMPLETE = "auto_on_book_complete"
    MANUAL = "manual"


class Badge(Base):
    __tablename__ = "badges"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    icon_url = Column(String(512), nullable=True)
    is_generic = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class BookBadge(Base):
    """Which badges a book can award, and how."""
    __tablename__ = "book_badges"
    __table_args__ = (UniqueConstraint("book_id", "badge_id", name="uq_book_badges_book_badge"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    book_id = Column(String(36), ForeignKey("books.id"), nullable=False, index=True)
    badge_id = Column(String(36), ForeignKey("badges.id"), nullable=False, index=True)
    award_method = Column(String(32), nullable=False, default=AwardMethod.AUTO_ON_BOOK_COMPLETE.value)
    completion_threshold = Column(Integer, nullable=False, default=100)  # 1..100
    is_enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class EarnedBadge(Base):
    """Permanent award record. book_id is null for badges not tied to a book."""
    __tablename__ = "earned_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", "book_id", name="uq_earned_badges_user_badge_book"),
        Index(
            "ix_earned_badges_user_badge_no_book",
            "user_id", "badge_id",
            unique=True,
            sqlite_where=text("book_id IS NULL"),
            postgresql_where=text("book_id IS NULL"),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    badge_id = Column(String(36), ForeignKey("badges.id"), nullable=False, index=True)
    book_id = Column(String(36), ForeignKey("books.id"), nullable=True, index=True)
    awarded_by_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    note = Column(Text, nullable=True)
    awarded_at = Column(DateTime, nullable=False, default=datetime.utcnow)
