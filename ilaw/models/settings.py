"""Runtime settings editable by admins and teachers (stored, not env-only)."""
import uuid
from datetime import datetime
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String
from ilaw.database import Base


class SystemSetting(Base):
    """Single row (id=1). Missing row means the env defaults from ilaw.config apply."""
    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    maintenance_mode = Column(Boolean, nullable=False, default=False)
    allow_new_registrations = Column(Boolean, nullable=False, default=True)
    auto_approve_students = Column(Boolean, nullable=False, default=False)
    auto_approve_teachers = Column(Boolean, nullable=False, default=False)
    require_strong_passwords = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class TeachingSetting(Base):
    """Per-teacher book catalogue preferences."""
    __tablename__ = "teaching_settings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False, index=True)
    preferred_grades = Column(JSON, nullable=False, default=list)  # e.g. ["Grade 5"]
    subjects = Column(JSON, nullable=False, default=list)  # "Storybook" or educational subject labels
    max_class_size = Column(Integer, nullable=False, default=30)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
