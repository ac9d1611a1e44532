"""
System-wide and per-teacher settings.

System settings live in a single row (id=1) seeded from ilaw.config on first
read, so env vars act as defaults and admins can change the switches at
runtime. Teaching settings narrow the teacher book catalogue by grade and
subject.
"""
import logging
import re
from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from ilaw.config import get_settings
from ilaw.models.book import Book, BookType
from ilaw.models.settings import SystemSetting, TeachingSetting

logger = logging.getLogger(__name__)

SYSTEM_SETTINGS_ID = 1
STORYBOOK_SUBJECT = "Storybook"
DEFAULT_PREFERRED_GRADES = ["Grade 5"]
DEFAULT_SUBJECTS = [STORYBOOK_SUBJECT]
DEFAULT_MAX_CLASS_SIZE = 30
MIN_CLASS_SIZE = 10
MAX_CLASS_SIZE = 50

_STORYBOOK_RE = re.compile(r"^storybooks?$", re.IGNORECASE)
_KINDER_RE = re.compile(r"^k(in(der(garten)?)?)?$", re.IGNORECASE)


class TeachingSettingsError(ValueError):
    """Submitted teaching settings are out of range."""


# ---------- System settings ----------


def get_system_settings(db: Session) -> SystemSetting:
    row = db.query(SystemSetting).filter(SystemSetting.id == SYSTEM_SETTINGS_ID).first()
    if row:
        return row

    env = get_settings()
    row = SystemSetting(
        id=SYSTEM_SETTINGS_ID,
        maintenance_mode=False,
        allow_new_registrations=env.allow_new_registrations,
        auto_approve_students=env.auto_approve_students,
        auto_approve_teachers=env.auto_approve_teachers,
        require_strong_passwords=env.require_strong_passwords,
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return db.query(SystemSetting).filter(SystemSetting.id == SYSTEM_SETTINGS_ID).one()
    db.refresh(row)
    return row


def update_system_settings(db: Session, **changes) -> SystemSetting:
    """Apply non-None values. Unknown keys are ignored."""
    row = get_system_settings(db)
    for key, value in changes.items():
        if value is not None and hasattr(row, key) and key not in ("id", "updated_at"):
            setattr(row, key, value)
    db.commit()
    db.refresh(row)
    logger.info("System settings updated: %s", sorted(k for k, v in changes.items() if v is not None))
    return row


# ---------- Teaching settings ----------


def is_storybook_subject(value: str | None) -> bool:
    return bool(value) and _STORYBOOK_RE.match(value.strip()) is not None


def normalize_subjects(values: list[str] | None) -> list[str]:
    """Trim, drop blanks and fold "storybooks"/"Storybook" variants to "Storybook"."""
    out = []
    for value in values or []:
        value = value.strip()
        if value:
            out.append(STORYBOOK_SUBJECT if is_storybook_subject(value) else value)
    return out


def clean_grades(values: list[str] | None) -> list[str]:
    return [v.strip() for v in values or [] if v and v.strip()]


def canonical_grade(value: str) -> str:
    """Kindergarten -> K, Grade 5 -> 5; anything else is returned trimmed."""
    v = (value or "").strip()
    if not v:
        return v
    if _KINDER_RE.match(v):
        return "K"
    digits = re.search(r"\d+", v)
    if digits:
        return digits.group(0)
    return v


def subject_slug(value: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", (value or "").lower()).strip()
    return re.sub(r"\s+", "-", slug)


def get_teaching_settings(db: Session, user_id: str) -> TeachingSetting | None:
    return db.query(TeachingSetting).filter(TeachingSetting.user_id == user_id).first()


def save_teaching_settings(
    db: Session,
    user_id: str,
    *,
    preferred_grades: list[str] | None,
    subjects: list[str] | None,
    max_class_size: int | None,
) -> tuple[TeachingSetting, bool]:
    """Validate and upsert. Returns (row, created). Raises TeachingSettingsError."""
    grades = clean_grades(preferred_grades)
    subjects = normalize_subjects(subjects)
    size = DEFAULT_MAX_CLASS_SIZE if max_class_size is None else max_class_size
    if not grades:
        raise TeachingSettingsError("At least one grade must be selected")
    if not subjects:
        raise TeachingSettingsError("At least one subject must be selected")
    if not MIN_CLASS_SIZE <= size <= MAX_CLASS_SIZE:
        raise TeachingSettingsError(f"Max class size must be between {MIN_CLASS_SIZE} and {MAX_CLASS_SIZE}")

    def _apply(row: TeachingSetting) -> None:
        row.preferred_grades = grades
        row.subjects = subjects
        row.max_class_size = size

    existing = get_teaching_settings(db, user_id)
    if existing:
        _apply(existing)
        db.commit()
        db.refresh(existing)
        return existing, False

    row = TeachingSetting(user_id=user_id)
    _apply(row)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = get_teaching_settings(db, user_id)
        if existing is None:
            raise
        _apply(existing)
        db.commit()
        db.refresh(existing)
        return existing, False
    db.refresh(row)
    return row, True


def _subject_matches(label: str):
    slug = subject_slug(label)
    return or_(
        Book.subject == label,
        Book.subject == slug,
        Book.subject.ilike(f"%{label}%"),
        Book.subject.ilike(f"%{slug}%"),
    )


def filter_books_by_teaching_settings(q: Query, settings: TeachingSetting | None) -> Query:
    """
    Grades: book grade in the teacher's canonical grades. Subjects: "Storybook"
    admits storybooks; other labels admit educational books with a matching subject.
    """
    if settings is None:
        return q

    grades = [g for g in (canonical_grade(g) for g in settings.preferred_grades or []) if g]
    if grades:
        q = q.filter(Book.grade.in_(grades))

    wanted = normalize_subjects(settings.subjects)
    wants_storybooks = STORYBOOK_SUBJECT in wanted
    educational = [s for s in wanted if s != STORYBOOK_SUBJECT]
    edu_clause = None
    if educational:
        edu_clause = and_(
            Book.type == BookType.EDUCATIONAL.value,
            or_(*[_subject_matches(s) for s in educational]),
        )

    if wants_storybooks and edu_clause is not None:
        q = q.filter(or_(Book.type == BookType.STORYBOOK.value, edu_clause))
    elif wants_storybooks:
        q = q.filter(Book.type == BookType.STORYBOOK.value)
    elif edu_clause is not None:
        q = q.filter(edu_clause)
    return q


def filter_books_by_request(
    q: Query,
    *,
    type: str | None = None,
    grade: str | None = None,
    subject: str | None = None,
    search: str | None = None,
) -> Query:
    """Explicit catalogue filters; "all" or empty means no filter. A subject filter overrides type."""
    if grade and grade != "all":
        q = q.filter(Book.grade == canonical_grade(grade))
    if subject and subject != "all":
        if is_storybook_subject(subject):
            q = q.filter(Book.type == BookType.STORYBOOK.value)
        else:
            q = q.filter(Book.type == BookType.EDUCATIONAL.value, _subject_matches(subject.strip()))
    elif type and type != "all":
        q = q.filter(Book.type == type)
    if search and search.strip():
        like = f"%{search.strip()}%"
        q = q.filter(or_(Book.title.ilike(like), Book.description.ilike(like), Book.subject.ilike(like)))
    return q
