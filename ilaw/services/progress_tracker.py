"""
Progress rows and reading sessions.

Progress is one row per (user, book), upserted. Reading sessions add elapsed
seconds to Progress.total_reading_time when they end. Unique constraints on
progress and on open reading sessions turn concurrent duplicate inserts into
IntegrityError, which is handled by re-reading the winner's row.
"""
import logging
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ilaw.models.progress import Progress, ReadingSession

logger = logging.getLogger(__name__)


class ReadingSessionNotFound(LookupError):
    """No open reading session for this user and book."""


def get_progress(db: Session, user_id: str, book_id: str) -> Progress | None:
    return (
        db.query(Progress)
        .filter(Progress.user_id == user_id, Progress.book_id == book_id)
        .first()
    )


def _apply(row: Progress, percent_complete: int | None, add_reading_seconds: int, now: datetime) -> None:
    if percent_complete is not None:
        row.percent_complete = percent_complete
    if add_reading_seconds:
        row.total_reading_time = (row.total_reading_time or 0) + add_reading_seconds
    row.last_read_at = now


def upsert_progress(
    db: Session,
    user_id: str,
    book_id: str,
    *,
    percent_complete: int | None = None,
    add_reading_seconds: int = 0,
    now: datetime | None = None,
) -> tuple[Progress, bool]:
    """
    Create-or-update Progress for (user, book). Returns (row, created).
    percent_complete=None leaves the stored value alone (new rows start at 0).
    """
    now = now or datetime.utcnow()
    existing = get_progress(db, user_id, book_id)
    if existing:
        _apply(existing, percent_complete, add_reading_seconds, now)
        db.commit()
        db.refresh(existing)
        return existing, False

    row = Progress(
        user_id=user_id,
        book_id=book_id,
        percent_complete=percent_complete if percent_complete is not None else 0,
        total_reading_time=add_reading_seconds,
        last_read_at=now,
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = get_progress(db, user_id, book_id)
        if existing is None:
            raise
        logger.info("Progress for user %s book %s created concurrently; updating", user_id, book_id)
        _apply(existing, percent_complete, add_reading_seconds, now)
        db.commit()
        db.refresh(existing)
        return existing, False
    db.refresh(row)
    return row, True


def get_open_session(db: Session, user_id: str, book_id: str) -> ReadingSession | None:
    return (
        db.query(ReadingSession)
        .filter(
            ReadingSession.user_id == user_id,
            ReadingSession.book_id == book_id,
            ReadingSession.end_time.is_(None),
        )
        .first()
    )


def start_reading_session(
    db: Session, user_id: str, book_id: str, now: datetime | None = None
) -> tuple[ReadingSession, bool]:
    """Idempotent: an already-open session is returned unchanged. Returns (session, created)."""
    active = get_open_session(db, user_id, book_id)
    if active:
        return active, False

    session = ReadingSession(user_id=user_id, book_id=book_id, start_time=now or datetime.utcnow())
    db.add(session)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        active = get_open_session(db, user_id, book_id)
        if active is None:
            raise
        return active, False
    db.refresh(session)
    return session, True


def end_reading_session(
    db: Session, user_id: str, book_id: str, now: datetime | None = None
) -> tuple[ReadingSession, int]:
    """
    Close the open session and add its elapsed whole seconds to Progress.
    Returns (session, elapsed_seconds). Raises ReadingSessionNotFound.
    """
    active = get_open_session(db, user_id, book_id)
    if not active:
        raise ReadingSessionNotFound("No active reading session found")

    end_time = now or datetime.utcnow()
    elapsed = max(0, int((end_time - active.start_time).total_seconds()))

    # Conditional update so two concurrent "end" calls cannot both count the time
    closed = (
        db.query(ReadingSession)
        .filter(ReadingSession.id == active.id, ReadingSession.end_time.is_(None))
        .update({"end_time": end_time, "total_seconds": elapsed}, synchronize_session=False)
    )
    if not closed:
        db.rollback()
        raise ReadingSessionNotFound("No active reading session found")
    db.commit()
    db.refresh(active)

    upsert_progress(db, user_id, book_id, add_reading_seconds=elapsed, now=end_time)
    logger.info("Reading session %s ended after %s seconds", active.id, elapsed)
    return active, elapsed
