"""
Badge awarding.

complete_book() is the award-on-completion engine: mark Progress 100%, then
credit every badge mapped to the book that the user does not hold yet for that
book. Each step commits on its own and is idempotent, so a failed call can be
retried and converges without duplicate awards. Manual awards use award_badge()
directly.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ilaw.models.badge import AwardMethod, Badge, BookBadge, EarnedBadge
from ilaw.models.progress import Progress
from ilaw.services.progress_tracker import upsert_progress
from ilaw.services.quiz_sessions import round_half_up

logger = logging.getLogger(__name__)

COMPLETE_PERCENT = 100
DEFAULT_THRESHOLD = 100


@dataclass
class CompletionResult:
    progress: Progress
    awarded: list[tuple[Badge, EarnedBadge]] = field(default_factory=list)


def normalize_threshold(value: float | None) -> int:
    if value is None:
        return DEFAULT_THRESHOLD
    return max(1, min(100, round_half_up(value)))


def find_earned_badge(db: Session, user_id: str, badge_id: str, book_id: str | None) -> EarnedBadge | None:
    q = db.query(EarnedBadge).filter(
        EarnedBadge.user_id == user_id,
        EarnedBadge.badge_id == badge_id,
    )
    if book_id is None:
        q = q.filter(EarnedBadge.book_id.is_(None))
    else:
        q = q.filter(EarnedBadge.book_id == book_id)
    return q.first()


def award_badge(
    db: Session,
    *,
    user_id: str,
    badge_id: str,
    book_id: str | None = None,
    note: str | None = None,
    awarded_by_id: str | None = None,
    now: datetime | None = None,
) -> tuple[EarnedBadge, bool]:
    """Insert an EarnedBadge unless one exists for (user, badge, book). Returns (row, created)."""
    existing = find_earned_badge(db, user_id, badge_id, book_id)
    if existing:
        return existing, False

    earned = EarnedBadge(
        user_id=user_id,
        badge_id=badge_id,
        book_id=book_id,
        note=note,
        awarded_by_id=awarded_by_id,
        awarded_at=now or datetime.utcnow(),
    )
    db.add(earned)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = find_earned_badge(db, user_id, badge_id, book_id)
        if existing is None:
            raise
        return existing, False
    db.refresh(earned)
    logger.info("Badge %s awarded to user %s (book %s)", badge_id, user_id, book_id)
    return earned, True


def detach_book_awards(db: Session, book_id: str) -> int:
    """
    Clear book_id on the book's earned badges ahead of deleting the book. A user
    who already holds the same badge with no book keeps that row and the
    book's copy is dropped. Does not commit. Returns the number of rows dropped.
    """
    rows = db.query(EarnedBadge).filter(EarnedBadge.book_id == book_id).all()
    if not rows:
        return 0
    held = {
        (user_id, badge_id)
        for user_id, badge_id in db.query(EarnedBadge.user_id, EarnedBadge.badge_id).filter(
            EarnedBadge.book_id.is_(None),
            EarnedBadge.user_id.in_({r.user_id for r in rows}),
        )
    }
    dropped = 0
    for earned in rows:
        if (earned.user_id, earned.badge_id) in held:
            db.delete(earned)
            dropped += 1
        else:
            earned.book_id = None
            held.add((earned.user_id, earned.badge_id))
    db.flush()
    if dropped:
        logger.info("Dropped %d duplicate earned badges while detaching book %s", dropped, book_id)
    return dropped


def attach_badge_to_book(
    db: Session,
    *,
    book_id: str,
    badge_id: str,
    award_method: str = AwardMethod.AUTO_ON_BOOK_COMPLETE.value,
    completion_threshold: float | None = None,
    is_enabled: bool = True,
) -> tuple[BookBadge, bool]:
    """Create the book/badge mapping, or return the existing one. Returns (mapping, created)."""
    def _existing():
        return (
            db.query(BookBadge)
            .filter(BookBadge.book_id == book_id, BookBadge.badge_id == badge_id)
            .first()
        )

    mapping = _existing()
    if mapping:
        return mapping, False

    mapping = BookBadge(
        book_id=book_id,
        badge_id=badge_id,
        award_method=award_method,
        completion_threshold=normalize_threshold(completion_threshold),
        is_enabled=is_enabled,
    )
    db.add(mapping)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        mapping = _existing()
        if mapping is None:
            raise
        return mapping, False
    db.refresh(mapping)
    return mapping, True


def badges_for_completion(
    db: Session, book_id: str, percent_complete: int = COMPLETE_PERCENT, strict: bool = False
) -> list[tuple[BookBadge, Badge]]:
    """
    Mappings (with their badge) eligible on completion. By default every mapped
    badge qualifies; strict mode keeps only enabled auto mappings whose
    threshold is reached.
    """
    q = (
        db.query(BookBadge, Badge)
        .join(Badge, BookBadge.badge_id == Badge.id)
        .filter(BookBadge.book_id == book_id)
        .order_by(BookBadge.created_at.asc())
    )
    if strict:
        q = q.filter(
            BookBadge.is_enabled.is_(True),
            BookBadge.award_method == AwardMethod.AUTO_ON_BOOK_COMPLETE.value,
            BookBadge.completion_threshold <= percent_complete,
        )
    return q.all()


def complete_book(db: Session, user_id: str, book_id: str, *, strict: bool = False) -> CompletionResult:
    """
    Mark the book finished for the user and award not-yet-held mapped badges.
    Caller checks that user and book exist. Only newly created awards are
    returned; calling again returns an empty list.
    """
    now = datetime.utcnow()
    progress, _ = upsert_progress(db, user_id, book_id, percent_complete=COMPLETE_PERCENT, now=now)
    result = CompletionResult(progress=progress)

    for _mapping, badge in badges_for_completion(db, book_id, COMPLETE_PERCENT, strict=strict):
        earned, created = award_badge(db, user_id=user_id, badge_id=badge.id, book_id=book_id, now=now)
        if created:
            result.awarded.append((badge, earned))

    logger.info(
        "Book %s completed by user %s; %d badge(s) awarded",
        book_id, user_id, len(result.awarded),
    )
    return result
