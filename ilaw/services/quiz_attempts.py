"""
Quiz attempt writes and raw-row reads.

attempt_number is max(existing) + 1 per (user, book, page) when a page is given,
or per (user, book) across all pages otherwise. The unique constraint on
quiz_attempts catches two concurrent submissions that picked the same number;
the loser recomputes and tries again.
"""
import logging
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ilaw.models.quiz_attempt import QuizAttempt
from ilaw.services.quiz_sessions import MODE_RETRY, MODE_STRAIGHT, round_half_up

logger = logging.getLogger(__name__)

MAX_DURATION_SECONDS = 86400
ATTEMPT_NUMBER_RETRIES = 3


class QuizAttemptError(ValueError):
    """Submitted scores are out of range."""


class AttemptNumberConflict(RuntimeError):
    """Could not claim a free attempt number after several tries."""


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def validate_scores(score_correct: int, score_total: int) -> None:
    if score_total <= 0:
        raise QuizAttemptError("scoreTotal must be greater than 0")
    if score_correct < 0 or score_correct > score_total:
        raise QuizAttemptError("scoreCorrect must be between 0 and scoreTotal")


def normalize_percentage(score_correct: int, score_total: int, percentage: float | None) -> int:
    raw = percentage if percentage is not None else score_correct / score_total * 100
    return _clamp(round_half_up(raw), 0, 100)


def next_attempt_number(db: Session, user_id: str, book_id: str, page_id: str | None) -> int:
    q = db.query(func.max(QuizAttempt.attempt_number)).filter(
        QuizAttempt.user_id == user_id,
        QuizAttempt.book_id == book_id,
    )
    if page_id is not None:
        q = q.filter(QuizAttempt.page_id == page_id)
    return (q.scalar() or 0) + 1


def record_attempt(
    db: Session,
    *,
    user_id: str,
    book_id: str,
    page_id: str | None,
    score_correct: int,
    score_total: int,
    percentage: float | None = None,
    mode: str | None = None,
    duration_sec: int | None = None,
) -> QuizAttempt:
    """Validate and insert one attempt. Raises QuizAttemptError on bad scores."""
    validate_scores(score_correct, score_total)
    safe_mode = MODE_STRAIGHT if mode == MODE_STRAIGHT else MODE_RETRY
    safe_pct = normalize_percentage(score_correct, score_total, percentage)
    safe_duration = _clamp(int(duration_sec or 0), 0, MAX_DURATION_SECONDS)

    for _ in range(ATTEMPT_NUMBER_RETRIES):
        attempt = QuizAttempt(
            user_id=user_id,
            book_id=book_id,
            page_id=page_id,
            score_correct=score_correct,
            score_total=score_total,
            percentage=safe_pct,
            mode=safe_mode,
            attempt_number=next_attempt_number(db, user_id, book_id, page_id),
            duration_sec=safe_duration,
        )
        db.add(attempt)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(
                "Attempt number %s already taken for user %s book %s; retrying",
                attempt.attempt_number, user_id, book_id,
            )
            continue
        db.refresh(attempt)
        logger.info("Quiz attempt saved: id=%s attempt_number=%s", attempt.id, attempt.attempt_number)
        return attempt

    raise AttemptNumberConflict("Could not record quiz attempt, please retry")


def list_attempts(
    db: Session,
    *,
    user_id: str | None = None,
    book_id: str | None = None,
    page_id: str | None = None,
) -> list[QuizAttempt]:
    """Newest first."""
    q = db.query(QuizAttempt)
    if user_id is not None:
        q = q.filter(QuizAttempt.user_id == user_id)
    if book_id is not None:
        q = q.filter(QuizAttempt.book_id == book_id)
    if page_id is not None:
        q = q.filter(QuizAttempt.page_id == page_id)
    return q.order_by(QuizAttempt.created_at.desc()).all()


def latest_per_book(attempts: list[QuizAttempt]) -> list[QuizAttempt]:
    """
    One row per (user, book): the highest attempt_number, ties broken by the
    newer created_at. Row-level, unlike session grouping.
    """
    latest: dict[tuple[str, str], QuizAttempt] = {}
    for a in attempts:
        key = (a.user_id, a.book_id)
        current = latest.get(key)
        if current is None or (a.attempt_number, a.created_at) > (current.attempt_number, current.created_at):
            latest[key] = a
    return list(latest.values())
