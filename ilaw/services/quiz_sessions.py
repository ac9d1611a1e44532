"""
Quiz session aggregation for reporting.

Raw quiz attempts are grouped into "sessions": consecutive attempts on the same
book where each attempt follows the previous one within the gap threshold.
Sessions are derived on every read and never stored. Nothing here touches the
database; input is any sequence of objects with user_id, book_id, created_at,
score_correct, score_total and mode attributes (ORM rows in production).
"""
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

SESSION_GAP_SECONDS = 120

MODE_RETRY = "retry"
MODE_STRAIGHT = "straight"


@dataclass
class QuizSession:
    user_id: str
    book_id: str
    start_at: datetime
    end_at: datetime
    total_correct: int = 0
    total_total: int = 0
    percentage: int = 0
    mode: str = MODE_RETRY


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (12.5 -> 13, not 12)."""
    return int(math.floor(value + 0.5))


def session_percentage(total_correct: int, total_total: int) -> int:
    if total_total <= 0:
        return 0
    return round_half_up(100 * total_correct / total_total)


def group_into_sessions(attempts: Iterable, gap_seconds: int = SESSION_GAP_SECONDS) -> list[QuizSession]:
    """
    Single pass over attempts already sorted by created_at ascending.
    A new session opens when there is no current session or the attempt comes
    more than gap_seconds after the current session's last attempt. Mode is
    sticky: one "straight" attempt makes the whole session "straight".
    """
    sessions: list[QuizSession] = []
    current: QuizSession | None = None

    for attempt in attempts:
        at = attempt.created_at
        mode = MODE_STRAIGHT if attempt.mode == MODE_STRAIGHT else MODE_RETRY

        if current is None or (at - current.end_at).total_seconds() > gap_seconds:
            current = QuizSession(
                user_id=attempt.user_id,
                book_id=attempt.book_id,
                start_at=at,
                end_at=at,
                mode=mode,
            )
            sessions.append(current)
        else:
            current.end_at = at

        current.total_correct += int(attempt.score_correct or 0)
        current.total_total += int(attempt.score_total or 0)
        current.percentage = session_percentage(current.total_correct, current.total_total)
        if mode == MODE_STRAIGHT:
            current.mode = MODE_STRAIGHT

    return sessions


def _by_time(attempts: Iterable) -> list:
    return sorted(attempts, key=lambda a: a.created_at)


def sessions_for_book(
    attempts: Iterable,
    user_id: str,
    book_id: str,
    gap_seconds: int = SESSION_GAP_SECONDS,
) -> list[QuizSession]:
    scoped = [a for a in attempts if a.user_id == user_id and a.book_id == book_id]
    return group_into_sessions(_by_time(scoped), gap_seconds)


def latest_session_for_book(
    attempts: Iterable,
    user_id: str,
    book_id: str,
    gap_seconds: int = SESSION_GAP_SECONDS,
) -> QuizSession | None:
    """None means "no data", which callers must not render as a 0% score."""
    sessions = sessions_for_book(attempts, user_id, book_id, gap_seconds)
    return sessions[-1] if sessions else None


def all_sessions_for_student(
    attempts: Iterable,
    user_id: str,
    gap_seconds: int = SESSION_GAP_SECONDS,
) -> list[QuizSession]:
    """Each book is grouped independently; books appear in first-seen order."""
    by_book: dict[str, list] = {}
    for attempt in attempts:
        if attempt.user_id != user_id:
            continue
        by_book.setdefault(attempt.book_id, []).append(attempt)

    sessions: list[QuizSession] = []
    for book_attempts in by_book.values():
        sessions.extend(group_into_sessions(_by_time(book_attempts), gap_seconds))
    return sessions


def average_percentage(sessions: Sequence[QuizSession]) -> int | None:
    if not sessions:
        return None
    return round_half_up(sum(s.percentage for s in sessions) / len(sessions))
