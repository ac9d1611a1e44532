"""Admin/teacher dashboard aggregates over reading sessions and student progress."""
from sqlalchemy.orm import Session

from ilaw.models.progress import Progress, ReadingSession
from ilaw.models.user import ApprovalStatus, User, UserRole
from ilaw.schemas.stats import DashboardStats
from ilaw.services.quiz_sessions import round_half_up

COMPLETE_PERCENT = 100


def _rate(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole else 0


def dashboard_stats(db: Session) -> DashboardStats:
    closed = (
        db.query(ReadingSession.total_seconds)
        .filter(ReadingSession.end_time.isnot(None))
        .all()
    )
    durations = [s for (s,) in closed if s and s > 0]
    total_reading = sum(durations)

    # Completion rates only count approved students
    rows = (
        db.query(Progress.user_id, Progress.percent_complete)
        .join(User, Progress.user_id == User.id)
        .filter(
            User.role == UserRole.STUDENT.value,
            User.approval_status == ApprovalStatus.APPROVED.value,
        )
        .all()
    )
    completed = [(uid, pct) for uid, pct in rows if (pct or 0) >= COMPLETE_PERCENT]
    readers = {uid for uid, _ in rows}
    finishers = {uid for uid, _ in completed}

    return DashboardStats(
        average_reading_seconds=round_half_up(total_reading / len(durations)) if durations else 0,
        total_sessions=len(closed),
        total_reading_seconds=total_reading,
        completion_rate=_rate(len(finishers), len(readers)),
        book_completion_rate=_rate(len(completed), len(rows)),
        completed_books_count=len(completed),
        readers_count=len(readers),
    )
