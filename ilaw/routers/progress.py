"""Reading progress, reading-time sessions and book completion (with badge awards)."""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session
from ilaw.auth import get_current_user, resolve_target_user_id
from ilaw.config import get_settings
from ilaw.database import get_db
from ilaw.models.book import Book
from ilaw.models.progress import Progress
from ilaw.models.user import ApprovalStatus, User, UserRole
from ilaw.routers.books import get_book_or_404
from ilaw.schemas.badge import AwardedBadge
from ilaw.schemas.book import BookSummary
from ilaw.schemas.progress import (
    CompletionResponse,
    ProgressListResponse,
    ProgressResponse,
    ProgressUpdate,
    ProgressWriteResponse,
    ReadingSessionEndResponse,
    ReadingSessionRequest,
    ReadingSessionStartResponse,
)
from ilaw.services.badge_award import complete_book
from ilaw.services.progress_tracker import (
    ReadingSessionNotFound,
    end_reading_session,
    start_reading_session,
    upsert_progress,
)
from ilaw.services.quiz_sessions import round_half_up

router = APIRouter(prefix="/api", tags=["progress"])
settings = get_settings()
logger = logging.getLogger(__name__)


def _progress_response(row: Progress, book: Book | None = None, student: User | None = None) -> ProgressResponse:
    student_name = None
    if student:
        student_name = f"{student.first_name} {student.last_name}".strip() or student.username
    return ProgressResponse(
        id=row.id,
        user_id=row.user_id,
        book_id=row.book_id,
        percent_complete=row.percent_complete,
        total_reading_time=row.total_reading_time,
        last_read_at=row.last_read_at,
        book=BookSummary(id=book.id, title=book.title) if book else None,
        student_name=student_name,
    )


# ---------- Progress ----------


@router.get("/progress", response_model=ProgressListResponse)
def list_progress(
    student_id: str | None = Query(None, alias="studentId"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Admin: everyone, or one student with ?studentId=. Teacher: approved students.
    Student: own rows only.
    """
    q = (
        db.query(Progress, Book, User)
        .join(Book, Progress.book_id == Book.id)
        .join(User, Progress.user_id == User.id)
    )
    if user.role == UserRole.ADMIN.value:
        if student_id:
            q = q.filter(Progress.user_id == student_id)
    elif user.role == UserRole.TEACHER.value:
        q = q.filter(
            User.role == UserRole.STUDENT.value,
            User.approval_status == ApprovalStatus.APPROVED.value,
        )
    else:
        q = q.filter(Progress.user_id == user.id)
    rows = q.order_by(Progress.last_read_at.desc()).all()
    return ProgressListResponse(progress=[_progress_response(p, b, u) for p, b, u in rows])


@router.post("/progress", response_model=ProgressWriteResponse)
def update_progress(
    body: ProgressUpdate,
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Set percentComplete directly (no badge awarding). 201 when the row is new."""
    target_id = resolve_target_user_id(user, body.user_id)
    book = get_book_or_404(db, body.book_id)
    pct = body.percent_complete if body.percent_complete is not None else 0
    pct = max(0, min(100, round_half_up(pct)))

    row, created = upsert_progress(db, target_id, book.id, percent_complete=pct)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return ProgressWriteResponse(
        message="Progress created" if created else "Progress updated",
        progress=_progress_response(row, book),
    )


# ---------- Reading sessions ----------


@router.post("/reading-sessions/start", response_model=ReadingSessionStartResponse)
def start_session(
    body: ReadingSessionRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    get_book_or_404(db, body.book_id)
    session, created = start_reading_session(db, user.id, body.book_id)
    return ReadingSessionStartResponse(
        message="Reading session started successfully" if created else "Active session already exists",
        session_id=session.id,
        start_time=session.start_time,
    )


@router.post("/reading-sessions/end", response_model=ReadingSessionEndResponse)
def end_session(
    body: ReadingSessionRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        session, elapsed = end_reading_session(db, user.id, body.book_id)
    except ReadingSessionNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return ReadingSessionEndResponse(
        message="Reading session ended successfully",
        session_id=session.id,
        start_time=session.start_time,
        end_time=session.end_time,
        total_seconds=elapsed,
    )


# ---------- Completion ----------


@router.post("/books/{book_id}/complete", response_model=CompletionResponse)
def complete(
    book_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Mark the book 100% complete for the current user and award mapped badges
    not yet earned. Safe to call again: the second call awards nothing.
    """
    book = get_book_or_404(db, book_id)
    result = complete_book(db, user.id, book.id, strict=settings.strict_badge_mapping)

    awarded = [
        AwardedBadge(
            badge_id=badge.id,
            name=badge.name,
            description=badge.description,
            icon_url=badge.icon_url,
            is_generic=badge.is_generic,
            awarded_at=earned.awarded_at,
        )
        for badge, earned in result.awarded
    ]
    message = "Book marked as completed"
    if awarded:
        message += f". {len(awarded)} badge{'' if len(awarded) == 1 else 's'} awarded."
    return CompletionResponse(
        message=message,
        progress=_progress_response(result.progress, book),
        awarded_badges=awarded,
    )
