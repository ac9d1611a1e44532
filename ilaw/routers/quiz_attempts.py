import logging
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from ilaw.auth import get_current_user, resolve_target_user_id
from ilaw.config import get_settings
from ilaw.database import get_db
from ilaw.models.book import Book, Page
from ilaw.models.user import User, UserRole
from ilaw.schemas.quiz import (
    QuizAttemptCreate,
    QuizAttemptCreateResponse,
    QuizAttemptListResponse,
    QuizAttemptResponse,
    QuizSessionResponse,
    QuizSessionSummaryResponse,
)
from ilaw.services import quiz_sessions
from ilaw.services.quiz_attempts import (
    AttemptNumberConflict,
    QuizAttemptError,
    latest_per_book,
    list_attempts,
    record_attempt,
)

router = APIRouter(prefix="/api/quiz-attempts", tags=["quiz-attempts"])
settings = get_settings()
logger = logging.getLogger(__name__)


def _session_response(session: quiz_sessions.QuizSession) -> QuizSessionResponse:
    return QuizSessionResponse(**asdict(session))


def _reading_scope(user: User, requested_user_id: str | None) -> str | None:
    """Students may only read their own attempts; staff may read anyone's (None = everyone)."""
    if user.role == UserRole.STUDENT.value:
        if requested_user_id and requested_user_id != user.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        return user.id
    return requested_user_id


@router.post("", response_model=QuizAttemptCreateResponse, status_code=status.HTTP_201_CREATED)
def create_quiz_attempt(
    body: QuizAttemptCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record one quiz submission. Scores are validated here so bad rows never reach reporting."""
    owner_id = resolve_target_user_id(user, body.user_id)
    if owner_id != user.id and not db.query(User.id).filter(User.id == owner_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if not db.query(Book.id).filter(Book.id == body.book_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    if body.page_id is not None:
        page = db.query(Page).filter(Page.id == body.page_id).first()
        if not page or page.book_id != body.book_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Page does not belong to this book")

    try:
        attempt = record_attempt(
            db,
            user_id=owner_id,
            book_id=body.book_id,
            page_id=body.page_id,
            score_correct=body.score_correct,
            score_total=body.score_total,
            percentage=body.percentage,
            mode=body.mode,
            duration_sec=body.duration_sec,
        )
    except QuizAttemptError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AttemptNumberConflict as e:
        logger.error("Attempt numbering conflict for user %s book %s", owner_id, body.book_id)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return QuizAttemptCreateResponse(attempt=QuizAttemptResponse.model_validate(attempt))


@router.get("", response_model=QuizAttemptListResponse)
def get_quiz_attempts(
    user_id: str | None = Query(None, alias="userId"),
    book_id: str | None = Query(None, alias="bookId"),
    page_id: str | None = Query(None, alias="pageId"),
    latest_per_book_only: bool = Query(False, alias="latestPerBook"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Raw attempt rows, newest first. latestPerBook=true keeps one row per (user, book)."""
    scope = _reading_scope(user, user_id)
    attempts = list_attempts(db, user_id=scope, book_id=book_id, page_id=page_id)
    if latest_per_book_only:
        attempts = latest_per_book(attempts)
    return QuizAttemptListResponse(
        count=len(attempts),
        attempts=[QuizAttemptResponse.model_validate(a) for a in attempts],
    )


@router.get("/sessions", response_model=QuizSessionSummaryResponse)
def get_quiz_sessions(
    user_id: str | None = Query(None, alias="userId"),
    book_id: str | None = Query(None, alias="bookId"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Attempts grouped into sessions for one student: a single book when bookId is
    given, otherwise every book. latestSession is null when there is no data.
    """
    scope = _reading_scope(user, user_id)
    if scope is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="userId is required")

    gap = settings.quiz_session_gap_seconds
    attempts = list_attempts(db, user_id=scope, book_id=book_id)
    if book_id is not None:
        sessions = quiz_sessions.sessions_for_book(attempts, scope, book_id, gap)
        latest = quiz_sessions.latest_session_for_book(attempts, scope, book_id, gap)
    else:
        sessions = quiz_sessions.all_sessions_for_student(attempts, scope, gap)
        latest = max(sessions, key=lambda s: s.end_at) if sessions else None

    return QuizSessionSummaryResponse(
        user_id=scope,
        book_id=book_id,
        sessions=[_session_response(s) for s in sessions],
        latest_session=_session_response(latest) if latest else None,
        average_percentage=quiz_sessions.average_percentage(sessions),
    )
