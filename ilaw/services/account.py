"""Self-service account data: export and deletion."""
import logging
from datetime import datetime
from sqlalchemy.orm import Session

from ilaw.models.badge import Badge, EarnedBadge
from ilaw.models.book import Book
from ilaw.models.progress import Progress, ReadingSession
from ilaw.models.quiz_attempt import QuizAttempt
from ilaw.models.settings import TeachingSetting
from ilaw.models.user import User, UserRole
from ilaw.schemas.account import AccountExport, ReadingSessionExport
from ilaw.schemas.badge import EarnedBadgeResponse
from ilaw.schemas.progress import ProgressResponse
from ilaw.schemas.quiz import QuizAttemptResponse
from ilaw.schemas.user import UserResponse

logger = logging.getLogger(__name__)


class LastAdminError(RuntimeError):
    """The only admin account cannot remove itself."""


def export_account(db: Session, user: User) -> AccountExport:
    progress = db.query(Progress).filter(Progress.user_id == user.id).all()
    sessions = (
        db.query(ReadingSession)
        .filter(ReadingSession.user_id == user.id)
        .order_by(ReadingSession.start_time.asc())
        .all()
    )
    attempts = (
        db.query(QuizAttempt)
        .filter(QuizAttempt.user_id == user.id)
        .order_by(QuizAttempt.created_at.asc())
        .all()
    )
    earned = db.query(EarnedBadge).filter(EarnedBadge.user_id == user.id).all()
    return AccountExport(
        exported_at=datetime.utcnow(),
        user=UserResponse.model_validate(user),
        progress=[ProgressResponse.model_validate(p) for p in progress],
        reading_sessions=[ReadingSessionExport.model_validate(s) for s in sessions],
        quiz_attempts=[QuizAttemptResponse.model_validate(a) for a in attempts],
        earned_badges=[EarnedBadgeResponse.model_validate(e) for e in earned],
    )


def delete_account(db: Session, user: User) -> None:
    """
    Remove the user and their learner data. Content they authored (books,
    badges, manual awards to others) stays, with the author reference cleared.
    """
    if user.role == UserRole.ADMIN.value:
        admins = db.query(User.id).filter(User.role == UserRole.ADMIN.value).count()
        if admins <= 1:
            raise LastAdminError("Cannot delete the only admin account")

    user_id = user.id
    for model in (Progress, ReadingSession, QuizAttempt, EarnedBadge, TeachingSetting):
        db.query(model).filter(model.user_id == user_id).delete(synchronize_session=False)
    db.query(Book).filter(Book.added_by_id == user_id).update({"added_by_id": None}, synchronize_session=False)
    db.query(Badge).filter(Badge.created_by_id == user_id).update({"created_by_id": None}, synchronize_session=False)
    db.query(EarnedBadge).filter(EarnedBadge.awarded_by_id == user_id).update(
        {"awarded_by_id": None}, synchronize_session=False
    )
    db.delete(user)
    db.commit()
    logger.info("Account %s deleted", user_id)
