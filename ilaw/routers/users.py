import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session
from ilaw.auth import get_current_user, get_current_user_admin, get_current_user_staff
from ilaw.database import get_db
from ilaw.models.badge import Badge, EarnedBadge
from ilaw.models.book import Book
from ilaw.models.user import ApprovalStatus, User, UserRole
from ilaw.schemas.badge import AwardBadgeRequest, AwardBadgeResponse, BadgeResponse, EarnedBadgeResponse
from ilaw.schemas.book import BookSummary
from ilaw.schemas.user import RejectRequest, UserResponse
from ilaw.services.badge_award import award_badge

router = APIRouter(prefix="/api", tags=["users"])
logger = logging.getLogger(__name__)

MAX_REJECTION_REASON = 1000


def _list_by_role(db: Session, role: UserRole, approval: str | None = None) -> list[UserResponse]:
    q = db.query(User).filter(User.role == role.value)
    if approval in {s.value for s in ApprovalStatus}:
        q = q.filter(User.approval_status == approval)
    return [UserResponse.model_validate(u) for u in q.order_by(User.created_at.desc()).all()]


def _set_approval(db: Session, user_id: str, role: UserRole, approval: ApprovalStatus, reason: str | None = None) -> User:
    user = db.query(User).filter(User.id == user_id, User.role == role.value).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{role.value.title()} not found")
    user.approval_status = approval.value
    user.rejection_reason = reason[:MAX_REJECTION_REASON] if reason else None
    db.commit()
    db.refresh(user)
    logger.info("%s %s set to %s", role.value, user.id, approval.value)
    return user


# ---------- Students ----------


@router.get("/students", response_model=list[UserResponse])
def list_students(
    approval: str | None = Query(None, alias="status"),
    _staff: User = Depends(get_current_user_staff),
    db: Session = Depends(get_db),
):
    """List students (admin/teacher). Optional ?status=pending|approved|rejected."""
    return _list_by_role(db, UserRole.STUDENT, approval)


@router.get("/students/pending", response_model=list[UserResponse])
def list_pending_students(
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    return _list_by_role(db, UserRole.STUDENT, ApprovalStatus.PENDING.value)


@router.post("/students/{user_id}/approve", response_model=UserResponse)
def approve_student(
    user_id: str,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    return UserResponse.model_validate(_set_approval(db, user_id, UserRole.STUDENT, ApprovalStatus.APPROVED))


@router.post("/students/{user_id}/reject", response_model=UserResponse)
def reject_student(
    user_id: str,
    body: RejectRequest,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    user = _set_approval(db, user_id, UserRole.STUDENT, ApprovalStatus.REJECTED, body.reason)
    return UserResponse.model_validate(user)


# ---------- Teachers ----------


@router.get("/teachers", response_model=list[UserResponse])
def list_teachers(
    approval: str | None = Query(None, alias="status"),
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    return _list_by_role(db, UserRole.TEACHER, approval)


@router.post("/teachers/{user_id}/approve", response_model=UserResponse)
def approve_teacher(
    user_id: str,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    return UserResponse.model_validate(_set_approval(db, user_id, UserRole.TEACHER, ApprovalStatus.APPROVED))


@router.post("/teachers/{user_id}/reject", response_model=UserResponse)
def reject_teacher(
    user_id: str,
    body: RejectRequest,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    user = _set_approval(db, user_id, UserRole.TEACHER, ApprovalStatus.REJECTED, body.reason)
    return UserResponse.model_validate(user)


# ---------- Earned badges ----------


def _earned_response(earned: EarnedBadge, badge: Badge | None, book: Book | None) -> EarnedBadgeResponse:
    return EarnedBadgeResponse(
        id=earned.id,
        user_id=earned.user_id,
        badge_id=earned.badge_id,
        book_id=earned.book_id,
        note=earned.note,
        awarded_at=earned.awarded_at,
        badge=BadgeResponse.model_validate(badge) if badge else None,
        book=BookSummary(id=book.id, title=book.title) if book else None,
    )


@router.get("/users/{user_id}/badges", response_model=list[EarnedBadgeResponse])
def list_user_badges(
    user_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Earned badges with badge and book details. Students may only list their own."""
    if user.role == UserRole.STUDENT.value and user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    rows = (
        db.query(EarnedBadge, Badge, Book)
        .join(Badge, EarnedBadge.badge_id == Badge.id)
        .outerjoin(Book, EarnedBadge.book_id == Book.id)
        .filter(EarnedBadge.user_id == user_id)
        .order_by(EarnedBadge.awarded_at.desc())
        .all()
    )
    return [_earned_response(earned, badge, book) for earned, badge, book in rows]


@router.post("/users/{user_id}/badges", response_model=AwardBadgeResponse)
def award_user_badge(
    user_id: str,
    body: AwardBadgeRequest,
    response: Response,
    staff: User = Depends(get_current_user_staff),
    db: Session = Depends(get_db),
):
    """Manual award (admin/teacher). Awarding the same badge twice returns the existing record."""
    target = db.query(User).filter(User.id == user_id).first()
    if not target:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    badge = db.query(Badge).filter(Badge.id == body.badge_id).first()
    if not badge:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Badge not found")
    book = None
    if body.book_id is not None:
        book = db.query(Book).filter(Book.id == body.book_id).first()
        if not book:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")

    earned, created = award_badge(
        db,
        user_id=target.id,
        badge_id=badge.id,
        book_id=book.id if book else None,
        note=(body.note or "").strip() or None,
        awarded_by_id=staff.id,
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return AwardBadgeResponse(
        message="Badge awarded" if created else "Badge already earned",
        earned_badge=_earned_response(earned, badge, book),
    )
