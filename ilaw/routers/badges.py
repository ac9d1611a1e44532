import logging
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from ilaw.auth import get_current_user, get_current_user_admin, get_current_user_staff
from ilaw.database import get_db
from ilaw.models.badge import Badge, BookBadge, EarnedBadge
from ilaw.models.user import User
from ilaw.routers.books import get_book_or_404
from ilaw.schemas.badge import (
    BadgeCreate,
    BadgeResponse,
    BadgeUpdate,
    BookBadgeAttachResponse,
    BookBadgeCreate,
    BookBadgeResponse,
)
from ilaw.services.badge_award import attach_badge_to_book

router = APIRouter(prefix="/api", tags=["badges"])
logger = logging.getLogger(__name__)


def _get_badge_or_404(db: Session, badge_id: str) -> Badge:
    badge = db.query(Badge).filter(Badge.id == badge_id).first()
    if not badge:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Badge not found")
    return badge


def _mapping_response(mapping: BookBadge, badge: Badge | None) -> BookBadgeResponse:
    return BookBadgeResponse(
        id=mapping.id,
        book_id=mapping.book_id,
        badge_id=mapping.badge_id,
        award_method=mapping.award_method,
        completion_threshold=mapping.completion_threshold,
        is_enabled=mapping.is_enabled,
        created_at=mapping.created_at,
        badge=BadgeResponse.model_validate(badge) if badge else None,
    )


# ---------- Badges ----------


@router.post("/badges", response_model=BadgeResponse, status_code=status.HTTP_201_CREATED)
def create_badge(
    body: BadgeCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_staff),
):
    name = body.name.strip()
    if len(name) < 2:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Badge name is required (min 2 chars)")
    badge = Badge(
        name=name,
        description=body.description,
        icon_url=body.icon_url or None,
        is_generic=body.is_generic,
        is_active=body.is_active,
        created_by_id=user.id,
    )
    db.add(badge)
    db.commit()
    db.refresh(badge)
    return BadgeResponse.model_validate(badge)


@router.get("/badges", response_model=list[BadgeResponse])
def list_badges(
    search: str | None = None,
    active: str | None = None,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    """List badges. ?search= matches name/description, ?active=true|false."""
    q = db.query(Badge)
    if search and search.strip():
        like = f"%{search.strip()}%"
        q = q.filter(or_(Badge.name.ilike(like), Badge.description.ilike(like)))
    if active == "true":
        q = q.filter(Badge.is_active.is_(True))
    elif active == "false":
        q = q.filter(Badge.is_active.is_(False))
    return [BadgeResponse.model_validate(b) for b in q.order_by(Badge.created_at.desc()).all()]


@router.patch("/badges/{badge_id}", response_model=BadgeResponse)
def update_badge(
    badge_id: str,
    body: BadgeUpdate,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user_staff),
):
    badge = _get_badge_or_404(db, badge_id)
    if body.name is not None:
        if len(body.name.strip()) < 2:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Badge name is required (min 2 chars)")
        badge.name = body.name.strip()
    if body.description is not None:
        badge.description = body.description
    if body.icon_url is not None:
        badge.icon_url = body.icon_url or None
    if body.is_generic is not None:
        badge.is_generic = body.is_generic
    if body.is_active is not None:
        badge.is_active = body.is_active
    db.commit()
    db.refresh(badge)
    return BadgeResponse.model_validate(badge)


@router.delete("/badges/{badge_id}")
def delete_badge(
    badge_id: str,
    db: Session = Depends(get_db),
    _admin: User = Depends(get_current_user_admin),
):
    """Delete a badge together with its book mappings and every earned copy."""
    badge = _get_badge_or_404(db, badge_id)
    db.query(BookBadge).filter(BookBadge.badge_id == badge.id).delete(synchronize_session=False)
    db.query(EarnedBadge).filter(EarnedBadge.badge_id == badge.id).delete(synchronize_session=False)
    db.delete(badge)
    db.commit()
    logger.info("Badge %s deleted", badge_id)
    return {"message": "Badge deleted"}


# ---------- Book <-> badge mappings ----------


@router.post("/books/{book_id}/badges", response_model=BookBadgeAttachResponse)
def attach_book_badge(
    book_id: str,
    body: BookBadgeCreate,
    response: Response,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user_staff),
):
    """Attach a badge to a book. An existing mapping is returned unchanged (200)."""
    get_book_or_404(db, book_id)
    badge = _get_badge_or_404(db, body.badge_id)
    mapping, created = attach_badge_to_book(
        db,
        book_id=book_id,
        badge_id=badge.id,
        award_method=body.award_method.value,
        completion_threshold=body.completion_threshold,
        is_enabled=body.is_enabled,
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return BookBadgeAttachResponse(
        message="Badge attached to book" if created else "Badge already attached to this book",
        book_badge=_mapping_response(mapping, badge),
    )


@router.get("/books/{book_id}/badges", response_model=list[BookBadgeResponse])
def list_book_badges(
    book_id: str,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    rows = (
        db.query(BookBadge, Badge)
        .join(Badge, BookBadge.badge_id == Badge.id)
        .filter(BookBadge.book_id == book_id)
        .order_by(BookBadge.created_at.desc())
        .all()
    )
    return [_mapping_response(m, b) for m, b in rows]


@router.delete("/books/{book_id}/badges/{mapping_id}")
def remove_book_badge(
    book_id: str,
    mapping_id: str,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user_staff),
):
    mapping = (
        db.query(BookBadge)
        .filter(BookBadge.id == mapping_id, BookBadge.book_id == book_id)
        .first()
    )
    if not mapping:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book badge mapping not found")
    db.delete(mapping)
    db.commit()
    return {"message": "Book badge removed"}
