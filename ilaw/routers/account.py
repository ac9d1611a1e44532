"""The logged-in user's own profile, data export and account deletion."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session
from ilaw.auth import get_current_user
from ilaw.database import get_db
from ilaw.models.user import User
from ilaw.schemas.account import AccountExportResponse
from ilaw.schemas.user import ProfileEnvelope, ProfileResponse, ProfileUpdate
from ilaw.services.account import LastAdminError, delete_account, export_account

router = APIRouter(prefix="/api/user", tags=["account"])
logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 200
MAX_EMAIL_LENGTH = 254


def _profile(user: User) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        name=f"{user.first_name} {user.last_name}".strip(),
        email=user.email,
        username=user.username,
        role=user.role,
    )


@router.get("/profile", response_model=ProfileEnvelope)
def get_profile(user: User = Depends(get_current_user)):
    return ProfileEnvelope(profile=_profile(user))


@router.put("/profile", response_model=ProfileEnvelope)
def update_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update display name and email. The first word of `name` is the first name."""
    name = body.name.strip()[:MAX_NAME_LENGTH]
    email = body.email.strip().lower()[:MAX_EMAIL_LENGTH]
    if not name or not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name and email are required")

    clash = (
        db.query(User.id)
        .filter(func.lower(User.email) == email, User.id != user.id)
        .first()
    )
    if clash:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is already in use by another user")

    first, _, rest = name.partition(" ")
    user.first_name = first
    user.last_name = rest.strip()
    user.email = email
    db.commit()
    db.refresh(user)
    return ProfileEnvelope(message="Profile updated successfully", profile=_profile(user))


@router.get("/export", response_model=AccountExportResponse)
def export_data(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    logger.info("Data export for user %s", user.id)
    return AccountExportResponse(data=export_account(db, user))


@router.delete("/account")
def delete_own_account(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        delete_account(db, user)
    except LastAdminError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"success": True, "message": "Account deleted successfully"}
