import logging
import re
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from ilaw.database import get_db
from ilaw.models.settings import SystemSetting
from ilaw.models.user import ApprovalStatus, User, UserRole
from ilaw.auth import create_access_token, get_current_user, hash_password, verify_password
from ilaw.schemas.user import (
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    SetPasswordRequest,
    TokenResponse,
    UserResponse,
)
from ilaw.services.settings import get_system_settings

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)

STRONG_PASSWORD_MESSAGE = (
    "Password does not meet strength requirements. It must be at least 8 characters long, "
    "contain uppercase and lowercase letters, a number, and a special character."
)


def is_strong_password(password: str) -> bool:
    return (
        len(password) >= 8
        and re.search(r"[a-z]", password) is not None
        and re.search(r"[A-Z]", password) is not None
        and re.search(r"\d", password) is not None
        and re.search(r"[^A-Za-z0-9]", password) is not None
    )


def _initial_approval(role: UserRole, settings: SystemSetting) -> str:
    if role == UserRole.STUDENT and settings.auto_approve_students:
        return ApprovalStatus.APPROVED.value
    if role == UserRole.TEACHER and settings.auto_approve_teachers:
        return ApprovalStatus.APPROVED.value
    return ApprovalStatus.PENDING.value


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Self-registration for students and teachers. New accounts wait for admin approval."""
    settings = get_system_settings(db)
    if not settings.allow_new_registrations:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="New registrations are currently disabled by the administrator.",
        )
    if body.role == UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot register as admin")
    if settings.require_strong_passwords and not is_strong_password(body.password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=STRONG_PASSWORD_MESSAGE)

    email = body.email.strip().lower()
    username = body.username.strip().lower()
    existing = db.query(User).filter(or_(User.email == email, User.username == username)).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email or username already in use")

    user = User(
        email=email,
        username=username,
        password=hash_password(body.password),
        first_name=body.first_name.strip(),
        last_name=body.last_name.strip(),
        role=body.role.value,
        grade_level=body.grade_level,
        approval_status=_initial_approval(body.role, settings),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered %s account %s", user.role, user.id)

    approved = user.approval_status == ApprovalStatus.APPROVED.value
    return RegisterResponse(
        message=(
            "Registration successful!"
            if approved
            else "Registration successful! Your account is pending approval."
        ),
        user=UserResponse.model_validate(user),
        token=create_access_token(user.id, user.email, user.role) if approved else None,
        requires_approval=not approved,
    )


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Login with email and password."""
    email = body.email.strip().lower()
    user = db.query(User).filter(func.lower(User.email) == email).first()
    if not user or not verify_password(body.password, user.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if user.role != UserRole.ADMIN.value:
        if user.approval_status == ApprovalStatus.PENDING.value:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Your account is pending approval.",
            )
        if user.approval_status == ApprovalStatus.REJECTED.value:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Your account was rejected. {user.rejection_reason or ''}".strip(),
            )
    token = create_access_token(user.id, user.email, user.role)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)


@router.put("/me/password")
def set_password(
    body: SetPasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change password."""
    if not verify_password(body.current_password, user.password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
    if get_system_settings(db).require_strong_passwords and not is_strong_password(body.new_password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=STRONG_PASSWORD_MESSAGE)
    user.password = hash_password(body.new_password)
    db.commit()
    return {"message": "Password updated successfully"}
