"""
Bearer-token authentication and role guards.

Tokens carry the user id, email and role. Routers depend on get_current_user
for any logged-in account, or on the staff/admin guards below.
"""
from datetime import datetime, timedelta
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from ilaw.config import get_settings
from ilaw.database import get_db
from ilaw.models.user import ApprovalStatus, User, UserRole
from ilaw.schemas.user import TokenPayload

settings = get_settings()
bearer = HTTPBearer(auto_error=False)
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

STAFF_ROLES = frozenset({UserRole.ADMIN.value, UserRole.TEACHER.value})


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str | None) -> bool:
    return bool(hashed) and pwd_context.verify(plain, hashed)


def create_access_token(user_id: str, email: str, role: str) -> str:
    claims = {
        "sub": user_id,
        "email": email,
        "role": role,
        "type": "access",
        "exp": datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> TokenPayload | None:
    """None for anything that is not a valid, unexpired access token."""
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if claims.get("type") != "access" or "sub" not in claims:
        return None
    return TokenPayload(
        sub=claims["sub"],
        email=claims.get("email", ""),
        role=claims.get("role", ""),
        exp=claims["exp"],
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise _unauthorized("Authentication required")
    payload = decode_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    user = db.query(User).filter(User.id == payload.sub).first()
    if user is None:
        raise _unauthorized("User not found")
    # An account can be rejected after its token was issued
    if user.role != UserRole.ADMIN.value and user.approval_status != ApprovalStatus.APPROVED.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is not approved")
    return user


def require_roles(*roles: str, detail: str = "Access denied"):
    """Dependency factory: the logged-in user must have one of `roles`."""
    allowed = frozenset(roles)

    def guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return user

    return guard


get_current_user_staff = require_roles(*STAFF_ROLES)
get_current_user_admin = require_roles(UserRole.ADMIN.value, detail="Only admin can access.")


def resolve_target_user_id(user: User, requested_user_id: str | None) -> str:
    """Students always act on themselves; staff may act on another user."""
    if user.role == UserRole.STUDENT.value or not requested_user_id:
        return user.id
    return requested_user_id
