from datetime import datetime
from ilaw.models.user import UserRole
from ilaw.schemas.base import CamelModel


class UserResponse(CamelModel):
    id: str
    email: str
    username: str
    first_name: str
    last_name: str
    role: str
    grade_level: str | None
    approval_status: str
    created_at: datetime


class RegisterRequest(CamelModel):
    email: str
    username: str
    password: str
    first_name: str = ""
    last_name: str = ""
    role: UserRole = UserRole.STUDENT
    grade_level: str | None = None


class RegisterResponse(CamelModel):
    success: bool = True
    message: str
    user: UserResponse
    token: str | None = None
    requires_approval: bool


class TokenPayload(CamelModel):
    sub: str  # user id
    email: str
    role: str
    exp: int
    type: str = "access"


class LoginRequest(CamelModel):
    email: str
    password: str


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class SetPasswordRequest(CamelModel):
    current_password: str
    new_password: str


class RejectRequest(CamelModel):
    reason: str = ""


class ProfileResponse(CamelModel):
    id: str
    name: str
    email: str
    username: str
    role: str


class ProfileEnvelope(CamelModel):
    success: bool = True
    message: str | None = None
    profile: ProfileResponse


class ProfileUpdate(CamelModel):
    name: str = ""
    email: str = ""
