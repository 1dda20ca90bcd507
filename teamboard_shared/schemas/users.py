"""Account schemas: signup, login, verification and password reset."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, UUID4, field_validator

from .common import Role


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class SignupRequest(BaseModel):
    """Register a new account. With an invite code the user joins that team."""
    email: EmailStr
    username: str = Field(min_length=1, max_length=50)
    password: str
    profile_photo: Optional[str] = None
    subscribed_to_updates: bool = True
    team_invite_code: Optional[str] = None

    @field_validator("username")
    @classmethod
    def _strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be blank")
        return v

    @field_validator("team_invite_code")
    @classmethod
    def _blank_code_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class EmailRequest(BaseModel):
    """Body for resend-verification and forgot-password."""
    email: EmailStr


class PasswordResetRequest(BaseModel):
    token: str = Field(min_length=1)
    password: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    id: UUID4
    email: str
    username: str
    role: Role
    team_id: Optional[UUID4] = None
    profile_photo: Optional[str] = None
    email_verified: bool = False
    subscribed_to_updates: bool = True
    last_active: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class SignupResponse(BaseModel):
    message: str
    user: UserResponse


class LoginResponse(BaseModel):
    token: str
    user: UserResponse
