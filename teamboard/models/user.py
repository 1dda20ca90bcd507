"""User model."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    email: str = Field(unique=True, index=True, nullable=False)  # stored lower-cased
    username: str = Field(unique=True, index=True, nullable=False)
    password_hash: str = Field(nullable=False)
    role: str = Field(nullable=False, default="admin")  # admin | editor
    # Weak back-reference; cleared (not cascaded) when the team is deleted
    team_id: Optional[uuid.UUID] = Field(default=None, index=True)
    profile_photo: Optional[str] = None
    subscribed_to_updates: bool = Field(default=True, nullable=False)
    email_verified: bool = Field(default=False, nullable=False)
    verification_token: Optional[str] = Field(default=None, unique=True, index=True)
    verification_token_expires_at: Optional[datetime] = Field(
        default=None, sa_type=sa.DateTime(timezone=True)
    )
    reset_token: Optional[str] = Field(default=None, unique=True, index=True)
    reset_token_expires_at: Optional[datetime] = Field(
        default=None, sa_type=sa.DateTime(timezone=True)
    )
    last_active: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
