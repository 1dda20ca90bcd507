"""Team invitation model."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, utcnow


class TeamInvitation(UUIDMixin, SQLModel, table=True):
    __tablename__ = "team_invitations"

    team_id: uuid.UUID = Field(foreign_key="teams.id", nullable=False, index=True)
    email: str = Field(nullable=False, index=True)  # need not belong to an existing user
    invite_code: str = Field(nullable=False)  # team code at the time of the invite
    invited_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    status: str = Field(default="pending", nullable=False, index=True)  # pending | accepted | canceled
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
        sa_type=sa.DateTime(timezone=True),
    )
    accepted_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    accepted_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
