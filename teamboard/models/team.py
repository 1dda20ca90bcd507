"""Team model and editor roster."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, utcnow


class Team(UUIDMixin, SQLModel, table=True):
    __tablename__ = "teams"

    admin_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    # Empty until an admin first asks for an invite link
    invite_code: Optional[str] = Field(default=None, unique=True, index=True)
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
        sa_type=sa.DateTime(timezone=True),
    )


class TeamEditor(SQLModel, table=True):
    __tablename__ = "team_editors"

    team_id: uuid.UUID = Field(foreign_key="teams.id", primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True)
