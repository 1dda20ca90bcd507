"""Project and project membership models."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin, utcnow


class Project(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "projects"

    # team_id is fixed at creation
    team_id: uuid.UUID = Field(foreign_key="teams.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    description: Optional[str] = None
    created_by: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    status: str = Field(default="active", nullable=False, index=True)  # active | on_hold | completed | archived


class ProjectMember(UUIDMixin, SQLModel, table=True):
    __tablename__ = "project_members"
    __table_args__ = (
        sa.UniqueConstraint("project_id", "user_id", name="uq_project_member"),
    )

    project_id: uuid.UUID = Field(foreign_key="projects.id", nullable=False, index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    role: str = Field(default="member", nullable=False)  # owner | member
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
        sa_type=sa.DateTime(timezone=True),
    )
