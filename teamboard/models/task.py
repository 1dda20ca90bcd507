"""Project task model."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class ProjectTask(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "project_tasks"

    project_id: uuid.UUID = Field(foreign_key="projects.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    description: Optional[str] = None
    status: str = Field(nullable=False, default="pending", index=True)  # pending | in_progress | completed
    assigned_to: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", index=True)
    created_by: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    due_date: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
