from typing import Optional, List
from pydantic import BaseModel, Field, field_validator
from uuid import UUID
from datetime import datetime
from .common import ProjectRole, ProjectStatus, Role


class ProjectBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = ""

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Project name is required")
        return v


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Project name is required")
        return v


class ProjectRead(BaseModel):
    id: UUID
    team_id: UUID
    name: str
    description: Optional[str] = None
    status: ProjectStatus
    created_by: UUID
    creator_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProjectMemberAdd(BaseModel):
    user_id: UUID
    role: ProjectRole = ProjectRole.MEMBER


class ProjectMemberRead(BaseModel):
    user_id: UUID
    username: str
    email: str
    profile_photo: Optional[str] = None
    role: Role
    project_role: ProjectRole


class ProjectDetail(BaseModel):
    project: ProjectRead
    members: List[ProjectMemberRead]


class AvailableMemberRead(BaseModel):
    id: UUID
    username: str
    email: str
    profile_photo: Optional[str] = None
    role: Role
