"""
Team-related Pydantic schemas.

Covers: team members listing, invite links, email invitations and their
lifecycle states.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, UUID4

from .common import InvitationStatus, Role


# ---------------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------------

class TeamRead(BaseModel):
    id: UUID4
    admin_id: Optional[UUID4] = None
    created_at: datetime


class TeamMemberRead(BaseModel):
    id: UUID4
    username: str
    email: str
    profile_photo: Optional[str] = None
    role: Role
    email_verified: bool
    last_active: Optional[datetime] = None
    created_at: datetime
    is_admin: bool = False


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------

class InviteLinkResponse(BaseModel):
    invite_code: str
    invite_link: str


class InvitationSendRequest(BaseModel):
    email: EmailStr
    message: Optional[str] = Field(default=None, max_length=1000)


class InvitationRead(BaseModel):
    id: UUID4
    team_id: UUID4
    email: str
    status: InvitationStatus
    invited_by: Optional[UUID4] = None
    created_at: datetime
    accepted_at: Optional[datetime] = None
    accepted_by: Optional[UUID4] = None

    model_config = {"from_attributes": True}


class InvitationSendResponse(BaseModel):
    message: str
    invite_link: str
    invitation: Optional[InvitationRead] = None


class TeamMembersResponse(BaseModel):
    team: TeamRead
    members: List[TeamMemberRead]
    invitations: List[InvitationRead]
