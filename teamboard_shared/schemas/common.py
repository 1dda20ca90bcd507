from enum import Enum
from typing import Optional
from pydantic import BaseModel

class Role(str, Enum):
    ADMIN = "admin"
    EDITOR = "editor"

class ProjectRole(str, Enum):
    OWNER = "owner"
    MEMBER = "member"

class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    ARCHIVED = "archived"

class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    CANCELED = "canceled"

# Allowed invitation state transitions; terminal states map to []
INVITATION_TRANSITIONS: dict["InvitationStatus", list["InvitationStatus"]] = {
    InvitationStatus.PENDING: [InvitationStatus.ACCEPTED, InvitationStatus.CANCELED],
    InvitationStatus.ACCEPTED: [],
    InvitationStatus.CANCELED: [],
}

class ErrorBody(BaseModel):
    code: str
    message: str
    status: int

class ErrorResponse(BaseModel):
    error: ErrorBody

class MessageResponse(BaseModel):
    message: str
    detail: Optional[object] = None
