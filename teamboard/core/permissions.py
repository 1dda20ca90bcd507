"""
Authorization engine.

``can_perform(actor, action, resource)`` is the single place where Teamboard
decides who may do what. It is pure: callers load the actor and a resource
snapshot first, then ask. Rules are checked in order and the first denial
wins:

1. Team scope. The actor must belong to the resource's team (for member and
   task operations, the parent project's team). This applies to every role,
   so an admin of one team can never touch another team's data.
2. The rule registered for the action in ``_RULES``.
3. Anything without a registered rule is denied.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import structlog

from teamboard.core.errors import Denied
from teamboard_shared.schemas.common import Role

log = structlog.get_logger()

NOT_YOUR_TEAM = "not your team"
INSUFFICIENT_ROLE = "insufficient role"
CANNOT_REMOVE_CREATOR = "cannot remove creator"
CROSS_TEAM_MEMBER = "cross-team member"
NO_MATCHING_RULE = "no matching rule"


class Action(str, Enum):
    TEAM_READ = "team.read"
    TEAM_DELETE = "team.delete"
    INVITE_GENERATE = "invite.generate"
    INVITE_REGENERATE = "invite.regenerate"
    INVITE_SEND = "invite.send"
    INVITE_CANCEL = "invite.cancel"
    PROJECT_READ = "project.read"
    PROJECT_CREATE = "project.create"
    PROJECT_UPDATE = "project.update"
    PROJECT_DELETE = "project.delete"
    PROJECT_MEMBER_ADD = "project_member.add"
    PROJECT_MEMBER_REMOVE = "project_member.remove"
    TASK_READ = "task.read"
    TASK_CREATE = "task.create"
    TASK_UPDATE = "task.update"
    TASK_DELETE = "task.delete"


@dataclass(frozen=True)
class Actor:
    """The authenticated user, with role and team as currently stored."""

    user_id: uuid.UUID
    role: Role
    team_id: Optional[uuid.UUID]
    email: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class Resource:
    """Snapshot of whatever an action targets.

    ``team_id`` is the team that owns it. ``created_by`` is the project
    creator, ``owner_id`` the task creator. ``target_user_id`` and
    ``target_team_id`` describe the user being added/removed/assigned.
    """

    team_id: Optional[uuid.UUID]
    created_by: Optional[uuid.UUID] = None
    owner_id: Optional[uuid.UUID] = None
    target_user_id: Optional[uuid.UUID] = None
    target_team_id: Optional[uuid.UUID] = None

    @classmethod
    def team(cls, team_id: Optional[uuid.UUID]) -> "Resource":
        return cls(team_id=team_id)

    @classmethod
    def project(cls, project) -> "Resource":
        return cls(team_id=project.team_id, created_by=project.created_by)

    @classmethod
    def project_member(cls, project, user_id: uuid.UUID, user_team_id: Optional[uuid.UUID]) -> "Resource":
        return cls(
            team_id=project.team_id,
            created_by=project.created_by,
            target_user_id=user_id,
            target_team_id=user_team_id,
        )

    @classmethod
    def task(cls, project, task=None, assignee=None) -> "Resource":
        return cls(
            team_id=project.team_id,
            created_by=project.created_by,
            owner_id=task.created_by if task is not None else None,
            target_user_id=assignee.id if assignee is not None else None,
            target_team_id=assignee.team_id if assignee is not None else None,
        )


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(allowed=True)


def deny(reason: str) -> Decision:
    return Decision(allowed=False, reason=reason)


# ---------------------------------------------------------------------------
# Resource rules (team scope already checked)
# ---------------------------------------------------------------------------

def _any_member(actor: Actor, resource: Resource) -> Decision:
    return ALLOW


def _admin_only(actor: Actor, resource: Resource) -> Decision:
    return ALLOW if actor.is_admin else deny(INSUFFICIENT_ROLE)


def _admin_or_creator(actor: Actor, resource: Resource) -> Decision:
    if actor.is_admin or actor.user_id == resource.created_by:
        return ALLOW
    return deny(INSUFFICIENT_ROLE)


def _member_add(actor: Actor, resource: Resource) -> Decision:
    decision = _admin_or_creator(actor, resource)
    if not decision:
        return decision
    if resource.target_team_id != resource.team_id:
        return deny(CROSS_TEAM_MEMBER)
    return ALLOW


def _member_remove(actor: Actor, resource: Resource) -> Decision:
    decision = _admin_or_creator(actor, resource)
    if not decision:
        return decision
    if resource.target_user_id == resource.created_by:
        return deny(CANNOT_REMOVE_CREATOR)
    return ALLOW


def _task_write(actor: Actor, resource: Resource) -> Decision:
    if resource.target_user_id is not None and resource.target_team_id != resource.team_id:
        return deny(CROSS_TEAM_MEMBER)
    return ALLOW


def _task_delete(actor: Actor, resource: Resource) -> Decision:
    if actor.user_id == resource.owner_id:
        return ALLOW
    return _admin_or_creator(actor, resource)


Rule = Callable[[Actor, Resource], Decision]

_RULES: dict[Action, Rule] = {
    Action.TEAM_READ: _any_member,
    Action.TEAM_DELETE: _admin_only,
    Action.INVITE_GENERATE: _admin_only,
    Action.INVITE_REGENERATE: _admin_only,
    Action.INVITE_SEND: _admin_only,
    Action.INVITE_CANCEL: _admin_only,
    Action.PROJECT_READ: _any_member,
    Action.PROJECT_CREATE: _any_member,
    Action.PROJECT_UPDATE: _admin_or_creator,
    Action.PROJECT_DELETE: _admin_or_creator,
    Action.PROJECT_MEMBER_ADD: _member_add,
    Action.PROJECT_MEMBER_REMOVE: _member_remove,
    Action.TASK_READ: _any_member,
    Action.TASK_CREATE: _task_write,
    Action.TASK_UPDATE: _task_write,
    Action.TASK_DELETE: _task_delete,
}


def can_perform(actor: Actor, action: Action, resource: Resource) -> Decision:
    """Decide whether ``actor`` may perform ``action`` on ``resource``."""
    if actor.team_id is None or actor.team_id != resource.team_id:
        return deny(NOT_YOUR_TEAM)
    rule = _RULES.get(action)
    if rule is None:
        return deny(NO_MATCHING_RULE)
    return rule(actor, resource)


def authorize(actor: Actor, action: Action, resource: Resource) -> None:
    """Raise ``Denied`` unless the action is permitted."""
    decision = can_perform(actor, action, resource)
    if not decision:
        log.info(
            "authz.denied",
            user_id=str(actor.user_id),
            action=action.value,
            reason=decision.reason,
        )
        raise Denied(decision.reason)
