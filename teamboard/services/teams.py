"""
Team service: team lifecycle, invite codes, editor roster and invitations.
"""

from __future__ import annotations

import uuid
from typing import Optional, Union

import structlog

from teamboard.core.auth import generate_invite_code
from teamboard.core.config import get_settings
from teamboard.core.errors import Conflict, InvalidInvite, NotFound
from teamboard.core.permissions import Action, Actor, Resource, authorize
from teamboard.core.store import Store
from teamboard.models.base import utcnow
from teamboard.models.invitation import TeamInvitation
from teamboard.models.team import Team
from teamboard.models.user import User
from teamboard_shared.schemas.common import (
    INVITATION_TRANSITIONS,
    InvitationStatus,
    Role,
)

log = structlog.get_logger()
settings = get_settings()


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------


async def create_team(store: Store, admin: User) -> Team:
    """Create a team owned by ``admin``. The invite code is generated lazily."""
    team = Team(admin_id=admin.id)
    await store.add(team)

    admin.role = Role.ADMIN.value
    admin.team_id = team.id
    await store.add(admin)

    log.info("team.created", team_id=str(team.id), admin_id=str(admin.id))
    return team


async def get_actor_team(store: Store, actor: Actor) -> Team:
    """Load the actor's own team; team-less actors have none."""
    team = await store.get_team(actor.team_id) if actor.team_id else None
    if team is None:
        raise NotFound("Team not found")
    return team


async def join_team(store: Store, team: Team, user: User) -> None:
    """Attach ``user`` to ``team`` as an editor."""
    user.role = Role.EDITOR.value
    user.team_id = team.id
    await store.add(user)
    await store.add_team_editor(team.id, user.id)
    log.info("team.editor_joined", team_id=str(team.id), user_id=str(user.id))


async def list_team_members(
    store: Store, actor: Actor, team_id: Union[uuid.UUID, str]
) -> tuple[Team, list[User], list[TeamInvitation]]:
    """Return (team, members, invitations). ``team_id`` may be "current"."""
    target = actor.team_id if team_id == "current" else team_id
    authorize(actor, Action.TEAM_READ, Resource.team(target))

    team = await store.get_team(target)
    if team is None:
        raise NotFound("Team not found")
    members = list(await store.list_team_users(team.id))
    invitations = list(await store.list_invitations(team.id))
    return team, members, invitations


async def delete_team(store: Store, actor: Actor) -> None:
    """Delete the actor's team.

    Members keep their accounts and become team-less; projects, invitations
    and the editor roster go with the team.
    """
    team = await get_actor_team(store, actor)
    authorize(actor, Action.TEAM_DELETE, Resource.team(team.id))

    await store.delete_team(team)
    log.info("team.deleted", team_id=str(team.id), by=str(actor.user_id))


# ---------------------------------------------------------------------------
# Invite codes
# ---------------------------------------------------------------------------


def invite_link(code: str) -> str:
    return f"{settings.frontend_url}/signup?teamInvite={code}"


async def ensure_invite_code(store: Store, team: Team) -> str:
    if team.invite_code:
        return team.invite_code
    code = await store.set_invite_code_if_absent(team, generate_invite_code())
    log.info("team.invite_code_generated", team_id=str(team.id))
    return code


async def get_invite_code(store: Store, actor: Actor) -> str:
    """Return the team's invite code, generating it on first request."""
    team = await get_actor_team(store, actor)
    authorize(actor, Action.INVITE_GENERATE, Resource.team(team.id))
    return await ensure_invite_code(store, team)


async def regenerate_invite_code(store: Store, actor: Actor) -> str:
    """Replace the team's invite code; the old one stops resolving.

    Editors who already joined are unaffected.
    """
    team = await get_actor_team(store, actor)
    authorize(actor, Action.INVITE_REGENERATE, Resource.team(team.id))

    team.invite_code = generate_invite_code()
    await store.add(team)
    log.info("team.invite_code_regenerated", team_id=str(team.id))
    return team.invite_code


async def resolve_invite(store: Store, code: Optional[str]) -> Team:
    """Find the team behind an invite code. Codes never expire."""
    if not code or not code.strip():
        raise InvalidInvite("Invalid team invitation code")
    team = await store.get_team_by_invite_code(code.strip())
    if team is None:
        raise InvalidInvite("Invalid team invitation code")
    return team


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------


async def record_invitation(
    store: Store, team: Team, email: str, invited_by: uuid.UUID
) -> TeamInvitation:
    """Record a pending invitation. Repeated invites to one email are allowed."""
    invitation = TeamInvitation(
        team_id=team.id,
        email=email.lower(),
        invite_code=team.invite_code,
        invited_by=invited_by,
        status=InvitationStatus.PENDING.value,
    )
    await store.add(invitation)
    return invitation


async def send_invitation(
    store: Store, actor: Actor, email: str
) -> tuple[Optional[TeamInvitation], str]:
    """Prepare an email invitation. Returns (invitation, invite_link).

    The invitation row is bookkeeping: if recording it fails the invite still
    goes out and ``invitation`` is None.
    """
    team = await get_actor_team(store, actor)
    authorize(actor, Action.INVITE_SEND, Resource.team(team.id))

    code = await ensure_invite_code(store, team)
    invitation: Optional[TeamInvitation] = None
    try:
        async with store.savepoint():
            invitation = await record_invitation(store, team, email, actor.user_id)
    except Exception:
        log.exception("team.invitation_record_failed", team_id=str(team.id), email=email)

    log.info("team.invitation_sent", team_id=str(team.id), email=email.lower())
    return invitation, invite_link(code)


def _transition(invitation: TeamInvitation, target: InvitationStatus) -> None:
    current = InvitationStatus(invitation.status)
    if target not in INVITATION_TRANSITIONS.get(current, []):
        raise Conflict(f"Invitation is already {current.value}")
    invitation.status = target.value


async def accept_invitations(store: Store, team: Team, user: User) -> list[TeamInvitation]:
    """Mark every pending invitation for ``user.email`` on ``team`` accepted."""
    accepted = []
    for invitation in await store.list_pending_invitations(team.id, user.email):
        _transition(invitation, InvitationStatus.ACCEPTED)
        invitation.accepted_at = utcnow()
        invitation.accepted_by = user.id
        await store.add(invitation)
        accepted.append(invitation)
    if accepted:
        log.info("team.invitations_accepted", team_id=str(team.id), count=len(accepted))
    return accepted


async def cancel_invitation(
    store: Store, actor: Actor, invitation_id: uuid.UUID
) -> TeamInvitation:
    invitation = await store.get_invitation(invitation_id)
    if invitation is None:
        raise NotFound("Invitation not found")
    authorize(actor, Action.INVITE_CANCEL, Resource.team(invitation.team_id))

    _transition(invitation, InvitationStatus.CANCELED)
    await store.add(invitation)
    log.info("team.invitation_canceled", invitation_id=str(invitation.id))
    return invitation
