"""
Team endpoints: member listing, team deletion, invitation cancellation.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from teamboard.core.errors import NotFound
from teamboard.core.identity import get_actor
from teamboard.core.permissions import Actor
from teamboard.core.store import Store, get_store
from teamboard.services import teams as team_service
from teamboard_shared.schemas.common import MessageResponse
from teamboard_shared.schemas.teams import (
    InvitationRead,
    TeamMemberRead,
    TeamMembersResponse,
    TeamRead,
)

router = APIRouter()


@router.get("/{team_id}/members", response_model=TeamMembersResponse)
async def get_team_members(
    team_id: str,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    """List the team's members and invitations. ``team_id`` may be "current"."""
    if team_id != "current":
        try:
            team_id = uuid.UUID(team_id)
        except ValueError:
            raise NotFound("Team not found")

    team, members, invitations = await team_service.list_team_members(store, actor, team_id)
    return TeamMembersResponse(
        team=TeamRead(id=team.id, admin_id=team.admin_id, created_at=team.created_at),
        members=[
            TeamMemberRead(
                id=m.id,
                username=m.username,
                email=m.email,
                profile_photo=m.profile_photo,
                role=m.role,
                email_verified=m.email_verified,
                last_active=m.last_active,
                created_at=m.created_at,
                is_admin=m.id == team.admin_id,
            )
            for m in members
        ],
        invitations=[InvitationRead.model_validate(i) for i in invitations],
    )


@router.delete("/current", response_model=MessageResponse)
async def delete_team(
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    """Delete the caller's team. Members keep their accounts."""
    await team_service.delete_team(store, actor)
    return MessageResponse(message="Team deleted")


@router.delete("/invitations/{invitation_id}", response_model=InvitationRead)
async def cancel_invitation(
    invitation_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    invitation = await team_service.cancel_invitation(store, actor, invitation_id)
    return InvitationRead.model_validate(invitation)
