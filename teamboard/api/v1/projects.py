"""
Project endpoints: CRUD and membership, scoped to the caller's team.
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, status

from teamboard.core.identity import get_actor
from teamboard.core.permissions import Actor
from teamboard.core.store import Store, get_store
from teamboard.services import projects as project_service
from teamboard_shared.schemas.common import MessageResponse
from teamboard_shared.schemas.projects import (
    AvailableMemberRead,
    ProjectCreate,
    ProjectDetail,
    ProjectMemberAdd,
    ProjectMemberRead,
    ProjectRead,
    ProjectUpdate,
)

router = APIRouter()


@router.get("", response_model=List[ProjectRead])
async def list_projects(
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    """List the caller's team projects, most recently updated first."""
    projects = await project_service.list_projects(store, actor)
    return [await project_service.to_read(store, p) for p in projects]


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    """Create a project; the caller becomes its owner."""
    project = await project_service.create_project(store, actor, body)
    return await project_service.to_read(store, project)


@router.get("/{project_id}", response_model=ProjectDetail)
async def get_project(
    project_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    return await project_service.get_project(store, actor, project_id)


@router.put("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: uuid.UUID,
    body: ProjectUpdate,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    project = await project_service.update_project(store, actor, project_id, body)
    return await project_service.to_read(store, project)


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    await project_service.delete_project(store, actor, project_id)
    return MessageResponse(message="Project deleted")


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------


@router.get("/{project_id}/available-members", response_model=List[AvailableMemberRead])
async def list_available_members(
    project_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    users = await project_service.list_available_members(store, actor, project_id)
    return [
        AvailableMemberRead(
            id=u.id,
            username=u.username,
            email=u.email,
            profile_photo=u.profile_photo,
            role=u.role,
        )
        for u in users
    ]


@router.post(
    "/{project_id}/members",
    response_model=ProjectMemberRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_member(
    project_id: uuid.UUID,
    body: ProjectMemberAdd,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    return await project_service.add_project_member(
        store, actor, project_id, body.user_id, body.role
    )


@router.delete("/{project_id}/members/{user_id}", response_model=MessageResponse)
async def remove_member(
    project_id: uuid.UUID,
    user_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    await project_service.remove_project_member(store, actor, project_id, user_id)
    return MessageResponse(message="Member removed")
