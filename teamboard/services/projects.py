"""
Project service layer: team-scoped projects and project membership.

Every mutation builds a resource snapshot and asks the authorization engine
before touching the store. The project creator is inserted as ``owner`` in
the same transaction as the project and can never be removed.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog

from teamboard.core.errors import Conflict, Invalid, NotFound
from teamboard.core.permissions import Action, Actor, Resource, authorize
from teamboard.core.store import Store
from teamboard.models.base import utcnow
from teamboard.models.project import Project, ProjectMember
from teamboard.models.user import User
from teamboard_shared.schemas.common import ProjectRole
from teamboard_shared.schemas.projects import (
    ProjectCreate,
    ProjectDetail,
    ProjectMemberRead,
    ProjectRead,
    ProjectUpdate,
)

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_project_or_404(store: Store, project_id: uuid.UUID) -> Project:
    project = await store.get_project(project_id)
    if project is None:
        raise NotFound("Project not found")
    return project


async def to_read(store: Store, project: Project) -> ProjectRead:
    creator = await store.get_user(project.created_by)
    data = ProjectRead.model_validate(project)
    data.creator_name = creator.username if creator else None
    return data


def member_read(member: ProjectMember, user: User) -> ProjectMemberRead:
    return ProjectMemberRead(
        user_id=user.id,
        username=user.username,
        email=user.email,
        profile_photo=user.profile_photo,
        role=user.role,
        project_role=member.role,
    )


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


async def list_projects(store: Store, actor: Actor) -> list[Project]:
    """Projects of the actor's team, most recently updated first."""
    authorize(actor, Action.PROJECT_READ, Resource.team(actor.team_id))
    return list(await store.list_projects(actor.team_id))


async def create_project(store: Store, actor: Actor, data: ProjectCreate) -> Project:
    authorize(actor, Action.PROJECT_CREATE, Resource.team(actor.team_id))

    project = Project(
        team_id=actor.team_id,
        name=data.name,
        description=data.description or "",
        created_by=actor.user_id,
    )
    await store.add(project)
    await store.add(
        ProjectMember(
            project_id=project.id,
            user_id=actor.user_id,
            role=ProjectRole.OWNER.value,
        )
    )

    log.info(
        "project.created",
        project_id=str(project.id),
        team_id=str(project.team_id),
        by=str(actor.user_id),
    )
    return project


async def get_project(store: Store, actor: Actor, project_id: uuid.UUID) -> ProjectDetail:
    project = await get_project_or_404(store, project_id)
    authorize(actor, Action.PROJECT_READ, Resource.project(project))

    members = [
        member_read(member, user)
        for member, user in await store.list_project_members(project.id)
    ]
    return ProjectDetail(project=await to_read(store, project), members=members)


async def update_project(
    store: Store, actor: Actor, project_id: uuid.UUID, data: ProjectUpdate
) -> Project:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise Invalid("No fields to update")

    project = await get_project_or_404(store, project_id)
    authorize(actor, Action.PROJECT_UPDATE, Resource.project(project))

    if "name" in changes:
        project.name = changes["name"]
    if "description" in changes:
        project.description = changes["description"]
    if "status" in changes:
        project.status = changes["status"].value
    project.updated_at = utcnow()
    await store.add(project)

    log.info("project.updated", project_id=str(project.id), fields=sorted(changes))
    return project


async def delete_project(store: Store, actor: Actor, project_id: uuid.UUID) -> None:
    """Delete a project; its members and tasks go with it."""
    project = await get_project_or_404(store, project_id)
    authorize(actor, Action.PROJECT_DELETE, Resource.project(project))

    await store.delete_project(project)
    log.info("project.deleted", project_id=str(project_id), by=str(actor.user_id))


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------


async def add_project_member(
    store: Store,
    actor: Actor,
    project_id: uuid.UUID,
    user_id: uuid.UUID,
    role: ProjectRole = ProjectRole.MEMBER,
) -> ProjectMemberRead:
    if role == ProjectRole.OWNER:
        raise Invalid("The owner role is reserved for the project creator")

    project = await get_project_or_404(store, project_id)
    authorize(actor, Action.PROJECT_READ, Resource.project(project))
    user = await store.get_user(user_id)
    if user is None:
        raise NotFound("User not found")
    authorize(
        actor,
        Action.PROJECT_MEMBER_ADD,
        Resource.project_member(project, user.id, user.team_id),
    )

    if await store.get_project_member(project.id, user.id):
        raise Conflict("User is already a member of this project")

    member = ProjectMember(project_id=project.id, user_id=user.id, role=role.value)
    try:
        await store.add(member)
    except Conflict as exc:
        raise Conflict("User is already a member of this project") from exc
    log.info("project.member_added", project_id=str(project.id), user_id=str(user.id))
    return member_read(member, user)


async def remove_project_member(
    store: Store, actor: Actor, project_id: uuid.UUID, user_id: uuid.UUID
) -> None:
    project = await get_project_or_404(store, project_id)
    member = await store.get_project_member(project.id, user_id)
    user: Optional[User] = await store.get_user(user_id) if member else None
    authorize(
        actor,
        Action.PROJECT_MEMBER_REMOVE,
        Resource.project_member(project, user_id, user.team_id if user else None),
    )
    if member is None:
        raise NotFound("User is not a member of this project")

    await store.delete(member)
    log.info("project.member_removed", project_id=str(project.id), user_id=str(user_id))


async def list_available_members(
    store: Store, actor: Actor, project_id: uuid.UUID
) -> list[User]:
    """Team members who are not yet on the project."""
    project = await get_project_or_404(store, project_id)
    authorize(actor, Action.PROJECT_READ, Resource.project(project))

    taken = {member.user_id for member, _ in await store.list_project_members(project.id)}
    return [u for u in await store.list_team_users(project.team_id) if u.id not in taken]
