"""
Task service layer: tasks are always reached through their parent project.

The parent project supplies the team scope, so a task of another team's
project is denied exactly like the project itself. Assignees must belong to
the project's team.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog

from teamboard.core.errors import Invalid, NotFound
from teamboard.core.permissions import Action, Actor, Resource, authorize
from teamboard.core.store import Store
from teamboard.models.base import utcnow
from teamboard.models.project import Project
from teamboard.models.task import ProjectTask
from teamboard.models.user import User
from teamboard.services.projects import get_project_or_404
from teamboard_shared.schemas.tasks import TaskCreate, TaskUpdate

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_task_or_404(
    store: Store, project: Project, task_id: uuid.UUID
) -> ProjectTask:
    task = await store.get_task(task_id)
    if task is None or task.project_id != project.id:
        raise NotFound("Task not found")
    return task


async def _load_assignee(store: Store, user_id: Optional[uuid.UUID]) -> Optional[User]:
    if user_id is None:
        return None
    user = await store.get_user(user_id)
    if user is None:
        raise NotFound("Assignee not found")
    return user


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def list_tasks(
    store: Store, actor: Actor, project_id: uuid.UUID
) -> list[ProjectTask]:
    project = await get_project_or_404(store, project_id)
    authorize(actor, Action.TASK_READ, Resource.task(project))
    return list(await store.list_tasks(project.id))


async def create_task(
    store: Store, actor: Actor, project_id: uuid.UUID, data: TaskCreate
) -> ProjectTask:
    project = await get_project_or_404(store, project_id)
    authorize(actor, Action.TASK_READ, Resource.task(project))
    assignee = await _load_assignee(store, data.assigned_to)
    authorize(actor, Action.TASK_CREATE, Resource.task(project, assignee=assignee))

    task = ProjectTask(
        project_id=project.id,
        title=data.title,
        description=data.description,
        status=data.status.value,
        assigned_to=assignee.id if assignee else None,
        created_by=actor.user_id,
        due_date=data.due_date,
    )
    await store.add(task)

    log.info(
        "task.created",
        task_id=str(task.id),
        project_id=str(project.id),
        by=str(actor.user_id),
    )
    return task


async def get_task(
    store: Store, actor: Actor, project_id: uuid.UUID, task_id: uuid.UUID
) -> ProjectTask:
    project = await get_project_or_404(store, project_id)
    authorize(actor, Action.TASK_READ, Resource.task(project))
    return await get_task_or_404(store, project, task_id)


async def update_task(
    store: Store,
    actor: Actor,
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    data: TaskUpdate,
) -> ProjectTask:
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise Invalid("No fields to update")
    if "title" in changes and changes["title"] is None:
        raise Invalid("Task title is required")

    project = await get_project_or_404(store, project_id)
    authorize(actor, Action.TASK_READ, Resource.task(project))
    assignee = await _load_assignee(store, changes.get("assigned_to"))
    authorize(actor, Action.TASK_UPDATE, Resource.task(project, assignee=assignee))
    task = await get_task_or_404(store, project, task_id)

    if "title" in changes:
        task.title = changes["title"]
    if "description" in changes:
        task.description = changes["description"]
    if changes.get("status") is not None:
        task.status = changes["status"].value
    if "assigned_to" in changes:
        task.assigned_to = assignee.id if assignee else None
    if "due_date" in changes:
        task.due_date = changes["due_date"]
    task.updated_at = utcnow()
    await store.add(task)

    log.info("task.updated", task_id=str(task.id), fields=sorted(changes))
    return task


async def delete_task(
    store: Store, actor: Actor, project_id: uuid.UUID, task_id: uuid.UUID
) -> None:
    project = await get_project_or_404(store, project_id)
    authorize(actor, Action.TASK_READ, Resource.task(project))
    task = await get_task_or_404(store, project, task_id)
    authorize(actor, Action.TASK_DELETE, Resource.task(project, task))

    await store.delete(task)
    log.info("task.deleted", task_id=str(task_id), by=str(actor.user_id))
