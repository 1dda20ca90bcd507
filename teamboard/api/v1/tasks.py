"""
Task endpoints, nested under their project.
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, status

from teamboard.core.identity import get_actor
from teamboard.core.permissions import Actor
from teamboard.core.store import Store, get_store
from teamboard.services import tasks as task_service
from teamboard_shared.schemas.common import MessageResponse
from teamboard_shared.schemas.tasks import TaskCreate, TaskRead, TaskUpdate

router = APIRouter()


@router.get("", response_model=List[TaskRead])
async def list_tasks(
    project_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    return await task_service.list_tasks(store, actor, project_id)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    project_id: uuid.UUID,
    body: TaskCreate,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    return await task_service.create_task(store, actor, project_id, body)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    return await task_service.get_task(store, actor, project_id, task_id)


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    body: TaskUpdate,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    return await task_service.update_task(store, actor, project_id, task_id, body)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    await task_service.delete_task(store, actor, project_id, task_id)
    return MessageResponse(message="Task deleted")
