"""
User endpoints: the caller's profile and activity timestamp.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from teamboard.core.errors import NotFound
from teamboard.core.identity import get_actor
from teamboard.core.permissions import Actor
from teamboard.core.store import Store, get_store
from teamboard.services import accounts
from teamboard_shared.schemas.users import UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_me(
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    user = await store.get_user(actor.user_id)
    if user is None:
        raise NotFound("User not found")
    return UserResponse.model_validate(user)


@router.put("/me/last-active", response_model=UserResponse)
async def update_last_active(
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    user = await accounts.touch_last_active(store, actor)
    return UserResponse.model_validate(user)
