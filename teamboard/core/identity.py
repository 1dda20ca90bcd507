"""
Identity resolution: who is asking.

The bearer token proves identity, but role and team are re-read from the
store on every request because either may change after the token was issued
(for example a team deletion leaves the user team-less).
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import Depends
from fastapi.security import APIKeyHeader

from teamboard.core.auth import verify_token
from teamboard.core.errors import NotFound, Unauthenticated
from teamboard.core.permissions import Actor
from teamboard.core.store import Store, get_store
from teamboard_shared.schemas.common import Role

log = structlog.get_logger()

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def parse_bearer(header: Optional[str]) -> str:
    if not header or not header.startswith("Bearer "):
        raise Unauthenticated("Authorization token required")
    token = header[7:].strip()
    if not token:
        raise Unauthenticated("Authorization token required")
    return token


async def resolve(token: str, store: Store) -> Actor:
    """Verify ``token`` and return the actor as currently stored."""
    claims = verify_token(token)
    user = await store.get_user(claims.user_id)
    if user is None:
        log.warning("identity.subject_missing", user_id=str(claims.user_id))
        raise NotFound("User not found")
    return Actor(
        user_id=user.id,
        role=Role(user.role),
        team_id=user.team_id,
        email=user.email,
    )


async def get_actor(
    authorization: Optional[str] = Depends(authorization_header),
    store: Store = Depends(get_store),
) -> Actor:
    """FastAPI dependency resolving the request's actor."""
    return await resolve(parse_bearer(authorization), store)
