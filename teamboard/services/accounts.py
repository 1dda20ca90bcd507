"""
Account service: signup, email verification, login and password reset.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import structlog

from teamboard.core.auth import (
    hash_password,
    issue_reset_token,
    issue_token,
    issue_verification_token,
    token_expired,
    verify_password,
)
from teamboard.core.config import get_settings
from teamboard.core.errors import Conflict, Invalid, NotFound, Unauthenticated
from teamboard.core.permissions import Actor
from teamboard.core.store import Store
from teamboard.models.base import utcnow
from teamboard.models.user import User
from teamboard.services import teams as team_service
from teamboard_shared.schemas.common import Role
from teamboard_shared.schemas.users import SignupRequest

log = structlog.get_logger()
settings = get_settings()


def _check_password(password: str) -> None:
    if len(password) < settings.min_password_length:
        raise Invalid(
            f"Password must be at least {settings.min_password_length} characters"
        )


async def signup(store: Store, req: SignupRequest) -> tuple[User, str]:
    """Register a user. Returns (user, verification_token).

    With an invite code the user joins that team as an editor and any pending
    invitations for their email are accepted. Without one they become the
    admin of a new team.
    """
    _check_password(req.password)
    email = req.email.lower()

    if await store.get_user_by_email(email):
        raise Conflict("User already exists with this email")
    if await store.get_user_by_username(req.username):
        raise Conflict("Username is already taken")

    team = None
    if req.team_invite_code:
        team = await team_service.resolve_invite(store, req.team_invite_code)

    token, expires_at = issue_verification_token()
    user = User(
        email=email,
        username=req.username,
        password_hash=hash_password(req.password),
        role=Role.EDITOR.value if team else Role.ADMIN.value,
        profile_photo=req.profile_photo,
        subscribed_to_updates=req.subscribed_to_updates,
        email_verified=False,
        verification_token=token,
        verification_token_expires_at=expires_at,
    )
    try:
        await store.add(user)
    except Conflict as exc:
        # a concurrent signup took the email or username after the checks above
        raise Conflict("User already exists with this email or username") from exc

    if team is not None:
        await team_service.join_team(store, team, user)
        await team_service.accept_invitations(store, team, user)
    else:
        team = await team_service.create_team(store, user)

    log.info(
        "user.registered",
        user_id=str(user.id),
        team_id=str(team.id),
        role=user.role,
    )
    return user, token


async def verify_email(store: Store, token: str, now: Optional[datetime] = None) -> User:
    """Consume a verification token. Each token works once."""
    user = await store.get_user_by_verification_token(token) if token else None
    if user is None or token_expired(user.verification_token_expires_at, now):
        raise Invalid("Invalid or expired verification token")

    user.email_verified = True
    user.verification_token = None
    user.verification_token_expires_at = None
    await store.add(user)
    log.info("user.email_verified", user_id=str(user.id))
    return user


async def resend_verification(store: Store, email: str) -> tuple[User, str]:
    """Issue a fresh verification token, replacing any previous one."""
    user = await store.get_user_by_email(email)
    if user is None:
        raise NotFound("User not found")
    if user.email_verified:
        raise Conflict("Email is already verified")

    token, expires_at = issue_verification_token()
    user.verification_token = token
    user.verification_token_expires_at = expires_at
    await store.add(user)
    return user, token


async def login(store: Store, email: str, password: str) -> tuple[str, User]:
    """Check credentials and issue a session token. Returns (token, user)."""
    user = await store.get_user_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        log.warning("auth.login_failure", email=email.lower(), reason="bad_credentials")
        raise Unauthenticated("Invalid email or password")
    if not user.email_verified:
        log.warning("auth.login_failure", email=email.lower(), reason="unverified")
        raise Unauthenticated("Please verify your email before logging in")

    user.last_active = utcnow()
    await store.add(user)

    token = issue_token(user.id, user.email, user.role, user.team_id)
    log.info("auth.login_success", user_id=str(user.id))
    return token, user


async def request_password_reset(store: Store, email: str) -> Optional[tuple[User, str]]:
    """Issue a reset token. Unknown emails return None so callers can stay silent."""
    user = await store.get_user_by_email(email)
    if user is None:
        return None
    token, expires_at = issue_reset_token()
    user.reset_token = token
    user.reset_token_expires_at = expires_at
    await store.add(user)
    log.info("user.password_reset_requested", user_id=str(user.id))
    return user, token


async def reset_password(
    store: Store, token: str, new_password: str, now: Optional[datetime] = None
) -> User:
    _check_password(new_password)
    user = await store.get_user_by_reset_token(token)
    if user is None or token_expired(user.reset_token_expires_at, now):
        raise Invalid("Invalid or expired reset token")

    user.password_hash = hash_password(new_password)
    user.reset_token = None
    user.reset_token_expires_at = None
    await store.add(user)
    log.info("user.password_reset", user_id=str(user.id))
    return user


async def touch_last_active(store: Store, actor: Actor) -> User:
    user = await store.get_user(actor.user_id)
    if user is None:
        raise NotFound("User not found")
    user.last_active = utcnow()
    await store.add(user)
    return user
