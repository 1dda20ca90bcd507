"""
Shared fixtures: in-memory SQLite for fast tests.

Settings are read once at import time, so the environment is prepared before
anything from ``teamboard`` is imported.
"""

from __future__ import annotations

import os

os.environ["TB_DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["TB_SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["TB_BCRYPT_ROUNDS"] = "4"
os.environ["TB_SENDGRID_API_KEY"] = ""
os.environ["TB_FRONTEND_URL"] = "http://frontend.test"

from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import teamboard.models  # noqa: F401
from teamboard.core.database import get_session
from teamboard.core.email import get_email_sender
from teamboard.core.permissions import Actor
from teamboard.core.store import SQLStore
from teamboard.main import app
from teamboard.models.user import User
from teamboard.services import accounts
from teamboard_shared.schemas.common import Role
from teamboard_shared.schemas.users import SignupRequest

PASSWORD = "correct-horse-battery"


class RecordingSender:
    """Stands in for ``EmailSender``; keeps every message instead of sending."""

    def __init__(self):
        self.sent: list[dict] = []

    def send(self, recipient: str, subject: str, template: str, variables: dict) -> bool:
        self.sent.append(
            {"recipient": recipient, "subject": subject, "template": template, "variables": variables}
        )
        return True

    def last(self, template: str) -> dict:
        return [m for m in self.sent if m["template"] == template][-1]


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def store(session):
    return SQLStore(session)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
def email_sender():
    return RecordingSender()


@pytest.fixture
async def client(session_factory, email_sender):
    async def override_session():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

async def make_user(
    store,
    username: str,
    invite_code: Optional[str] = None,
    verified: bool = True,
) -> User:
    """Sign a user up through the account service."""
    user, _token = await accounts.signup(
        store,
        SignupRequest(
            email=f"{username}@example.com",
            username=username,
            password=PASSWORD,
            team_invite_code=invite_code,
        ),
    )
    if verified:
        user.email_verified = True
        await store.add(user)
    return user


def actor_for(user: User) -> Actor:
    return Actor(user_id=user.id, role=Role(user.role), team_id=user.team_id, email=user.email)


@pytest.fixture
async def team(store):
    """An admin with a team and one editor who joined through the invite code.

    Returns (admin, editor, team).
    """
    from teamboard.services import teams as team_service

    admin = await make_user(store, "alice")
    code = await team_service.get_invite_code(store, actor_for(admin))
    editor = await make_user(store, "bob", invite_code=code)
    return admin, editor, await store.get_team(admin.team_id)


@pytest.fixture
async def outsider(store):
    """Admin of a different team."""
    return await make_user(store, "mallory")
