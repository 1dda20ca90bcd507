"""
Persistence port.

Services talk to storage only through a ``Store``. Lookups return ``None``
when the row is absent. A unique-key collision on write surfaces as
``Conflict``; other driver errors propagate unchanged. ``SQLStore`` is
the SQLModel implementation bound to one request-scoped ``AsyncSession``;
it never commits, the session owner does.
"""

from __future__ import annotations

import uuid
from typing import AsyncContextManager, Optional, Protocol, Sequence

import sqlalchemy as sa
from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from teamboard.core.database import get_session
from teamboard.core.errors import Conflict
from teamboard.models.invitation import TeamInvitation
from teamboard.models.project import Project, ProjectMember
from teamboard.models.task import ProjectTask
from teamboard.models.team import Team, TeamEditor
from teamboard.models.user import User


class Store(Protocol):
    # generic writes
    async def add(self, obj: SQLModel) -> None: ...
    async def delete(self, obj: SQLModel) -> None: ...
    def savepoint(self) -> AsyncContextManager: ...

    # users
    async def get_user(self, user_id: uuid.UUID) -> Optional[User]: ...
    async def get_user_by_email(self, email: str) -> Optional[User]: ...
    async def get_user_by_username(self, username: str) -> Optional[User]: ...
    async def get_user_by_verification_token(self, token: str) -> Optional[User]: ...
    async def get_user_by_reset_token(self, token: str) -> Optional[User]: ...
    async def list_team_users(self, team_id: uuid.UUID) -> Sequence[User]: ...

    # teams
    async def get_team(self, team_id: uuid.UUID) -> Optional[Team]: ...
    async def get_team_by_invite_code(self, code: str) -> Optional[Team]: ...
    async def set_invite_code_if_absent(self, team: Team, code: str) -> str: ...
    async def add_team_editor(self, team_id: uuid.UUID, user_id: uuid.UUID) -> None: ...
    async def delete_team(self, team: Team) -> None: ...

    # invitations
    async def get_invitation(self, invitation_id: uuid.UUID) -> Optional[TeamInvitation]: ...
    async def list_invitations(self, team_id: uuid.UUID) -> Sequence[TeamInvitation]: ...
    async def list_pending_invitations(
        self, team_id: uuid.UUID, email: str
    ) -> Sequence[TeamInvitation]: ...

    # projects
    async def get_project(self, project_id: uuid.UUID) -> Optional[Project]: ...
    async def list_projects(self, team_id: uuid.UUID) -> Sequence[Project]: ...
    async def delete_project(self, project: Project) -> None: ...
    async def get_project_member(
        self, project_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[ProjectMember]: ...
    async def list_project_members(
        self, project_id: uuid.UUID
    ) -> Sequence[tuple[ProjectMember, User]]: ...

    # tasks
    async def get_task(self, task_id: uuid.UUID) -> Optional[ProjectTask]: ...
    async def list_tasks(self, project_id: uuid.UUID) -> Sequence[ProjectTask]: ...


class SQLStore:
    """``Store`` backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ------------------------------------------------------------------
    # Generic
    # ------------------------------------------------------------------

    async def add(self, obj: SQLModel) -> None:
        """Insert or update ``obj``. A unique-key collision raises ``Conflict``."""
        self.session.add(obj)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if "unique" not in str(exc.orig).lower():
                raise
            raise Conflict("Resource already exists") from exc

    async def delete(self, obj: SQLModel) -> None:
        await self.session.delete(obj)
        await self.session.flush()

    def savepoint(self):
        """Nested transaction; rolling it back leaves the outer one intact."""
        return self.session.begin_nested()

    async def _one(self, stmt) -> Optional[SQLModel]:
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _all(self, stmt) -> list:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self._one(select(User).where(User.email == email.lower()))

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self._one(select(User).where(User.username == username))

    async def get_user_by_verification_token(self, token: str) -> Optional[User]:
        return await self._one(select(User).where(User.verification_token == token))

    async def get_user_by_reset_token(self, token: str) -> Optional[User]:
        return await self._one(select(User).where(User.reset_token == token))

    async def list_team_users(self, team_id: uuid.UUID) -> list[User]:
        return await self._all(
            select(User).where(User.team_id == team_id).order_by(User.created_at)
        )

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    async def get_team(self, team_id: uuid.UUID) -> Optional[Team]:
        return await self.session.get(Team, team_id)

    async def get_team_by_invite_code(self, code: str) -> Optional[Team]:
        return await self._one(select(Team).where(Team.invite_code == code))

    async def set_invite_code_if_absent(self, team: Team, code: str) -> str:
        """Write ``code`` only if the team has none yet, then re-read.

        Two concurrent callers both end up with whichever code landed first.
        """
        await self.session.execute(
            sa.update(Team)
            .where(Team.id == team.id, Team.invite_code.is_(None))
            .values(invite_code=code)
            .execution_options(synchronize_session=False)
        )
        await self.session.refresh(team)
        return team.invite_code

    async def add_team_editor(self, team_id: uuid.UUID, user_id: uuid.UUID) -> None:
        existing = await self.session.get(TeamEditor, (team_id, user_id))
        if existing is None:
            self.session.add(TeamEditor(team_id=team_id, user_id=user_id))
            await self.session.flush()

    async def delete_team(self, team: Team) -> None:
        """Remove a team and what it owns. Users keep their accounts."""
        projects = await self.list_projects(team.id)
        for project in projects:
            await self.delete_project(project)
        await self.session.execute(
            sa.delete(TeamInvitation).where(TeamInvitation.team_id == team.id)
        )
        await self.session.execute(
            sa.delete(TeamEditor).where(TeamEditor.team_id == team.id)
        )
        await self.session.execute(
            sa.update(User)
            .where(User.team_id == team.id)
            .values(team_id=None)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.delete(team)
        await self.session.flush()

    # ------------------------------------------------------------------
    # Invitations
    # ------------------------------------------------------------------

    async def get_invitation(self, invitation_id: uuid.UUID) -> Optional[TeamInvitation]:
        return await self.session.get(TeamInvitation, invitation_id)

    async def list_invitations(self, team_id: uuid.UUID) -> list[TeamInvitation]:
        return await self._all(
            select(TeamInvitation)
            .where(TeamInvitation.team_id == team_id)
            .order_by(TeamInvitation.created_at)
        )

    async def list_pending_invitations(
        self, team_id: uuid.UUID, email: str
    ) -> list[TeamInvitation]:
        return await self._all(
            select(TeamInvitation).where(
                TeamInvitation.team_id == team_id,
                TeamInvitation.email == email.lower(),
                TeamInvitation.status == "pending",
            )
        )

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def get_project(self, project_id: uuid.UUID) -> Optional[Project]:
        return await self.session.get(Project, project_id)

    async def list_projects(self, team_id: uuid.UUID) -> list[Project]:
        return await self._all(
            select(Project)
            .where(Project.team_id == team_id)
            .order_by(Project.updated_at.desc())
        )

    async def delete_project(self, project: Project) -> None:
        """Delete a project together with its members and tasks."""
        await self.session.execute(
            sa.delete(ProjectTask).where(ProjectTask.project_id == project.id)
        )
        await self.session.execute(
            sa.delete(ProjectMember).where(ProjectMember.project_id == project.id)
        )
        await self.session.delete(project)
        await self.session.flush()

    async def get_project_member(
        self, project_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[ProjectMember]:
        return await self._one(
            select(ProjectMember).where(
                ProjectMember.project_id == project_id,
                ProjectMember.user_id == user_id,
            )
        )

    async def list_project_members(
        self, project_id: uuid.UUID
    ) -> list[tuple[ProjectMember, User]]:
        result = await self.session.execute(
            select(ProjectMember, User)
            .join(User, User.id == ProjectMember.user_id)
            .where(ProjectMember.project_id == project_id)
            .order_by(ProjectMember.created_at)
        )
        return [(member, user) for member, user in result.all()]

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def get_task(self, task_id: uuid.UUID) -> Optional[ProjectTask]:
        return await self.session.get(ProjectTask, task_id)

    async def list_tasks(self, project_id: uuid.UUID) -> list[ProjectTask]:
        return await self._all(
            select(ProjectTask)
            .where(ProjectTask.project_id == project_id)
            .order_by(ProjectTask.created_at)
        )


async def get_store(session: AsyncSession = Depends(get_session)) -> SQLStore:
    """FastAPI dependency: a store bound to the request session."""
    return SQLStore(session)
