# SQLModel definitions, imported here to ensure metadata is populated for create_all.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .user import User  # noqa: F401
from .team import Team, TeamEditor  # noqa: F401
from .invitation import TeamInvitation  # noqa: F401
from .project import Project, ProjectMember  # noqa: F401
from .task import ProjectTask  # noqa: F401
