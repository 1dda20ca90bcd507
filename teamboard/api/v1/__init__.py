"""
API v1 Router

Auth routes are public except the invite endpoints; everything else needs a
bearer token and is scoped to the caller's team.
"""

from fastapi import APIRouter
from teamboard_shared.schemas.common import ErrorResponse
from . import auth, projects, tasks, teams, users

router = APIRouter(
    responses={status: {"model": ErrorResponse} for status in (401, 403, 404, 409)},
)

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(teams.router, prefix="/teams", tags=["Teams"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(tasks.router, prefix="/projects/{project_id}/tasks", tags=["Tasks"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/auth",
            "/teams/{teamId}/members",
            "/users/me",
            "/projects",
            "/projects/{projectId}/tasks",
        ],
    }
