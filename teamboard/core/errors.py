"""
Failure kinds raised by the core and their HTTP rendering.

Every failure carries a machine-checkable ``code``. The handler renders it in
the same envelope the API uses everywhere:
``{"error": {"code": ..., "message": ..., "status": ...}}``.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from teamboard_shared.schemas.common import ErrorBody, ErrorResponse

log = structlog.get_logger()


class TeamboardError(Exception):
    """Base class for failures surfaced to the caller."""

    code = "ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(TeamboardError):
    """Missing, invalid or expired credentials."""

    code = "UNAUTHENTICATED"
    status_code = 401


class Denied(TeamboardError):
    """An authorization rule failed. ``reason`` is the rule's explanation."""

    code = "DENIED"
    status_code = 403

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NotFound(TeamboardError):
    code = "NOT_FOUND"
    status_code = 404


class Conflict(TeamboardError):
    code = "CONFLICT"
    status_code = 409


class Invalid(TeamboardError):
    """Malformed input, rejected before the store is touched."""

    code = "INVALID"
    status_code = 422


class InvalidInvite(Invalid):
    code = "INVALID_INVITE"


def error_body(code: str, message: str, status: int) -> dict:
    return ErrorResponse(error=ErrorBody(code=code, message=message, status=status)).model_dump()


async def teamboard_error_handler(request: Request, exc: TeamboardError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("request.failed", path=request.url.path, code=exc.code, message=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, exc.status_code),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TeamboardError, teamboard_error_handler)
