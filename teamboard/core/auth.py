"""
Credentials and tokens for Teamboard.

Supports:
- Password hashing (bcrypt, cost from settings)
- Session JWTs carrying identity, role and team claims
- Single-use verification / password-reset tokens with expiry
- Team invite codes

Everything here is pure computation; persisting tokens is the caller's job.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from pydantic import BaseModel, ValidationError

from teamboard.core.config import get_settings
from teamboard.core.errors import Unauthenticated
from teamboard.models.base import as_utc, utcnow
from teamboard_shared.schemas.common import Role

settings = get_settings()

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with the configured cost factor."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=settings.bcrypt_rounds)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        return False


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

class TokenClaims(BaseModel):
    """Identity claims carried verbatim by a session token."""

    user_id: uuid.UUID
    email: str
    role: Role
    team_id: Optional[uuid.UUID] = None
    jti: Optional[str] = None


def issue_token(
    user_id: uuid.UUID,
    email: str,
    role: Role | str,
    team_id: Optional[uuid.UUID],
    *,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT for the given identity."""
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": Role(role).value,
        "team_id": str(team_id) if team_id else None,
        "iat": now,
        "exp": exp,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> TokenClaims:
    """Decode and verify a JWT.

    Raises Unauthenticated on a bad signature, expiry, or a payload that does
    not carry the expected claims.
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token has expired")
    except jwt.PyJWTError:
        raise Unauthenticated("Invalid token")

    try:
        return TokenClaims(
            user_id=payload["sub"],
            email=payload.get("email") or "",
            role=payload.get("role"),
            team_id=payload.get("team_id"),
            jti=payload.get("jti"),
        )
    except (KeyError, ValidationError):
        raise Unauthenticated("Malformed token payload")


# ---------------------------------------------------------------------------
# Single-use tokens
# ---------------------------------------------------------------------------

def _random_token() -> str:
    return secrets.token_hex(32)


def issue_verification_token(now: datetime | None = None) -> tuple[str, datetime]:
    """Return (token, expires_at) for an email verification link."""
    now = now or utcnow()
    return _random_token(), now + timedelta(hours=settings.verification_token_ttl_hours)


def issue_reset_token(now: datetime | None = None) -> tuple[str, datetime]:
    """Return (token, expires_at) for a password reset link."""
    now = now or utcnow()
    return _random_token(), now + timedelta(minutes=settings.reset_token_ttl_minutes)


def token_expired(expires_at: Optional[datetime], now: datetime | None = None) -> bool:
    """A missing expiry counts as expired."""
    if expires_at is None:
        return True
    return as_utc(expires_at) <= (now or utcnow())


# ---------------------------------------------------------------------------
# Invite codes
# ---------------------------------------------------------------------------

def generate_invite_code() -> str:
    return secrets.token_hex(8)
