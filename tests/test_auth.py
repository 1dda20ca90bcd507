"""
Tests for credentials, tokens and identity resolution.

Covers:
- Password hashing
- JWT issue/verify, expiry, tampering, malformed payloads
- Verification/reset token expiry
- Bearer header parsing
- Resolving an actor from the store's current role and team
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from teamboard.core.auth import (
    generate_invite_code,
    hash_password,
    issue_reset_token,
    issue_token,
    issue_verification_token,
    token_expired,
    verify_password,
    verify_token,
)
from teamboard.core.config import get_settings
from teamboard.core.errors import NotFound, Unauthenticated
from teamboard.core.identity import parse_bearer, resolve
from teamboard.services import teams as team_service
from teamboard_shared.schemas.common import Role

from .conftest import actor_for, make_user

settings = get_settings()


# ---------------------------------------------------------------------------
# Unit Tests: Password hashing
# ---------------------------------------------------------------------------

class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("MySecureP@ssw0rd!")
        assert hashed != "MySecureP@ssw0rd!"
        assert verify_password("MySecureP@ssw0rd!", hashed)

    def test_wrong_password_fails(self):
        hashed = hash_password("correct-password")
        assert not verify_password("wrong-password", hashed)

    def test_different_hashes_for_same_password(self):
        """bcrypt uses random salt, so hashes differ."""
        assert hash_password("same") != hash_password("same")

    def test_malformed_hash_never_matches(self):
        assert not verify_password("anything", "not-a-bcrypt-hash")


# ---------------------------------------------------------------------------
# Unit Tests: JWT
# ---------------------------------------------------------------------------

class TestJWT:
    def test_round_trip_claims(self):
        uid, tid = uuid.uuid4(), uuid.uuid4()
        claims = verify_token(issue_token(uid, "a@example.com", Role.ADMIN, tid))
        assert claims.user_id == uid
        assert claims.team_id == tid
        assert claims.role == Role.ADMIN
        assert claims.email == "a@example.com"
        assert claims.jti

    def test_teamless_token(self):
        claims = verify_token(issue_token(uuid.uuid4(), "a@example.com", "editor", None))
        assert claims.team_id is None

    def test_expired(self):
        token = issue_token(
            uuid.uuid4(), "a@example.com", Role.EDITOR, None, expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(Unauthenticated, match="expired"):
            verify_token(token)

    def test_bad_signature(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "some-other-secret-key-of-sufficient-length",
            algorithm="HS256",
        )
        with pytest.raises(Unauthenticated, match="Invalid token"):
            verify_token(token)

    def test_garbage(self):
        with pytest.raises(Unauthenticated):
            verify_token("not.a.jwt")

    @pytest.mark.parametrize(
        "payload",
        [
            {"sub": "not-a-uuid", "role": "admin"},
            {"sub": str(uuid.uuid4()), "role": "superuser"},
            {"sub": str(uuid.uuid4())},
        ],
    )
    def test_malformed_payload(self, payload):
        payload["exp"] = datetime.now(timezone.utc) + timedelta(hours=1)
        token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(Unauthenticated, match="Malformed"):
            verify_token(token)


# ---------------------------------------------------------------------------
# Unit Tests: single-use tokens and invite codes
# ---------------------------------------------------------------------------

class TestSingleUseTokens:
    def test_verification_token_expiry(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        token, expires = issue_verification_token(now)
        assert len(token) == 64
        assert expires == now + timedelta(hours=24)
        assert not token_expired(expires, now + timedelta(hours=23))
        assert token_expired(expires, now + timedelta(hours=24))

    def test_reset_token_expiry(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        _token, expires = issue_reset_token(now)
        assert expires == now + timedelta(hours=1)

    def test_naive_expiry_treated_as_utc(self):
        now = datetime(2025, 1, 1, 12, tzinfo=timezone.utc)
        assert not token_expired(datetime(2025, 1, 1, 13), now)
        assert token_expired(datetime(2025, 1, 1, 11), now)

    def test_missing_expiry_is_expired(self):
        assert token_expired(None)

    def test_tokens_are_random(self):
        assert issue_verification_token()[0] != issue_verification_token()[0]
        code = generate_invite_code()
        assert len(code) == 16
        assert code != generate_invite_code()


# ---------------------------------------------------------------------------
# Identity resolution
# ---------------------------------------------------------------------------

class TestParseBearer:
    def test_valid(self):
        assert parse_bearer("Bearer abc.def") == "abc.def"

    @pytest.mark.parametrize("header", [None, "", "abc.def", "Basic abc", "Bearer ", "Bearer    "])
    def test_rejected(self, header):
        with pytest.raises(Unauthenticated):
            parse_bearer(header)


class TestResolve:
    @pytest.mark.asyncio
    async def test_resolves_stored_identity(self, store):
        user = await make_user(store, "carol")
        token = issue_token(user.id, user.email, user.role, user.team_id)
        actor = await resolve(token, store)
        assert actor.user_id == user.id
        assert actor.role == Role.ADMIN
        assert actor.team_id == user.team_id

    @pytest.mark.asyncio
    async def test_stale_claims_use_current_state(self, store):
        """A token issued before the team was deleted resolves as team-less."""
        user = await make_user(store, "carol")
        token = issue_token(user.id, user.email, user.role, user.team_id)
        await team_service.delete_team(store, actor_for(user))

        actor = await resolve(token, store)
        assert actor.team_id is None

    @pytest.mark.asyncio
    async def test_missing_subject(self, store):
        token = issue_token(uuid.uuid4(), "ghost@example.com", Role.ADMIN, None)
        with pytest.raises(NotFound):
            await resolve(token, store)
