"""
Authentication endpoints.

- Signup (optionally joining a team through an invite code)
- Email verification and resend
- Email/password login issuing a bearer JWT
- Password reset
- Team invite link generation, regeneration and email invitations

Emails go out as background tasks after the response; a failed send never
fails the request.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends

from teamboard.core.config import get_settings
from teamboard.core.email import EmailSender, get_email_sender
from teamboard.core.identity import get_actor
from teamboard.core.permissions import Actor
from teamboard.core.store import Store, get_store
from teamboard.services import accounts
from teamboard.services import teams as team_service
from teamboard_shared.schemas.common import MessageResponse
from teamboard_shared.schemas.teams import (
    InvitationRead,
    InvitationSendRequest,
    InvitationSendResponse,
    InviteLinkResponse,
)
from teamboard_shared.schemas.users import (
    EmailRequest,
    LoginRequest,
    LoginResponse,
    PasswordResetRequest,
    SignupRequest,
    SignupResponse,
    UserResponse,
)

settings = get_settings()
router = APIRouter()


def _send_verification(
    background: BackgroundTasks, sender: EmailSender, email: str, token: str
) -> None:
    background.add_task(
        sender.send,
        email,
        "Verify your Teamboard email",
        "verification",
        {
            "verification_url": f"{settings.frontend_url}/verify-email/{token}",
            "ttl_hours": settings.verification_token_ttl_hours,
        },
    )


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@router.post("/signup", response_model=SignupResponse, status_code=201)
async def signup(
    body: SignupRequest,
    background: BackgroundTasks,
    store: Store = Depends(get_store),
    sender: EmailSender = Depends(get_email_sender),
):
    """Register a new user. Without an invite code the user gets a new team."""
    user, token = await accounts.signup(store, body)
    _send_verification(background, sender, user.email, token)
    return SignupResponse(
        message="Signup successful. Please check your email to verify your account.",
        user=UserResponse.model_validate(user),
    )


@router.get("/verify-email/{token}", response_model=MessageResponse)
async def verify_email(token: str, store: Store = Depends(get_store)):
    await accounts.verify_email(store, token)
    return MessageResponse(message="Email verified successfully")


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    body: EmailRequest,
    background: BackgroundTasks,
    store: Store = Depends(get_store),
    sender: EmailSender = Depends(get_email_sender),
):
    user, token = await accounts.resend_verification(store, body.email)
    _send_verification(background, sender, user.email, token)
    return MessageResponse(message="Verification email sent")


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, store: Store = Depends(get_store)):
    """Authenticate with email/password and receive a bearer token."""
    token, user = await accounts.login(store, body.email, body.password)
    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: EmailRequest,
    background: BackgroundTasks,
    store: Store = Depends(get_store),
    sender: EmailSender = Depends(get_email_sender),
):
    """Always answers the same way so account existence is not revealed."""
    issued = await accounts.request_password_reset(store, body.email)
    if issued is not None:
        user, token = issued
        background.add_task(
            sender.send,
            user.email,
            "Reset your Teamboard password",
            "password_reset",
            {
                "reset_url": f"{settings.frontend_url}/reset-password/{token}",
                "ttl_minutes": settings.reset_token_ttl_minutes,
            },
        )
    return MessageResponse(
        message="If an account exists for that email, a reset link has been sent"
    )


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(body: PasswordResetRequest, store: Store = Depends(get_store)):
    await accounts.reset_password(store, body.token, body.password)
    return MessageResponse(message="Password has been reset")


# ---------------------------------------------------------------------------
# Team invites
# ---------------------------------------------------------------------------


@router.post("/generate-invite", response_model=InviteLinkResponse)
async def generate_invite(
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    """Return the team's invite link, creating the code on first use."""
    code = await team_service.get_invite_code(store, actor)
    return InviteLinkResponse(invite_code=code, invite_link=team_service.invite_link(code))


@router.post("/regenerate-invite", response_model=InviteLinkResponse)
async def regenerate_invite(
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
):
    code = await team_service.regenerate_invite_code(store, actor)
    return InviteLinkResponse(invite_code=code, invite_link=team_service.invite_link(code))


@router.post("/send-invite", response_model=InvitationSendResponse)
async def send_invite(
    body: InvitationSendRequest,
    background: BackgroundTasks,
    actor: Actor = Depends(get_actor),
    store: Store = Depends(get_store),
    sender: EmailSender = Depends(get_email_sender),
):
    invitation, link = await team_service.send_invitation(store, actor, body.email)

    inviter = await store.get_user(actor.user_id)
    background.add_task(
        sender.send,
        body.email,
        "You've been invited to join a team on Teamboard",
        "team_invite",
        {
            "sender_name": inviter.username if inviter else "A teammate",
            "custom_message": body.message or "",
            "invite_link": link,
        },
    )
    return InvitationSendResponse(
        message="Invitation sent",
        invite_link=link,
        invitation=InvitationRead.model_validate(invitation) if invitation else None,
    )
