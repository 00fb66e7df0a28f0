"""
api/routes/v1/auth.py -- Registration, session and self-service endpoints.

Routes:
  POST /api/v1/auth/register   -- create an account for a whitelisted email; 201
  POST /api/v1/auth/login      -- password login; establishes the session cookie
  GET  /api/v1/auth/logout     -- clears the session; always 200 (POST accepted too)
  GET  /api/v1/auth/me         -- current user info (requires auth)
  PUT  /api/v1/auth/password   -- change own password (requires auth)

Handlers are plain `def`, not `async def`: FastAPI runs them in its threadpool,
so argon2 hashing never blocks the event loop or unrelated sessions.

Security:
  verify_credentials() provides timing equalization -- go through
  workflows.login(), never inline a store lookup + verify.
  Cache-Control: no-store on login responses.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from api.models import (
    MAX_EMAIL_LENGTH,
    MAX_PASSWORD_LENGTH,
    CredentialsRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    PasswordChangeRequest,
    RegisterResponse,
    UserSummary,
)
from auth import workflows
from auth.dependencies import get_credential_store, get_current_user, get_request_context
from auth.models import User
from auth.sessions import RequestContext
from auth.store import CredentialStore
from core.config import get_settings

# Auth policy:
# - POST /auth/register:  public -- gated by the whitelist, not by a session
# - POST /auth/login:     public
# - GET  /auth/logout:    public -- clearing a session needs no prior auth
# - GET  /auth/me:        requires auth (get_current_user)
# - PUT  /auth/password:  requires auth (get_current_user)
router = APIRouter()


def _login_fields(body: Any) -> tuple[str | None, str | None]:
    """Pull email and password out of a raw login body.

    Anything that is not a string within the size limits comes back as None,
    which verify_credentials() rejects like any other bad credential.
    """
    if not isinstance(body, dict):
        return None, None
    email = body.get("email")
    password = body.get("password")
    if not isinstance(email, str) or len(email) > MAX_EMAIL_LENGTH:
        email = None
    if not isinstance(password, str) or len(password) > MAX_PASSWORD_LENGTH:
        password = None
    return email, password


@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(
    body: CredentialsRequest,
    store: CredentialStore = Depends(get_credential_store),
) -> RegisterResponse:
    """Register a new account. The role is taken from the whitelist entry."""
    user = workflows.register(
        store,
        body.email,
        body.password,
        enforce_whitelist=get_settings().registration_whitelist_enforced,
    )
    return RegisterResponse(user=UserSummary.from_user(user))


@router.post("/auth/login", response_model=LoginResponse)
def login(
    response: Response,
    body: Any = Body(default=None),
    store: CredentialStore = Depends(get_credential_store),
    ctx: RequestContext = Depends(get_request_context),
) -> LoginResponse:
    """Authenticate with email and password and attach the user to the session.

    Unknown email, wrong password and an unusable body all get the same 401.
    """
    response.headers["Cache-Control"] = "no-store"
    email, password = _login_fields(body)
    user = workflows.login(store, ctx, email, password)
    return LoginResponse(user=UserSummary.from_user(user))


@router.get("/auth/logout", response_model=MessageResponse)
@router.post("/auth/logout", response_model=MessageResponse, include_in_schema=False)
def logout(ctx: RequestContext = Depends(get_request_context)) -> MessageResponse:
    """Clear the session. Succeeds whether or not anyone was logged in."""
    workflows.logout(ctx)
    return MessageResponse(message="Logged out.")


@router.get("/auth/me", response_model=MeResponse)
def me(current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return identity information for the currently authenticated user."""
    return MeResponse(
        id=current_user.id,
        email=current_user.email,
        role=current_user.role,
        created_at=current_user.created_at or "",
    )


@router.put("/auth/password", response_model=MessageResponse)
def change_password(
    body: PasswordChangeRequest,
    store: CredentialStore = Depends(get_credential_store),
    ctx: RequestContext = Depends(get_request_context),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    """Change the current user's password.

    The response is the same whether or not oldPassword matched; on a
    mismatch nothing is written.
    """
    workflows.change_password(store, ctx, body.old_password, body.new_password)
    return MessageResponse(message="Password updated.")
