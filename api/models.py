"""
API request and response models for Gatehouse REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Request fields are Optional on purpose: presence and length rules live in
auth/validation.py so the HTTP API and the CLI reject bad input with the same
400 messages. Pydantic only bounds the sizes it will accept.

None of the response models has a password hash field, so a hash cannot leak
through serialization.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import AuthorizedEmail, Role, User

MAX_EMAIL_LENGTH = 255
MAX_PASSWORD_LENGTH = 1024

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CredentialsRequest(BaseModel):
    """Request body for POST /auth/register.

    Login does not use it: a login body that fails these rules must get the
    same 401 as a wrong password, not a 400.
    """

    email: Optional[str] = Field(default=None, max_length=MAX_EMAIL_LENGTH)
    password: Optional[str] = Field(default=None, max_length=MAX_PASSWORD_LENGTH)


class PasswordChangeRequest(BaseModel):
    """Request body for PUT /auth/password. Accepts camelCase or snake_case keys."""

    model_config = ConfigDict(populate_by_name=True)

    old_password: Optional[str] = Field(default=None, alias="oldPassword", max_length=MAX_PASSWORD_LENGTH)
    new_password: Optional[str] = Field(default=None, alias="newPassword", max_length=MAX_PASSWORD_LENGTH)


class AuthorizedEmailCreate(BaseModel):
    """Request body for POST /auth/authorized-emails."""

    email: Optional[str] = Field(default=None, max_length=MAX_EMAIL_LENGTH)
    role: Optional[str] = Field(default=None, max_length=16)


class AuthorizedEmailPatch(BaseModel):
    """Request body for PUT /auth/authorized-emails/{email}."""

    role: Optional[str] = Field(default=None, max_length=16)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserSummary(BaseModel):
    """Public projection of a User: email and role only."""

    model_config = ConfigDict(frozen=True)

    email: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(email=user.email, role=user.role)


class RegisterResponse(BaseModel):
    """Response for POST /auth/register (201)."""

    model_config = ConfigDict(frozen=True)

    user: UserSummary


class LoginResponse(BaseModel):
    """Response for POST /auth/login (200)."""

    model_config = ConfigDict(frozen=True)

    message: str = "Logged in"
    user: UserSummary


class MeResponse(BaseModel):
    """Response for GET /auth/me."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    role: Role
    created_at: str = ""


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class AuthorizedEmailResponse(BaseModel):
    """One whitelist entry."""

    model_config = ConfigDict(frozen=True)

    email: str
    role: Role

    @classmethod
    def from_record(cls, record: AuthorizedEmail) -> "AuthorizedEmailResponse":
        return cls(email=record.email, role=record.role)


class AuthorizedEmailCreatedResponse(BaseModel):
    """Response for POST /auth/authorized-emails (201)."""

    model_config = ConfigDict(frozen=True)

    authorized: AuthorizedEmailResponse


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
