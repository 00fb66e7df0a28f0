"""
auth/workflows.py -- User-facing auth state transitions.

Each workflow is a free function that takes the CredentialStore explicitly
(tests pass an in-memory store) and, where a session is involved, the
request's RequestContext. Route handlers in api/ are thin adapters over these.

Ordering rules shared by every workflow:
  1. Gate (is_authenticated / is_admin) -- nothing else runs if it fails.
  2. Input validation -- BadRequestError before any store call.
  3. Password hashing -- done before the write, never inside a transaction.
  4. Store mutation -- DuplicateKeyError translated to ConflictError.

Anything else the store or hasher raises propagates unchanged; the API's
catch-all handler logs it and answers with a generic 500.
"""

from __future__ import annotations

import logging

from auth.credentials import check_password, verify_credentials
from auth.errors import ConflictError, DuplicateKeyError, ForbiddenError, UnauthenticatedError
from auth.gates import is_admin, is_authenticated
from auth.models import AuthorizedEmail, Role, User
from auth.passwords import hash_password
from auth.sessions import RequestContext, clear_session, establish_session
from auth.store import CredentialStore
from auth.validation import (
    parse_whitelist_role,
    require_fields,
    require_min_length,
    validate_email_address,
)
from auth.whitelist import authorize_registration

logger = logging.getLogger("gatehouse.auth")

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."

# ---------------------------------------------------------------------------
# Registration / login / logout
# ---------------------------------------------------------------------------


def register(
    store: CredentialStore,
    email: str | None,
    password: str | None,
    enforce_whitelist: bool = True,
) -> User:
    """Create an account for a whitelisted email.

    The role comes from the whitelist record. With enforce_whitelist=False an
    unlisted email still registers, with the store default role VISITOR.
    """
    require_fields('Both "email" and "password" fields must be defined', email, password)
    require_min_length('Both "email" and "password" must be at least 3 characters', email, password)
    validate_email_address(email)

    try:
        role = authorize_registration(store, email)
    except ForbiddenError:
        if enforce_whitelist:
            logger.warning("Registration refused for non-whitelisted email %s", email)
            raise
        role = Role.VISITOR

    password_hash = hash_password(password)
    try:
        user = store.create_user(email, password_hash, role)
    except DuplicateKeyError as exc:
        raise ConflictError(f"Email {email} is not available") from exc

    logger.info("User registered: %s (role=%s)", user.email, user.role.value)
    return user


def login(store: CredentialStore, ctx: RequestContext, email: str | None, password: str | None) -> User:
    """Authenticate and attach the user to the session.

    Unknown email and wrong password raise the same UnauthenticatedError with
    the same message, so the response cannot be used to enumerate accounts.
    """
    user = verify_credentials(store, email, password)
    if user is None:
        logger.info("Failed login attempt")
        raise UnauthenticatedError(INVALID_CREDENTIALS_MESSAGE)
    establish_session(ctx, user)
    logger.info("User logged in: id=%s", user.id)
    return user


def logout(ctx: RequestContext) -> None:
    if ctx.principal is not None:
        logger.info("User logged out: id=%s", ctx.principal.id)
    clear_session(ctx)


def current_user(ctx: RequestContext) -> User:
    return is_authenticated(ctx)


def change_password(
    store: CredentialStore,
    ctx: RequestContext,
    old_password: str | None,
    new_password: str | None,
) -> bool:
    """Replace the principal's password after re-checking the old one.

    Returns True if the password was changed. A wrong old password is a
    silent no-op: nothing is written and False is returned, but callers
    report success either way.
    """
    user = is_authenticated(ctx)
    require_fields('Both "oldPassword" and "newPassword" fields must be defined', old_password, new_password)
    require_min_length('"newPassword" must be at least 3 characters', new_password)

    if not check_password(user, old_password):
        logger.info("Password change ignored for user id=%s: old password mismatch", user.id)
        return False

    store.update_user_password(user.email, hash_password(new_password))
    logger.info("Password changed for user id=%s", user.id)
    return True


# ---------------------------------------------------------------------------
# Whitelist administration (ADMIN only)
#
# None of these touch the users table: revoking or downgrading an entry does
# not change an account that was already created from it.
# ---------------------------------------------------------------------------


def list_authorized_emails(store: CredentialStore, ctx: RequestContext) -> list[AuthorizedEmail]:
    is_admin(ctx)
    return store.list_authorized_emails()


def add_authorized_email(
    store: CredentialStore,
    ctx: RequestContext,
    email: str | None,
    role: object,
) -> AuthorizedEmail:
    admin = is_admin(ctx)
    require_fields('Both "email" and "role" fields must be defined', email, role)
    validate_email_address(email)
    granted = parse_whitelist_role(role)
    try:
        record = store.create_authorized_email(email, granted)
    except DuplicateKeyError as exc:
        raise ConflictError(f"Email {email} is already authorized") from exc
    logger.info("Whitelist add: %s (role=%s) by admin id=%s", email, granted.value, admin.id)
    return record


def update_authorized_email_role(store: CredentialStore, ctx: RequestContext, email: str, role: object) -> bool:
    """Change an entry's role. Returns False (still a success) if email is not listed."""
    admin = is_admin(ctx)
    require_fields('"role" field must be defined', role)
    granted = parse_whitelist_role(role)
    updated = store.update_authorized_email_role(email, granted)
    if updated:
        logger.info("Whitelist update: %s -> %s by admin id=%s", email, granted.value, admin.id)
    else:
        logger.info("Whitelist update for unlisted email %s ignored", email)
    return updated


def delete_authorized_email(store: CredentialStore, ctx: RequestContext, email: str) -> bool:
    """Remove an entry. Returns False (still a success) if email was not listed."""
    admin = is_admin(ctx)
    deleted = store.delete_authorized_email(email)
    if deleted:
        logger.info("Whitelist delete: %s by admin id=%s", email, admin.id)
    return deleted
