"""
auth/sessions.py -- Session principal management.

The session slot is a per-client mapping supplied by the transport (Starlette's
SessionMiddleware exposes it as request.session, a signed cookie). Only the
user's id is written to it: no password material and no role. The role is
re-read from the store on every request, so an admin's change takes effect on
the user's very next request.

Lifecycle:
  anonymous      -- no user_id in the slot
  authenticated  -- establish_session() wrote user_id after a successful login
  anonymous      -- clear_session() removed it (idempotent)

A user_id that no longer resolves to a row is treated as anonymous for that
request. The stale value is left in place; it fails the same way every time.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any

from auth.models import User
from auth.store import CredentialStore

SESSION_USER_KEY = "user_id"


@dataclass
class RequestContext:
    """Request-scoped auth state threaded into every workflow call.

    principal is the resolved User, or None for an anonymous request.
    session is the transport's durable per-client slot.
    """

    session: MutableMapping[str, Any]
    principal: User | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None


def resolve_context(store: CredentialStore, session: MutableMapping[str, Any]) -> RequestContext:
    """Resolve the session's stored user id to a principal. Runs once per request."""
    user_id = session.get(SESSION_USER_KEY)
    if user_id is None:
        return RequestContext(session=session)
    return RequestContext(session=session, principal=store.find_user_by_id(user_id))


def establish_session(ctx: RequestContext, user: User) -> None:
    """Attach user as this session's principal."""
    ctx.session[SESSION_USER_KEY] = user.id
    ctx.principal = user


def clear_session(ctx: RequestContext) -> None:
    """Drop the session's principal. Safe to call when already anonymous."""
    ctx.session.pop(SESSION_USER_KEY, None)
    ctx.principal = None
