"""
auth/gates.py -- Access control predicates.

Gates run before a workflow's business logic and short-circuit it by raising.
They only read the RequestContext: no store access, no mutation.

  is_authenticated -- UnauthenticatedError (401) when no principal is attached.
  is_admin         -- is_authenticated first, then ForbiddenError (403) unless
                      the principal's role is ADMIN.
"""

from __future__ import annotations

from auth.errors import ForbiddenError, UnauthenticatedError
from auth.models import Role, User
from auth.sessions import RequestContext


def is_authenticated(ctx: RequestContext) -> User:
    if ctx.principal is None:
        raise UnauthenticatedError("Authentication required.")
    return ctx.principal


def is_admin(ctx: RequestContext) -> User:
    user = is_authenticated(ctx)
    if user.role != Role.ADMIN:
        raise ForbiddenError("Access restricted to ADMIN users.")
    return user
