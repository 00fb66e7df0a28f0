"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

get_request_context() resolves the session cookie to a principal exactly once
per request (FastAPI caches a dependency's result within one request, so every
other dependency that asks for it gets the same RequestContext).

get_current_user() and require_admin() apply the gates from auth/gates.py.
They raise AuthError subclasses, which api/main.py turns into 401/403
responses before the route body runs.

Layer rule: no imports from api/.
  auth/dependencies.py may import from fastapi (for Depends/Request) because
  this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Depends, Request

from auth.gates import is_admin, is_authenticated
from auth.models import User
from auth.sessions import RequestContext, resolve_context
from auth.store import CredentialStore


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credential_store


def get_request_context(
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
) -> RequestContext:
    """Build the request's RequestContext from the session slot.

    Requires SessionMiddleware to be installed (it provides request.session).
    """
    return resolve_context(store, request.session)


def get_current_user(ctx: RequestContext = Depends(get_request_context)) -> User:
    """Require authentication. Raises UnauthenticatedError (401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    return is_authenticated(ctx)


def require_admin(ctx: RequestContext = Depends(get_request_context)) -> User:
    """Require ADMIN role. Raises 401 if unauthenticated, 403 if not admin."""
    return is_admin(ctx)
