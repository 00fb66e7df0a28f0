"""
api/routes/v1/whitelist.py -- Registration whitelist administration (ADMIN only).

Routes:
  GET    /api/v1/auth/authorized-emails          -- list entries
  POST   /api/v1/auth/authorized-emails          -- add an entry; 201
  PUT    /api/v1/auth/authorized-emails/{email}  -- change an entry's role; 204
  DELETE /api/v1/auth/authorized-emails/{email}  -- remove an entry; 204

require_admin is attached at the router level, so it runs before body
parsing: an anonymous caller gets 401 and a non-admin gets 403 even when the
request body is missing or malformed.

Updating or deleting an email that is not listed is a no-op that still
returns 204. Existing user accounts are never modified by these routes.

The {email} segment is a path parameter, so an address whose local part
contains "/" is still addressable.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from api.models import (
    AuthorizedEmailCreate,
    AuthorizedEmailCreatedResponse,
    AuthorizedEmailPatch,
    AuthorizedEmailResponse,
)
from auth import workflows
from auth.dependencies import get_credential_store, get_request_context, require_admin
from auth.sessions import RequestContext
from auth.store import CredentialStore

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/auth/authorized-emails", response_model=list[AuthorizedEmailResponse])
def list_authorized_emails(
    store: CredentialStore = Depends(get_credential_store),
    ctx: RequestContext = Depends(get_request_context),
) -> list[AuthorizedEmailResponse]:
    records = workflows.list_authorized_emails(store, ctx)
    return [AuthorizedEmailResponse.from_record(r) for r in records]


@router.post("/auth/authorized-emails", response_model=AuthorizedEmailCreatedResponse, status_code=201)
def add_authorized_email(
    body: AuthorizedEmailCreate,
    store: CredentialStore = Depends(get_credential_store),
    ctx: RequestContext = Depends(get_request_context),
) -> AuthorizedEmailCreatedResponse:
    """Whitelist an email with role ADMIN or EMPLOYEE. 409 if already listed."""
    record = workflows.add_authorized_email(store, ctx, body.email, body.role)
    return AuthorizedEmailCreatedResponse(authorized=AuthorizedEmailResponse.from_record(record))


@router.put("/auth/authorized-emails/{email:path}", status_code=204)
def update_authorized_email_role(
    email: str,
    body: AuthorizedEmailPatch,
    store: CredentialStore = Depends(get_credential_store),
    ctx: RequestContext = Depends(get_request_context),
) -> Response:
    workflows.update_authorized_email_role(store, ctx, email, body.role)
    return Response(status_code=204)


@router.delete("/auth/authorized-emails/{email:path}", status_code=204)
def delete_authorized_email(
    email: str,
    store: CredentialStore = Depends(get_credential_store),
    ctx: RequestContext = Depends(get_request_context),
) -> Response:
    workflows.delete_authorized_email(store, ctx, email)
    return Response(status_code=204)
