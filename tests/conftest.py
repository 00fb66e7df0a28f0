"""
tests/conftest.py -- Shared test fixtures for Gatehouse unit and integration tests.

This module provides:
  - store: a fresh in-memory CredentialStore per test (unit tests)
  - seeded_store: store with an ADMIN, an EMPLOYEE and a whitelist entry
  - make_ctx: builds a RequestContext over a plain dict session
  - _make_test_store(): isolated named shared-memory DB for the ASGI stack
  - _patch_lifespan(): wires the test store into app.state, bypassing real startup
  - client: TestClient over the real app with the seeded accounts

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the TestClient because route handlers run in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. Every client fixture gets a uuid-suffixed name so tests never share
rows.

DEBUG and the argon2 cost settings must be set before any auth module import:
get_settings() is read once at import time by auth/passwords.py and api/main.py.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any auth/core import. DEBUG lets get_settings()
# auto-generate SECRET_KEY; the argon2 values keep each hash around a millisecond.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("ARGON2_PARALLELISM", "1")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import Role, User
from auth.passwords import hash_password
from auth.sessions import SESSION_USER_KEY, RequestContext
from auth.store import CredentialStore

ADMIN_EMAIL = "admin@corp.io"
ADMIN_PASSWORD = "P4ssword!"
EMPLOYEE_EMAIL = "worker@corp.io"
EMPLOYEE_PASSWORD = "w0rkerpass"
INVITED_EMAIL = "bob@x.com"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _seed(store: CredentialStore) -> dict[str, User]:
    """Whitelist and register one ADMIN and one EMPLOYEE; whitelist bob@x.com (not registered)."""
    store.create_authorized_email(ADMIN_EMAIL, Role.ADMIN)
    store.create_authorized_email(EMPLOYEE_EMAIL, Role.EMPLOYEE)
    store.create_authorized_email(INVITED_EMAIL, Role.EMPLOYEE)
    admin = store.create_user(ADMIN_EMAIL, hash_password(ADMIN_PASSWORD), Role.ADMIN)
    employee = store.create_user(EMPLOYEE_EMAIL, hash_password(EMPLOYEE_PASSWORD), Role.EMPLOYEE)
    return {"admin": admin, "employee": employee}


def _make_test_store(db_suffix: str) -> CredentialStore:
    """Create an isolated named shared-memory SQLite store.

    Named URIs allow multiple connections (from different TestClient worker
    threads) to reach the same in-memory database.
    """
    return CredentialStore(f"sqlite:///file:test_auth_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store: CredentialStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.credential_store = store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[CredentialStore, None, None]:
    s = CredentialStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def seeded_store(store: CredentialStore) -> tuple[CredentialStore, dict[str, User]]:
    return store, _seed(store)


@pytest.fixture
def make_ctx():
    """Factory: make_ctx() is anonymous, make_ctx(user) is logged in as user."""

    def _make(user: User | None = None) -> RequestContext:
        session: dict = {}
        if user is not None:
            session[SESSION_USER_KEY] = user.id
        return RequestContext(session=session, principal=user)

    return _make


# ---------------------------------------------------------------------------
# Integration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client() -> Generator[tuple[TestClient, CredentialStore], None, None]:
    """Yield (client, store) for API integration tests.

    The TestClient uses the real FastAPI app (real middleware, real session
    cookie) with a patched lifespan pointing at an isolated store. The client
    keeps cookies between requests, so logging in once authenticates the
    following calls; client.cookies.clear() goes back to anonymous.
    """
    store = _make_test_store(uuid.uuid4().hex)
    _seed(store)
    app.router.lifespan_context = _patch_lifespan(store)

    with TestClient(app, raise_server_exceptions=True) as test_client:
        yield test_client, store

    store.close()


def login(client: TestClient, email: str, password: str):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})
