"""
tests/test_api_whitelist.py -- Integration tests for /api/v1/auth/authorized-emails.

Coverage:
  - Anonymous callers get 401 on every method, even with no/garbage body
  - EMPLOYEE callers get 403 and cause no store mutation
  - ADMIN: list, create (201 / 400 bad role / 400 bad email / 409 duplicate),
    update role (204), delete (204), idempotent update/delete of unlisted emails,
    emails containing "/" in the path
  - Whitelist changes never touch existing accounts
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from auth.models import Role
from auth.store import CredentialStore
from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, EMPLOYEE_EMAIL, EMPLOYEE_PASSWORD, INVITED_EMAIL, login

ENDPOINT = "/api/v1/auth/authorized-emails"


def _as_pairs(records) -> list[dict]:
    return [{"email": r.email, "role": r.role.value} for r in records]


class TestWhitelistAccessControl:
    @pytest.mark.parametrize(
        "method,path",
        [("get", ENDPOINT), ("post", ENDPOINT), ("put", f"{ENDPOINT}/{INVITED_EMAIL}"), ("delete", f"{ENDPOINT}/{INVITED_EMAIL}")],
    )
    def test_anonymous_401(self, client: tuple[TestClient, CredentialStore], method: str, path: str) -> None:
        test_client, _store = client
        resp = test_client.request(method.upper(), path)
        assert resp.status_code == 401

    def test_employee_403_without_mutation(self, client: tuple[TestClient, CredentialStore]) -> None:
        test_client, store = client
        before = _as_pairs(store.list_authorized_emails())
        login(test_client, EMPLOYEE_EMAIL, EMPLOYEE_PASSWORD)

        assert test_client.get(ENDPOINT).status_code == 403
        assert test_client.post(ENDPOINT, json={"email": "new@mail.com", "role": "ADMIN"}).status_code == 403
        assert test_client.put(f"{ENDPOINT}/{INVITED_EMAIL}", json={"role": "ADMIN"}).status_code == 403
        assert test_client.delete(f"{ENDPOINT}/{INVITED_EMAIL}").status_code == 403

        assert _as_pairs(store.list_authorized_emails()) == before

    def test_forbidden_envelope(self, client: tuple[TestClient, CredentialStore]) -> None:
        test_client, _store = client
        login(test_client, EMPLOYEE_EMAIL, EMPLOYEE_PASSWORD)
        body = test_client.get(ENDPOINT).json()
        assert body["error"]["code"] == "forbidden"
        assert body["error"]["message"] == "Access restricted to ADMIN users."


class TestWhitelistAdmin:
    @pytest.fixture
    def admin_client(self, client: tuple[TestClient, CredentialStore]) -> tuple[TestClient, CredentialStore]:
        test_client, store = client
        assert login(test_client, ADMIN_EMAIL, ADMIN_PASSWORD).status_code == 200
        return test_client, store

    def test_list(self, admin_client) -> None:
        test_client, store = admin_client
        resp = test_client.get(ENDPOINT)
        assert resp.status_code == 200
        assert resp.json() == _as_pairs(store.list_authorized_emails())

    @pytest.mark.parametrize("role", ["ADMIN", "EMPLOYEE"])
    def test_create(self, admin_client, role: str) -> None:
        test_client, store = admin_client
        data = {"email": "valid.email@mail.com", "role": role}
        assert data not in _as_pairs(store.list_authorized_emails())

        resp = test_client.post(ENDPOINT, json=data)

        assert resp.status_code == 201
        assert resp.json() == {"authorized": data}
        assert data in _as_pairs(store.list_authorized_emails())

    def test_create_invalid_role_400(self, admin_client) -> None:
        test_client, store = admin_client
        before = _as_pairs(store.list_authorized_emails())
        resp = test_client.post(ENDPOINT, json={"email": "something@mail.com", "role": "pourztegr"})
        assert resp.status_code == 400
        assert _as_pairs(store.list_authorized_emails()) == before

    def test_create_invalid_email_400(self, admin_client) -> None:
        test_client, _store = admin_client
        resp = test_client.post(ENDPOINT, json={"email": "nope", "role": "EMPLOYEE"})
        assert resp.status_code == 400

    def test_create_duplicate_409(self, admin_client) -> None:
        test_client, _store = admin_client
        resp = test_client.post(ENDPOINT, json={"email": INVITED_EMAIL, "role": "ADMIN"})
        assert resp.status_code == 409

    def test_update_role(self, admin_client) -> None:
        test_client, store = admin_client
        email = "future.admin.email@adminmail.com"
        store.create_authorized_email(email, Role.EMPLOYEE)

        resp = test_client.put(f"{ENDPOINT}/{email}", json={"role": "ADMIN"})

        assert resp.status_code == 204
        assert store.find_authorized_email(email).role is Role.ADMIN

    def test_update_invalid_role_400(self, admin_client) -> None:
        test_client, store = admin_client
        resp = test_client.put(f"{ENDPOINT}/{INVITED_EMAIL}", json={"role": "VISITOR"})
        assert resp.status_code == 400
        assert store.find_authorized_email(INVITED_EMAIL).role is Role.EMPLOYEE

    def test_update_unlisted_is_noop_204(self, admin_client) -> None:
        test_client, store = admin_client
        resp = test_client.put(f"{ENDPOINT}/ghost@mail.com", json={"role": "ADMIN"})
        assert resp.status_code == 204
        assert store.find_authorized_email("ghost@mail.com") is None

    def test_delete(self, admin_client) -> None:
        test_client, store = admin_client
        resp = test_client.delete(f"{ENDPOINT}/{ADMIN_EMAIL}")
        assert resp.status_code == 204
        assert {"email": ADMIN_EMAIL, "role": "ADMIN"} not in _as_pairs(store.list_authorized_emails())

    def test_delete_does_not_revoke_account(self, admin_client) -> None:
        """Removing the admin's own whitelist entry leaves the account and session working."""
        test_client, store = admin_client
        test_client.delete(f"{ENDPOINT}/{ADMIN_EMAIL}")
        assert store.find_user_by_email(ADMIN_EMAIL).role is Role.ADMIN
        assert test_client.get(ENDPOINT).status_code == 200

    def test_delete_unlisted_204(self, admin_client) -> None:
        test_client, _store = admin_client
        assert test_client.delete(f"{ENDPOINT}/ghost@mail.com").status_code == 204

    def test_update_and_delete_email_with_slash(self, admin_client) -> None:
        test_client, store = admin_client
        email = "sales/emea@mail.com"
        store.create_authorized_email(email, Role.EMPLOYEE)

        assert test_client.put(f"{ENDPOINT}/{email}", json={"role": "ADMIN"}).status_code == 204
        assert store.find_authorized_email(email).role is Role.ADMIN

        assert test_client.delete(f"{ENDPOINT}/{email}").status_code == 204
        assert store.find_authorized_email(email) is None

    def test_admin_whitelists_then_user_registers(self, admin_client) -> None:
        test_client, store = admin_client
        test_client.post(ENDPOINT, json={"email": "newhire@mail.com", "role": "EMPLOYEE"})
        test_client.get("/api/v1/auth/logout")

        resp = test_client.post("/api/v1/auth/register", json={"email": "newhire@mail.com", "password": "hunter22"})

        assert resp.status_code == 201
        assert resp.json()["user"]["role"] == "EMPLOYEE"
        assert store.find_user_by_email("newhire@mail.com").role is Role.EMPLOYEE
