#!/usr/bin/env python3
"""
Gatehouse: operator CLI for the registration whitelist.

The whitelist HTTP API is ADMIN-only, so the very first ADMIN has to be
whitelisted out of band. This CLI talks to the credential store directly and
applies the same email / role validation as the API.

Usage:
  python main.py authorize alice@example.com --role ADMIN
  python main.py authorize bob@example.com            # role defaults to EMPLOYEE
  python main.py revoke bob@example.com
  python main.py list

Environment variables:
  DATABASE_URL  SQLAlchemy URL of the credential store (default: local SQLite file).
                --db-url overrides it. SECRET_KEY is not needed here.
"""

import argparse
import logging
import sys
from typing import Optional

from auth.errors import BadRequestError, DuplicateKeyError
from auth.models import Role
from auth.store import CredentialStore
from auth.validation import parse_whitelist_role, validate_email_address
from core.config import get_store_settings

logger = logging.getLogger("gatehouse.cli")


def _authorize(store: CredentialStore, email: str, role: str) -> int:
    try:
        validate_email_address(email)
        granted = parse_whitelist_role(role)
    except BadRequestError as e:
        print(f"  [!] {e.message}")
        return 2
    try:
        store.create_authorized_email(email, granted)
    except DuplicateKeyError:
        print(f"  [!] {email} is already authorized. Use the API to change its role.")
        return 1
    logger.info("Whitelist add via CLI: %s (role=%s)", email, granted.value)
    print(f"  {email} authorized as {granted.value}.")
    return 0


def _revoke(store: CredentialStore, email: str) -> int:
    if not store.delete_authorized_email(email):
        print(f"  [!] {email} is not on the whitelist.")
        return 1
    logger.info("Whitelist delete via CLI: %s", email)
    print(f"  {email} removed from the whitelist. Existing accounts are unchanged.")
    return 0


def _list(store: CredentialStore) -> int:
    records = store.list_authorized_emails()
    if not records:
        print("  (whitelist is empty)")
        return 0
    width = max(len(r.email) for r in records)
    for r in records:
        print(f"  {r.email.ljust(width)}  {r.role.value}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="gatehouse",
        description="Manage the Gatehouse registration whitelist.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py authorize alice@example.com --role ADMIN
  python main.py revoke bob@example.com
  python main.py list --db-url sqlite:///gatehouse_auth.db
        """,
    )
    parser.add_argument(
        "--db-url",
        metavar="URL",
        help="SQLAlchemy database URL (default: DATABASE_URL setting)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_auth = sub.add_parser("authorize", help="Allow an email to self-register")
    p_auth.add_argument("email")
    p_auth.add_argument(
        "--role",
        default=Role.EMPLOYEE.value,
        help="Role granted on registration: ADMIN or EMPLOYEE (default: EMPLOYEE)",
    )

    p_revoke = sub.add_parser("revoke", help="Remove an email from the whitelist")
    p_revoke.add_argument("email")

    sub.add_parser("list", help="Show every whitelisted email and its role")

    args = parser.parse_args(argv)

    store = CredentialStore(args.db_url or get_store_settings().database_url)
    try:
        if args.command == "authorize":
            return _authorize(store, args.email, args.role)
        if args.command == "revoke":
            return _revoke(store, args.email)
        return _list(store)
    finally:
        store.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)-5s %(name)s %(message)s")
    sys.exit(main())
