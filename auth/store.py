"""
auth/store.py -- SQLAlchemy Core persistence layer for auth entities.

Pattern: Repository + Data Mapper.
CredentialStore is the repository; _row_to_user / _row_to_authorized_email are
the mappers. Workflow and dependency code never touches SQL directly.

Contract consumed by the auth core:
  - Lookups return None when nothing matches; they never raise for "not found".
  - UNIQUE(email) violations on create surface as DuplicateKeyError. The
    database constraint is the only arbiter of concurrent registrations for
    the same email -- there is no read-then-insert check in code.
  - Every method opens and commits its own short transaction. Callers hash
    passwords before calling in, so no transaction is held across argon2 work.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.errors import DuplicateKeyError
from auth.models import AuthorizedEmail, Role, User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("role", String(16), nullable=False, server_default=Role.VISITOR.value),
    Column("created_at", String(32), nullable=False),
)

_authorized_emails = Table(
    "authorized_emails",
    _metadata,
    Column("email", String(255), primary_key=True),
    Column("role", String(16), nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CredentialStore:
    """Repository for User and AuthorizedEmail records.

    Usage:
        store = CredentialStore("sqlite:///gatehouse_auth.db")
        store.create_authorized_email("bob@x.com", Role.EMPLOYEE)
        user = store.create_user("bob@x.com", hash_password("secret"), Role.EMPLOYEE)
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query. Used by /health."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def find_user_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        if not isinstance(email, str):
            raise TypeError("email must be a string")
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def find_user_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def create_user(self, email: str, password_hash: str, role: Role = Role.VISITOR) -> User:
        """Insert a new user and return the stored record.

        Raises DuplicateKeyError if the email is already taken, including when
        a concurrent request inserted it first.
        """
        role = Role(role)
        created_at = _now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        email=email,
                        password_hash=password_hash,
                        role=role.value,
                        created_at=created_at,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise DuplicateKeyError(f"users.email already exists: {email}") from exc
        return User(
            id=result.inserted_primary_key[0],
            email=email,
            password_hash=password_hash,
            role=role,
            created_at=created_at,
        )

    def update_user_password(self, email: str, password_hash: str) -> None:
        with self.engine.connect() as conn:
            conn.execute(_users.update().where(_users.c.email == email).values(password_hash=password_hash))
            conn.commit()

    # ------------------------------------------------------------------
    # Authorized emails (whitelist)
    # ------------------------------------------------------------------

    def find_authorized_email(self, email: str) -> AuthorizedEmail | None:
        """Exact-match whitelist lookup. Returns None if the email is not whitelisted."""
        with self.engine.connect() as conn:
            row = conn.execute(_authorized_emails.select().where(_authorized_emails.c.email == email)).fetchone()
        return _row_to_authorized_email(row) if row is not None else None

    def list_authorized_emails(self) -> list[AuthorizedEmail]:
        """Return every whitelist entry ordered by email."""
        with self.engine.connect() as conn:
            rows = conn.execute(_authorized_emails.select().order_by(_authorized_emails.c.email)).fetchall()
        return [_row_to_authorized_email(r) for r in rows]

    def create_authorized_email(self, email: str, role: Role) -> AuthorizedEmail:
        """Insert a whitelist entry. Raises DuplicateKeyError if the email is already listed."""
        role = Role(role)
        created_at = _now_iso()
        try:
            with self.engine.connect() as conn:
                conn.execute(_authorized_emails.insert().values(email=email, role=role.value, created_at=created_at))
                conn.commit()
        except IntegrityError as exc:
            raise DuplicateKeyError(f"authorized_emails.email already exists: {email}") from exc
        return AuthorizedEmail(email=email, role=role, created_at=created_at)

    def update_authorized_email_role(self, email: str, role: Role) -> bool:
        """Change the role granted to a whitelisted email.

        Returns True if a row was updated, False if the email is not listed.
        Existing users registered against this email keep their current role.
        """
        role = Role(role)
        with self.engine.connect() as conn:
            result = conn.execute(
                _authorized_emails.update().where(_authorized_emails.c.email == email).values(role=role.value)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_authorized_email(self, email: str) -> bool:
        """Remove a whitelist entry. Returns True if deleted, False if not found.

        Users already registered against the email are left untouched.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_authorized_emails.delete().where(_authorized_emails.c.email == email))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        role=Role(row.role),
        created_at=row.created_at,
    )


def _row_to_authorized_email(row) -> AuthorizedEmail:
    return AuthorizedEmail(
        email=row.email,
        role=Role(row.role),
        created_at=row.created_at,
    )
