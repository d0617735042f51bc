"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper.
AccountStore is the repository; _row_to_account is the mapper. Service and
route code never touches SQL directly.

Uniqueness:
  accounts.login carries a UNIQUE constraint. That constraint -- not the
  registrar's find-then-save sequence -- is what guarantees one account per
  login when two sign-ups race, including across processes sharing the same
  database. save() converts the IntegrityError into DuplicateAccountError so
  callers see the same failure whichever path caught the duplicate.

  SQLite compares TEXT with the BINARY collation by default, so logins are
  case-sensitive: "alice" and "Alice" are distinct accounts.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.errors import DuplicateAccountError
from auth.models import Account, Role

# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


class CredentialStore(Protocol):
    """What the registrar and authenticator need from persistence.

    save() must enforce login uniqueness atomically and raise
    DuplicateAccountError on conflict. A save() followed by find_by_login()
    on the same login must see the saved record.
    """

    def find_by_login(self, login: str) -> Account | None: ...

    def save(self, account: Account) -> Account: ...


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_accounts = Table(
    "accounts",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("login", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("role", String(30), nullable=False),
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


class AccountStore:
    """SQL-backed CredentialStore.

    Usage:
        store = AccountStore("sqlite:///:memory:")
        saved = store.save(Account(login="alice", password_hash=h, role=Role.USER))
        store.find_by_login("alice")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite") and ":memory:" not in db_url and "mode=memory" not in db_url:
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def find_by_login(self, login: str) -> Account | None:
        """Look up an account by exact login (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(_accounts.c.login == login)).fetchone()
        return _row_to_account(row) if row is not None else None

    def save(self, account: Account) -> Account:
        """Insert a new account and return it with id and created_at filled in.

        Raises DuplicateAccountError if the login already exists. The insert
        runs in its own transaction, so a conflict leaves nothing behind.
        """
        created_at = _now_iso()
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    _accounts.insert().values(
                        login=account.login,
                        password_hash=account.password_hash,
                        role=Role(account.role).value,
                        created_at=created_at,
                    )
                )
                new_id = result.inserted_primary_key[0]
        except IntegrityError as exc:
            raise DuplicateAccountError() from exc
        return Account(
            id=new_id,
            login=account.login,
            password_hash=account.password_hash,
            role=Role(account.role),
            created_at=created_at,
        )

    def count(self) -> int:
        """Return the number of stored accounts."""
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_accounts)).scalar()
        return result or 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_account(row) -> Account:
    return Account(
        id=row.id,
        login=row.login,
        password_hash=row.password_hash,
        role=Role(row.role),
        created_at=row.created_at,
    )
