"""SQLite storage adapter.

Implements the core StoragePort on top of a single, process-wide SQLite
connection configured for crash durability and exclusive single-writer access.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from core.errors import (
    DuplicateDomainError,
    StorageConfigurationError,
    StoreBusyError,
    StoreConsistencyError,
    StoreError,
)
from core.models import DomainRecord, RateLimitRecord

LOGGER = logging.getLogger(__name__)

# Applied in order; each value is read back and must match exactly.
PRAGMAS: tuple[tuple[str, str], ...] = (
    ("journal_mode", "wal"),
    ("wal_autocheckpoint", "0"),
    ("synchronous", "3"),
    ("locking_mode", "exclusive"),
    ("journal_size_limit", "-1"),
    ("checkpoint_fullfsync", "1"),
    ("fullfsync", "1"),
)

_DUPLICATE_DOMAIN_MESSAGE = "UNIQUE constraint failed: domains.domain"


def _is_busy(exc: sqlite3.Error) -> bool:
    code = getattr(exc, "sqlite_errorcode", None)
    if code is not None and code & 0xFF == sqlite3.SQLITE_BUSY:
        return True
    return "database is locked" in str(exc)


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the StoragePort contract."""

    def __init__(self, db_path: str, timeout: float = 5.0) -> None:
        self._db_path = db_path
        self._timeout = timeout
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def db_path(self) -> str:
        return self._db_path

    def _connection(self) -> sqlite3.Connection:
        # locking_mode is per connection, so the same handle is reused for the
        # whole process lifetime. Autocommit keeps every statement atomic on
        # its own and never leaves a transaction open between calls.
        if self._conn is None:
            conn = sqlite3.connect(
                self._db_path,
                timeout=self._timeout,
                isolation_level=None,
                check_same_thread=False,
            )
            conn.row_factory = sqlite3.Row
            self._conn = conn
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def read_pragma(self, name: str) -> Optional[str]:
        """Return the current value of a pragma as a lowercase string."""

        row = self._connection().execute(f"PRAGMA {name}").fetchone()
        if row is None:
            return None
        return str(row[0]).lower()

    def configure(self) -> None:
        """Apply the durability pragmas and verify each one took effect."""

        conn = self._connection()
        for name, expected in PRAGMAS:
            statement = f"PRAGMA {name} = {expected}"
            try:
                conn.execute(statement).fetchall()
                actual = self.read_pragma(name)
            except sqlite3.Error as exc:
                raise StorageConfigurationError(f"unable to execute pragma '{statement}': {exc}") from exc
            if actual is None:
                raise StorageConfigurationError(f"expected pragma value to be returned for {name}, got no rows")
            if actual != expected:
                raise StorageConfigurationError(
                    f"pragma '{name}' read back as {actual!r}, expected {expected!r}"
                )
            LOGGER.debug("Pragma %s = %s", name, actual)

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - domains: accepted domains, one row per normalized apex zone
        - users_rate_limit: per-user attempt counter and window start
        """

        conn = self._connection()
        # domains is append-only from the bot's point of view.
        # Fields:
        # - domain: normalized lowercase zone.tld (UNIQUE)
        # - created_ts: UTC unix seconds of acceptance
        # - created_by_id: Telegram user id of the submitter
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS domains (
                domain TEXT UNIQUE NOT NULL,
                created_ts INTEGER NOT NULL,
                created_by_id INTEGER NOT NULL
            )
            """
        )
        # users_rate_limit keeps a single counter row per user.
        # Fields:
        # - the_user_id: Telegram user id (PRIMARY KEY)
        # - last_access_ts: UTC unix seconds the current window started
        # - the_count: attempts consumed in the current window
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS users_rate_limit (
                the_user_id INTEGER PRIMARY KEY,
                last_access_ts INTEGER NOT NULL,
                the_count INTEGER NOT NULL
            )
            """
        )

    def consume_attempt(self, user_id: int, now: int, max_attempts: int, window_seconds: int) -> bool:
        """Count one attempt for the user in a single conditional upsert.

        When the quota is spent the DO UPDATE's WHERE clause is false, the row
        is left untouched and RETURNING yields nothing.
        """

        try:
            rows = self._connection().execute(
                """
                INSERT INTO users_rate_limit (the_user_id, last_access_ts, the_count)
                VALUES (:user_id, :now, 1)
                ON CONFLICT(the_user_id) DO UPDATE SET
                    last_access_ts = CASE
                        WHEN :now - last_access_ts >= :window THEN excluded.last_access_ts
                        ELSE last_access_ts
                    END,
                    the_count = CASE
                        WHEN :now - last_access_ts >= :window THEN 1
                        ELSE the_count + 1
                    END
                WHERE :now - last_access_ts >= :window OR the_count < :max_attempts
                RETURNING the_count
                """,
                {
                    "user_id": user_id,
                    "now": now,
                    "window": window_seconds,
                    "max_attempts": max_attempts,
                },
            ).fetchall()
        except sqlite3.Error as exc:
            if _is_busy(exc):
                raise StoreBusyError() from exc
            raise StoreError(f"failed to query user rate limit counter: {exc}") from exc
        return bool(rows)

    def insert_domain(self, domain: str, user_id: int, now: int) -> None:
        """Insert an accepted domain, mapping constraint and lock errors."""

        try:
            cur = self._connection().execute(
                "INSERT INTO domains (domain, created_ts, created_by_id) VALUES (?, ?, ?)",
                (domain, now, user_id),
            )
        except sqlite3.IntegrityError as exc:
            if _DUPLICATE_DOMAIN_MESSAGE in str(exc):
                raise DuplicateDomainError(domain) from exc
            raise StoreError(f"failed to insert domain into database: {exc}") from exc
        except sqlite3.Error as exc:
            if _is_busy(exc):
                raise StoreBusyError() from exc
            raise StoreError(f"failed to insert domain into database: {exc}") from exc

        if cur.rowcount != 1:
            LOGGER.error("Domain insert for %s affected %s rows", domain, cur.rowcount)
            raise StoreConsistencyError(
                f"expected 1 row to be affected by domain insert query, got {cur.rowcount}"
            )

    def get_domain(self, domain: str) -> Optional[DomainRecord]:
        """Return the stored record for a normalized domain, if any."""

        row = self._connection().execute(
            "SELECT domain, created_ts, created_by_id FROM domains WHERE domain = ?",
            (domain,),
        ).fetchone()
        if row is None:
            return None
        return DomainRecord(
            domain=row["domain"],
            created_ts=int(row["created_ts"]),
            created_by_id=int(row["created_by_id"]),
        )

    def count_domains(self) -> int:
        row = self._connection().execute("SELECT COUNT(*) FROM domains").fetchone()
        return int(row[0])

    def get_rate_limit(self, user_id: int) -> Optional[RateLimitRecord]:
        """Return the current counter row for a user, if any."""

        row = self._connection().execute(
            "SELECT the_user_id, last_access_ts, the_count FROM users_rate_limit WHERE the_user_id = ?",
            (user_id,),
        ).fetchone()
        if row is None:
            return None
        return RateLimitRecord(
            user_id=int(row["the_user_id"]),
            window_start_ts=int(row["last_access_ts"]),
            attempt_count=int(row["the_count"]),
        )
