from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from adapters.sqlite_storage import PRAGMAS, SQLiteStorage
from core.errors import (
    DuplicateDomainError,
    StorageConfigurationError,
    StoreBusyError,
    StoreConsistencyError,
    StoreError,
)
from core.models import DomainRecord


@pytest.fixture()
def storage(tmp_path: Path):
    store = SQLiteStorage(str(tmp_path / "domains.db"))
    store.configure()
    store.init_db()
    yield store
    store.close()


class FakeCursor:
    def __init__(self, rowcount: int) -> None:
        self.rowcount = rowcount


class FakeConnection:
    """Connection double that fails or misreports every execute."""

    def __init__(self, error: "Exception | None" = None, rowcount: int = 1) -> None:
        self._error = error
        self._rowcount = rowcount

    def execute(self, *args, **kwargs) -> FakeCursor:
        if self._error is not None:
            raise self._error
        return FakeCursor(self._rowcount)

    def close(self) -> None:
        pass


def _with_connection(tmp_path: Path, conn: FakeConnection) -> SQLiteStorage:
    store = SQLiteStorage(str(tmp_path / "fake.db"))
    store._conn = conn  # type: ignore[assignment]
    return store


def test_configure_applies_every_pragma(storage: SQLiteStorage) -> None:
    assert [name for name, _ in PRAGMAS] == [
        "journal_mode",
        "wal_autocheckpoint",
        "synchronous",
        "locking_mode",
        "journal_size_limit",
        "checkpoint_fullfsync",
        "fullfsync",
    ]
    for name, expected in PRAGMAS:
        assert storage.read_pragma(name) == expected


def test_configure_fails_when_pragma_does_not_stick() -> None:
    # In-memory databases cannot switch to WAL; journal_mode reads back "memory".
    store = SQLiteStorage(":memory:")
    with pytest.raises(StorageConfigurationError):
        store.configure()
    store.close()


def test_insert_domain_persists_record(storage: SQLiteStorage) -> None:
    storage.insert_domain("git.ir", 42, 1_700_000_000)

    assert storage.get_domain("git.ir") == DomainRecord(
        domain="git.ir",
        created_ts=1_700_000_000,
        created_by_id=42,
    )
    assert storage.count_domains() == 1


def test_duplicate_insert_leaves_single_row(storage: SQLiteStorage) -> None:
    storage.insert_domain("git.ir", 42, 1_700_000_000)

    with pytest.raises(DuplicateDomainError):
        storage.insert_domain("git.ir", 7, 1_700_000_005)

    assert storage.count_domains() == 1
    record = storage.get_domain("git.ir")
    assert record is not None
    assert record.created_by_id == 42


def test_records_survive_reopen(tmp_path: Path) -> None:
    path = str(tmp_path / "domains.db")
    first = SQLiteStorage(path)
    first.configure()
    first.init_db()
    first.insert_domain("git.ir", 42, 1_700_000_000)
    first.close()

    second = SQLiteStorage(path)
    second.configure()
    second.init_db()
    assert second.get_domain("git.ir") is not None
    second.close()


def test_locked_database_maps_to_busy(tmp_path: Path) -> None:
    store = _with_connection(tmp_path, FakeConnection(error=sqlite3.OperationalError("database is locked")))

    with pytest.raises(StoreBusyError):
        store.insert_domain("git.ir", 1, 1)
    with pytest.raises(StoreBusyError):
        store.consume_attempt(1, 1, 3, 60)


def test_unexpected_errors_map_to_store_error(tmp_path: Path) -> None:
    store = _with_connection(tmp_path, FakeConnection(error=sqlite3.OperationalError("disk I/O error")))

    with pytest.raises(StoreError) as excinfo:
        store.insert_domain("git.ir", 1, 1)
    assert not isinstance(excinfo.value, (StoreBusyError, DuplicateDomainError))


def test_other_integrity_errors_are_not_duplicates(tmp_path: Path) -> None:
    store = _with_connection(
        tmp_path,
        FakeConnection(error=sqlite3.IntegrityError("NOT NULL constraint failed: domains.created_ts")),
    )

    with pytest.raises(StoreError) as excinfo:
        store.insert_domain("git.ir", 1, 1)
    assert not isinstance(excinfo.value, DuplicateDomainError)


def test_unexpected_rowcount_is_consistency_error(tmp_path: Path) -> None:
    store = _with_connection(tmp_path, FakeConnection(rowcount=0))

    with pytest.raises(StoreConsistencyError):
        store.insert_domain("git.ir", 1, 1)
