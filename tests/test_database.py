"""Tests for database initialization and transactions."""

import sqlite3
from pathlib import Path

import pytest

from reader.storage.database import (
    Database,
    db_retry,
    get_connection,
    initialize_database,
    transaction,
)


def _tables(db_path: Path) -> list[str]:
    conn = sqlite3.connect(str(db_path))
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
    tables = [row[0] for row in cursor.fetchall()]
    conn.close()
    return tables


def _columns(db_path: Path, table: str) -> set[str]:
    conn = sqlite3.connect(str(db_path))
    cursor = conn.execute(f"PRAGMA table_info({table})")
    columns = {row[1] for row in cursor.fetchall()}
    conn.close()
    return columns


class TestInitializeDatabase:
    def test_creates_tables(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)

        tables = _tables(db_path)
        assert "users" in tables
        assert "books" in tables
        assert "chapters" in tables
        assert "reading_progress" in tables

    def test_idempotent(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)
        initialize_database(db_path)  # Should not raise
        assert "books" in _tables(db_path)

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "dir" / "test.db"
        initialize_database(db_path)
        assert db_path.exists()

    def test_chapters_table_schema(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)
        assert {"id", "book_id", "title", "position", "ordinal", "number"} <= _columns(
            db_path, "chapters"
        )

    def test_reading_progress_table_schema(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)
        assert {
            "user_id",
            "book_id",
            "position",
            "reading_time",
            "last_read_at",
            "last_device_id",
        } <= _columns(db_path, "reading_progress")

    def test_progress_unique_per_user_and_book(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)
        conn = get_connection(db_path)
        conn.execute("INSERT INTO users (id) VALUES (1)")
        conn.execute(
            "INSERT INTO books (id, user_id, title, file_path, created_at) "
            "VALUES (1, 1, 't', '/x.txt', '2024-01-01T00:00:00+00:00')"
        )
        conn.execute("INSERT INTO reading_progress (user_id, book_id) VALUES (1, 1)")
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO reading_progress (user_id, book_id) VALUES (1, 1)")
        conn.close()

    def test_deleting_book_cascades(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)
        conn = get_connection(db_path)
        conn.execute("INSERT INTO users (id) VALUES (1)")
        conn.execute(
            "INSERT INTO books (id, user_id, title, file_path, created_at) "
            "VALUES (1, 1, 't', '/x.txt', '2024-01-01T00:00:00+00:00')"
        )
        conn.execute(
            "INSERT INTO chapters (book_id, title, position, ordinal) VALUES (1, 'c', 0, 0)"
        )
        conn.execute("INSERT INTO reading_progress (user_id, book_id) VALUES (1, 1)")
        conn.execute("DELETE FROM books WHERE id = 1")

        assert conn.execute("SELECT COUNT(*) FROM chapters").fetchone()[0] == 0
        assert conn.execute("SELECT COUNT(*) FROM reading_progress").fetchone()[0] == 0
        conn.close()


class TestGetConnection:
    def test_returns_connection_with_row_factory(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)

        conn = get_connection(db_path)
        assert conn.row_factory == sqlite3.Row
        conn.close()

    def test_wal_mode_enabled(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)

        conn = get_connection(db_path)
        mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
        conn.close()
        assert mode == "wal"


class TestTransaction:
    def test_commits_on_success(self, tmp_path: Path) -> None:
        db = Database(tmp_path / "test.db")
        db.initialize()
        with db.connect() as conn, transaction(conn, immediate=True):
            conn.execute("INSERT INTO users (id) VALUES (5)")

        with db.connect() as conn:
            assert conn.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 1

    def test_rolls_back_on_error(self, tmp_path: Path) -> None:
        db = Database(tmp_path / "test.db")
        db.initialize()
        with pytest.raises(RuntimeError):
            with db.connect() as conn, transaction(conn):
                conn.execute("INSERT INTO users (id) VALUES (5)")
                raise RuntimeError("boom")

        with db.connect() as conn:
            assert conn.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 0


class TestDbRetry:
    def test_retries_while_locked(self) -> None:
        calls = {"count": 0}

        @db_retry(max_retries=3, initial_delay=0)
        def flaky() -> str:
            calls["count"] += 1
            if calls["count"] < 3:
                raise sqlite3.OperationalError("database is locked")
            return "ok"

        assert flaky() == "ok"
        assert calls["count"] == 3

    def test_non_retryable_error_propagates(self) -> None:
        calls = {"count": 0}

        @db_retry(max_retries=3, initial_delay=0)
        def broken() -> None:
            calls["count"] += 1
            raise sqlite3.OperationalError("no such table: nothing")

        with pytest.raises(sqlite3.OperationalError):
            broken()
        assert calls["count"] == 1

    def test_gives_up_after_max_retries(self) -> None:
        @db_retry(max_retries=2, initial_delay=0)
        def always_locked() -> None:
            raise sqlite3.OperationalError("database is locked")

        with pytest.raises(sqlite3.OperationalError, match="locked"):
            always_locked()
