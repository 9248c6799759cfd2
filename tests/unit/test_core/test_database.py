"""
Tests for the database layer and schema creation.
"""

import sqlite3

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from src.core.database import PostgreSQLDatabase, SQLiteDatabase, get_database
from src.core.schema import TABLES, create_schema


@pytest.fixture
def empty_db(tmp_path):
    db_path = tmp_path / "test.db"
    sqlite3.connect(db_path).close()
    return SQLiteDatabase(db_path)


class TestSQLiteDatabase:

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="init_db.py"):
            SQLiteDatabase(tmp_path / "nope.db")

    def test_create_schema_creates_every_table(self, empty_db):
        create_schema(empty_db)
        for table in TABLES:
            assert empty_db.table_exists(table)

    def test_create_schema_is_idempotent(self, empty_db):
        create_schema(empty_db)
        create_schema(empty_db)
        assert empty_db.count("tasks") == 0

    def test_execute_write_returns_lastrowid_for_insert(self, db):
        first = db.execute_write(
            "INSERT INTO categories (name, color, user_id) VALUES (?, ?, ?)", ("Work", "#fff", 1)
        )
        second = db.execute_write(
            "INSERT INTO categories (name, color, user_id) VALUES (?, ?, ?)", ("Home", "#000", 1)
        )
        assert second == first + 1

    def test_execute_write_returns_rowcount_for_update(self, db):
        for name in ("a", "b", "c"):
            db.execute_write(
                "INSERT INTO categories (name, color, user_id) VALUES (?, ?, ?)", (name, "#fff", 7)
            )
        assert db.execute_write("UPDATE categories SET color = ? WHERE user_id = ?", ("#111", 7)) == 3
        assert db.execute_write("DELETE FROM categories WHERE user_id = ?", (99,)) == 0

    def test_execute_and_execute_one_return_dicts(self, db):
        db.execute_write(
            "INSERT INTO categories (name, color, user_id) VALUES (?, ?, ?)", ("Work", "#fff", 1)
        )
        rows = db.execute("SELECT name, color FROM categories")
        assert rows == [{"name": "Work", "color": "#fff"}]
        assert db.execute_one("SELECT name FROM categories WHERE name = ?", ("Nope",)) is None

    def test_count_with_where(self, db):
        for user_id in (1, 1, 2):
            db.execute_write(
                "INSERT INTO categories (name, color, user_id) VALUES (?, ?, ?)", ("c", "#fff", user_id)
            )
        assert db.count("categories") == 3
        assert db.count("categories", "user_id = ?", (1,)) == 2

    def test_transaction_rolls_back_on_error(self, db):
        with pytest.raises(RuntimeError):
            with db.transaction() as conn:
                conn.execute(
                    "INSERT INTO categories (name, color, user_id) VALUES (?, ?, ?)", ("x", "#fff", 1)
                )
                raise RuntimeError("boom")
        assert db.count("categories") == 0

    def test_check_constraint_rejects_unknown_tier(self, db):
        with pytest.raises(sqlite3.IntegrityError):
            db.execute_write(
                "INSERT INTO tasks (title, priority, user_id) VALUES (?, ?, ?)", ("t", "urgent", 1)
            )


class TestGetDatabase:

    def test_defaults_to_sqlite_at_configured_path(self, config, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        sqlite3.connect(config.get_database_path()).close()
        db = get_database(config)
        assert isinstance(db, SQLiteDatabase)
        assert db.db_path == config.get_database_path()

    def test_use_sqlite_overrides_database_url(self, config, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/planner")
        monkeypatch.setenv("USE_SQLITE", "1")
        sqlite3.connect(config.get_database_path()).close()
        assert isinstance(get_database(config), SQLiteDatabase)


class TestPostgreSQLQueryConversion:

    def test_placeholders_converted(self):
        db = PostgreSQLDatabase.__new__(PostgreSQLDatabase)
        assert db._convert_query("SELECT * FROM tasks WHERE id = ? AND user_id = ?") == (
            "SELECT * FROM tasks WHERE id = %s AND user_id = %s"
        )
