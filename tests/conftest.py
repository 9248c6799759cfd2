"""
Shared fixtures: a throwaway SQLite database with the full schema, and a
Config pointed at a temporary directory.
"""

import sqlite3
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.config import Config
from src.core.database import SQLiteDatabase
from src.core.schema import create_schema
from src.core.storage import Storage


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Config in a temp dir whose database_path points into tmp_path."""
    monkeypatch.delenv("DATABASE_URL", raising=False)
    cfg = Config(config_dir=tmp_path / "config")
    cfg.set("database_path", str(tmp_path / "planner.db"))
    return cfg


@pytest.fixture
def db(tmp_path):
    db_path = tmp_path / "planner.db"
    sqlite3.connect(db_path).close()
    database = SQLiteDatabase(db_path)
    create_schema(database)
    return database


@pytest.fixture
def storage(db):
    return Storage(db)
