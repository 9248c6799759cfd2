"""
Tests for database initialization and demo data.
"""

import random
from datetime import datetime, timezone

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from src.core.schema import TABLES
from src.core.seed import (
    CATEGORY_NAMES,
    DEMO_ACTIVITIES,
    DEMO_TASKS,
    DEMO_TIPS,
    init_database,
    seed_demo_data,
)
from src.core.storage import Storage

NOW = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


class TestInitDatabase:

    def test_creates_file_and_tables(self, config):
        db = init_database(config)
        assert config.get_database_path().exists()
        for table in TABLES:
            assert db.table_exists(table)

    def test_reset_drops_existing_rows(self, config):
        db = init_database(config)
        Storage(db).create_category("Temp", "#fff", 1)
        db = init_database(config, reset=True)
        assert db.count("categories") == 0


class TestSeedDemoData:

    def test_seeds_everything(self, storage):
        created = seed_demo_data(storage, user_id=1, now=NOW, rng=random.Random(0))
        assert created == {
            "categories": len(CATEGORY_NAMES),
            "tasks": len(DEMO_TASKS),
            "activities": len(DEMO_ACTIVITIES),
            "tips": len(DEMO_TIPS),
            "productivity": 1,
        }

        categories = {c.name: c.color for c in storage.list_categories(1)}
        assert categories["Work"] == "#4F46E5"
        assert categories["Spiritual"] == "#F59E0B"

        record = storage.latest_productivity(1)
        assert record.focus_score == 85
        assert [s.hour for s in record.hourly_data] == list(range(8, 19))
        assert all(0 <= s.score < 100 for s in record.hourly_data)

    def test_tasks_are_linked_to_categories(self, storage):
        seed_demo_data(storage, user_id=1, now=NOW)
        tasks = {t.title: t for t in storage.list_tasks(1, limit=100)}
        assert tasks["Journal reflection"].category.name == "Spiritual"
        assert tasks["Review team feedback"].completed is True
        assert tasks["Finalize project proposal"].due_date == datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)

    def test_second_run_creates_nothing(self, storage):
        seed_demo_data(storage, user_id=1, now=NOW)
        created = seed_demo_data(storage, user_id=1, now=NOW)
        assert sum(created.values()) == 0
