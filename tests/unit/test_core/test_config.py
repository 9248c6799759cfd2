"""
Tests for configuration loading and calendar-day helpers.
"""

import json
from datetime import date, datetime, timezone

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from src.core.config import Config
from src.core.timeutil import day_bounds, local_date, resolve_timezone, timeframe_start


class TestConfig:

    def test_defaults_written_on_first_use(self, tmp_path):
        config = Config(config_dir=tmp_path)
        assert (tmp_path / "settings.json").exists()
        assert (tmp_path / "preferences.json").exists()
        assert config.get("timezone") == "UTC"
        assert config.get("insight_selector", "preferences") == "random"

    def test_set_persists(self, tmp_path):
        Config(config_dir=tmp_path).set("timezone", "Europe/Berlin")
        assert Config(config_dir=tmp_path).get_timezone() == "Europe/Berlin"

    def test_missing_keys_fall_back_to_defaults(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"log_level": "DEBUG"}))
        config = Config(config_dir=tmp_path)
        assert config.get("log_level") == "DEBUG"
        assert config.get("database_path") == "data/database/planner.db"

    def test_unknown_section_returns_default(self, tmp_path):
        assert Config(config_dir=tmp_path).get("x", "nowhere", 5) == 5

    def test_relative_database_path_is_under_project_root(self, tmp_path):
        path = Config(config_dir=tmp_path).get_database_path()
        assert path.is_absolute()
        assert path.parts[-3:] == ("data", "database", "planner.db")

    def test_environment_selects_config_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PLANNER_CONFIG_DIR", str(tmp_path / "env"))
        assert Config().config_dir == tmp_path / "env"


class TestTimeutil:

    def test_resolve_timezone(self):
        assert resolve_timezone(None) is timezone.utc
        assert resolve_timezone("America/New_York") is not None
        with pytest.raises(ValueError):
            resolve_timezone("Mars/Olympus_Mons")

    def test_local_date_crosses_midnight(self):
        zone = resolve_timezone("America/New_York")
        moment = datetime(2026, 10, 19, 2, 0, tzinfo=timezone.utc)
        assert local_date(moment, zone) == date(2026, 10, 18)

    def test_day_bounds_in_utc(self):
        zone = resolve_timezone("America/New_York")  # UTC-4 in October
        start, end = day_bounds(datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc), zone)
        assert start == datetime(2026, 10, 19, 4, 0, tzinfo=timezone.utc)
        assert end == datetime(2026, 10, 20, 4, 0, tzinfo=timezone.utc)

    def test_timeframes(self):
        now = datetime(2026, 3, 31, 15, 0, tzinfo=timezone.utc)
        assert timeframe_start("day", now, timezone.utc) == datetime(2026, 3, 31, tzinfo=timezone.utc)
        assert timeframe_start("week", now, timezone.utc) == datetime(2026, 3, 24, 15, 0, tzinfo=timezone.utc)
        # One calendar month back clamps to the end of February
        assert timeframe_start("month", now, timezone.utc) == datetime(2026, 2, 28, 15, 0, tzinfo=timezone.utc)

    def test_unknown_timeframe(self):
        with pytest.raises(ValueError):
            timeframe_start("year", datetime.now(timezone.utc), timezone.utc)
