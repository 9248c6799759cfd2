"""
Configuration management for Mindful Planner
Handles loading and saving server settings and user preferences
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, List, Optional


class Config:
    """Configuration manager for the planner service"""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration manager

        Args:
            config_dir: Path to configuration directory (defaults to
                $PLANNER_CONFIG_DIR or ./config)
        """
        if config_dir is None:
            env_dir = os.environ.get("PLANNER_CONFIG_DIR")
            config_dir = Path(env_dir) if env_dir else Path(__file__).parent.parent.parent / "config"

        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.settings_file = self.config_dir / "settings.json"
        self.preferences_file = self.config_dir / "preferences.json"

        # Load configurations
        self.settings = self._load_json(self.settings_file, self._default_settings())
        self.preferences = self._load_json(self.preferences_file, self._default_preferences())

    def _load_json(self, file_path: Path, default: Dict[str, Any]) -> Dict[str, Any]:
        """Load JSON file or return default if file doesn't exist"""
        if file_path.exists():
            with open(file_path, 'r') as f:
                loaded = json.load(f)
            # Keys added in newer versions fall back to their defaults
            return {**default, **loaded}
        else:
            self._save_json(file_path, default)
            return default

    def _save_json(self, file_path: Path, data: Dict[str, Any]) -> None:
        """Save data to JSON file"""
        with open(file_path, 'w') as f:
            json.dump(data, f, indent=2)

    def _default_settings(self) -> Dict[str, Any]:
        """Default server settings"""
        return {
            "database_path": "data/database/planner.db",
            "timezone": "UTC",
            "log_level": "INFO",
            "cors_origins": [
                "http://localhost:5173",  # Vite dev server
                "http://localhost:3000",
                "http://127.0.0.1:5173",
                "http://127.0.0.1:3000",
            ],
        }

    def _default_preferences(self) -> Dict[str, Any]:
        """Default behaviour preferences"""
        return {
            "insight_selector": "random",  # 'random' or 'signals'
            "task_list_limit": 50,
        }

    def get(self, key: str, section: str = "settings", default: Any = None) -> Any:
        """
        Get configuration value

        Args:
            key: Configuration key
            section: Configuration section ('settings', 'preferences')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        section_map = {
            "settings": self.settings,
            "preferences": self.preferences,
        }

        return section_map.get(section, {}).get(key, default)

    def set(self, key: str, value: Any, section: str = "settings") -> None:
        """
        Set configuration value and save to disk

        Args:
            key: Configuration key
            value: Value to set
            section: Configuration section ('settings', 'preferences')
        """
        section_map = {
            "settings": (self.settings, self.settings_file),
            "preferences": (self.preferences, self.preferences_file),
        }

        if section in section_map:
            config_dict, file_path = section_map[section]
            config_dict[key] = value
            self._save_json(file_path, config_dict)

    def get_database_path(self) -> Path:
        """Get full path to the SQLite database file"""
        path = Path(self.settings["database_path"])
        if path.is_absolute():
            return path
        return Path(__file__).parent.parent.parent / path

    def get_timezone(self) -> str:
        """Timezone name used for calendar-day boundaries"""
        return self.settings.get("timezone", "UTC")

    def get_cors_origins(self) -> List[str]:
        return list(self.settings.get("cors_origins", []))
