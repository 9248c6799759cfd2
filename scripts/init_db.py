#!/usr/bin/env python3
"""
Database initialization script for Mindful Planner
Creates the database (SQLite file or PostgreSQL tables) and loads demo data
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.config import Config
from src.core.logging_setup import configure_logging
from src.core.seed import init_database, seed_database

logger = logging.getLogger("init_db")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create and seed the Mindful Planner database")
    parser.add_argument("--reset", action="store_true", help="Delete an existing SQLite database first")
    parser.add_argument("--no-seed", action="store_true", help="Create tables only")
    args = parser.parse_args(argv)

    config = Config()
    configure_logging(config.get("log_level", "settings", "INFO"))

    if args.reset:
        response = input(f"Delete the database at {config.get_database_path()}? (yes/no): ")
        if response.lower() != 'yes':
            print("Aborting database initialization.")
            return 1

    try:
        db = init_database(config, reset=args.reset)
        if not args.no_seed:
            seed_database(config)
    except Exception:
        logger.exception("Database initialization failed")
        return 1

    print(f"Database ready at {db.db_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
