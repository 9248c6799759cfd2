"""
Table definitions for Mindful Planner.

Both dialects hold the same tables; timestamps are written by the storage
layer as UTC ISO-8601 strings (SQLite TEXT, PostgreSQL TIMESTAMPTZ).
"""

from typing import List

SQLITE_SCHEMA: List[str] = [
    """
    CREATE TABLE IF NOT EXISTS categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL CHECK(length(name) > 0),
        color TEXT NOT NULL,
        user_id INTEGER NOT NULL,
        created_at DATETIME DEFAULT (strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now'))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_categories_user ON categories(user_id)",
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL CHECK(length(title) > 0),
        description TEXT,
        priority TEXT NOT NULL CHECK(priority IN ('high', 'medium', 'low', 'ai')),
        category_id INTEGER,
        completed BOOLEAN NOT NULL DEFAULT 0,
        is_mindful BOOLEAN NOT NULL DEFAULT 0,
        due_date DATETIME,
        user_id INTEGER NOT NULL,
        ai_priority INTEGER,
        created_at DATETIME DEFAULT (strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now')),
        updated_at DATETIME DEFAULT (strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now')),
        FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE SET NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_category ON tasks(category_id)",
    """
    CREATE TABLE IF NOT EXISTS mindfulness_activities (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        type TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT NOT NULL,
        duration INTEGER NOT NULL CHECK(duration >= 1),
        created_at DATETIME DEFAULT (strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS mindfulness_sessions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        activity_id INTEGER,
        duration INTEGER NOT NULL CHECK(duration >= 1),
        completed BOOLEAN NOT NULL DEFAULT 1,
        created_at DATETIME DEFAULT (strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now')),
        FOREIGN KEY (activity_id) REFERENCES mindfulness_activities(id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_sessions_user ON mindfulness_sessions(user_id, created_at)",
    """
    CREATE TABLE IF NOT EXISTS mindfulness_tips (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        content TEXT NOT NULL CHECK(length(content) > 0),
        type TEXT NOT NULL,
        created_at DATETIME DEFAULT (strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS productivity_data (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        date DATETIME NOT NULL,
        focus_score INTEGER CHECK(focus_score BETWEEN 0 AND 100),
        completed_tasks INTEGER NOT NULL DEFAULT 0,
        mindfulness_minutes INTEGER NOT NULL DEFAULT 0,
        hourly_data TEXT,
        created_at DATETIME DEFAULT (strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now'))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_productivity_user_date ON productivity_data(user_id, date)",
]

POSTGRES_SCHEMA: List[str] = [
    """
    CREATE TABLE IF NOT EXISTS categories (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL CHECK(length(name) > 0),
        color TEXT NOT NULL,
        user_id INTEGER NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_categories_user ON categories(user_id)",
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id SERIAL PRIMARY KEY,
        title TEXT NOT NULL CHECK(length(title) > 0),
        description TEXT,
        priority TEXT NOT NULL CHECK(priority IN ('high', 'medium', 'low', 'ai')),
        category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL,
        completed BOOLEAN NOT NULL DEFAULT false,
        is_mindful BOOLEAN NOT NULL DEFAULT false,
        due_date TIMESTAMPTZ,
        user_id INTEGER NOT NULL,
        ai_priority INTEGER,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_category ON tasks(category_id)",
    """
    CREATE TABLE IF NOT EXISTS mindfulness_activities (
        id SERIAL PRIMARY KEY,
        type TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT NOT NULL,
        duration INTEGER NOT NULL CHECK(duration >= 1),
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS mindfulness_sessions (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL,
        activity_id INTEGER REFERENCES mindfulness_activities(id),
        duration INTEGER NOT NULL CHECK(duration >= 1),
        completed BOOLEAN NOT NULL DEFAULT true,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_sessions_user ON mindfulness_sessions(user_id, created_at)",
    """
    CREATE TABLE IF NOT EXISTS mindfulness_tips (
        id SERIAL PRIMARY KEY,
        content TEXT NOT NULL CHECK(length(content) > 0),
        type TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS productivity_data (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL,
        date TIMESTAMPTZ NOT NULL,
        focus_score INTEGER CHECK(focus_score BETWEEN 0 AND 100),
        completed_tasks INTEGER NOT NULL DEFAULT 0,
        mindfulness_minutes INTEGER NOT NULL DEFAULT 0,
        hourly_data TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_productivity_user_date ON productivity_data(user_id, date)",
]

TABLES = [
    "categories",
    "tasks",
    "mindfulness_activities",
    "mindfulness_sessions",
    "mindfulness_tips",
    "productivity_data",
]


def create_schema(db) -> None:
    """Create every table and index for the database's dialect (idempotent)."""
    statements = POSTGRES_SCHEMA if db.dialect == "postgresql" else SQLITE_SCHEMA
    db.execute_script(statements)
