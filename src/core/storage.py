"""
Query layer for Mindful Planner.

Wraps the Database abstraction with the handful of reads and writes the API
needs and converts rows into model dataclasses. Calendar-day arithmetic is
left to callers: methods take explicit UTC bounds.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from src.core.database import Database
from src.core.models import (
    Category,
    MindfulnessActivity,
    MindfulnessSession,
    MindfulnessTip,
    ProductivityDataPoint,
    Task,
    format_datetime,
    utcnow,
)

logger = logging.getLogger(__name__)

TASK_FILTERS = ("all", "today", "important", "completed")

# Columns a task update may touch
TASK_COLUMNS = (
    "title",
    "description",
    "priority",
    "ai_priority",
    "category_id",
    "completed",
    "is_mindful",
    "due_date",
)

TASK_SELECT = """
    SELECT t.*,
           c.name AS category_name,
           c.color AS category_color,
           c.user_id AS category_user_id,
           c.created_at AS category_created_at
    FROM tasks t
    LEFT JOIN categories c ON c.id = t.category_id
"""


def _to_db_value(key: str, value: Any) -> Any:
    if isinstance(value, datetime):
        return format_datetime(value)
    if key in ("completed", "is_mindful") and value is not None:
        return bool(value)
    return value


class Storage:
    """Typed access to tasks, categories, mindfulness and productivity rows."""

    def __init__(self, db: Database):
        self.db = db

    # =========================================================================
    # Tasks
    # =========================================================================

    def create_task(self, fields: Dict[str, Any], now: Optional[datetime] = None) -> Task:
        """Insert a task and return it with its category embedded."""
        now = now or utcnow()
        values = {k: _to_db_value(k, fields.get(k)) for k in TASK_COLUMNS}
        values["completed"] = bool(fields.get("completed", False))
        values["is_mindful"] = bool(fields.get("is_mindful", False))

        task_id = self.db.execute_write(
            """
            INSERT INTO tasks (title, description, priority, ai_priority, category_id,
                               completed, is_mindful, due_date, user_id, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                values["title"],
                values["description"],
                values["priority"],
                values["ai_priority"],
                values["category_id"],
                values["completed"],
                values["is_mindful"],
                values["due_date"],
                fields["user_id"],
                format_datetime(now),
                format_datetime(now),
            ),
        )
        logger.debug("Created task %s for user %s", task_id, fields["user_id"])
        return self.get_task(task_id)

    def get_task(self, task_id: int) -> Optional[Task]:
        row = self.db.execute_one(TASK_SELECT + " WHERE t.id = ?", (task_id,))
        return Task.from_dict(row) if row else None

    def list_tasks(
        self,
        user_id: int,
        task_filter: str = "all",
        today_start: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Task]:
        """
        List a user's tasks, scored 'ai' tasks first.

        Filters:
            all: every task
            today: due on or after ``today_start``
            important: declared tier 'high'
            completed: completed flag set
        """
        if task_filter not in TASK_FILTERS:
            raise ValueError(f"Unknown task filter: {task_filter}")

        clauses = ["t.user_id = ?"]
        params: List[Any] = [user_id]

        if task_filter == "today":
            clauses.append("t.due_date >= ?")
            params.append(format_datetime(today_start or utcnow()))
        elif task_filter == "important":
            clauses.append("t.priority = ?")
            params.append("high")
        elif task_filter == "completed":
            clauses.append("t.completed = ?")
            params.append(True)

        query = (
            TASK_SELECT
            + " WHERE " + " AND ".join(clauses)
            + " ORDER BY t.ai_priority IS NULL, t.ai_priority DESC, t.created_at DESC, t.id DESC"
            + " LIMIT ? OFFSET ?"
        )
        params.extend([limit, offset])

        rows = self.db.execute(query, tuple(params))
        return [Task.from_dict(row) for row in rows]

    def update_task(self, task_id: int, changes: Dict[str, Any],
                    now: Optional[datetime] = None) -> Optional[Task]:
        """Apply a partial update; unknown keys are ignored."""
        now = now or utcnow()
        columns = [k for k in TASK_COLUMNS if k in changes]

        assignments = [f"{column} = ?" for column in columns] + ["updated_at = ?"]
        params = [_to_db_value(c, changes[c]) for c in columns] + [format_datetime(now), task_id]

        updated = self.db.execute_write(
            f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?",
            tuple(params),
        )
        if not updated:
            return None
        logger.debug("Updated task %s (%s)", task_id, ", ".join(columns) or "touch")
        return self.get_task(task_id)

    def delete_task(self, task_id: int) -> bool:
        deleted = self.db.execute_write("DELETE FROM tasks WHERE id = ?", (task_id,))
        return deleted > 0

    def count_tasks(
        self,
        user_id: int,
        completed: Optional[bool] = None,
        category_id: Optional[int] = None,
        updated_since: Optional[datetime] = None,
    ) -> int:
        clauses = ["user_id = ?"]
        params: List[Any] = [user_id]
        if completed is not None:
            clauses.append("completed = ?")
            params.append(completed)
        if category_id is not None:
            clauses.append("category_id = ?")
            params.append(category_id)
        if updated_since is not None:
            clauses.append("updated_at >= ?")
            params.append(format_datetime(updated_since))
        return self.db.count("tasks", " AND ".join(clauses), tuple(params))

    # =========================================================================
    # Categories
    # =========================================================================

    def create_category(self, name: str, color: str, user_id: int,
                        now: Optional[datetime] = None) -> Category:
        category_id = self.db.execute_write(
            "INSERT INTO categories (name, color, user_id, created_at) VALUES (?, ?, ?, ?)",
            (name, color, user_id, format_datetime(now or utcnow())),
        )
        return self.get_category(category_id)

    def get_category(self, category_id: int) -> Optional[Category]:
        row = self.db.execute_one("SELECT * FROM categories WHERE id = ?", (category_id,))
        return Category.from_dict(row) if row else None

    def list_categories(self, user_id: int) -> List[Category]:
        rows = self.db.execute(
            "SELECT * FROM categories WHERE user_id = ? ORDER BY name, id",
            (user_id,),
        )
        return [Category.from_dict(row) for row in rows]

    # =========================================================================
    # Mindfulness
    # =========================================================================

    def create_activity(self, activity: MindfulnessActivity,
                        now: Optional[datetime] = None) -> MindfulnessActivity:
        activity_id = self.db.execute_write(
            """
            INSERT INTO mindfulness_activities (type, title, description, duration, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (activity.type, activity.title, activity.description, activity.duration,
             format_datetime(now or utcnow())),
        )
        return self.get_activity(activity_id)

    def get_activity(self, activity_id: int) -> Optional[MindfulnessActivity]:
        row = self.db.execute_one(
            "SELECT * FROM mindfulness_activities WHERE id = ?", (activity_id,)
        )
        return MindfulnessActivity.from_dict(row) if row else None

    def list_activities(self) -> List[MindfulnessActivity]:
        rows = self.db.execute(
            "SELECT * FROM mindfulness_activities ORDER BY created_at DESC, id DESC"
        )
        return [MindfulnessActivity.from_dict(row) for row in rows]

    def create_session(self, user_id: int, duration: int, activity_id: Optional[int] = None,
                       completed: bool = True,
                       now: Optional[datetime] = None) -> MindfulnessSession:
        session_id = self.db.execute_write(
            """
            INSERT INTO mindfulness_sessions (user_id, activity_id, duration, completed, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (user_id, activity_id, duration, completed, format_datetime(now or utcnow())),
        )
        row = self.db.execute_one(
            "SELECT * FROM mindfulness_sessions WHERE id = ?", (session_id,)
        )
        return MindfulnessSession.from_dict(row)

    def list_sessions(self, user_id: int) -> List[MindfulnessSession]:
        """All of a user's sessions, newest first."""
        rows = self.db.execute(
            """
            SELECT * FROM mindfulness_sessions
            WHERE user_id = ?
            ORDER BY created_at DESC, id DESC
            """,
            (user_id,),
        )
        return [MindfulnessSession.from_dict(row) for row in rows]

    def session_seconds_since(self, user_id: int, since: datetime) -> int:
        row = self.db.execute_one(
            """
            SELECT COALESCE(SUM(duration), 0) AS total
            FROM mindfulness_sessions
            WHERE user_id = ? AND created_at >= ?
            """,
            (user_id, format_datetime(since)),
        )
        return int(row["total"]) if row else 0

    def create_tip(self, content: str, tip_type: str,
                   now: Optional[datetime] = None) -> MindfulnessTip:
        tip_id = self.db.execute_write(
            "INSERT INTO mindfulness_tips (content, type, created_at) VALUES (?, ?, ?)",
            (content, tip_type, format_datetime(now or utcnow())),
        )
        row = self.db.execute_one("SELECT * FROM mindfulness_tips WHERE id = ?", (tip_id,))
        return MindfulnessTip.from_dict(row)

    def list_tips(self, tip_type: Optional[str] = None) -> List[MindfulnessTip]:
        if tip_type:
            rows = self.db.execute(
                "SELECT * FROM mindfulness_tips WHERE type = ? ORDER BY id", (tip_type,)
            )
        else:
            rows = self.db.execute("SELECT * FROM mindfulness_tips ORDER BY id")
        return [MindfulnessTip.from_dict(row) for row in rows]

    def random_tip(self, tip_type: Optional[str] = None) -> Optional[MindfulnessTip]:
        if tip_type:
            row = self.db.execute_one(
                "SELECT * FROM mindfulness_tips WHERE type = ? ORDER BY RANDOM() LIMIT 1",
                (tip_type,),
            )
        else:
            row = self.db.execute_one(
                "SELECT * FROM mindfulness_tips ORDER BY RANDOM() LIMIT 1"
            )
        return MindfulnessTip.from_dict(row) if row else None

    # =========================================================================
    # Productivity
    # =========================================================================

    def upsert_productivity(
        self,
        point: ProductivityDataPoint,
        day_start: datetime,
        day_end: datetime,
    ) -> ProductivityDataPoint:
        """
        Store the user's record for the day [day_start, day_end).

        An existing record inside the window is overwritten in place, so a
        user never has two records for one calendar day.
        """
        existing = self.db.execute_one(
            """
            SELECT id FROM productivity_data
            WHERE user_id = ? AND date >= ? AND date < ?
            ORDER BY date DESC
            LIMIT 1
            """,
            (point.user_id, format_datetime(day_start), format_datetime(day_end)),
        )

        values = (
            format_datetime(point.date),
            point.focus_score,
            point.completed_tasks,
            point.mindfulness_minutes,
            point.hourly_json(),
        )

        if existing:
            record_id = existing["id"]
            self.db.execute_write(
                """
                UPDATE productivity_data
                SET date = ?, focus_score = ?, completed_tasks = ?,
                    mindfulness_minutes = ?, hourly_data = ?
                WHERE id = ?
                """,
                values + (record_id,),
            )
            logger.debug("Updated productivity record %s for user %s", record_id, point.user_id)
        else:
            record_id = self.db.execute_write(
                """
                INSERT INTO productivity_data (date, focus_score, completed_tasks,
                                               mindfulness_minutes, hourly_data,
                                               user_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                values + (point.user_id, format_datetime(utcnow())),
            )
            logger.debug("Created productivity record %s for user %s", record_id, point.user_id)

        row = self.db.execute_one("SELECT * FROM productivity_data WHERE id = ?", (record_id,))
        return ProductivityDataPoint.from_dict(row)

    def list_productivity(self, user_id: int, since: datetime) -> List[ProductivityDataPoint]:
        """Records dated on or after ``since``, oldest first."""
        rows = self.db.execute(
            """
            SELECT * FROM productivity_data
            WHERE user_id = ? AND date >= ?
            ORDER BY date ASC, id ASC
            """,
            (user_id, format_datetime(since)),
        )
        return [ProductivityDataPoint.from_dict(row) for row in rows]

    def latest_productivity(self, user_id: int) -> Optional[ProductivityDataPoint]:
        row = self.db.execute_one(
            """
            SELECT * FROM productivity_data
            WHERE user_id = ?
            ORDER BY date DESC, id DESC
            LIMIT 1
            """,
            (user_id,),
        )
        return ProductivityDataPoint.from_dict(row) if row else None
