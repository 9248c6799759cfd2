"""
Database creation and demo data.

Shared by scripts/init_db.py and the ``planner init-db`` / ``planner seed``
commands. Seeding is idempotent: rows that already exist (matched by name,
title or content) are skipped.
"""

import logging
import os
import random
import sqlite3
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Dict, Optional

from src.core.config import Config
from src.core.database import Database, get_database
from src.core.models import HourlyScore, MindfulnessActivity, ProductivityDataPoint
from src.core.schema import create_schema
from src.core.storage import Storage
from src.core.timeutil import day_bounds, local_date, resolve_timezone

logger = logging.getLogger(__name__)

DEMO_USER_ID = 1

CATEGORY_COLORS = [
    "#4F46E5",  # Primary blue
    "#A78BFA",  # Soft purple
    "#34D399",  # Gentle green
    "#EC4899",  # Pink
    "#F59E0B",  # Amber
]

CATEGORY_NAMES = ["Work", "Personal", "Health & Wellness", "Learning", "Spiritual"]

# (title, description, tier, category, mindful, completed, (day offset, hour or None))
DEMO_TASKS = [
    ("Finalize project proposal",
     "Complete the final draft with all client feedback incorporated.",
     "high", "Work", True, False, (0, 15)),
    ("Morning meditation session",
     "15-minute guided meditation to start the day with intention.",
     "medium", "Spiritual", True, False, (0, 9)),
    ("Review team feedback",
     "Go through team feedback for the latest design iteration.",
     "low", "Work", False, True, (0, 10)),
    ("Weekly grocery shopping",
     "Buy fresh produce and meal prep ingredients.",
     "medium", "Personal", False, False, (1, None)),
    ("30-minute yoga practice",
     "Focus on stretching and mindful movement.",
     "medium", "Health & Wellness", True, False, (0, 17)),
    ("Read chapter on mindfulness",
     "Continue reading the book on mindfulness practices.",
     "low", "Learning", True, False, (2, None)),
    ("Schedule doctor appointment",
     "Annual check-up and wellness visit.",
     "high", "Health & Wellness", False, False, (5, None)),
    ("Journal reflection",
     "Write about progress and insights from the week.",
     "medium", "Spiritual", True, False, (0, 20)),
]

DEMO_ACTIVITIES = [
    MindfulnessActivity(type="meditation", title="Morning Clarity",
                        description="Start your day with clear intentions and focused awareness",
                        duration=300),
    MindfulnessActivity(type="meditation", title="Quick Centering",
                        description="A brief reset for busy moments during the day",
                        duration=120),
    MindfulnessActivity(type="breathing", title="Deep Breathing",
                        description="Focus on breath to restore calm and balance",
                        duration=480),
    MindfulnessActivity(type="meditation", title="Evening Wind Down",
                        description="Release the day's tensions and prepare for restful sleep",
                        duration=600),
    MindfulnessActivity(type="reflection", title="Body Scan Relaxation",
                        description="Progressive relaxation through mindful body awareness",
                        duration=900),
]

DEMO_TIPS = [
    ("Before starting your next task, take three deep breaths. Inhale peace, exhale tension. "
     "Notice how your body feels in this moment.", "daily"),
    ("Between tasks, pause for 30 seconds to feel your feet on the ground and notice three "
     "things you can see, hear, and feel.", "task-related"),
    ("Notice when your mind wanders during focused work. Gently acknowledge the thought, then "
     "return to your task without judgment.", "task-related"),
    ("Take one mindful bite during your next meal. Notice the texture, temperature, and "
     "flavors without distraction.", "daily"),
    ("When you feel overwhelmed, place a hand on your heart and offer yourself words of "
     "kindness.", "general"),
    ("As you transition between tasks, take a moment to celebrate what you've accomplished "
     "before moving on.", "task-related"),
    ("Your worth isn't measured by your productivity. Take a moment to appreciate yourself "
     "exactly as you are.", "general"),
    ("Pause right now and feel the weight of your body being supported. Let yourself be held.",
     "daily"),
]


def _due_at(now: datetime, zone: tzinfo, day_offset: int, hour: Optional[int]) -> datetime:
    """Due timestamp relative to the local day of ``now``."""
    if hour is None:
        return now + timedelta(days=day_offset)
    day = local_date(now, zone) + timedelta(days=day_offset)
    return datetime.combine(day, time(hour)).replace(tzinfo=zone).astimezone(timezone.utc)


def _uses_sqlite() -> bool:
    """Mirror of the backend choice made by get_database()"""
    use_sqlite = os.environ.get("USE_SQLITE", "").lower() in ("1", "true", "yes")
    return use_sqlite or not os.environ.get("DATABASE_URL")


def init_database(config: Optional[Config] = None, reset: bool = False) -> Database:
    """
    Create the database (if needed) and its tables.

    Args:
        config: Configuration (creates default if not provided)
        reset: Delete an existing SQLite file first

    Returns:
        Database with the schema in place
    """
    config = config or Config()

    if _uses_sqlite():
        db_path = config.get_database_path()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        if reset and db_path.exists():
            logger.info("Removing existing database at %s", db_path)
            db_path.unlink()
        if not db_path.exists():
            logger.info("Creating database at %s", db_path)
            sqlite3.connect(db_path).close()

    db = get_database(config)
    create_schema(db)
    logger.info("Schema ready (%s)", db.dialect)
    return db


def seed_demo_data(
    storage: Storage,
    user_id: int = DEMO_USER_ID,
    now: Optional[datetime] = None,
    zone: Optional[tzinfo] = None,
    rng: Optional[random.Random] = None,
) -> Dict[str, int]:
    """
    Insert the demo categories, tasks, activities, tips and today's
    productivity record.

    Returns:
        Number of rows created per kind
    """
    now = now or datetime.now(timezone.utc)
    zone = zone or timezone.utc
    rng = rng or random.Random()
    created = {"categories": 0, "tasks": 0, "activities": 0, "tips": 0, "productivity": 0}

    # Categories
    existing = {c.name: c for c in storage.list_categories(user_id)}
    for i, name in enumerate(CATEGORY_NAMES):
        if name in existing:
            continue
        existing[name] = storage.create_category(name, CATEGORY_COLORS[i % len(CATEGORY_COLORS)], user_id)
        created["categories"] += 1

    # Tasks
    titles = {t.title for t in storage.list_tasks(user_id, "all", limit=1000)}
    for title, description, tier, category, mindful, completed, (offset, hour) in DEMO_TASKS:
        if title in titles:
            continue
        storage.create_task({
            "title": title,
            "description": description,
            "priority": tier,
            "category_id": existing[category].id,
            "is_mindful": mindful,
            "completed": completed,
            "due_date": _due_at(now, zone, offset, hour),
            "user_id": user_id,
        }, now)
        created["tasks"] += 1

    # Mindfulness activities
    activity_titles = {a.title for a in storage.list_activities()}
    for activity in DEMO_ACTIVITIES:
        if activity.title not in activity_titles:
            storage.create_activity(activity, now)
            created["activities"] += 1

    # Mindfulness tips
    tip_contents = {tip.content for tip in storage.list_tips()}
    for content, tip_type in DEMO_TIPS:
        if content not in tip_contents:
            storage.create_tip(content, tip_type, now)
            created["tips"] += 1

    # Today's productivity record
    start, end = day_bounds(now, zone)
    if not storage.list_productivity(user_id, start):
        point = ProductivityDataPoint(
            user_id=user_id,
            date=now,
            focus_score=85,
            completed_tasks=3,
            mindfulness_minutes=15,
            hourly_data=[HourlyScore(hour=h, score=rng.randrange(100)) for h in range(8, 19)],
        )
        storage.upsert_productivity(point, start, end)
        created["productivity"] += 1

    logger.info("Seeded demo data for user %s: %s", user_id, created)
    return created


def seed_database(config: Optional[Config] = None, user_id: int = DEMO_USER_ID) -> Dict[str, int]:
    """Seed the configured database, answering calendar questions in its timezone."""
    config = config or Config()
    db = get_database(config)
    return seed_demo_data(Storage(db), user_id, zone=resolve_timezone(config.get_timezone()))
