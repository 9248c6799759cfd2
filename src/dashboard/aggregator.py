"""
Data aggregation module for the Mindful Planner dashboard.

Collects tasks, categories, mindfulness sessions and productivity records
into the figures shown on the dashboard: daily stats, per-category progress,
productivity charts, the mindfulness streak and the insight card.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

from src.core.config import Config
from src.core.database import Database
from src.core.models import Category, ProductivityDataPoint
from src.core.storage import Storage
from src.core.timeutil import day_bounds, local_date, resolve_timezone, timeframe_start
from src.dashboard.insights import Insight, InsightSelector, InsightSignals, build_insight_selector
from src.dashboard.streak import calculate_streak

logger = logging.getLogger(__name__)

RECENT_TASK_LIMIT = 10


@dataclass
class DailyStats:
    """Headline numbers for the dashboard."""
    active_tasks: int = 0
    completed_today: int = 0
    focus_score: int = 0
    mindfulness_minutes: int = 0


@dataclass
class CategoryProgress:
    """Completion figures for one category."""
    category: Category
    completed_tasks: int = 0
    total_tasks: int = 0
    percentage: int = 0


def completion_percentage(completed: int, total: int) -> int:
    """round(completed / total * 100), halves rounded up; 0 for an empty category."""
    if total <= 0:
        return 0
    return (completed * 200 + total) // (2 * total)


def seconds_to_minutes(seconds: int) -> int:
    """Whole minutes, rounded down."""
    return seconds // 60


class DashboardAggregator:
    """
    Central data aggregation for the dashboard.

    Queries storage and combines the results into the structures the API
    returns. All "today" questions are answered in the configured timezone.
    """

    def __init__(
        self,
        db: Database,
        config: Optional[Config] = None,
        insight_selector: Optional[InsightSelector] = None,
    ):
        """
        Initialize aggregator.

        Args:
            db: Database connection
            config: Configuration (creates default if not provided)
            insight_selector: Selector for the insight card (built from
                preferences if not provided)
        """
        self.db = db
        self.config = config if config else Config()
        self.storage = Storage(db)
        self.zone = resolve_timezone(self.config.get("timezone", "settings", "UTC"))
        if insight_selector is None:
            insight_selector = build_insight_selector(
                self.config.get("insight_selector", "preferences", "random")
            )
        self.insight_selector = insight_selector

    def today_start(self, now: Optional[datetime] = None) -> datetime:
        """Start of the current local day, in UTC."""
        return day_bounds(now or datetime.now(timezone.utc), self.zone)[0]

    def get_stats(self, user_id: int, now: Optional[datetime] = None) -> DailyStats:
        """
        Compute today's headline stats for a user.

        - active_tasks: tasks not yet completed
        - completed_today: completed tasks last touched today
        - focus_score: focus score of the most recent productivity record
        - mindfulness_minutes: minutes of mindfulness recorded today
        """
        start = self.today_start(now)

        latest = self.storage.latest_productivity(user_id)
        seconds = self.storage.session_seconds_since(user_id, start)

        return DailyStats(
            active_tasks=self.storage.count_tasks(user_id, completed=False),
            completed_today=self.storage.count_tasks(user_id, completed=True, updated_since=start),
            focus_score=(latest.focus_score or 0) if latest else 0,
            mindfulness_minutes=seconds_to_minutes(seconds),
        )

    def get_category_progress(self, user_id: int) -> List[CategoryProgress]:
        """Completed/total task counts for each of a user's categories."""
        progress = []
        for category in self.storage.list_categories(user_id):
            total = self.storage.count_tasks(user_id, category_id=category.id)
            completed = self.storage.count_tasks(user_id, completed=True, category_id=category.id)
            progress.append(CategoryProgress(
                category=category,
                completed_tasks=completed,
                total_tasks=total,
                percentage=completion_percentage(completed, total),
            ))
        return progress

    def get_productivity(
        self,
        user_id: int,
        timeframe: str = "day",
        now: Optional[datetime] = None,
    ) -> List[ProductivityDataPoint]:
        """Productivity records inside the timeframe ('day', 'week', 'month')."""
        since = timeframe_start(timeframe, now or datetime.now(timezone.utc), self.zone)
        return self.storage.list_productivity(user_id, since)

    def record_productivity(self, point: ProductivityDataPoint) -> ProductivityDataPoint:
        """Upsert the record for the point's local calendar day."""
        if point.date is None:
            point.date = datetime.now(timezone.utc)
        start, end = day_bounds(point.date, self.zone)
        return self.storage.upsert_productivity(point, start, end)

    def get_streak(self, user_id: int, now: Optional[datetime] = None) -> int:
        """Consecutive-day mindfulness streak for a user."""
        now = now or datetime.now(timezone.utc)
        sessions = self.storage.list_sessions(user_id)
        timestamps = [s.created_at for s in sessions if s.created_at is not None]
        return calculate_streak(timestamps, today=local_date(now, self.zone), zone=self.zone)

    def gather_insight_signals(self, user_id: int, now: Optional[datetime] = None) -> InsightSignals:
        """Last week of productivity, the most recent tasks and all sessions."""
        now = now or datetime.now(timezone.utc)
        return InsightSignals(
            productivity=self.get_productivity(user_id, "week", now),
            recent_tasks=self.storage.list_tasks(user_id, "all", limit=RECENT_TASK_LIMIT),
            sessions=self.storage.list_sessions(user_id),
            now=now,
            zone=self.zone,
        )

    def generate_insight(self, user_id: int, now: Optional[datetime] = None) -> Insight:
        signals = self.gather_insight_signals(user_id, now)
        insight = self.insight_selector.select(signals)
        logger.debug("Selected %s insight for user %s", insight.type, user_id)
        return insight

    def summary(self, user_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Everything the CLI dashboard shows, in one call."""
        now = now or datetime.now(timezone.utc)
        open_tasks = [t for t in self.storage.list_tasks(user_id, "all") if not t.completed]
        return {
            "stats": self.get_stats(user_id, now),
            "categories": self.get_category_progress(user_id),
            "streak": self.get_streak(user_id, now),
            "insight": self.generate_insight(user_id, now),
            "priorities": open_tasks[:5],
        }
