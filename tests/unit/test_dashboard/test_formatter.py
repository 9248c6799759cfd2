"""
Tests for the rich dashboard formatter.
"""

from datetime import datetime, timedelta, timezone

from rich.console import Console

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from src.core.models import Category, Task
from src.dashboard.aggregator import CategoryProgress, DailyStats
from src.dashboard.formatter import DashboardFormatter, greeting_for
from src.dashboard.insights import Insight

NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


def render(summary) -> str:
    console = Console(record=True, width=100, color_system=None)
    DashboardFormatter(console).render_dashboard(summary, "Keep going!", now=NOW)
    return console.export_text()


class TestGreeting:

    def test_hours(self):
        assert greeting_for(NOW.replace(hour=8)) == "Good Morning!"
        assert greeting_for(NOW.replace(hour=13)) == "Good Afternoon!"
        assert greeting_for(NOW.replace(hour=19)) == "Good Evening!"
        assert greeting_for(NOW.replace(hour=23)) == "Good Night!"


class TestDashboardFormatter:

    def test_tier_badge_shows_ai_score(self):
        formatter = DashboardFormatter(Console(width=80))
        assert "AI 83" in formatter._format_tier(Task(title="t", priority="ai", ai_priority=83))
        assert "HIGH" in formatter._format_tier(Task(title="t", priority="high"))

    def test_due_date_labels(self):
        formatter = DashboardFormatter(Console(width=80))
        overdue = Task(title="t", due_date=NOW - timedelta(days=2, hours=1))
        today = Task(title="t", due_date=NOW + timedelta(hours=3))
        assert "3d overdue" in formatter._format_due_date(overdue, NOW)
        assert "Due today" in formatter._format_due_date(today, NOW)
        assert "---" in formatter._format_due_date(Task(title="t"), NOW)

    def test_render_full_dashboard(self):
        work = Category(id=1, name="Work", color="#4F46E5", user_id=1)
        summary = {
            "stats": DailyStats(active_tasks=4, completed_today=2, focus_score=85, mindfulness_minutes=15),
            "categories": [CategoryProgress(category=work, completed_tasks=1, total_tasks=3, percentage=33)],
            "streak": 3,
            "insight": Insight("Take a break.", "mindfulness"),
            "priorities": [
                Task(id=1, title="Finalize project proposal", priority="ai", ai_priority=83,
                     is_mindful=True, due_date=NOW + timedelta(days=2)),
            ],
        }
        output = render(summary)
        assert "Good Morning!" in output
        assert "Finalize project proposal" in output
        assert "AI 83" in output
        assert "Work" in output and "1/3" in output and "33%" in output
        assert "3 days" in output
        assert "Take a break." in output
        assert "4 active" in output and "focus 85" in output

    def test_render_empty_dashboard(self):
        summary = {
            "stats": DailyStats(),
            "categories": [],
            "streak": 0,
            "insight": Insight("Start small.", "recommendation"),
            "priorities": [],
        }
        output = render(summary)
        assert "No active tasks" in output
        assert "Categories" not in output
        assert "0 days" in output
