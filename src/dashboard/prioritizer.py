"""
Rule-based priority scoring for tasks in the 'ai' tier.

Scores a task on a 0-100 scale from its due date, how much detail it
carries, whether it is a mindful task, and its declared tier.

Score formula:
    score = clamp(50 + due_date + description + mindfulness + tier, 0, 100)
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from src.core.models import PriorityTier, Task

BASE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100

TIER_POINTS = {
    PriorityTier.HIGH.value: 15,
    PriorityTier.MEDIUM.value: 5,
    PriorityTier.LOW.value: -5,
}

MINDFUL_POINTS = 8


def days_until_due(due_date: datetime, now: Optional[datetime] = None) -> int:
    """
    Whole days between now and the due date, rounded down.

    Overdue tasks give negative numbers; anything due later today gives 0.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if due_date.tzinfo is None:
        due_date = due_date.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return math.floor((due_date - now) / timedelta(days=1))


def calculate_due_date_points(due_date: Optional[datetime], now: Optional[datetime] = None) -> int:
    """
    Points for deadline proximity.

    Scoring:
        - Due today or overdue: +30
        - Due tomorrow: +25
        - Due within 3 days: +20
        - Due within a week: +15
        - Due later: +5
        - No due date: 0
    """
    if due_date is None:
        return 0

    days = days_until_due(due_date, now)

    if days <= 0:
        return 30
    elif days == 1:
        return 25
    elif days <= 3:
        return 20
    elif days <= 7:
        return 15
    else:
        return 5


def calculate_description_points(description: Optional[str]) -> int:
    """More detailed tasks tend to matter more: >200 chars +10, >100 +5, >50 +2."""
    if not description:
        return 0

    # Measured in UTF-16 code units, so a character outside the BMP counts twice
    length = len(description.encode("utf-16-le")) // 2
    if length > 200:
        return 10
    elif length > 100:
        return 5
    elif length > 50:
        return 2
    return 0


def calculate_mindfulness_points(is_mindful: bool) -> int:
    return MINDFUL_POINTS if is_mindful else 0


def calculate_tier_points(tier: Optional[str]) -> int:
    """Declared tier adjustment; the 'ai' tier contributes nothing."""
    if tier is None or tier == PriorityTier.AI.value:
        return 0
    return TIER_POINTS.get(tier, 0)


def score_breakdown(task: Task, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Per-rule contributions behind a task's score.

    Args:
        task: Task (or anything with due_date, description, is_mindful, priority)
        now: Current datetime for the deadline rule

    Returns:
        Dict with each rule's points, the raw sum and the clamped score
    """
    if now is None:
        now = datetime.now(timezone.utc)

    contributions = {
        "base": BASE_SCORE,
        "due_date": calculate_due_date_points(task.due_date, now),
        "description": calculate_description_points(task.description),
        "mindfulness": calculate_mindfulness_points(task.is_mindful),
        "tier": calculate_tier_points(task.priority),
    }
    raw = sum(contributions.values())

    return {
        **contributions,
        "raw": raw,
        "score": max(MIN_SCORE, min(MAX_SCORE, raw)),
    }


def calculate_task_priority(task: Task, now: Optional[datetime] = None) -> int:
    """
    Compute the numeric AI priority for a task.

    Args:
        task: Task to score
        now: Current datetime (defaults to utcnow)

    Returns:
        Integer score between 0 and 100
    """
    return score_breakdown(task, now)["score"]


def needs_rescore(previous_tier: Optional[str], new_tier: Optional[str]) -> bool:
    """A stored score is (re)computed only when a task moves into the 'ai' tier."""
    return new_tier == PriorityTier.AI.value and previous_tier != PriorityTier.AI.value
