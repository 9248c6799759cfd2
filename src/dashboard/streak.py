"""
Mindfulness streak calculation.

A streak is the number of consecutive calendar days, ending today or
yesterday, that contain at least one mindfulness session. A streak that
last saw a session yesterday is still alive until today is over.
"""

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional

from src.core.timeutil import local_date

STREAK_ACTIVE_MESSAGE = "Keep going! You're building a great habit."
STREAK_EMPTY_MESSAGE = "Start your mindfulness journey today!"


def session_days(timestamps: Iterable[datetime], zone: tzinfo = timezone.utc) -> List[date]:
    """Distinct calendar days that have a session, newest first."""
    return sorted({local_date(ts, zone) for ts in timestamps}, reverse=True)


def calculate_streak(
    timestamps: Iterable[datetime],
    today: Optional[date] = None,
    zone: Optional[tzinfo] = None,
) -> int:
    """
    Count consecutive days with a session, walking back from today.

    Args:
        timestamps: Session creation times (any order, duplicates allowed)
        today: Calendar day to anchor on (defaults to today in ``zone``)
        zone: Timezone that defines calendar days (defaults to UTC)

    Returns:
        Number of consecutive days; 0 when the latest session is older
        than yesterday
    """
    zone = zone or timezone.utc
    if today is None:
        today = local_date(datetime.now(timezone.utc), zone)

    days = session_days(timestamps, zone)
    if not days:
        return 0

    latest = days[0]
    yesterday = today - timedelta(days=1)

    if latest == today:
        cursor = yesterday
    elif latest == yesterday:
        cursor = yesterday - timedelta(days=1)
    else:
        # Streak is broken
        return 0

    streak = 1
    for day in days[1:]:
        if day != cursor:
            break
        streak += 1
        cursor -= timedelta(days=1)

    return streak


def streak_message(days: int) -> str:
    return STREAK_ACTIVE_MESSAGE if days > 0 else STREAK_EMPTY_MESSAGE
