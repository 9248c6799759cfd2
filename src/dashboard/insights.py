"""
Insight selection for the dashboard's "AI insight" card.

Callers gather recent usage signals into an InsightSignals bundle and ask an
InsightSelector for one Insight. The default RandomInsightSelector picks
uniformly from a fixed catalog; SignalInsightSelector narrows the catalog to
messages whose pattern is actually present in the signals.
"""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Callable, Dict, List, Optional

from src.core.models import MindfulnessSession, ProductivityDataPoint, Task
from src.core.timeutil import local_date

INSIGHT_TYPES = ("productivity", "mindfulness", "recommendation")


@dataclass
class Insight:
    """One human-readable insight and its category tag."""
    message: str
    type: str  # 'productivity', 'mindfulness', 'recommendation'

    def to_dict(self) -> Dict[str, str]:
        return {"message": self.message, "type": self.type}


@dataclass
class InsightSignals:
    """Aggregated usage data an insight may be conditioned on."""
    productivity: List[ProductivityDataPoint] = field(default_factory=list)
    recent_tasks: List[Task] = field(default_factory=list)
    sessions: List[MindfulnessSession] = field(default_factory=list)
    now: Optional[datetime] = None
    zone: tzinfo = timezone.utc


# =============================================================================
# Pattern checks
# =============================================================================

def _peaks_in_morning(signals: InsightSignals) -> bool:
    """Average hourly focus peaks between 9 AM and 11 AM."""
    totals: Dict[int, List[int]] = {}
    for point in signals.productivity:
        for sample in point.hourly_data:
            totals.setdefault(sample.hour, []).append(sample.score)
    if not totals:
        return False
    averages = {hour: sum(scores) / len(scores) for hour, scores in totals.items()}
    peak_hour = max(averages, key=averages.get)
    return 9 <= peak_hour <= 11


def _takes_short_breaks(signals: InsightSignals) -> bool:
    """Short sessions (two minutes or less) alongside completed work."""
    short = [s for s in signals.sessions if s.duration <= 120]
    completed = [t for t in signals.recent_tasks if t.completed]
    return bool(short) and bool(completed)


def _postpones_work(signals: InsightSignals) -> bool:
    """Overdue, unfinished tasks in a category named 'Work'."""
    now = signals.now or datetime.now(timezone.utc)
    return any(
        task.category is not None
        and task.category.name.lower() == "work"
        and task.is_overdue(now)
        for task in signals.recent_tasks
    )


def _morning_meditation_lifts_focus(signals: InsightSignals) -> bool:
    """Days with a pre-noon session have a higher average focus score."""
    zone = signals.zone
    morning_days = {
        local_date(s.created_at, zone)
        for s in signals.sessions
        if s.created_at is not None and s.created_at.astimezone(zone).hour < 12
    }
    with_session, without_session = [], []
    for point in signals.productivity:
        if point.date is None or point.focus_score is None:
            continue
        bucket = with_session if local_date(point.date, zone) in morning_days else without_session
        bucket.append(point.focus_score)
    if not with_session or not without_session:
        return False
    return sum(with_session) / len(with_session) > sum(without_session) / len(without_session)


def _detailed_tasks_get_done(signals: InsightSignals) -> bool:
    """Completed tasks skew towards ones with detailed descriptions."""
    completed = [t for t in signals.recent_tasks if t.completed]
    detailed = [t for t in completed if t.description and len(t.description) > 100]
    return bool(detailed) and len(detailed) * 2 >= len(completed)


@dataclass
class CatalogEntry:
    insight: Insight
    applies: Callable[[InsightSignals], bool]


CATALOG: List[CatalogEntry] = [
    CatalogEntry(
        Insight(
            "Based on your patterns, your most productive time is between 9 AM and 11 AM. "
            "I've prioritized your creative tasks during this window.",
            "productivity",
        ),
        _peaks_in_morning,
    ),
    CatalogEntry(
        Insight(
            "You complete more tasks when you take short mindfulness breaks. "
            "Consider adding more 2-minute meditations between tasks.",
            "mindfulness",
        ),
        _takes_short_breaks,
    ),
    CatalogEntry(
        Insight(
            "I've noticed you tend to postpone tasks in the 'Work' category. "
            "Would breaking them into smaller steps help?",
            "recommendation",
        ),
        _postpones_work,
    ),
    CatalogEntry(
        Insight(
            "Your focus score increases on days when you complete a morning meditation. "
            "Consider making this a daily habit.",
            "mindfulness",
        ),
        _morning_meditation_lifts_focus,
    ),
    CatalogEntry(
        Insight(
            "Tasks with detailed descriptions are completed 30% faster. "
            "Try adding more details to your high-priority tasks.",
            "productivity",
        ),
        _detailed_tasks_get_done,
    ),
]


# =============================================================================
# Selectors
# =============================================================================

class InsightSelector(ABC):
    """Chooses one insight for a user from their usage signals."""

    @abstractmethod
    def select(self, signals: InsightSignals) -> Insight:
        pass


class RandomInsightSelector(InsightSelector):
    """Uniform pick from the catalog; the signals are not consulted."""

    def __init__(self, catalog: Optional[List[CatalogEntry]] = None,
                 rng: Optional[random.Random] = None):
        self.catalog = catalog if catalog is not None else CATALOG
        self.rng = rng or random.Random()

    def select(self, signals: InsightSignals) -> Insight:
        return self.rng.choice(self.catalog).insight


class SignalInsightSelector(InsightSelector):
    """
    Uniform pick among catalog entries whose pattern holds for the signals.

    Falls back to the whole catalog when no pattern is present, so callers
    always get an insight.
    """

    def __init__(self, catalog: Optional[List[CatalogEntry]] = None,
                 rng: Optional[random.Random] = None):
        self.catalog = catalog if catalog is not None else CATALOG
        self.rng = rng or random.Random()

    def matching(self, signals: InsightSignals) -> List[CatalogEntry]:
        return [entry for entry in self.catalog if entry.applies(signals)]

    def select(self, signals: InsightSignals) -> Insight:
        candidates = self.matching(signals) or self.catalog
        return self.rng.choice(candidates).insight


SELECTORS = {
    "random": RandomInsightSelector,
    "signals": SignalInsightSelector,
}


def build_insight_selector(name: str = "random", rng: Optional[random.Random] = None) -> InsightSelector:
    """Create the selector named in preferences ('random' or 'signals')."""
    try:
        selector_cls = SELECTORS[name]
    except KeyError:
        raise ValueError(f"Unknown insight selector: {name}") from None
    return selector_cls(rng=rng)
