"""
Dashboard module for Mindful Planner.

Provides priority scoring, streak calculation, insight selection, data
aggregation and CLI formatting for the dashboard.
"""

from .prioritizer import (
    calculate_task_priority,
    score_breakdown,
    needs_rescore,
)
from .streak import calculate_streak, streak_message
from .insights import (
    Insight,
    InsightSignals,
    InsightSelector,
    RandomInsightSelector,
    SignalInsightSelector,
    build_insight_selector,
)
from .aggregator import (
    DashboardAggregator,
    DailyStats,
    CategoryProgress,
)
from .formatter import DashboardFormatter

__all__ = [
    # Prioritizer
    'calculate_task_priority',
    'score_breakdown',
    'needs_rescore',
    # Streak
    'calculate_streak',
    'streak_message',
    # Insights
    'Insight',
    'InsightSignals',
    'InsightSelector',
    'RandomInsightSelector',
    'SignalInsightSelector',
    'build_insight_selector',
    # Aggregator
    'DashboardAggregator',
    'DailyStats',
    'CategoryProgress',
    # Formatter
    'DashboardFormatter',
]
