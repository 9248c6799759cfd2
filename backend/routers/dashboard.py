"""
Dashboard data aggregation API endpoints.

Headline stats, per-category progress and the productivity chart data,
all computed by the DashboardAggregator.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.dependencies import get_aggregator, get_user_id
from backend.schemas import (
    CategoryProgressResponse,
    DashboardStatsResponse,
    Envelope,
    ProductivityCreate,
    ProductivityResponse,
)
from src.core.models import HourlyScore, ProductivityDataPoint
from src.core.timeutil import TIMEFRAMES
from src.dashboard.aggregator import DashboardAggregator

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=Envelope[DashboardStatsResponse])
async def get_stats(
    user_id: int = Depends(get_user_id),
    aggregator: DashboardAggregator = Depends(get_aggregator),
):
    """
    Today's headline numbers.

    - activeTasks: incomplete tasks
    - completedToday: tasks completed and last updated today
    - focusScore: from the latest productivity record (0 if none)
    - mindfulnessMinutes: today's session time, rounded to whole minutes
    """
    stats = aggregator.get_stats(user_id)
    return {"data": DashboardStatsResponse.model_validate(stats)}


@router.get("/category-progress", response_model=Envelope[List[CategoryProgressResponse]])
async def get_category_progress(
    user_id: int = Depends(get_user_id),
    aggregator: DashboardAggregator = Depends(get_aggregator),
):
    progress = aggregator.get_category_progress(user_id)
    return {"data": [CategoryProgressResponse.model_validate(p) for p in progress]}


@router.get("/productivity", response_model=Envelope[List[ProductivityResponse]])
async def get_productivity(
    user_id: int = Depends(get_user_id),
    timeframe: str = Query("day", description="day, week or month"),
    aggregator: DashboardAggregator = Depends(get_aggregator),
):
    """Productivity records inside the timeframe, oldest first."""
    if timeframe not in TIMEFRAMES:
        raise HTTPException(status_code=400, detail=f"Invalid timeframe: {timeframe}")

    points = aggregator.get_productivity(user_id, timeframe)
    return {"data": [ProductivityResponse.model_validate(p) for p in points]}


@router.post("/productivity", response_model=Envelope[ProductivityResponse], status_code=201)
async def record_productivity(
    body: ProductivityCreate,
    aggregator: DashboardAggregator = Depends(get_aggregator),
):
    """Store the user's record for the day; an existing one is replaced."""
    point = ProductivityDataPoint(
        user_id=body.user_id,
        date=body.date,
        focus_score=body.focus_score,
        completed_tasks=body.completed_tasks,
        mindfulness_minutes=body.mindfulness_minutes,
        hourly_data=[HourlyScore(hour=h.hour, score=h.score) for h in body.hourly_data],
    )
    stored = aggregator.record_productivity(point)
    return {"data": ProductivityResponse.model_validate(stored)}
