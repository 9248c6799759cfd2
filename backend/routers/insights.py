"""
Insight endpoint: one short observation about the user's recent habits.
"""

from fastapi import APIRouter, Depends

from backend.dependencies import get_aggregator, get_user_id
from backend.schemas import Envelope, InsightResponse
from src.dashboard.aggregator import DashboardAggregator

router = APIRouter(prefix="/api/ai", tags=["insights"])


@router.get("/insight", response_model=Envelope[InsightResponse])
async def get_insight(
    user_id: int = Depends(get_user_id),
    aggregator: DashboardAggregator = Depends(get_aggregator),
):
    insight = aggregator.generate_insight(user_id)
    return {"data": InsightResponse.model_validate(insight)}
