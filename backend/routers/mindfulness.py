"""
Mindfulness API endpoints.

Tips, guided activities, session logging and the consecutive-day streak.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.dependencies import get_aggregator, get_broadcaster, get_storage, get_user_id
from backend.schemas import (
    ActivityResponse,
    Envelope,
    MindfulnessSessionCreate,
    SessionResponse,
    StreakResponse,
    TipResponse,
    TipType,
)
from backend.websocket import EventBroadcaster
from src.core.storage import Storage
from src.dashboard.aggregator import DashboardAggregator
from src.dashboard.streak import streak_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mindfulness", tags=["mindfulness"])


@router.get("/tips", response_model=Envelope[Optional[TipResponse]])
async def random_tip(
    tip_type: Optional[TipType] = Query(None, alias="type"),
    storage: Storage = Depends(get_storage),
):
    """One random tip, optionally of a given type; null when none exist."""
    tip = storage.random_tip(tip_type)
    return {"data": TipResponse.model_validate(tip) if tip else None}


@router.get("/activities", response_model=Envelope[List[ActivityResponse]])
async def list_activities(storage: Storage = Depends(get_storage)):
    """All guided activities, newest first."""
    activities = storage.list_activities()
    return {"data": [ActivityResponse.model_validate(a) for a in activities]}


@router.post("/sessions", response_model=Envelope[SessionResponse], status_code=201)
async def create_session(
    body: MindfulnessSessionCreate,
    storage: Storage = Depends(get_storage),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    """Record a mindfulness session and notify the user's channel."""
    if body.activity_id is not None and storage.get_activity(body.activity_id) is None:
        raise HTTPException(status_code=404, detail="Activity not found")

    session = storage.create_session(
        user_id=body.user_id,
        duration=body.duration,
        activity_id=body.activity_id,
        completed=body.completed,
    )
    logger.info("Recorded %ss mindfulness session for user %s", session.duration, session.user_id)

    await broadcaster.mindfulness_completed(session)
    return {"data": SessionResponse.model_validate(session)}


@router.get("/streak", response_model=Envelope[StreakResponse])
async def get_streak(
    user_id: int = Depends(get_user_id),
    aggregator: DashboardAggregator = Depends(get_aggregator),
):
    days = aggregator.get_streak(user_id)
    return {"data": StreakResponse(days=days, message=streak_message(days))}
