"""
Dependency injection for FastAPI endpoints.

Shared resources (config, database, connection registry, broadcaster,
insight selector) live on ``app.state`` and are set up by
backend.main.create_app; these functions hand them to route handlers via
Depends(). Independent app instances therefore share nothing.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request

from backend.websocket import ConnectionRegistry, EventBroadcaster
from src.core.config import Config
from src.core.database import Database, get_database as open_database
from src.core.storage import Storage
from src.dashboard.aggregator import DashboardAggregator


@lru_cache()
def get_config() -> Config:
    """
    Get cached Config instance.

    Used when create_app() is not handed a config explicitly.
    """
    return Config()


def get_app_config(request: Request) -> Config:
    return request.app.state.config


def get_database(request: Request) -> Database:
    """
    Get the app's Database instance.

    Opened on first use so that the app can start (and report an unhealthy
    /health) before the database has been initialized.
    """
    state = request.app.state
    if state.database is None:
        state.database = open_database(state.config)
    return state.database


def get_storage(db: Database = Depends(get_database)) -> Storage:
    return Storage(db)


def get_aggregator(request: Request, db: Database = Depends(get_database)) -> DashboardAggregator:
    """Get DashboardAggregator for dashboard data."""
    state = request.app.state
    return DashboardAggregator(db, state.config, insight_selector=state.insight_selector)


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


def get_broadcaster(request: Request) -> EventBroadcaster:
    return request.app.state.broadcaster


def get_user_id(user_id: Optional[str] = Query(None, alias="userId")) -> int:
    """Required ``userId`` query parameter; 400 if missing or not an integer."""
    try:
        return int(user_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid user ID")
