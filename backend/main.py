"""
Mindful Planner FastAPI Backend

Main entry point for the API server: task management with priority
scoring, categories, mindfulness sessions, dashboard statistics and a
WebSocket channel for live updates.

Architecture:
- FastAPI handles HTTP routing and request/response validation
- Pydantic schemas define the camelCase wire format
- src.core.storage provides persistence via SQLite or PostgreSQL
- Each app instance owns its connection registry and broadcaster

Run with:
    uvicorn backend.main:app --reload --port 8000

Or:
    python -m backend.main
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from backend.dependencies import get_config
from backend.errors import register_exception_handlers
from backend.routers import (
    tasks_router,
    categories_router,
    mindfulness_router,
    dashboard_router,
    insights_router,
)
from backend.websocket import ConnectionRegistry, EventBroadcaster, websocket_endpoint
from src.core.config import Config
from src.core.database import Database, get_database
from src.core.logging_setup import configure_logging
from src.dashboard.insights import InsightSelector, build_insight_selector

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: Open the database and report where it lives
    - Shutdown: Log the number of channels still open
    """
    try:
        if app.state.database is None:
            app.state.database = get_database(app.state.config)
        logger.info("Database connected: %s", app.state.database.db_path)
        logger.info("Config loaded from: %s", app.state.config.config_dir)
    except FileNotFoundError as e:
        # Allow app to start; endpoints will fail until the database exists
        logger.error("%s", e)

    yield

    logger.info("Shutting down with %d open WebSocket channel(s)", app.state.registry.count())


def create_app(
    config: Optional[Config] = None,
    database: Optional[Database] = None,
    insight_selector: Optional[InsightSelector] = None,
) -> FastAPI:
    """
    Build a fully wired application.

    Args:
        config: Configuration (cached default if not provided)
        database: Database to use (opened from config on first use if not provided)
        insight_selector: Selector for the insight card (from preferences if not provided)

    Returns:
        FastAPI app with its own connection registry and broadcaster
    """
    config = config or get_config()
    configure_logging(config.get("log_level", "settings", "INFO"))

    app = FastAPI(
        title="Mindful Planner API",
        description="""
        Task planning with mindfulness tracking.

        ## Features

        - **Tasks**: CRUD with rule-based priority scoring for the 'ai' tier
        - **Categories**: Group tasks and track completion per category
        - **Mindfulness**: Tips, guided activities, session logging, daily streak
        - **Dashboard**: Today's stats, category progress, productivity charts
        - **Insights**: A short observation about recent habits
        - **WebSocket** (`/ws`): Live change events for the authenticated user
        """,
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.database = database
    app.state.registry = ConnectionRegistry()
    app.state.broadcaster = EventBroadcaster(app.state.registry)
    app.state.insight_selector = insight_selector or build_insight_selector(
        config.get("insight_selector", "preferences", "random")
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(tasks_router)
    app.include_router(categories_router)
    app.include_router(mindfulness_router)
    app.include_router(dashboard_router)
    app.include_router(insights_router)

    @app.websocket("/ws")
    async def websocket_route(websocket: WebSocket):
        """
        WebSocket endpoint for live updates.

        Protocol:
        - Client sends: { "type": "AUTH", "userId": 1, "timestamp": ... }
        - Server sends: { "type": "AUTH_SUCCESS", "timestamp": "..." }
        - Server sends: { "type": "TASK_UPDATED", "payload": {...}, "timestamp": "..." }
        """
        await websocket_endpoint(websocket, app.state.registry)

    @app.get("/")
    async def root():
        """API root - returns basic info and available endpoints."""
        return {
            "data": {
                "name": "Mindful Planner API",
                "version": API_VERSION,
                "docs": "/docs",
                "endpoints": {
                    "tasks": "/api/tasks",
                    "categories": "/api/categories",
                    "mindfulness": "/api/mindfulness",
                    "dashboard": "/api/dashboard/stats",
                    "insight": "/api/ai/insight",
                    "websocket": "/ws",
                },
            }
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring."""
        try:
            if app.state.database is None:
                app.state.database = get_database(app.state.config)
            app.state.database.execute_one("SELECT 1")
        except Exception as e:
            logger.warning("Health check failed: %s", e)
            return {"data": {"status": "unhealthy", "error": str(e)}}
        return {
            "data": {
                "status": "healthy",
                "database": "connected",
                "connections": app.state.registry.count(),
            }
        }

    return app


app = create_app()


# Allow running directly with: python -m backend.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
