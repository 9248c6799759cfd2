"""
API routers for the Mindful Planner backend.

Each router handles a specific domain:
- tasks: Task CRUD with priority scoring
- categories: Task categories
- mindfulness: Tips, activities, sessions and the streak
- dashboard: Stats, category progress and productivity data
- insights: The dashboard insight card
"""

from .tasks import router as tasks_router
from .categories import router as categories_router
from .mindfulness import router as mindfulness_router
from .dashboard import router as dashboard_router
from .insights import router as insights_router

__all__ = [
    'tasks_router',
    'categories_router',
    'mindfulness_router',
    'dashboard_router',
    'insights_router',
]
