"""
Task management API endpoints.

CRUD for tasks. Tasks in the 'ai' tier get a computed priority score;
every successful write is pushed to the owner's WebSocket channel.
"""

import dataclasses
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.dependencies import (
    get_aggregator,
    get_app_config,
    get_broadcaster,
    get_storage,
    get_user_id,
)
from backend.schemas import DeleteResult, Envelope, TaskCreate, TaskResponse, TaskUpdate
from backend.websocket import EventBroadcaster
from src.core.config import Config
from src.core.models import PriorityTier, Task, utcnow
from src.core.storage import TASK_FILTERS, Storage
from src.dashboard.aggregator import DashboardAggregator
from src.dashboard.prioritizer import calculate_task_priority, needs_rescore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _require_task(storage: Storage, task_id: int) -> Task:
    task = storage.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def _require_category(storage: Storage, category_id: int, user_id: int) -> None:
    """The category must exist and belong to the task's owner."""
    category = storage.get_category(category_id)
    if category is None or category.user_id != user_id:
        raise HTTPException(status_code=404, detail="Category not found")


@router.get("", response_model=Envelope[List[TaskResponse]])
async def list_tasks(
    user_id: int = Depends(get_user_id),
    task_filter: str = Query("all", alias="filter", description="all, today, important, completed"),
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: int = Query(0, ge=0),
    storage: Storage = Depends(get_storage),
    aggregator: DashboardAggregator = Depends(get_aggregator),
    config: Config = Depends(get_app_config),
):
    """
    List a user's tasks, scored 'ai' tasks first, then newest first.

    ``today`` means due on or after the start of the current day.
    """
    if task_filter not in TASK_FILTERS:
        raise HTTPException(status_code=400, detail=f"Invalid filter: {task_filter}")

    if limit is None:
        limit = config.get("task_list_limit", "preferences", 50)

    tasks = storage.list_tasks(
        user_id,
        task_filter,
        today_start=aggregator.today_start(),
        limit=limit,
        offset=offset,
    )
    return {"data": [TaskResponse.model_validate(t) for t in tasks]}


@router.get("/{task_id}", response_model=Envelope[TaskResponse])
async def get_task(task_id: int, storage: Storage = Depends(get_storage)):
    """Get a single task by ID."""
    task = _require_task(storage, task_id)
    return {"data": TaskResponse.model_validate(task)}


@router.post("", response_model=Envelope[TaskResponse], status_code=201)
async def create_task(
    body: TaskCreate,
    storage: Storage = Depends(get_storage),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    """
    Create a new task.

    Tasks created in the 'ai' tier are scored immediately.
    """
    if body.category_id is not None:
        _require_category(storage, body.category_id, body.user_id)

    now = utcnow()
    fields = body.model_dump()
    if body.priority == PriorityTier.AI.value:
        fields["ai_priority"] = calculate_task_priority(Task(**fields), now)

    task = storage.create_task(fields, now)
    logger.info("Created task %s for user %s", task.id, task.user_id)

    await broadcaster.task_created(task)
    return {"data": TaskResponse.model_validate(task)}


@router.put("/{task_id}", response_model=Envelope[TaskResponse])
async def update_task(
    task_id: int,
    body: TaskUpdate,
    storage: Storage = Depends(get_storage),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    """
    Partially update a task.

    The score is computed only when the task moves into the 'ai' tier, from
    the stored task with this update applied. Leaving the tier clears it.
    """
    existing = _require_task(storage, task_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("category_id") is not None:
        _require_category(storage, changes["category_id"], existing.user_id)

    now = utcnow()
    new_tier = changes.get("priority", existing.priority)

    if needs_rescore(existing.priority, new_tier):
        merged = dataclasses.replace(existing, **changes)
        changes["ai_priority"] = calculate_task_priority(merged, now)
    elif new_tier != PriorityTier.AI.value and existing.ai_priority is not None:
        changes["ai_priority"] = None

    task = storage.update_task(task_id, changes, now)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")

    await broadcaster.task_updated(task)
    return {"data": TaskResponse.model_validate(task)}


@router.delete("/{task_id}", response_model=Envelope[DeleteResult])
async def delete_task(
    task_id: int,
    storage: Storage = Depends(get_storage),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    """Delete a task permanently."""
    existing = _require_task(storage, task_id)

    if not storage.delete_task(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    logger.info("Deleted task %s", task_id)

    await broadcaster.task_deleted(existing.user_id, task_id)
    return {"data": DeleteResult(success=True)}
