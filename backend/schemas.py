"""
Pydantic schemas for API request/response validation.

These schemas provide:
- Validation of request bodies (400 with per-field messages on failure)
- camelCase JSON on the wire, snake_case attributes in Python
- The WebSocket message types, including the change-event union

Every HTTP response body is wrapped as ``{"data": ...}``; errors are
``{"error": ...}`` (see backend/errors.py).
"""

from datetime import datetime, timezone
from typing import Annotated, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")

Tier = Literal["high", "medium", "low", "ai"]
ActivityType = Literal["meditation", "breathing", "reflection"]
TipType = Literal["daily", "task-related", "general"]
InsightType = Literal["productivity", "mindfulness", "recommendation"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base schema: snake_case fields, camelCase JSON, readable from dataclasses."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(CamelModel, Generic[T]):
    """Standard success wrapper."""
    data: T


class ErrorResponse(BaseModel):
    """Error response for API errors."""
    error: Union[str, List[dict]]


class DeleteResult(CamelModel):
    success: bool = True


# =============================================================================
# Category Schemas
# =============================================================================

class CategoryCreate(CamelModel):
    """Request body for creating a category."""
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(..., min_length=1, max_length=32)
    user_id: int


class CategoryResponse(CamelModel):
    id: int
    name: str
    color: str
    user_id: int
    created_at: Optional[datetime] = None


# =============================================================================
# Task Schemas
# =============================================================================

class TaskCreate(CamelModel):
    """Request body for creating a task. ``aiPriority`` is never accepted."""
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    priority: Tier = "medium"
    category_id: Optional[int] = None
    completed: bool = False
    is_mindful: bool = False
    due_date: Optional[datetime] = None
    user_id: int


class TaskUpdate(CamelModel):
    """Request body for a partial task update; only sent fields change."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    priority: Optional[Tier] = None
    category_id: Optional[int] = None
    completed: Optional[bool] = None
    is_mindful: Optional[bool] = None
    due_date: Optional[datetime] = None

    @field_validator("title", "priority", "completed", "is_mindful")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class TaskResponse(CamelModel):
    """Task data returned from API, with its category embedded."""
    id: int
    title: str
    description: Optional[str] = None
    priority: str
    ai_priority: Optional[int] = None
    category_id: Optional[int] = None
    completed: bool = False
    is_mindful: bool = False
    due_date: Optional[datetime] = None
    user_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    category: Optional[CategoryResponse] = None


# =============================================================================
# Mindfulness Schemas
# =============================================================================

class ActivityResponse(CamelModel):
    id: int
    type: ActivityType
    title: str
    description: str
    duration: int
    created_at: Optional[datetime] = None


class TipResponse(CamelModel):
    id: int
    content: str
    type: TipType
    created_at: Optional[datetime] = None


class MindfulnessSessionCreate(CamelModel):
    """Request body for recording a completed mindfulness session."""
    user_id: int
    activity_id: Optional[int] = None
    duration: int = Field(..., ge=1, description="Seconds spent")
    completed: bool = True


class SessionResponse(CamelModel):
    id: int
    user_id: int
    activity_id: Optional[int] = None
    duration: int
    completed: bool = True
    created_at: Optional[datetime] = None


class StreakResponse(CamelModel):
    days: int
    message: str


# =============================================================================
# Dashboard Schemas
# =============================================================================

class HourlyScoreSchema(CamelModel):
    hour: int = Field(..., ge=0, le=23)
    score: int = Field(..., ge=0, le=100)


class ProductivityCreate(CamelModel):
    """Request body for storing a user's productivity record for a day."""
    user_id: int
    date: Optional[datetime] = None
    focus_score: Optional[int] = Field(default=None, ge=0, le=100)
    completed_tasks: int = Field(default=0, ge=0)
    mindfulness_minutes: int = Field(default=0, ge=0)
    hourly_data: List[HourlyScoreSchema] = Field(default_factory=list)


class ProductivityResponse(CamelModel):
    id: int
    user_id: int
    date: datetime
    focus_score: Optional[int] = None
    completed_tasks: int = 0
    mindfulness_minutes: int = 0
    hourly_data: List[HourlyScoreSchema] = Field(default_factory=list)


class DashboardStatsResponse(CamelModel):
    active_tasks: int
    completed_today: int
    focus_score: int
    mindfulness_minutes: int


class CategoryProgressResponse(CamelModel):
    category: CategoryResponse
    completed_tasks: int
    total_tasks: int
    percentage: int


class InsightResponse(CamelModel):
    message: str
    type: InsightType


# =============================================================================
# WebSocket Messages
# =============================================================================

class AuthMessage(CamelModel):
    """First frame a client sends: ``{"type": "AUTH", "userId": 1}``"""
    type: Literal["AUTH"]
    user_id: int = Field(..., ge=1)
    timestamp: Optional[Union[int, float, str]] = None


class AuthSuccess(CamelModel):
    type: Literal["AUTH_SUCCESS"] = "AUTH_SUCCESS"
    timestamp: datetime = Field(default_factory=_now)


class DeletedTaskPayload(CamelModel):
    id: int


class TaskCreatedEvent(CamelModel):
    type: Literal["TASK_CREATED"] = "TASK_CREATED"
    payload: TaskResponse
    timestamp: datetime = Field(default_factory=_now)


class TaskUpdatedEvent(CamelModel):
    type: Literal["TASK_UPDATED"] = "TASK_UPDATED"
    payload: TaskResponse
    timestamp: datetime = Field(default_factory=_now)


class TaskDeletedEvent(CamelModel):
    type: Literal["TASK_DELETED"] = "TASK_DELETED"
    payload: DeletedTaskPayload
    timestamp: datetime = Field(default_factory=_now)


class MindfulnessCompletedEvent(CamelModel):
    type: Literal["MINDFULNESS_COMPLETED"] = "MINDFULNESS_COMPLETED"
    payload: SessionResponse
    timestamp: datetime = Field(default_factory=_now)


Event = Annotated[
    Union[TaskCreatedEvent, TaskUpdatedEvent, TaskDeletedEvent, MindfulnessCompletedEvent],
    Field(discriminator="type"),
]

event_adapter: TypeAdapter = TypeAdapter(Event)
