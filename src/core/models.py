"""
Data models for Mindful Planner
Defines core data structures for tasks, categories, mindfulness and productivity
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any
import json


class PriorityTier(str, Enum):
    """User-declared priority label"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    AI = "ai"


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp from a database row.

    SQLite hands back ISO strings, PostgreSQL hands back datetimes. Naive
    values are taken to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value))
        except (ValueError, TypeError):
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime for storage (UTC, fixed-width ISO-8601)"""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Category:
    """Task category owned by one user"""
    id: Optional[int] = None
    name: str = ""
    color: str = ""
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Category':
        """Create Category from database row dictionary"""
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            color=data.get('color', ''),
            user_id=data.get('user_id'),
            created_at=parse_datetime(data.get('created_at')),
        )


@dataclass
class Task:
    """Task data model"""
    id: Optional[int] = None
    title: str = ""
    description: Optional[str] = None
    priority: str = PriorityTier.MEDIUM.value  # 'high', 'medium', 'low', 'ai'
    ai_priority: Optional[int] = None  # Only meaningful for the 'ai' tier
    category_id: Optional[int] = None
    completed: bool = False
    is_mindful: bool = False
    due_date: Optional[datetime] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    category: Optional[Category] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Task':
        """
        Create Task from database row dictionary.

        Rows joined with categories carry the category columns with a
        ``category_`` prefix; they become the embedded ``category``.
        """
        category = None
        if data.get('category_name') is not None:
            category = Category(
                id=data.get('category_id'),
                name=data.get('category_name', ''),
                color=data.get('category_color', ''),
                user_id=data.get('category_user_id'),
                created_at=parse_datetime(data.get('category_created_at')),
            )

        return cls(
            id=data.get('id'),
            title=data.get('title', ''),
            description=data.get('description'),
            priority=data.get('priority', PriorityTier.MEDIUM.value),
            ai_priority=data.get('ai_priority'),
            category_id=data.get('category_id'),
            completed=bool(data.get('completed', False)),
            is_mindful=bool(data.get('is_mindful', False)),
            due_date=parse_datetime(data.get('due_date')),
            user_id=data.get('user_id'),
            created_at=parse_datetime(data.get('created_at')),
            updated_at=parse_datetime(data.get('updated_at')),
            category=category,
        )

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Check if task is overdue"""
        if self.due_date and not self.completed:
            return (now or utcnow()) > self.due_date
        return False


@dataclass
class MindfulnessActivity:
    """A guided activity (meditation, breathing, reflection)"""
    id: Optional[int] = None
    type: str = "meditation"
    title: str = ""
    description: str = ""
    duration: int = 0  # seconds
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MindfulnessActivity':
        return cls(
            id=data.get('id'),
            type=data.get('type', 'meditation'),
            title=data.get('title', ''),
            description=data.get('description', ''),
            duration=data.get('duration', 0),
            created_at=parse_datetime(data.get('created_at')),
        )


@dataclass
class MindfulnessSession:
    """A recorded mindfulness session; immutable once stored"""
    id: Optional[int] = None
    user_id: Optional[int] = None
    activity_id: Optional[int] = None
    duration: int = 0  # seconds actually spent
    completed: bool = True
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MindfulnessSession':
        return cls(
            id=data.get('id'),
            user_id=data.get('user_id'),
            activity_id=data.get('activity_id'),
            duration=data.get('duration', 0),
            completed=bool(data.get('completed', True)),
            created_at=parse_datetime(data.get('created_at')),
        )


@dataclass
class MindfulnessTip:
    """Short mindfulness prompt ('daily', 'task-related', 'general')"""
    id: Optional[int] = None
    content: str = ""
    type: str = "general"
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MindfulnessTip':
        return cls(
            id=data.get('id'),
            content=data.get('content', ''),
            type=data.get('type', 'general'),
            created_at=parse_datetime(data.get('created_at')),
        )


@dataclass
class HourlyScore:
    """Focus score sampled for one hour of the day"""
    hour: int
    score: int


@dataclass
class ProductivityDataPoint:
    """One user's productivity record for a calendar day"""
    id: Optional[int] = None
    user_id: Optional[int] = None
    date: Optional[datetime] = None
    focus_score: Optional[int] = None  # 0-100
    completed_tasks: int = 0
    mindfulness_minutes: int = 0
    hourly_data: List[HourlyScore] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProductivityDataPoint':
        return cls(
            id=data.get('id'),
            user_id=data.get('user_id'),
            date=parse_datetime(data.get('date')),
            focus_score=data.get('focus_score'),
            completed_tasks=data.get('completed_tasks', 0) or 0,
            mindfulness_minutes=data.get('mindfulness_minutes', 0) or 0,
            hourly_data=cls._parse_hourly(data.get('hourly_data')),
            created_at=parse_datetime(data.get('created_at')),
        )

    def hourly_json(self) -> Optional[str]:
        """Serialize hourly samples for the hourly_data column"""
        if not self.hourly_data:
            return None
        return json.dumps([{"hour": s.hour, "score": s.score} for s in self.hourly_data])

    @staticmethod
    def _parse_hourly(json_str: Optional[str]) -> List[HourlyScore]:
        """Parse JSON array of {hour, score} objects"""
        if json_str:
            try:
                result = json.loads(json_str)
            except (json.JSONDecodeError, TypeError):
                return []
            if isinstance(result, list):
                return [
                    HourlyScore(hour=int(item["hour"]), score=int(item["score"]))
                    for item in result
                    if isinstance(item, dict) and "hour" in item and "score" in item
                ]
        return []
