"""
Core module for Mindful Planner
Contains database, configuration, storage and model definitions
"""

from .config import Config
from .database import Database, SQLiteDatabase, PostgreSQLDatabase, get_database
from .models import (
    Task,
    Category,
    MindfulnessActivity,
    MindfulnessSession,
    MindfulnessTip,
    ProductivityDataPoint,
    HourlyScore,
    PriorityTier,
)
from .storage import Storage

__all__ = [
    'Config',
    'Database',
    'SQLiteDatabase',
    'PostgreSQLDatabase',
    'get_database',
    'Task',
    'Category',
    'MindfulnessActivity',
    'MindfulnessSession',
    'MindfulnessTip',
    'ProductivityDataPoint',
    'HourlyScore',
    'PriorityTier',
    'Storage',
]
