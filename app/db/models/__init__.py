"""Database models package."""
from app.db.models.user import User
from app.db.models.course import Course
from app.db.models.metrics import DailyMetrics
from app.db.models.sync_run import SyncRun

__all__ = [
    "User",
    "Course",
    "DailyMetrics",
    "SyncRun",
]
