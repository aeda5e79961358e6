"""Pydantic schemas package."""

from app.schemas.course import CourseCreate, CourseRead, SyncTriggerResponse
from app.schemas.metrics import (
    Comparison,
    DataPoint,
    MetricsResponse,
    PeriodComparison,
    Series,
    Summary,
)
from app.schemas.sync_run import SyncRunRead
from app.schemas.user import Token, TokenPayload, UserCreate, UserLogin, UserRead

__all__ = [
    "Comparison",
    "CourseCreate",
    "CourseRead",
    "DataPoint",
    "MetricsResponse",
    "PeriodComparison",
    "Series",
    "Summary",
    "SyncRunRead",
    "SyncTriggerResponse",
    "Token",
    "TokenPayload",
    "UserCreate",
    "UserLogin",
    "UserRead",
]
