"""Course metrics endpoints for the dashboard."""
from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api import deps
from app.core.metrics import MetricsRange
from app.db.models.user import User
from app.schemas import MetricsResponse, PeriodComparison
from app.services.metrics import MetricsService
from app.utils.dates import utcnow


router = APIRouter(prefix="/courses/{course_id}/metrics", tags=["metrics"])


@router.get("", response_model=MetricsResponse)
def read_metrics(
    course_id: uuid.UUID,
    *,
    range: Optional[str] = Query("week", description="day, week, month or year"),
    anchor_date: Optional[date] = Query(None, description="Last day of the period, defaults to today"),
    current_user: User = Depends(deps.get_current_user),
    service: MetricsService = Depends(deps.get_metrics_service),
) -> MetricsResponse:
    """Return summary, chart series and the comparison with the previous period."""

    anchor = anchor_date or utcnow().date()
    return service.get_metrics(course_id, MetricsRange.parse(range), anchor)


@router.get("/summary", response_model=PeriodComparison)
def read_summary(
    course_id: uuid.UUID,
    *,
    range: Optional[str] = Query("week"),
    anchor_date: Optional[date] = Query(None),
    current_user: User = Depends(deps.get_current_user),
    service: MetricsService = Depends(deps.get_metrics_service),
) -> PeriodComparison:
    anchor = anchor_date or utcnow().date()
    return service.get_summary(course_id, MetricsRange.parse(range), anchor)
