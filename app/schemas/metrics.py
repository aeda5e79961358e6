"""Schemas for course metrics responses."""
from __future__ import annotations

import datetime as dt
from typing import List

from pydantic import BaseModel

from app.core.metrics import SummaryStatistics

# Summaries are validated straight into the dataclass the comparator fills in.
Summary = SummaryStatistics


class DataPoint(BaseModel):
    date: dt.date
    value: float


class Series(BaseModel):
    """One chart line."""

    metric_name: str
    label: str
    color: str
    data_points: List[DataPoint]


class PeriodComparison(BaseModel):
    current: Summary
    previous: Summary


class Comparison(BaseModel):
    current_period: Summary
    previous_period: Summary


class MetricsResponse(BaseModel):
    """Dashboard payload for one course and period."""

    range: str
    start_date: dt.date
    end_date: dt.date
    summary: Summary
    series: List[Series]
    comparison: Comparison
