"""Read path for course metrics: summaries, comparisons and chart series."""
from __future__ import annotations

import uuid
from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Sequence

from sqlalchemy.orm import Session

from app.core.metrics import MetricsRange, current_window, previous_window, summarize
from app.db.models.course import Course
from app.db.models.metrics import DailyMetrics
from app.services.metrics_store import MetricsStore
from app.utils.exceptions import NotFoundError

# (metric name, label, colour, column)
SERIES_DEFINITIONS = (
    ("total_submissions", "Total submissions", "#10B981", "total_submissions"),
    ("correct_submissions", "Correct submissions", "#3B82F6", "correct_submissions"),
    ("wrong_submissions", "Wrong submissions", "#EF4444", "wrong_submissions"),
    ("new_learners", "New learners", "#8B5CF6", "new_learners"),
    ("dau", "Active learners (DAU)", "#F59E0B", "active_learners_dau"),
    ("rating", "Course rating", "#EC4899", "rating_value"),
)


def build_series(rows: Sequence[DailyMetrics]) -> List[Dict[str, Any]]:
    """Chart series for ``rows``, one entry per metric."""

    return [
        {
            "metric_name": name,
            "label": label,
            "color": color,
            "data_points": [
                {"date": row.date, "value": float(getattr(row, column) or 0)} for row in rows
            ],
        }
        for name, label, color, column in SERIES_DEFINITIONS
    ]


class MetricsService:
    """Compare a window of the stored series with the window before it.

    Nothing here writes or caches; every call reads the rows fresh.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.store = MetricsStore(db)

    def get_summary(
        self, course_id: uuid.UUID, metrics_range: MetricsRange, anchor: date
    ) -> Dict[str, Any]:
        """Return ``{"current": ..., "previous": ...}`` summary statistics."""

        current_rows, previous_rows = self._load_windows(course_id, metrics_range, anchor)
        return {
            "current": asdict(summarize(current_rows, previous_rows)),
            "previous": asdict(summarize(previous_rows)),
        }

    def get_metrics(
        self, course_id: uuid.UUID, metrics_range: MetricsRange, anchor: date
    ) -> Dict[str, Any]:
        """Return summary, chart series and comparison for the dashboard."""

        current_rows, previous_rows = self._load_windows(course_id, metrics_range, anchor)
        current = asdict(summarize(current_rows, previous_rows))
        previous = asdict(summarize(previous_rows))
        window = current_window(metrics_range, anchor)
        return {
            "range": metrics_range.value,
            "start_date": window.start,
            "end_date": window.end,
            "summary": current,
            "series": build_series(current_rows),
            "comparison": {"current_period": current, "previous_period": previous},
        }

    def _load_windows(
        self, course_id: uuid.UUID, metrics_range: MetricsRange, anchor: date
    ) -> tuple[List[DailyMetrics], List[DailyMetrics]]:
        if self.db.get(Course, course_id) is None:
            raise NotFoundError(f"Course {course_id} not found")

        current = current_window(metrics_range, anchor)
        previous = previous_window(metrics_range, anchor)
        return (
            self.store.get_range(course_id, current.start, current.end),
            self.store.get_range(course_id, previous.start, previous.end),
        )


__all__ = ["MetricsService", "SERIES_DEFINITIONS", "build_series"]
