"""Fixed-length reporting windows and period-over-period summaries."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Any, Optional, Sequence


class MetricsRange(str, Enum):
    """Reporting window sizes. A month is always 30 days, a year 365."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def days(self) -> int:
        return _RANGE_DAYS[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> "MetricsRange":
        """Map a query value onto a range, defaulting to a week."""

        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.WEEK


_RANGE_DAYS = {
    MetricsRange.DAY: 1,
    MetricsRange.WEEK: 7,
    MetricsRange.MONTH: 30,
    MetricsRange.YEAR: 365,
}


@dataclass(frozen=True, slots=True)
class DateWindow:
    """Inclusive range of calendar days."""

    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


def current_window(metrics_range: MetricsRange, anchor: date) -> DateWindow:
    return DateWindow(start=anchor - timedelta(days=metrics_range.days - 1), end=anchor)


def previous_window(metrics_range: MetricsRange, anchor: date) -> DateWindow:
    current = current_window(metrics_range, anchor)
    return DateWindow(
        start=current.start - timedelta(days=metrics_range.days),
        end=current.start - timedelta(days=1),
    )


def percent_change(current: float, previous: float) -> float:
    """Relative change in percent; a zero base reports 0."""

    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 1)


@dataclass
class SummaryStatistics:
    """Aggregated statistics over one period; also the API summary shape."""

    total_submissions: int = 0
    correct_submissions: int = 0
    wrong_submissions: int = 0
    submission_success_rate: float = 0.0
    new_learners: int = 0
    new_learners_change: int = 0
    new_learners_change_percent: float = 0.0
    certificates: int = 0
    certificates_change: int = 0
    reputation_delta: int = 0
    knowledge_delta: int = 0
    reviews_count: int = 0
    reviews_count_change: int = 0
    rating_value: float = 0.0
    rating_delta: float = 0.0
    reviews_average: float = 0.0
    active_learners_dau: int = 0
    active_learners_dau_change: int = 0
    active_learners_dau_change_percent: float = 0.0


def _average_dau(rows: Sequence[Any]) -> int:
    if not rows:
        return 0
    return int(sum(row.active_learners_dau for row in rows) / len(rows))


def summarize(rows: Sequence[Any], previous_rows: Sequence[Any] = ()) -> SummaryStatistics:
    """Summarise ``rows`` (ordered by date) against ``previous_rows``.

    Rows are anything exposing the daily metrics columns, typically
    :class:`~app.db.models.metrics.DailyMetrics`.
    """

    total = sum(row.total_submissions for row in rows)
    correct = sum(row.correct_submissions for row in rows)
    new_learners = sum(row.new_learners for row in rows)
    prev_new_learners = sum(row.new_learners for row in previous_rows)
    certificates = sum(row.certificates for row in rows)
    prev_certificates = sum(row.certificates for row in previous_rows)
    reviews_count = sum(row.reviews_count for row in rows)
    prev_reviews_count = sum(row.reviews_count for row in previous_rows)
    dau = _average_dau(rows)
    prev_dau = _average_dau(previous_rows)

    latest_rating = rows[-1].rating_value if rows else 0.0
    prev_latest_rating = previous_rows[-1].rating_value if previous_rows else latest_rating

    reviewed_days = [row.reviews_avg for row in rows if row.reviews_count > 0]
    reviews_average = sum(reviewed_days) / len(reviewed_days) if reviewed_days else 0.0

    return SummaryStatistics(
        total_submissions=total,
        correct_submissions=correct,
        wrong_submissions=sum(row.wrong_submissions for row in rows),
        submission_success_rate=round(correct / total * 100, 1) if total else 0.0,
        new_learners=new_learners,
        new_learners_change=new_learners - prev_new_learners,
        new_learners_change_percent=percent_change(new_learners, prev_new_learners),
        certificates=certificates,
        certificates_change=certificates - prev_certificates,
        reputation_delta=sum(row.reputation_delta for row in rows),
        knowledge_delta=sum(row.knowledge_delta for row in rows),
        reviews_count=reviews_count,
        reviews_count_change=reviews_count - prev_reviews_count,
        rating_value=round(latest_rating, 2),
        rating_delta=round(latest_rating - prev_latest_rating, 2),
        reviews_average=round(reviews_average, 2),
        active_learners_dau=dau,
        active_learners_dau_change=dau - prev_dau,
        active_learners_dau_change_percent=percent_change(dau, prev_dau),
    )
