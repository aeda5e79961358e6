"""Bucket raw course activity into per-day statistics."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Set

if TYPE_CHECKING:
    from app.services.stepik.models import Review, Submission


@dataclass(slots=True)
class DayBucket:
    """Statistics for one UTC calendar day."""

    day: date
    correct: int = 0
    wrong: int = 0
    other: int = 0
    review_scores: list[int] = field(default_factory=list)
    user_ids: Set[int] = field(default_factory=set)

    @property
    def total(self) -> int:
        return self.correct + self.wrong + self.other

    @property
    def active_users(self) -> int:
        return len(self.user_ids)

    @property
    def reviews_count(self) -> int:
        return len(self.review_scores)

    @property
    def reviews_average(self) -> float:
        if not self.review_scores:
            return 0.0
        return sum(self.review_scores) / len(self.review_scores)

    def add_submission(self, submission: Submission) -> None:
        if submission.is_correct:
            self.correct += 1
        elif submission.is_wrong:
            self.wrong += 1
        else:
            self.other += 1
        self.user_ids.add(submission.user_id)

    def add_review(self, review: Review) -> None:
        self.review_scores.append(review.score)


def iter_days(start: date, end: date) -> Iterable[date]:
    """Yield every date from ``start`` to ``end`` inclusive."""

    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def aggregate_daily(
    submissions: Iterable[Submission],
    reviews: Iterable[Review],
    window_start: date,
    window_end: date,
) -> Dict[date, DayBucket]:
    """Return one bucket per day in ``[window_start, window_end]``, oldest first.

    Days without activity get an empty bucket. Records outside the window are
    dropped. Timestamps are expected in UTC.
    """

    buckets = {day: DayBucket(day=day) for day in iter_days(window_start, window_end)}

    for submission in submissions:
        bucket = buckets.get(submission.occurred_at.date())
        if bucket is not None:
            bucket.add_submission(submission)

    for review in reviews:
        bucket = buckets.get(review.created_at.date())
        if bucket is not None:
            bucket.add_review(review)

    return buckets


def estimate_growth(current_total: int, previous_total: Optional[int]) -> int:
    """Growth of a cumulative counter since the last recorded value, never negative."""

    return max(0, current_total - (previous_total or 0))

