"""Tests for per-day bucketing of course activity."""
from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from app.core.metrics import aggregate_daily, estimate_growth
from app.services.stepik.models import Review, Submission, parse_timestamp


def _submission(submission_id: int, user_id: int, status: str, when: datetime) -> Submission:
    return Submission(id=submission_id, step_id=1, user_id=user_id, status=status, occurred_at=when)


def _review(review_id: int, score: int, when: datetime) -> Review:
    return Review(id=review_id, course_id=42, user_id=review_id, score=score, created_at=when)


def _at(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 3, day, hour, tzinfo=timezone.utc)


def test_counts_by_status_and_distinct_users() -> None:
    submissions = [
        _submission(1, 10, "correct", _at(5, 9)),
        _submission(2, 10, "wrong", _at(5, 10)),
        _submission(3, 10, "correct", _at(5, 11)),
        _submission(4, 11, "wrong", _at(5, 12)),
        _submission(5, 11, "evaluation", _at(5, 23)),
    ]

    buckets = aggregate_daily(submissions, [], date(2024, 3, 5), date(2024, 3, 5))

    day = buckets[date(2024, 3, 5)]
    assert (day.correct, day.wrong, day.other) == (2, 2, 1)
    assert day.total == 5
    assert day.active_users == 2


def test_window_days_without_activity_are_zero_filled() -> None:
    buckets = aggregate_daily([_submission(1, 1, "correct", _at(3))], [], date(2024, 3, 1), date(2024, 3, 4))

    assert list(buckets) == [date(2024, 3, d) for d in range(1, 5)]
    assert buckets[date(2024, 3, 1)].total == 0
    assert buckets[date(2024, 3, 1)].active_users == 0
    assert buckets[date(2024, 3, 3)].total == 1


def test_records_outside_window_are_dropped() -> None:
    submissions = [_submission(1, 1, "correct", _at(1)), _submission(2, 2, "wrong", _at(9))]
    reviews = [_review(1, 5, _at(9))]

    buckets = aggregate_daily(submissions, reviews, date(2024, 3, 2), date(2024, 3, 8))

    assert sum(b.total for b in buckets.values()) == 0
    assert sum(b.reviews_count for b in buckets.values()) == 0


def test_review_average_per_day() -> None:
    reviews = [_review(1, 5, _at(2)), _review(2, 4, _at(2)), _review(3, 3, _at(2))]

    buckets = aggregate_daily([], reviews, date(2024, 3, 1), date(2024, 3, 2))

    assert buckets[date(2024, 3, 2)].reviews_count == 3
    assert buckets[date(2024, 3, 2)].reviews_average == 4.0
    assert buckets[date(2024, 3, 1)].reviews_average == 0.0


def test_utc_day_boundaries() -> None:
    late = parse_timestamp("2024-03-05T23:59:59Z")
    early = parse_timestamp("2024-03-06T01:30:00+03:00")

    buckets = aggregate_daily(
        [_submission(1, 1, "correct", late), _submission(2, 2, "correct", early)],
        [],
        date(2024, 3, 5),
        date(2024, 3, 6),
    )

    assert buckets[date(2024, 3, 5)].total == 2
    assert buckets[date(2024, 3, 6)].total == 0


def test_estimate_growth() -> None:
    assert estimate_growth(120, 100) == 20
    assert estimate_growth(90, 100) == 0
    assert estimate_growth(15, None) == 15


@pytest.mark.parametrize("value", [None, "", "yesterday"])
def test_unusable_timestamps_are_rejected(value) -> None:
    with pytest.raises(ValueError):
        parse_timestamp(value)

    with pytest.raises(ValueError):
        Submission.from_payload({"id": 1, "step": 2, "user": 3, "status": "correct", "time": value})
