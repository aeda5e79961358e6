"""Typed records parsed from Stepik API payloads."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

SUBMISSION_CORRECT = "correct"
SUBMISSION_WRONG = "wrong"


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp from the API into an aware UTC datetime.

    Raises :class:`ValueError` when the value is missing or unparsable; a record
    without a time cannot be placed on any day.
    """

    if not value:
        raise ValueError("missing timestamp")
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True, slots=True)
class Submission:
    """A learner's attempt at a step."""

    id: int
    step_id: int
    user_id: int
    status: str
    occurred_at: datetime

    @property
    def is_correct(self) -> bool:
        return self.status == SUBMISSION_CORRECT

    @property
    def is_wrong(self) -> bool:
        return self.status == SUBMISSION_WRONG

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Submission":
        return cls(
            id=int(payload["id"]),
            step_id=int(payload["step"]),
            user_id=int(payload.get("user") or 0),
            status=payload.get("status") or "unknown",
            occurred_at=parse_timestamp(payload.get("time")),
        )


@dataclass(frozen=True, slots=True)
class Review:
    """A course review left by a learner."""

    id: int
    course_id: int
    user_id: int
    score: int
    created_at: datetime
    text: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], *, course_id: int) -> "Review":
        return cls(
            id=int(payload["id"]),
            course_id=int(payload.get("course") or course_id),
            user_id=int(payload.get("user") or 0),
            score=int(payload.get("score") or 0),
            created_at=parse_timestamp(payload.get("create_date")),
            text=payload.get("text"),
        )


@dataclass(frozen=True, slots=True)
class CourseInfo:
    """Course metadata and cumulative counters."""

    id: int
    title: str
    summary: Optional[str] = None
    cover: Optional[str] = None
    learners_count: int = 0
    score: Optional[float] = None
    certificates_count: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CourseInfo":
        score = payload.get("score")
        certificates = payload.get("certificates_count")
        return cls(
            id=int(payload["id"]),
            title=payload.get("title") or "",
            summary=payload.get("summary"),
            cover=payload.get("cover"),
            learners_count=int(payload.get("learners_count") or 0),
            score=float(score) if score is not None else None,
            certificates_count=int(certificates) if certificates is not None else None,
        )


@dataclass(frozen=True, slots=True)
class CourseStats:
    """Course-level numbers the merge step needs for deltas."""

    course_id: int
    learners_count: int
    certificates_count: int
    average_score: Optional[float]
    reviews_count: int = 0

    @classmethod
    def from_course(cls, course: CourseInfo) -> "CourseStats":
        return cls(
            course_id=course.id,
            learners_count=course.learners_count,
            certificates_count=course.certificates_count or 0,
            average_score=course.score,
        )
