"""Registry of tracked courses."""
from __future__ import annotations

import re
import uuid
from typing import List, Optional
from urllib.parse import urlparse

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models.course import Course
from app.services.stepik import StepikClient
from app.utils.exceptions import NotFoundError, StoreError

_DIGITS = re.compile(r"^\d+$")


class InvalidCourseReferenceError(ValueError):
    """Raised when input is neither a course id nor a course URL."""


def parse_course_id(value: str) -> Optional[int]:
    """Extract a Stepik course id from ``"12345"`` or ``https://stepik.org/course/12345/...``."""

    value = (value or "").strip()
    if _DIGITS.match(value):
        return int(value)

    parsed = urlparse(value)
    if not parsed.scheme or not parsed.netloc:
        return None
    segments = [segment for segment in parsed.path.split("/") if segment]
    if "course" in segments:
        index = segments.index("course")
        if index + 1 < len(segments) and _DIGITS.match(segments[index + 1]):
            return int(segments[index + 1])
    return None


class CourseService:
    """List, add and remove the courses the scheduler syncs."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_courses(self) -> List[Course]:
        return list(self.db.scalars(select(Course).order_by(Course.created_at.desc())).all())

    def list_enabled(self) -> List[Course]:
        return list(self.db.scalars(select(Course).where(Course.is_enabled.is_(True))).all())

    def get_course(self, course_id: uuid.UUID) -> Course:
        course = self.db.get(Course, course_id)
        if course is None:
            raise NotFoundError(f"Course {course_id} not found")
        return course

    async def add_course(self, course_id_or_url: str, client: StepikClient) -> Course:
        """Track a course, fetching its metadata from Stepik on first add."""

        stepik_course_id = parse_course_id(course_id_or_url)
        if stepik_course_id is None:
            raise InvalidCourseReferenceError(
                "Could not add the course. Check the course id or URL."
            )

        existing = self.db.scalar(select(Course).where(Course.stepik_course_id == stepik_course_id))
        if existing is not None:
            return existing

        info = await client.get_course(stepik_course_id)
        course = Course(
            stepik_course_id=info.id,
            title=info.title,
            description=info.summary,
            cover_url=info.cover,
            is_enabled=True,
        )
        self.db.add(course)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise StoreError(f"Course {stepik_course_id} is already tracked") from exc
        self.db.refresh(course)
        logger.info("Course added", course_id=str(course.id), stepik_course_id=course.stepik_course_id)
        return course

    def delete_course(self, course_id: uuid.UUID) -> None:
        course = self.get_course(course_id)
        self.db.delete(course)
        self.db.commit()
        logger.info("Course deleted", course_id=str(course_id))


__all__ = ["CourseService", "InvalidCourseReferenceError", "parse_course_id"]
