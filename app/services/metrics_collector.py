"""Course sync: fetch upstream activity, aggregate per day, merge into the series."""
from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from app.config import settings
from app.core.metrics import DayBucket, aggregate_daily, estimate_growth
from app.db.models.course import Course
from app.db.models.metrics import DailyMetrics
from app.db.models.sync_run import SyncRun
from app.services.metrics_store import MetricsStore
from app.services.stepik import CourseInfo, CourseStats, StepikClient, StructureWalker
from app.services.sync_runs import SyncRunTracker
from app.utils.dates import as_utc, utcnow
from app.utils.exceptions import NotFoundError, UpstreamError


class MetricsMerger:
    """Fold freshly computed day buckets into the stored series."""

    def __init__(self, store: MetricsStore) -> None:
        self.store = store

    def merge(
        self,
        course_id: uuid.UUID,
        buckets: Dict[date, DayBucket],
        stats: Optional[CourseStats] = None,
    ) -> List[DailyMetrics]:
        """Upsert one row per bucket, oldest day first.

        Each day's rating delta is measured against the row written for the
        day before, so the dates must be processed in ascending order.
        """

        if not buckets:
            return []

        days = sorted(buckets)
        previous = self.store.get_by_key(course_id, days[0] - timedelta(days=1))
        written: List[DailyMetrics] = []

        for day in days:
            bucket = buckets[day]
            row = self.store.get_by_key(course_id, day)
            if row is None:
                row = DailyMetrics(
                    course_id=course_id,
                    date=day,
                    new_learners=0,
                    certificates=0,
                    reputation_delta=0,
                    knowledge_delta=0,
                    rating_value=0.0,
                    rating_delta=0.0,
                )
                stored_rating = None
            else:
                stored_rating = row.rating_value

            row.total_submissions = bucket.total
            row.correct_submissions = bucket.correct
            row.wrong_submissions = bucket.wrong
            row.active_learners_dau = bucket.active_users
            row.reviews_count = bucket.reviews_count
            row.reviews_avg = bucket.reviews_average

            rating = self._current_rating(stats, stored_rating, previous)
            baseline = previous.rating_value if previous is not None else rating
            row.rating_value = rating
            row.rating_delta = rating - baseline

            previous = self.store.upsert(row)
            written.append(row)

        if stats is not None:
            self._attribute_growth(course_id, stats)
        return written

    def _attribute_growth(self, course_id: uuid.UUID, stats: CourseStats) -> None:
        # Growth since the last recorded totals lands on the newest day only.
        latest = self.store.get_latest(course_id)
        if latest is None:
            return
        baseline = self.store.get_latest_before(course_id, latest.date, with_learner_totals=True)
        latest.new_learners = estimate_growth(
            stats.learners_count, baseline.learners_total if baseline else None
        )
        latest.certificates = estimate_growth(
            stats.certificates_count, baseline.certificates_total if baseline else None
        )
        latest.learners_total = stats.learners_count
        latest.certificates_total = stats.certificates_count
        self.store.upsert(latest)

    @staticmethod
    def _current_rating(
        stats: Optional[CourseStats],
        stored_rating: Optional[float],
        previous: Optional[DailyMetrics],
    ) -> float:
        if stats is not None and stats.average_score is not None:
            return float(stats.average_score)
        if stored_rating is not None:
            return stored_rating
        if previous is not None:
            return previous.rating_value
        return 0.0


class MetricsCollector:
    """Run one course sync end to end and record it as a :class:`SyncRun`."""

    def __init__(self, db: Session, client: StepikClient) -> None:
        self.db = db
        self.client = client
        self.tracker = SyncRunTracker(db)
        self.merger = MetricsMerger(MetricsStore(db))

    async def sync_course(self, course_id: uuid.UUID) -> SyncRun:
        course = self.db.get(Course, course_id)
        if course is None:
            raise NotFoundError(f"Course {course_id} not found")

        run = self.tracker.start(course.id)
        try:
            now = utcnow()
            since = self._window_start(course, now)
            stepik_id = course.stepik_course_id
            logger.info("Starting sync", course_id=str(course.id), stepik_course_id=stepik_id, since=since.isoformat())

            course_info = await self._fetch_course_info(stepik_id)
            step_ids = await self._resolve_step_ids(stepik_id)
            submissions = await self.client.get_submissions(step_ids[: settings.STEPIK_MAX_STEPS], since)
            reviews = await self.client.get_course_reviews(stepik_id, since)

            if course_info is not None:
                course.title = course_info.title
                course.description = course_info.summary
                course.cover_url = course_info.cover

            buckets = aggregate_daily(submissions, reviews, since.date(), now.date())
            stats = CourseStats.from_course(course_info) if course_info is not None else None
            self.merger.merge(course.id, buckets, stats)

            course.mark_synced(now)
            fetched = len(submissions) + len(reviews)
            self.tracker.succeed(run, fetched)
        except Exception as exc:
            logger.error("Sync failed", course_id=str(course_id), error=str(exc))
            self.db.rollback()
            self.tracker.fail(run, exc)
            raise

        logger.info("Sync completed", course_id=str(course_id), fetched=fetched, days=len(buckets))
        return run

    @staticmethod
    def _window_start(course: Course, now: datetime) -> datetime:
        # Whole days only: the first day of the window is rebuilt from scratch.
        last_synced = as_utc(course.last_synced_at)
        start = last_synced or now - timedelta(days=settings.SYNC_LOOKBACK_DAYS)
        return datetime.combine(start.date(), time.min, tzinfo=timezone.utc)

    async def _fetch_course_info(self, stepik_course_id: int) -> Optional[CourseInfo]:
        try:
            return await self.client.get_course(stepik_course_id)
        except (UpstreamError, NotFoundError) as exc:
            logger.warning("Course info unavailable", stepik_course_id=stepik_course_id, error=exc.message)
            return None

    async def _resolve_step_ids(self, stepik_course_id: int) -> List[int]:
        try:
            return await StructureWalker(self.client).resolve_step_ids(stepik_course_id)
        except NotFoundError as exc:
            logger.warning("Course structure unavailable", stepik_course_id=stepik_course_id, error=exc.message)
            return []


__all__ = ["MetricsCollector", "MetricsMerger"]
