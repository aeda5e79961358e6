"""Celery tasks that sync course activity into daily metrics."""
from __future__ import annotations

import asyncio
from typing import List, Sequence
from uuid import UUID

from loguru import logger

from app.celery_app import celery_app
from app.config import settings
from app.db.models.sync_run import SyncRun
from app.db.session import SessionLocal
from app.services.courses import CourseService
from app.services.metrics_collector import MetricsCollector
from app.services.stepik import StepikClient, get_token_manager
from app.utils.exceptions import NotFoundError

RETRY_COUNTDOWNS = (30, 120)


async def _sync_one(course_id: UUID) -> SyncRun:
    db = SessionLocal()
    try:
        async with StepikClient(get_token_manager()) as client:
            return await MetricsCollector(db, client).sync_course(course_id)
    finally:
        db.close()


async def _sync_many(course_ids: Sequence[UUID]) -> List[bool]:
    """Sync ``course_ids`` at most ``SYNC_CONCURRENCY`` at a time.

    Each course gets its own session; the HTTP client and token are shared.
    Only the upstream requests interleave: database work runs on plain
    synchronous sessions and holds the event loop until it returns.
    """

    semaphore = asyncio.Semaphore(max(1, settings.SYNC_CONCURRENCY))

    async with StepikClient(get_token_manager()) as client:

        async def guarded(course_id: UUID) -> bool:
            async with semaphore:
                db = SessionLocal()
                try:
                    await MetricsCollector(db, client).sync_course(course_id)
                    return True
                except Exception as exc:
                    logger.error("Scheduled sync failed", course_id=str(course_id), error=str(exc))
                    return False
                finally:
                    db.close()

        return await asyncio.gather(*(guarded(course_id) for course_id in course_ids))


@celery_app.task(name="app.tasks.sync.sync_course", bind=True, max_retries=len(RETRY_COUNTDOWNS))
def sync_course(self, course_id: str) -> dict[str, str | int]:
    """Sync one course now; failures are retried after 30 s and then 120 s."""

    try:
        run = asyncio.run(_sync_one(UUID(course_id)))
    except NotFoundError:
        logger.warning("Sync requested for unknown course", course_id=course_id)
        raise
    except Exception as exc:
        attempt = min(self.request.retries, len(RETRY_COUNTDOWNS) - 1)
        raise self.retry(exc=exc, countdown=RETRY_COUNTDOWNS[attempt])

    return {
        "course_id": course_id,
        "sync_run_id": str(run.id),
        "status": run.status,
        "fetched": run.fetched_items_count,
    }


@celery_app.task(name="app.tasks.sync.sync_all_courses")
def sync_all_courses() -> dict[str, int]:
    """Sync every enabled course; one course failing does not stop the others."""

    db = SessionLocal()
    try:
        course_ids = [course.id for course in CourseService(db).list_enabled()]
    finally:
        db.close()

    if not course_ids:
        logger.info("No enabled courses to sync")
        return {"total": 0, "success": 0, "failures": 0}

    results = asyncio.run(_sync_many(course_ids))
    success = sum(1 for ok in results if ok)
    logger.info(
        "Scheduled sync completed",
        total=len(course_ids),
        success=success,
        failures=len(course_ids) - success,
    )
    return {"total": len(course_ids), "success": success, "failures": len(course_ids) - success}
