"""Sync run lifecycle tracking."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models.sync_run import (
    SYNC_STATUS_FAILED,
    SYNC_STATUS_OK,
    SYNC_STATUS_RUNNING,
    SyncRun,
)
from app.utils.exceptions import StoreError

# Valid status transitions
VALID_TRANSITIONS = {
    SYNC_STATUS_RUNNING: [SYNC_STATUS_OK, SYNC_STATUS_FAILED],
    SYNC_STATUS_OK: [],
    SYNC_STATUS_FAILED: [],
}


class InvalidSyncTransitionError(Exception):
    """Raised when a finished sync run is asked to change status again."""

    pass


def describe_error(error: BaseException) -> str:
    """Human readable error text stored on failed runs."""

    message = getattr(error, "message", None) or str(error)
    return message or error.__class__.__name__


class SyncRunTracker:
    """Create sync runs and move them to a terminal status exactly once."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def start(self, course_id: uuid.UUID) -> SyncRun:
        """Persist a ``running`` sync run before any fetching begins."""

        run = SyncRun(
            course_id=course_id,
            started_at=datetime.now(timezone.utc),
            status=SYNC_STATUS_RUNNING,
            fetched_items_count=0,
        )
        self.db.add(run)
        self._commit()
        logger.info("Sync run started", sync_run_id=str(run.id), course_id=str(course_id))
        return run

    def succeed(self, run: SyncRun, fetched_items_count: int) -> SyncRun:
        """Mark ``run`` as ok and commit the pending unit of work with it."""

        self._transition(run, SYNC_STATUS_OK)
        run.fetched_items_count = fetched_items_count
        self._commit()
        return run

    def fail(self, run: SyncRun, error: BaseException) -> SyncRun:
        """Mark ``run`` as failed with a description of ``error``."""

        self._transition(run, SYNC_STATUS_FAILED)
        run.error_text = describe_error(error)
        self._commit()
        return run

    def list_runs(self, course_id: Optional[uuid.UUID] = None, limit: int = 20) -> List[SyncRun]:
        """Return sync history, newest first."""

        stmt = select(SyncRun)
        if course_id is not None:
            stmt = stmt.where(SyncRun.course_id == course_id)
        stmt = stmt.order_by(SyncRun.started_at.desc()).limit(limit)
        return list(self.db.scalars(stmt).all())

    def _transition(self, run: SyncRun, status: str) -> None:
        if status not in VALID_TRANSITIONS.get(run.status, []):
            raise InvalidSyncTransitionError(
                f"Cannot move sync run {run.id} from {run.status} to {status}"
            )
        run.status = status
        run.finished_at = datetime.now(timezone.utc)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError("Failed to persist sync run") from exc


__all__ = ["InvalidSyncTransitionError", "SyncRunTracker", "VALID_TRANSITIONS", "describe_error"]
