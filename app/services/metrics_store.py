"""Persistence access for the daily metrics series."""
from __future__ import annotations

import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models.metrics import DailyMetrics
from app.utils.exceptions import StoreError


class MetricsStore:
    """Keyed access to ``metrics_daily`` rows.

    Writes are flushed but not committed; the caller owns the transaction.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_key(self, course_id: uuid.UUID, day: date) -> Optional[DailyMetrics]:
        try:
            return self.db.get(DailyMetrics, (course_id, day))
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to load metrics for {day.isoformat()}") from exc

    def get_range(self, course_id: uuid.UUID, start: date, end: date) -> List[DailyMetrics]:
        """Rows with ``start <= date <= end``, oldest first."""

        stmt = (
            select(DailyMetrics)
            .where(DailyMetrics.course_id == course_id)
            .where(DailyMetrics.date >= start)
            .where(DailyMetrics.date <= end)
            .order_by(DailyMetrics.date)
        )
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as exc:
            raise StoreError("Failed to load metrics range") from exc

    def get_latest(self, course_id: uuid.UUID) -> Optional[DailyMetrics]:
        stmt = (
            select(DailyMetrics)
            .where(DailyMetrics.course_id == course_id)
            .order_by(DailyMetrics.date.desc())
            .limit(1)
        )
        try:
            return self.db.scalar(stmt)
        except SQLAlchemyError as exc:
            raise StoreError("Failed to load latest metrics") from exc

    def get_latest_before(
        self, course_id: uuid.UUID, day: date, *, with_learner_totals: bool = False
    ) -> Optional[DailyMetrics]:
        """Most recent row strictly before ``day``."""

        stmt = (
            select(DailyMetrics)
            .where(DailyMetrics.course_id == course_id)
            .where(DailyMetrics.date < day)
        )
        if with_learner_totals:
            stmt = stmt.where(DailyMetrics.learners_total.is_not(None))
        stmt = stmt.order_by(DailyMetrics.date.desc()).limit(1)
        try:
            return self.db.scalar(stmt)
        except SQLAlchemyError as exc:
            raise StoreError("Failed to load previous metrics") from exc

    def upsert(self, row: DailyMetrics) -> DailyMetrics:
        """Insert a new row or write changes of a loaded one."""

        try:
            self.db.add(row)
            self.db.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to store metrics for {row.date}") from exc
        return row


__all__ = ["MetricsStore"]
