"""Tracked course model."""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class Course(Base):
    """A Stepik course whose activity is synced into daily metrics."""

    __tablename__ = "courses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    stepik_course_id = Column(Integer, unique=True, nullable=False, index=True)
    title = Column(String(500), nullable=False, default="")
    description = Column(Text)
    cover_url = Column(String(1000))
    is_enabled = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    last_synced_at = Column(DateTime(timezone=True))

    sync_runs = relationship(
        "SyncRun",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SyncRun.started_at.desc()",
    )
    daily_metrics = relationship(
        "DailyMetrics",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def last_sync_status(self) -> str | None:
        """Status of the most recent sync run, if any."""

        return self.sync_runs[0].status if self.sync_runs else None

    def mark_synced(self, synced_at: datetime) -> None:
        """Record a successful sync."""

        self.last_synced_at = synced_at
        self.updated_at = synced_at
