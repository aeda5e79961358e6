"""Sync run model for tracking ingestion executions."""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base

SYNC_STATUS_RUNNING = "running"
SYNC_STATUS_OK = "ok"
SYNC_STATUS_FAILED = "failed"


class SyncRun(Base):
    """Lifecycle record of one course sync."""

    __tablename__ = "sync_runs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    course_id = Column(
        UUID(as_uuid=True), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    started_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    finished_at = Column(DateTime(timezone=True))
    status = Column(String(20), nullable=False, default=SYNC_STATUS_RUNNING)
    error_text = Column(Text)
    fetched_items_count = Column(Integer, default=0, nullable=False)

    course = relationship("Course", back_populates="sync_runs")

    @property
    def is_finished(self) -> bool:
        return self.status != SYNC_STATUS_RUNNING

    def __repr__(self):
        return f"<SyncRun(id={self.id}, course_id={self.course_id}, status='{self.status}')>"
