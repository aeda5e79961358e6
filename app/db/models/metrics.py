"""Daily course metrics model."""
from sqlalchemy import Column, Date, Float, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base import Base


class DailyMetrics(Base):
    """Aggregated course activity for one calendar day (UTC).

    Rows are keyed by ``(course_id, date)``; sync runs update them in place.
    """

    __tablename__ = "metrics_daily"

    course_id = Column(
        UUID(as_uuid=True),
        ForeignKey("courses.id", ondelete="CASCADE"),
        primary_key=True,
    )
    date = Column(Date, primary_key=True)

    total_submissions = Column(Integer, default=0, nullable=False)
    correct_submissions = Column(Integer, default=0, nullable=False)
    wrong_submissions = Column(Integer, default=0, nullable=False)
    active_learners_dau = Column(Integer, default=0, nullable=False)

    new_learners = Column(Integer, default=0, nullable=False)
    certificates = Column(Integer, default=0, nullable=False)
    # Upstream cumulative counters observed when growth was last attributed to this day
    learners_total = Column(Integer)
    certificates_total = Column(Integer)

    reputation_delta = Column(Integer, default=0, nullable=False)
    knowledge_delta = Column(Integer, default=0, nullable=False)

    reviews_count = Column(Integer, default=0, nullable=False)
    reviews_avg = Column(Float, default=0.0, nullable=False)
    rating_value = Column(Float, default=0.0, nullable=False)
    rating_delta = Column(Float, default=0.0, nullable=False)

    course = relationship("Course", back_populates="daily_metrics")
