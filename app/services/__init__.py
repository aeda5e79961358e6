"""Service layer package."""

from app.services.auth import AuthService
from app.services.courses import CourseService
from app.services.metrics import MetricsService
from app.services.metrics_collector import MetricsCollector, MetricsMerger
from app.services.metrics_store import MetricsStore
from app.services.sync_runs import SyncRunTracker

__all__ = [
    "AuthService",
    "CourseService",
    "MetricsCollector",
    "MetricsMerger",
    "MetricsService",
    "MetricsStore",
    "SyncRunTracker",
]
