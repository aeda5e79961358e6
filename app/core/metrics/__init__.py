"""Pure metric computations: daily buckets and period comparisons."""

from app.core.metrics.aggregation import DayBucket, aggregate_daily, estimate_growth, iter_days
from app.core.metrics.periods import (
    DateWindow,
    MetricsRange,
    SummaryStatistics,
    current_window,
    percent_change,
    previous_window,
    summarize,
)

__all__ = [
    "DateWindow",
    "DayBucket",
    "MetricsRange",
    "SummaryStatistics",
    "aggregate_daily",
    "current_window",
    "estimate_growth",
    "iter_days",
    "percent_change",
    "previous_window",
    "summarize",
]
