"""Utility helpers package."""

from app.utils.exceptions import (
    AuthError,
    CourseAnalyticsError,
    NotFoundError,
    StoreError,
    UpstreamError,
)

__all__ = ["AuthError", "CourseAnalyticsError", "NotFoundError", "StoreError", "UpstreamError"]
