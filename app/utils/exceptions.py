"""Custom exception classes and error handling utilities."""
from typing import Any, Dict, Optional
from fastapi import HTTPException, status
from loguru import logger


class CourseAnalyticsError(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class AuthError(CourseAnalyticsError):
    """Upstream credential exchange failed."""
    pass


class UpstreamError(CourseAnalyticsError):
    """A page or resource request to the upstream API failed."""
    pass


class NotFoundError(CourseAnalyticsError):
    """Requested course or course structure does not exist."""
    pass


class StoreError(CourseAnalyticsError):
    """Persistence operation failed."""
    pass


def handle_auth_error(error: AuthError) -> HTTPException:
    """Handle upstream credential errors."""
    logger.error(f"Upstream authentication error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail="Could not authenticate against the course platform."
    )


def handle_upstream_error(error: UpstreamError) -> HTTPException:
    """Handle upstream API errors."""
    logger.warning(f"Upstream error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail="The course platform is temporarily unavailable. Please try again later."
    )


def handle_not_found_error(error: NotFoundError) -> HTTPException:
    """Handle missing resources."""
    logger.info(f"Not found: {error.message}")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error.message
    )


def handle_store_error(error: StoreError) -> HTTPException:
    """Handle database errors and return appropriate HTTP response."""
    logger.error(f"Database error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database operation failed. Please try again later."
    )
