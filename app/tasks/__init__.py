"""Celery tasks package."""

from app.tasks import sync

__all__ = ["sync"]
