"""API endpoint modules for v1."""

from app.api.v1.endpoints import auth, courses, metrics, sync_runs

__all__ = ["auth", "courses", "metrics", "sync_runs"]
