"""API router for version 1."""
from fastapi import APIRouter

from app.api.v1.endpoints import auth, courses, metrics, sync_runs


api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(courses.router)
api_router.include_router(metrics.router)
api_router.include_router(sync_runs.router)
