"""Stepik API integration: credentials, pagination and course structure."""

from app.services.stepik.auth import TokenManager, get_token_manager
from app.services.stepik.client import StepikClient, older_than
from app.services.stepik.models import CourseInfo, CourseStats, Review, Submission
from app.services.stepik.structure import StructureWalker

__all__ = [
    "CourseInfo",
    "CourseStats",
    "Review",
    "StepikClient",
    "StructureWalker",
    "Submission",
    "TokenManager",
    "get_token_manager",
    "older_than",
]
