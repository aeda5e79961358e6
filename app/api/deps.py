"""Shared API dependencies."""
from __future__ import annotations

import uuid
from typing import AsyncIterator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.security import InvalidTokenError, decode_token
from app.db.models.user import User
from app.db.session import get_db
from app.schemas import TokenPayload
from app.services.courses import CourseService
from app.services.metrics import MetricsService
from app.services.stepik import StepikClient, get_token_manager
from app.services.sync_runs import SyncRunTracker

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> User:
    """Resolve the authenticated user from the Authorization header."""

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    try:
        payload = decode_token(token)
        if payload.get("type") != "access":
            raise InvalidTokenError("Token must be an access token")
        token_data = TokenPayload.model_validate(payload)
    except (InvalidTokenError, ValidationError, ValueError, KeyError) as exc:
        raise credentials_exception from exc

    user = db.get(User, uuid.UUID(str(token_data.sub)))
    if not user:
        raise credentials_exception
    return user


async def get_stepik_client() -> AsyncIterator[StepikClient]:
    """Yield a Stepik client for the request, sharing the process token manager."""

    async with StepikClient(get_token_manager()) as client:
        yield client


def get_course_service(db: Session = Depends(get_db)) -> CourseService:
    return CourseService(db)


def get_metrics_service(db: Session = Depends(get_db)) -> MetricsService:
    return MetricsService(db)


def get_sync_run_tracker(db: Session = Depends(get_db)) -> SyncRunTracker:
    return SyncRunTracker(db)
