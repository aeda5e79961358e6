"""Schemas for tracked courses."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CourseCreate(BaseModel):
    """Course to start tracking, given as a numeric id or a course URL."""

    course_id_or_url: str = Field(min_length=1, max_length=500)


class CourseRead(BaseModel):
    id: uuid.UUID
    stepik_course_id: int
    title: str
    description: Optional[str] = None
    cover_url: Optional[str] = None
    is_enabled: bool
    created_at: Optional[datetime] = None
    last_synced_at: Optional[datetime] = None
    last_sync_status: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SyncTriggerResponse(BaseModel):
    """Returned when a manual sync has been queued."""

    course_id: uuid.UUID
    task_id: str
    status: str = "queued"
