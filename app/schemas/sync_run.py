"""Schemas for sync run history."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from app.utils.dates import as_utc


class SyncRunRead(BaseModel):
    id: uuid.UUID
    course_id: uuid.UUID
    started_at: datetime
    finished_at: Optional[datetime] = None
    status: str
    error_text: Optional[str] = None
    fetched_items_count: int = 0
    duration_seconds: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="after")
    def compute_duration(self) -> "SyncRunRead":
        if self.finished_at is not None:
            elapsed = as_utc(self.finished_at) - as_utc(self.started_at)
            self.duration_seconds = round(elapsed.total_seconds(), 3)
        return self
