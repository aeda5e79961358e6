"""Sync history endpoints."""
from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.api import deps
from app.db.models.user import User
from app.schemas import SyncRunRead
from app.services.sync_runs import SyncRunTracker


router = APIRouter(prefix="/sync-runs", tags=["sync-runs"])


@router.get("", response_model=List[SyncRunRead])
def list_sync_runs(
    *,
    course_id: Optional[uuid.UUID] = Query(None),
    limit: int = Query(20, ge=1, le=200),
    current_user: User = Depends(deps.get_current_user),
    tracker: SyncRunTracker = Depends(deps.get_sync_run_tracker),
) -> List[SyncRunRead]:
    """Return recent sync runs, newest first."""

    return tracker.list_runs(course_id=course_id, limit=limit)
