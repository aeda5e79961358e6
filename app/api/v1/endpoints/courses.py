"""Course registry endpoints."""
from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api import deps
from app.db.models.user import User
from app.schemas import CourseCreate, CourseRead, SyncTriggerResponse
from app.services.courses import CourseService, InvalidCourseReferenceError
from app.services.stepik import StepikClient
from app.tasks.sync import sync_course


router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=List[CourseRead])
def list_courses(
    *,
    current_user: User = Depends(deps.get_current_user),
    service: CourseService = Depends(deps.get_course_service),
) -> List[CourseRead]:
    return service.list_courses()


@router.post("", response_model=CourseRead, status_code=status.HTTP_201_CREATED)
async def add_course(
    payload: CourseCreate,
    current_user: User = Depends(deps.get_current_user),
    service: CourseService = Depends(deps.get_course_service),
    client: StepikClient = Depends(deps.get_stepik_client),
) -> CourseRead:
    """Track a course by id or URL and queue its first sync."""

    try:
        course = await service.add_course(payload.course_id_or_url, client)
    except InvalidCourseReferenceError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if course.last_synced_at is None:
        sync_course.delay(str(course.id))
    return course


@router.get("/{course_id}", response_model=CourseRead)
def read_course(
    course_id: uuid.UUID,
    current_user: User = Depends(deps.get_current_user),
    service: CourseService = Depends(deps.get_course_service),
) -> CourseRead:
    return service.get_course(course_id)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: uuid.UUID,
    current_user: User = Depends(deps.get_current_user),
    service: CourseService = Depends(deps.get_course_service),
) -> Response:
    """Stop tracking a course; its metrics and sync history go with it."""

    service.delete_course(course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{course_id}/sync",
    response_model=SyncTriggerResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def trigger_sync(
    course_id: uuid.UUID,
    current_user: User = Depends(deps.get_current_user),
    service: CourseService = Depends(deps.get_course_service),
) -> SyncTriggerResponse:
    """Queue an immediate sync of one course."""

    course = service.get_course(course_id)
    result = sync_course.delay(str(course.id))
    return SyncTriggerResponse(course_id=course.id, task_id=result.id)
