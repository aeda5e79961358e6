"""Resolve a course's content tree down to step identifiers."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger

from app.config import settings
from app.services.stepik.client import StepikClient
from app.utils.exceptions import NotFoundError, UpstreamError


def _first(payload: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
    items = payload.get(key) or []
    return items[0] if items else None


def _ids(node: Dict[str, Any], key: str) -> List[int]:
    return [int(value) for value in node.get(key) or []]


class StructureWalker:
    """Depth-bounded descent: course -> sections -> units -> lesson -> steps.

    Only the first ``max_sections`` sections and ``max_units`` units per section
    are visited, so large courses yield a partial step list.
    """

    def __init__(
        self,
        client: StepikClient,
        *,
        max_sections: Optional[int] = None,
        max_units: Optional[int] = None,
    ) -> None:
        self.client = client
        self.max_sections = max_sections or settings.STEPIK_MAX_SECTIONS
        self.max_units = max_units or settings.STEPIK_MAX_UNITS

    async def resolve_step_ids(self, course_id: int) -> List[int]:
        try:
            payload = await self.client.get_json(f"courses/{course_id}")
        except UpstreamError as exc:
            raise NotFoundError(f"Structure of course {course_id} is unavailable") from exc

        course = _first(payload, "courses")
        if course is None:
            raise NotFoundError(f"Course {course_id} not found on Stepik")

        step_ids: List[int] = []
        for section_id in _ids(course, "sections")[: self.max_sections]:
            section = await self._get_node("sections", section_id)
            if section is None:
                continue
            for unit_id in _ids(section, "units")[: self.max_units]:
                unit = await self._get_node("units", unit_id)
                lesson_id = unit.get("lesson") if unit else None
                if not lesson_id:
                    continue
                lesson = await self._get_node("lessons", int(lesson_id))
                if lesson is not None:
                    step_ids.extend(_ids(lesson, "steps"))

        logger.info("Resolved course structure", course_id=course_id, steps=len(step_ids))
        return step_ids

    async def _get_node(self, kind: str, node_id: int) -> Optional[Dict[str, Any]]:
        try:
            payload = await self.client.get_json(f"{kind}/{node_id}")
        except UpstreamError as exc:
            logger.warning("Skipping course structure node", kind=kind, node_id=node_id, error=exc.message)
            return None
        return _first(payload, kind)


__all__ = ["StructureWalker"]
