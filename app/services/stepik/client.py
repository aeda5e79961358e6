"""Async client for the Stepik REST API."""
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

import httpx
from loguru import logger

from app.config import settings
from app.services.stepik.auth import TokenManager
from app.services.stepik.models import CourseInfo, Review, Submission
from app.utils.exceptions import NotFoundError, UpstreamError

T = TypeVar("T")

PageExtractor = Callable[[Dict[str, Any]], Iterable[T]]
StopPredicate = Callable[[List[T]], bool]


def _has_next(payload: Dict[str, Any]) -> bool:
    meta = payload.get("meta")
    if not isinstance(meta, dict):
        return False
    return bool(meta.get("has_next"))


def parse_records(
    items: Iterable[Dict[str, Any]], parse: Callable[[Dict[str, Any]], T], *, kind: str
) -> List[T]:
    """Parse raw API items, skipping the ones that lack required fields."""

    records: List[T] = []
    for item in items:
        try:
            records.append(parse(item))
        except (KeyError, TypeError, ValueError) as exc:
            item_id = item.get("id") if isinstance(item, dict) else None
            logger.warning("Skipping malformed record", kind=kind, item_id=item_id, error=str(exc))
    return records


def older_than(cutoff: datetime, key: Callable[[T], datetime]) -> StopPredicate:
    """Stop once the oldest record on a newest-first page predates ``cutoff``."""

    def predicate(page_items: List[T]) -> bool:
        return bool(page_items) and min(key(item) for item in page_items) < cutoff

    return predicate


class StepikClient:
    """Fetch course data on behalf of a sync run.

    Authentication goes through the shared :class:`TokenManager`. Single resource
    requests raise :class:`UpstreamError` on failure; paginated walks stop at the
    first failing page and keep what they already collected.
    """

    def __init__(
        self,
        token_manager: TokenManager,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        page_delay: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.token_manager = token_manager
        self.page_delay = settings.STEPIK_PAGE_DELAY_SECONDS if page_delay is None else page_delay
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.STEPIK_API_BASE,
            timeout=timeout or settings.STEPIK_REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "StepikClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GET ``path`` with a bearer token and return the decoded body."""

        token = await self.token_manager.ensure_valid_token()
        try:
            response = await self._http.get(
                path, params=params, headers={"Authorization": f"Bearer {token}"}
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Request to {path} failed: {exc}", details={"path": path}) from exc

        if response.status_code == 401:
            self.token_manager.invalidate()
        if response.status_code >= 400:
            logger.warning("Stepik API returned error", status=response.status_code, path=path)
            raise UpstreamError(
                f"Stepik API returned {response.status_code} for {path}",
                details={"status": response.status_code, "path": path},
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(f"Stepik API returned invalid JSON for {path}") from exc
        if not isinstance(payload, dict):
            raise UpstreamError(f"Unexpected payload shape for {path}")
        return payload

    async def fetch_all(
        self,
        path: str,
        extract: PageExtractor[T],
        *,
        params: Optional[Dict[str, Any]] = None,
        stop_when: Optional[StopPredicate[T]] = None,
        max_pages: Optional[int] = None,
    ) -> List[T]:
        """Walk a paginated endpoint from page 1 and collect extracted items."""

        page_limit = settings.STEPIK_MAX_PAGES if max_pages is None else max_pages
        items: List[T] = []
        page = 1
        while page <= page_limit:
            query = dict(params or {})
            query["page"] = page
            try:
                payload = await self.get_json(path, query)
            except UpstreamError as exc:
                logger.warning("Pagination stopped early", path=path, page=page, error=exc.message)
                break

            page_items = list(extract(payload))
            items.extend(page_items)

            if not _has_next(payload):
                break
            if stop_when is not None and stop_when(page_items):
                break

            page += 1
            await asyncio.sleep(self.page_delay)

        return items

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------
    async def get_course(self, course_id: int) -> CourseInfo:
        """Return course metadata or raise :class:`NotFoundError`."""

        payload = await self.get_json(f"courses/{course_id}")
        courses = payload.get("courses") or []
        if not courses:
            raise NotFoundError(f"Course {course_id} not found on Stepik")
        try:
            return CourseInfo.from_payload(courses[0])
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamError(f"Malformed course payload for {course_id}: {exc}") from exc

    async def get_submissions(
        self, step_ids: Sequence[int], since: Optional[datetime] = None
    ) -> List[Submission]:
        """Return submissions for ``step_ids`` made at or after ``since``."""

        def extract(payload: Dict[str, Any]) -> List[Submission]:
            return parse_records(payload.get("submissions") or [], Submission.from_payload, kind="submission")

        stop_when = older_than(since, lambda item: item.occurred_at) if since else None
        submissions: List[Submission] = []
        for step_id in step_ids:
            fetched = await self.fetch_all(
                "submissions",
                extract,
                params={"step": step_id, "order": "desc"},
                stop_when=stop_when,
                max_pages=settings.STEPIK_SUBMISSION_MAX_PAGES,
            )
            submissions.extend(item for item in fetched if since is None or item.occurred_at >= since)
        return submissions

    async def get_course_reviews(
        self, course_id: int, since: Optional[datetime] = None
    ) -> List[Review]:
        """Return reviews of ``course_id`` created at or after ``since``."""

        def extract(payload: Dict[str, Any]) -> List[Review]:
            return parse_records(
                payload.get("course-reviews") or [],
                lambda item: Review.from_payload(item, course_id=course_id),
                kind="review",
            )

        reviews = await self.fetch_all(
            "course-reviews",
            extract,
            params={"course": course_id},
            max_pages=settings.STEPIK_REVIEW_MAX_PAGES,
        )
        return [review for review in reviews if since is None or review.created_at >= since]


__all__ = ["StepikClient", "older_than", "parse_records"]
