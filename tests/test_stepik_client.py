"""Tests for paginated Stepik fetching."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from app.utils.exceptions import AuthError, NotFoundError, UpstreamError


def _items(start: int, count: int) -> list:
    return [{"id": start + offset} for offset in range(count)]


def _extract(key: str):
    return lambda payload: payload.get(key) or []


@pytest.mark.asyncio
async def test_fetch_all_follows_has_next(stepik_api) -> None:
    stepik_api.routes["course-reviews"] = [
        stepik_api.page("course-reviews", _items(1, 2), has_next=True),
        stepik_api.page("course-reviews", _items(3, 2), has_next=True),
        stepik_api.page("course-reviews", _items(5, 1)),
    ]

    async with stepik_api.client() as client:
        items = await client.fetch_all("course-reviews", _extract("course-reviews"))

    assert [item["id"] for item in items] == [1, 2, 3, 4, 5]
    pages = [r.url.params["page"] for r in stepik_api.api_requests("course-reviews")]
    assert pages == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_fetch_all_respects_max_pages(stepik_api) -> None:
    stepik_api.routes["course-reviews"] = [
        stepik_api.page("course-reviews", _items(n * 10, 1), has_next=True)
        for n in range(5)
    ]

    async with stepik_api.client() as client:
        items = await client.fetch_all("course-reviews", _extract("course-reviews"), max_pages=2)

    assert len(items) == 2
    assert len(stepik_api.api_requests("course-reviews")) == 2


@pytest.mark.asyncio
async def test_fetch_all_passes_params_and_bearer_token(stepik_api) -> None:
    stepik_api.routes["course-reviews"] = [stepik_api.page("course-reviews", [])]

    async with stepik_api.client() as client:
        await client.fetch_all("course-reviews", _extract("course-reviews"), params={"course": 42})

    request = stepik_api.api_requests("course-reviews")[0]
    assert request.url.params["course"] == "42"
    assert request.headers["Authorization"] == "Bearer token-1"


@pytest.mark.asyncio
async def test_failed_page_keeps_collected_items(stepik_api) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["page"] == "1":
            return httpx.Response(200, json=stepik_api.page("course-reviews", [{"id": 1}], has_next=True))
        return httpx.Response(503, json={"detail": "unavailable"})

    stepik_api.routes["course-reviews"] = handler

    async with stepik_api.client() as client:
        items = await client.fetch_all("course-reviews", _extract("course-reviews"))

    assert items == [{"id": 1}]


@pytest.mark.asyncio
async def test_auth_failure_is_not_absorbed(stepik_api) -> None:
    stepik_api.token_status = 401
    stepik_api.routes["course-reviews"] = [stepik_api.page("course-reviews", [{"id": 1}])]

    async with stepik_api.client() as client:
        with pytest.raises(AuthError):
            await client.fetch_all("course-reviews", _extract("course-reviews"))


@pytest.mark.asyncio
async def test_unauthorized_response_invalidates_token(stepik_api) -> None:
    stepik_api.routes["courses/1"] = lambda request: httpx.Response(401, json={"detail": "expired"})

    async with stepik_api.client() as client:
        with pytest.raises(UpstreamError):
            await client.get_json("courses/1")
        with pytest.raises(UpstreamError):
            await client.get_json("courses/1")

    assert stepik_api.token_requests == 2


@pytest.mark.asyncio
async def test_submissions_stop_at_cutoff_and_exclude_older(stepik_api) -> None:
    now = datetime.now(timezone.utc)
    cutoff = now - timedelta(days=2)

    def submission(submission_id: int, age: timedelta) -> dict:
        return {
            "id": submission_id,
            "step": 7,
            "user": submission_id,
            "status": "correct",
            "time": (now - age).isoformat().replace("+00:00", "Z"),
        }

    stepik_api.routes["submissions"] = [
        stepik_api.page("submissions", [submission(1, timedelta(hours=1)), submission(2, timedelta(days=1))], has_next=True),
        stepik_api.page("submissions", [submission(3, timedelta(days=1, hours=12)), submission(4, timedelta(days=3))], has_next=True),
        stepik_api.page("submissions", [submission(5, timedelta(days=4))]),
    ]

    async with stepik_api.client() as client:
        submissions = await client.get_submissions([7], since=cutoff)

    assert [s.id for s in submissions] == [1, 2, 3]
    requests = stepik_api.api_requests("submissions")
    assert [r.url.params["page"] for r in requests] == ["1", "2"]
    assert requests[0].url.params["order"] == "desc"
    assert requests[0].url.params["step"] == "7"


@pytest.mark.asyncio
async def test_reviews_filtered_by_creation_time(stepik_api) -> None:
    now = datetime.now(timezone.utc)
    stepik_api.routes["course-reviews"] = [
        stepik_api.page(
            "course-reviews",
            [
                {"id": 1, "user": 5, "score": 5, "create_date": now.isoformat()},
                {"id": 2, "user": 6, "score": 3, "create_date": (now - timedelta(days=40)).isoformat()},
            ],
        )
    ]

    async with stepik_api.client() as client:
        reviews = await client.get_course_reviews(42, since=now - timedelta(days=30))

    assert [(r.id, r.score, r.course_id) for r in reviews] == [(1, 5, 42)]


@pytest.mark.asyncio
async def test_get_course_parses_metadata(stepik_api) -> None:
    stepik_api.routes["courses/42"] = {
        "courses": [
            {
                "id": 42,
                "title": "Python Basics",
                "summary": "Intro course",
                "cover": "https://cdn.example/cover.png",
                "learners_count": 150,
                "score": 4.7,
                "certificates_count": 12,
            }
        ]
    }

    async with stepik_api.client() as client:
        info = await client.get_course(42)

    assert info.title == "Python Basics"
    assert info.learners_count == 150
    assert info.score == pytest.approx(4.7)
    assert info.certificates_count == 12


@pytest.mark.asyncio
async def test_get_course_empty_list_raises_not_found(stepik_api) -> None:
    stepik_api.routes["courses/404"] = {"courses": []}

    async with stepik_api.client() as client:
        with pytest.raises(NotFoundError):
            await client.get_course(404)


@pytest.mark.asyncio
async def test_invalid_json_raises_upstream_error(stepik_api) -> None:
    stepik_api.routes["courses/1"] = lambda request: httpx.Response(200, content=b"<html>")

    async with stepik_api.client() as client:
        with pytest.raises(UpstreamError):
            await client.get_json("courses/1")


@pytest.mark.asyncio
async def test_fetch_all_with_zero_max_pages_fetches_nothing(stepik_api) -> None:
    stepik_api.routes["course-reviews"] = [stepik_api.page("course-reviews", _items(1, 1))]

    async with stepik_api.client() as client:
        items = await client.fetch_all("course-reviews", _extract("course-reviews"), max_pages=0)

    assert items == []
    assert not stepik_api.api_requests("course-reviews")


@pytest.mark.asyncio
async def test_malformed_submissions_are_skipped(stepik_api) -> None:
    now = datetime.now(timezone.utc)
    stepik_api.routes["submissions"] = [
        stepik_api.page(
            "submissions",
            [
                {"id": 1, "step": 5, "user": 1, "status": "correct", "time": now.isoformat()},
                {"id": 2, "step": 5, "user": 2, "status": "wrong", "time": "not-a-date"},
                {"id": 3, "step": 5, "user": 3, "status": "wrong"},
                {"step": 5, "user": 4, "status": "correct", "time": now.isoformat()},
                {"id": 5, "step": 5, "user": 5, "status": "wrong", "time": now.isoformat()},
            ],
        )
    ]

    async with stepik_api.client() as client:
        submissions = await client.get_submissions([5])

    assert [s.id for s in submissions] == [1, 5]


@pytest.mark.asyncio
async def test_review_with_bad_score_is_skipped(stepik_api) -> None:
    now = datetime.now(timezone.utc).isoformat()
    stepik_api.routes["course-reviews"] = [
        stepik_api.page(
            "course-reviews",
            [
                {"id": 1, "user": 3, "score": "five", "create_date": now},
                {"id": 2, "user": 4, "score": 4, "create_date": now},
            ],
        )
    ]

    async with stepik_api.client() as client:
        reviews = await client.get_course_reviews(42)

    assert [r.id for r in reviews] == [2]
    assert reviews[0].score == 4
