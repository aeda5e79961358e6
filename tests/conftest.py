"""Pytest fixtures for API and sync tests."""

import os
from collections.abc import AsyncIterator, Callable, Generator
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union

os.environ.setdefault("SECRET_KEY", "test-secret-key")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db, get_stepik_client
from app.core.security import create_access_token, get_password_hash
from app.db import models  # noqa: F401  # Imported for side effects
from app.db.base import Base
from app.db.models import Course, User
from app.main import create_app
from app.services.stepik import StepikClient, TokenManager

TOKEN_URL = "https://stepik.org/oauth2/token/"
API_BASE = "https://stepik.org/api/"

Route = Union[Dict[str, Any], List[Dict[str, Any]], Callable[[httpx.Request], httpx.Response]]


def page(key: str, items: List[Dict[str, Any]], *, has_next: bool = False) -> Dict[str, Any]:
    """Build one page of a paginated Stepik response."""

    return {"meta": {"has_next": has_next}, key: items}


class FakeStepikAPI:
    """In-memory stand-in for the Stepik REST API and its token endpoint.

    Routes map an API path (``"courses/42"``) to a payload, a list of pages
    selected by the ``page`` query parameter, or a callable returning a response.
    Unknown paths answer 404.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Route] = {}
        self.requests: List[httpx.Request] = []
        self.token_requests = 0
        self.token_status = 200
        self.expires_in = 36000

    page = staticmethod(page)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url).startswith(TOKEN_URL):
            self.token_requests += 1
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_client"})
            return httpx.Response(
                200,
                json={"access_token": f"token-{self.token_requests}", "expires_in": self.expires_in},
            )

        path = request.url.path[len("/api/"):].strip("/")
        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, json={"detail": "Not found"})
        if callable(route):
            return route(request)
        if isinstance(route, list):
            index = int(request.url.params.get("page", "1")) - 1
            if index >= len(route):
                return httpx.Response(200, json={"meta": {"has_next": False}})
            return httpx.Response(200, json=route[index])
        return httpx.Response(200, json=route)

    def install_course(self, *, now: Optional[datetime] = None) -> None:
        """Serve course 42: one lesson of two steps, recent submissions and a review."""

        now = now or datetime.now(timezone.utc)
        self.routes["courses/42"] = {
            "courses": [
                {
                    "id": 42,
                    "title": "Python Basics (updated)",
                    "summary": "Intro course",
                    "cover": "https://cdn.example/cover.png",
                    "learners_count": 150,
                    "score": 4.7,
                    "certificates_count": 12,
                    "sections": [1],
                }
            ]
        }
        self.routes["sections/1"] = {"sections": [{"id": 1, "units": [10]}]}
        self.routes["units/10"] = {"units": [{"id": 10, "lesson": 100}]}
        self.routes["lessons/100"] = {"lessons": [{"id": 100, "steps": [1000, 1001]}]}

        def submissions(request: httpx.Request) -> httpx.Response:
            step = int(request.url.params["step"])
            yesterday = now - timedelta(days=1)
            items = [
                {"id": step * 10 + 1, "step": step, "user": 1, "status": "correct", "time": now.isoformat()},
                {"id": step * 10 + 2, "step": step, "user": 2, "status": "wrong", "time": yesterday.isoformat()},
            ]
            return httpx.Response(200, json=page("submissions", items))

        self.routes["submissions"] = submissions
        self.routes["course-reviews"] = [
            page("course-reviews", [{"id": 1, "user": 3, "score": 5, "create_date": now.isoformat()}])
        ]

    def api_requests(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.rstrip("/") == f"/api/{path}"]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def token_manager(self, **kwargs: Any) -> TokenManager:
        return TokenManager("client-id", "client-secret", TOKEN_URL, transport=self.transport, **kwargs)

    def client(self, token_manager: Optional[TokenManager] = None) -> StepikClient:
        return StepikClient(
            token_manager or self.token_manager(),
            base_url=API_BASE,
            transport=self.transport,
            page_delay=0,
        )


@pytest.fixture()
def stepik_api() -> FakeStepikAPI:
    return FakeStepikAPI()


@pytest.fixture(scope="session")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables(db_engine) -> Generator[None, None, None]:
    yield
    with db_engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())


@pytest.fixture()
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def course(db_session: Session) -> Course:
    course = Course(stepik_course_id=42, title="Python Basics", is_enabled=True)
    db_session.add(course)
    db_session.commit()
    return course


@pytest.fixture()
def user(db_session: Session) -> User:
    user = User(username="analyst", password_hash=get_password_hash("supersecure"))
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest.fixture()
def client(db_session: Session, stepik_api: FakeStepikAPI) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    async def override_get_stepik_client() -> AsyncIterator[StepikClient]:
        async with stepik_api.client() as stepik_client:
            yield stepik_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_stepik_client] = override_get_stepik_client
    with TestClient(app) as test_client:
        yield test_client
