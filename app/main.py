"""FastAPI application factory."""
from __future__ import annotations

from typing import Callable, List

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import api_router
from app.config import settings
from app.utils.exceptions import (
    AuthError,
    NotFoundError,
    StoreError,
    UpstreamError,
    handle_auth_error,
    handle_not_found_error,
    handle_store_error,
    handle_upstream_error,
)


tags_metadata: List[dict[str, str]] = [
    {"name": "auth", "description": "Register dashboard users and issue access tokens."},
    {"name": "courses", "description": "Manage the courses whose activity is synced."},
    {"name": "metrics", "description": "Daily course metrics and period comparisons."},
    {"name": "sync-runs", "description": "History of course sync executions."},
]


def _json_error_handler(translate: Callable[[Exception], HTTPException]):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        http_exc = translate(exc)
        return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})

    return handler


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Daily analytics for Stepik courses.",
        version="0.1.0",
        openapi_tags=tags_metadata,
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors(), "message": "Validation failed"},
        )

    app.add_exception_handler(AuthError, _json_error_handler(handle_auth_error))
    app.add_exception_handler(UpstreamError, _json_error_handler(handle_upstream_error))
    app.add_exception_handler(NotFoundError, _json_error_handler(handle_not_found_error))
    app.add_exception_handler(StoreError, _json_error_handler(handle_store_error))

    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
