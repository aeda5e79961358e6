"""OAuth client-credential token management for the Stepik API."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import httpx
from loguru import logger
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.config import settings
from app.utils.exceptions import AuthError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Retrying Stepik token exchange",
        attempt=retry_state.attempt_number,
        error=str(error),
    )


@dataclass(slots=True)
class _Credential:
    token: str
    expires_at: datetime

    def is_valid(self, now: datetime, margin: timedelta) -> bool:
        return now < self.expires_at - margin


class TokenManager:
    """Hand out bearer tokens, refreshing them before they expire.

    One instance is shared by every client in the process. Reading a still
    valid token takes no lock; a refresh happens under a lock and re-checks the
    cached credential first, so concurrent callers share a single exchange.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_url: str,
        *,
        safety_margin: timedelta = timedelta(minutes=5),
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.safety_margin = safety_margin
        self.timeout = timeout
        self._transport = transport
        self._credential: Optional[_Credential] = None
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    async def ensure_valid_token(self) -> str:
        """Return an access token valid for at least the safety margin."""

        credential = self._credential
        if credential is not None and credential.is_valid(_utcnow(), self.safety_margin):
            return credential.token

        async with self._refresh_lock():
            credential = self._credential
            if credential is not None and credential.is_valid(_utcnow(), self.safety_margin):
                return credential.token
            self._credential = await self._refresh()
            return self._credential.token

    def invalidate(self) -> None:
        """Drop the cached credential so the next call exchanges a new one."""

        self._credential = None

    def _refresh_lock(self) -> asyncio.Lock:
        # asyncio.Lock binds to one loop; Celery tasks run each sync in a fresh loop.
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def _refresh(self) -> _Credential:
        logger.info("Refreshing Stepik OAuth token")
        try:
            response = await self._request_token()
        except httpx.HTTPError as exc:
            raise AuthError(f"Token endpoint unreachable: {exc}") from exc

        if response.status_code >= 400:
            raise AuthError(
                f"Token endpoint returned {response.status_code}",
                details={"status": response.status_code, "body": response.text[:500]},
            )

        try:
            payload = response.json()
            token = str(payload["access_token"])
            expires_in = int(payload["expires_in"])
        except (ValueError, KeyError, TypeError) as exc:
            raise AuthError("Token endpoint returned a malformed response") from exc

        credential = _Credential(token=token, expires_at=_utcnow() + timedelta(seconds=expires_in))
        logger.info("Stepik token refreshed", expires_at=credential.expires_at.isoformat())
        return credential

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        before_sleep=_log_retry,
        reraise=True,
    )
    async def _request_token(self) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.post(
                self.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
            )


@lru_cache()
def get_token_manager() -> TokenManager:
    """Return the process-wide token manager."""

    return TokenManager(
        settings.STEPIK_CLIENT_ID,
        settings.STEPIK_CLIENT_SECRET,
        settings.STEPIK_TOKEN_URL,
        safety_margin=timedelta(seconds=settings.STEPIK_TOKEN_SAFETY_MARGIN_SECONDS),
        timeout=settings.STEPIK_REQUEST_TIMEOUT_SECONDS,
    )


__all__ = ["TokenManager", "get_token_manager"]
