from __future__ import annotations

import logging
import time
from typing import Optional

import httpx

from .errors import AuthenticationError, ClientError
from .observability import log_event

LOGIN_PATH = "/api/login"


class SessionState:
    """
    Single in-memory slot for the session credential (JWT).
    No expiry timer: the slot is only cleared when a request observes a 401.
    """

    def __init__(self, token: Optional[str] = None):
        self.token = token

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    def store(self, token: str) -> None:
        self.token = token

    def invalidate(self, used_token: Optional[str] = None) -> bool:
        """
        Clear the slot. When ``used_token`` is given, only clear it if the slot
        still holds that token; a concurrent request may already have stored a
        fresh one. Returns True when the slot was cleared.
        """
        if used_token is not None and self.token != used_token:
            return False
        self.token = None
        return True


class Authenticator:
    """Exchanges the long-lived API token for a session JWT and caches it."""

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        base_url: str,
        api_token: str,
        session: Optional[SessionState] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.http = http
        self.base_url = base_url
        self.session = session if session is not None else SessionState()
        self.log = logger or logging.getLogger("testomatio_mcp.auth")
        self._api_token = api_token

    @property
    def login_url(self) -> str:
        return f"{self.base_url}{LOGIN_PATH}"

    async def authenticate(self) -> str:
        """Return the cached JWT, logging in first when the slot is empty."""
        if self.session.token:
            return self.session.token

        start = time.perf_counter()
        try:
            resp = await self.http.post(
                self.login_url,
                data={"api_token": self._api_token},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as exc:
            log_event(
                "auth_login",
                method="POST",
                endpoint=LOGIN_PATH,
                status="exception",
                error_type=type(exc).__name__,
                duration_ms=int((time.perf_counter() - start) * 1000),
            )
            raise ClientError(
                f"Network/timeout error calling POST {self.login_url}: {exc}"
            ) from exc

        log_event(
            "auth_login",
            method="POST",
            endpoint=LOGIN_PATH,
            status=resp.status_code,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )

        if not resp.is_success:
            raise AuthenticationError(
                f"Authentication failed: HTTP {resp.status_code}: "
                f"{resp.reason_phrase}. Response: {resp.text}",
                status_code=resp.status_code,
                status_text=resp.reason_phrase,
                response_text=resp.text,
            )

        token = self._extract_token(resp)
        self.session.store(token)
        self.log.debug("Session token refreshed")
        return token

    @staticmethod
    def _extract_token(resp: httpx.Response) -> str:
        try:
            data = resp.json()
        except ValueError:
            data = None

        token = data.get("jwt") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthenticationError(
                "Authentication failed: No JWT token received in response",
                status_code=resp.status_code,
                status_text=resp.reason_phrase,
                response_text=(resp.text or "")[:500],
            )
        return token


__all__ = ["LOGIN_PATH", "SessionState", "Authenticator"]
