from __future__ import annotations

from typing import Optional


class ClientError(Exception):
    """Base error for Testomat.io client failures."""


class AuthenticationError(ClientError):
    """Login exchange failed or returned no session token."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        status_text: Optional[str] = None,
        response_text: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text
        self.response_text = response_text


class ApiRequestError(ClientError):
    def __init__(
        self,
        *,
        status_code: int,
        status_text: str,
        method: str,
        url: str,
        response_text: Optional[str] = None,
    ):
        message = f"HTTP {status_code}: {status_text}"
        if response_text:
            message = f"{message}. Response: {response_text}"
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text
        self.method = method
        self.url = url
        self.response_text = response_text


class ResponseParseError(ClientError):
    pass


__all__ = [
    "ClientError",
    "AuthenticationError",
    "ApiRequestError",
    "ResponseParseError",
]
