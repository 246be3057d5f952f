from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://app.testomat.io"
DEFAULT_TIMEOUT_SECONDS = 30.0

TOKEN_ENV = "TESTOMATIO_API_TOKEN"
PROJECT_ENV = "TESTOMATIO_PROJECT_ID"
BASE_URL_ENV = "TESTOMATIO_BASE_URL"
TIMEOUT_ENV = "TESTOMATIO_TIMEOUT"
LOG_LEVEL_ENV = "TESTOMATIO_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def normalize_value(value: Optional[str]) -> str:
    """Strip leading/trailing whitespace from a raw config string."""
    return (value or "").strip()


def normalize_base_url(value: Optional[str]) -> str:
    """
    Remove all whitespace from a base URL, including values that arrive
    split across lines, and drop the trailing slash.
    """
    return "".join((value or "").split()).rstrip("/")


@dataclass(frozen=True)
class ServerConfig:
    api_token: str
    project_id: str
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        api_token = normalize_value(self.api_token)
        project_id = normalize_value(self.project_id)
        base_url = normalize_base_url(self.base_url) or DEFAULT_BASE_URL

        if not api_token:
            raise ValueError("API token must be provided.")
        if not project_id:
            raise ValueError("Project ID must be provided.")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        object.__setattr__(self, "api_token", api_token)
        object.__setattr__(self, "project_id", project_id)
        object.__setattr__(self, "base_url", base_url)


def load_env_config(*, use_dotenv: bool = True) -> Tuple[str, str, str]:
    """Load API token, project id and base URL from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    api_token = normalize_value(os.getenv(TOKEN_ENV))
    project_id = normalize_value(os.getenv(PROJECT_ENV))
    base_url = normalize_base_url(os.getenv(BASE_URL_ENV)) or DEFAULT_BASE_URL
    return api_token, project_id, base_url


def load_log_level(*, use_dotenv: bool = True) -> str:
    if use_dotenv:
        load_dotenv()
    return normalize_value(os.getenv(LOG_LEVEL_ENV)) or DEFAULT_LOG_LEVEL


def load_timeout(default: float = DEFAULT_TIMEOUT_SECONDS) -> float:
    raw = normalize_value(os.getenv(TIMEOUT_ENV))
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{TIMEOUT_ENV} must be a number, got {raw!r}") from exc


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT_SECONDS",
    "ServerConfig",
    "normalize_value",
    "normalize_base_url",
    "load_env_config",
    "load_log_level",
    "load_timeout",
]
