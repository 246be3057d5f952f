from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from .auth import Authenticator, SessionState
from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    ServerConfig,
    load_env_config,
    load_timeout,
)
from .errors import ApiRequestError, ClientError, ResponseParseError
from .observability import log_event

# One extra attempt per logical request, only after a 401 on a cached JWT.
MAX_AUTH_RETRIES = 1

QueryItems = List[Tuple[str, str]]


def stringify_param(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_query_params(params: Optional[Mapping[str, Any]]) -> QueryItems:
    """
    Flatten a params mapping into ordered query items.

    - None values are skipped
    - lists become repeated ``key[]`` entries (order kept, duplicates allowed)
    - dicts become ``key[sub]=value`` entries
    - everything else is stringified
    """
    items: QueryItems = []
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            array_key = key if key.endswith("[]") else f"{key}[]"
            items.extend((array_key, stringify_param(v)) for v in value)
        elif isinstance(value, dict):
            items.extend(
                (f"{key}[{sub}]", stringify_param(v))
                for sub, v in value.items()
                if v is not None
            )
        else:
            items.append((key, stringify_param(value)))
    return items


class ApiClient:
    """
    Shared HTTP client for the Testomat.io project API.
    - Owns the Authenticator and its single session slot
    - Builds /api/{project_id}{path} URLs, query params and JSON bodies
    - Re-authenticates once when a cached JWT is rejected with 401
    - No business logic; tools own formatting and payload shapes
    """

    def __init__(
        self,
        *,
        api_token: str,
        project_id: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[SessionState] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.config = ServerConfig(
            api_token=api_token,
            project_id=project_id,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )
        self.log = logger or logging.getLogger("testomatio_mcp.client")

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=self.config.timeout_seconds,
        )
        self.authenticator = Authenticator(
            http=self.http,
            base_url=self.config.base_url,
            api_token=self.config.api_token,
            session=session,
        )

    @classmethod
    def from_config(cls, config: ServerConfig, **kwargs: Any) -> "ApiClient":
        return cls(
            api_token=config.api_token,
            project_id=config.project_id,
            base_url=config.base_url,
            timeout_seconds=config.timeout_seconds,
            **kwargs,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "ApiClient":
        api_token, project_id, base_url = load_env_config()
        if not api_token or not project_id:
            raise ValueError(
                "Missing TESTOMATIO_API_TOKEN or TESTOMATIO_PROJECT_ID in environment."
            )
        kwargs.setdefault("timeout_seconds", load_timeout())
        return cls(
            api_token=api_token, project_id=project_id, base_url=base_url, **kwargs
        )

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def project_id(self) -> str:
        return self.config.project_id

    @property
    def session(self) -> SessionState:
        return self.authenticator.session

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def authenticate(self) -> str:
        return await self.authenticator.authenticate()

    def resource_url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}/api/{self.project_id}{path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        tool: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Core request method.
        - Authenticates first (free when a JWT is cached)
        - On 401 with a JWT cached before the call: invalidate, re-authenticate
          and retry exactly once
        - Raises ApiRequestError on any other non-2xx response
        - Raises ClientError on network/timeout errors (never retried)
        - Raises ResponseParseError if the response isn't a JSON object
        """
        method = method.upper()
        url = self.resource_url(path)
        query = encode_query_params(params)

        # A 401 on the very first login's token is not retried.
        had_credential = self.session.has_token
        retries = 0

        while True:
            token = await self.authenticator.authenticate()
            resp = await self._send(
                method, url, token=token, query=query, json=json, tool=tool,
                attempt=retries,
            )

            if self._should_reauthenticate(
                resp, retries=retries, had_credential=had_credential
            ):
                self.session.invalidate(token)
                retries += 1
                self.log.info("Session token rejected; re-authenticating")
                continue

            if not resp.is_success:
                raise self._to_http_error(resp, method=method)

            return self._safe_json(resp)

    @staticmethod
    def _should_reauthenticate(
        resp: httpx.Response, *, retries: int, had_credential: bool
    ) -> bool:
        return (
            resp.status_code == 401
            and had_credential
            and retries < MAX_AUTH_RETRIES
        )

    async def _send(
        self,
        method: str,
        url: str,
        *,
        token: str,
        query: QueryItems,
        json: Optional[Dict[str, Any]],
        tool: Optional[str],
        attempt: int,
    ) -> httpx.Response:
        endpoint = httpx.URL(url).path
        start = time.perf_counter()
        try:
            resp = await self.http.request(
                method,
                url,
                params=query,
                json=json,
                headers={
                    "Authorization": token,
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as exc:
            log_event(
                "op_call",
                tool=tool,
                method=method,
                endpoint=endpoint,
                status="exception",
                error_type=type(exc).__name__,
                duration_ms=int((time.perf_counter() - start) * 1000),
                attempt=attempt,
            )
            raise ClientError(
                f"Network/timeout error calling {method} {url}: {exc}"
            ) from exc

        log_event(
            "op_call",
            tool=tool,
            method=method,
            endpoint=endpoint,
            status=resp.status_code,
            duration_ms=int((time.perf_counter() - start) * 1000),
            attempt=attempt,
        )
        return resp

    def _safe_json(self, resp: httpx.Response) -> Dict[str, Any]:
        if not resp.content:
            return {}

        try:
            data = resp.json()
        except ValueError as exc:
            snippet = (resp.text or "")[:500]
            raise ResponseParseError(
                f"Expected JSON from {resp.request.method} "
                f"{resp.request.url}, got non-JSON body snippet: "
                f"{snippet!r}"
            ) from exc

        if not isinstance(data, dict):
            raise ResponseParseError(
                f"Expected top-level JSON object from "
                f"{resp.request.method} {resp.request.url}, "
                f"got {type(data).__name__}"
            )
        return data

    @staticmethod
    def _to_http_error(resp: httpx.Response, *, method: str) -> ApiRequestError:
        # Bodies are only surfaced for writes, where they carry validation errors.
        response_text = resp.text if method in ("POST", "PUT") else None
        return ApiRequestError(
            status_code=resp.status_code,
            status_text=resp.reason_phrase,
            method=method,
            url=str(resp.request.url),
            response_text=response_text,
        )

    async def get(
        self,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        tool: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.request("GET", path, params=params, tool=tool)

    async def post(
        self, path: str, *, json: Dict[str, Any], tool: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self.request("POST", path, json=json, tool=tool)

    async def put(
        self, path: str, *, json: Dict[str, Any], tool: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self.request("PUT", path, json=json, tool=tool)


__all__ = [
    "MAX_AUTH_RETRIES",
    "ApiClient",
    "encode_query_params",
    "stringify_param",
]
