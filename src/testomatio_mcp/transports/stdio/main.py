from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from testomatio_mcp import __version__
from testomatio_mcp.core.client import ApiClient
from testomatio_mcp.core.config import (
    BASE_URL_ENV,
    DEFAULT_BASE_URL,
    LOG_LEVEL_ENV,
    PROJECT_ENV,
    TOKEN_ENV,
    ServerConfig,
    load_env_config,
    load_log_level,
    load_timeout,
)
from testomatio_mcp.core.errors import ClientError
from testomatio_mcp.core.logging import setup_logging
from testomatio_mcp.core.registry import register_discovered_tools

SERVER_NAME = "testomatio-mcp"

log = logging.getLogger("testomatio_mcp.transports.stdio")


class ConfigError(ValueError):
    """Raised when required startup configuration is missing."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="Model Context Protocol server for the Testomat.io API",
    )
    parser.add_argument("-t", "--token", help=f"Testomat.io API token (env: {TOKEN_ENV})")
    parser.add_argument("-p", "--project", help=f"Project ID (env: {PROJECT_ENV})")
    parser.add_argument(
        "--base-url",
        help=f"Base URL for the Testomat.io API (env: {BASE_URL_ENV}, "
        f"default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument(
        "--log-level",
        help=f"Log level written to stderr (env: {LOG_LEVEL_ENV}, default: INFO)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def resolve_config(args: argparse.Namespace) -> ServerConfig:
    """Command-line flags win over environment variables (and .env)."""
    env_token, env_project, env_base_url = load_env_config()

    token = args.token or env_token
    project = args.project or env_project
    if not (token or "").strip():
        raise ConfigError(
            f"API token is required. Use --token <token> or set {TOKEN_ENV}."
        )
    if not (project or "").strip():
        raise ConfigError(
            f"Project ID is required. Use --project <project_id> or set {PROJECT_ENV}."
        )

    return ServerConfig(
        api_token=token,
        project_id=project,
        base_url=args.base_url or env_base_url,
        timeout_seconds=load_timeout(),
    )


def build_app(client: ApiClient) -> FastMCP:
    app = FastMCP(SERVER_NAME)
    register_discovered_tools(app, lambda: client)
    return app


async def serve(config: ServerConfig) -> None:
    async with ApiClient.from_config(config) as client:
        # Fail fast on bad credentials rather than on the first tool call.
        try:
            await client.authenticate()
        except ClientError as exc:
            log.error("%s", exc)
            raise SystemExit(1) from exc
        log.info("Authenticated with Testomat.io API")

        app = build_app(client)
        log.info("Serving %s on stdio", SERVER_NAME)
        await app.run_stdio_async()


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level or load_log_level())

    try:
        config = resolve_config(args)
    except ValueError as exc:
        log.error("Error: %s", exc)
        sys.exit(1)

    asyncio.run(serve(config))


if __name__ == "__main__":
    main()
