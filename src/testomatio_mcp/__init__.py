"""testomatio_mcp package exports."""

from .core import (
    ApiClient,
    ApiRequestError,
    AuthenticationError,
    ClientError,
    ResponseParseError,
    ServerConfig,
    format_resource,
    register_discovered_tools,
)

__version__ = "1.0.0"

__all__ = [
    "ApiClient",
    "ServerConfig",
    "ClientError",
    "AuthenticationError",
    "ApiRequestError",
    "ResponseParseError",
    "format_resource",
    "register_discovered_tools",
    "__version__",
]
