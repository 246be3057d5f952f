"""Core domain surface for testomatio-mcp (transport-agnostic)."""

from .auth import Authenticator, SessionState
from .client import ApiClient, encode_query_params
from .config import ServerConfig, load_env_config, normalize_base_url, normalize_value
from .errors import ApiRequestError, AuthenticationError, ClientError, ResponseParseError
from .markup import escape_markup, format_resource, unescape_markup
from .models import Resource
from .registry import (
    discover_tool_modules,
    iter_tool_functions,
    register_discovered_tools,
)

__all__ = [
    # Client
    "ApiClient",
    "Authenticator",
    "SessionState",
    "encode_query_params",
    # Exceptions
    "ClientError",
    "AuthenticationError",
    "ApiRequestError",
    "ResponseParseError",
    # Config helpers
    "ServerConfig",
    "load_env_config",
    "normalize_value",
    "normalize_base_url",
    # Markup
    "Resource",
    "format_resource",
    "escape_markup",
    "unescape_markup",
    # Registry helpers
    "discover_tool_modules",
    "iter_tool_functions",
    "register_discovered_tools",
]
