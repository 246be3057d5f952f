from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType
from typing import Callable, Iterable, List, Set, get_type_hints

from .client import ApiClient

log = logging.getLogger("testomatio_mcp.core.registry")

ERROR_PREFIX = "Error: "


# --- Discovery helpers ----------------------------------------------------- #


def discover_tool_modules(
    package_name: str = "testomatio_mcp.core.tools",
) -> List[ModuleType]:
    """Import all public modules under the given tools package, skipping failures."""
    modules: List[ModuleType] = []
    base_pkg = importlib.import_module(package_name)

    for finder in pkgutil.iter_modules(base_pkg.__path__, base_pkg.__name__ + "."):
        name = finder.name
        if name.rsplit(".", 1)[-1].startswith("_"):
            continue
        try:
            module = importlib.import_module(name)
            modules.append(module)
        except Exception as exc:  # pragma: no cover - logged, not fatal
            log.error("Failed importing tool module %s: %s", name, exc)
            continue

    return modules


def iter_tool_functions(module: ModuleType) -> Iterable[Callable]:
    """Yield coroutine functions that satisfy the tool convention."""
    for _, func in inspect.getmembers(module, inspect.iscoroutinefunction):
        if func.__name__.startswith("_"):
            continue
        if func.__module__ != module.__name__:
            # Skip imported functions
            continue

        params = list(inspect.signature(func).parameters.values())
        if not params or params[0].name != "client":
            log.debug(
                "Skipping %s.%s: first parameter must be 'client'",
                module.__name__,
                func.__name__,
            )
            continue

        yield func


# --- Wrapping / registration ---------------------------------------------- #


def _wrap_tool(func: Callable, client_provider: Callable[[], ApiClient]) -> Callable:
    """
    Return a wrapper that injects the client, hides it from the signature and
    turns any failure into an in-band ``Error: ...`` text result.
    """
    original_sig = inspect.signature(func)
    type_hints = get_type_hints(func)

    new_params = []
    for i, (name, param) in enumerate(original_sig.parameters.items()):
        if i == 0 and name == "client":
            continue  # drop injected client
        ann = type_hints.get(name, param.annotation)
        new_params.append(param.replace(annotation=ann))

    return_ann = type_hints.get("return", original_sig.return_annotation)
    new_sig = inspect.Signature(parameters=new_params, return_annotation=return_ann)

    async def wrapped(*args, **kwargs):
        client = client_provider()
        try:
            return await func(client, *args, **kwargs)
        except Exception as exc:
            log.warning(
                "Tool %s failed: %s", func.__name__, exc, extra={"tool": func.__name__}
            )
            return f"{ERROR_PREFIX}{exc}"

    wrapped.__name__ = func.__name__
    wrapped.__doc__ = func.__doc__
    wrapped.__module__ = func.__module__
    wrapped.__signature__ = new_sig  # type: ignore[attr-defined]
    return wrapped


def register_discovered_tools(
    app,
    client_provider: Callable[[], ApiClient] | ApiClient,
    modules: List[ModuleType] | None = None,
) -> List[str]:
    """
    Register discovered tools on an app that exposes a .tool decorator.
    Returns the registered tool names in registration order.
    """
    if isinstance(client_provider, ApiClient):
        _client = client_provider

        def client_provider():
            return _client

    if not hasattr(app, "tool"):
        raise TypeError("app must expose a 'tool' decorator")

    modules = modules or discover_tool_modules()
    seen_names: Set[str] = set()
    registered: List[str] = []

    for module in modules:
        for func in iter_tool_functions(module):
            name = func.__name__
            if name in seen_names:
                raise ValueError(f"Duplicate tool name detected: {name}")

            wrapped = _wrap_tool(func, client_provider)
            app.tool(name=name)(wrapped)
            seen_names.add(name)
            registered.append(name)
            log.debug("Registered tool: %s (%s)", name, module.__name__)

    log.info("Registered %d tools", len(registered))
    return registered


__all__ = [
    "ERROR_PREFIX",
    "discover_tool_modules",
    "iter_tool_functions",
    "register_discovered_tools",
]
