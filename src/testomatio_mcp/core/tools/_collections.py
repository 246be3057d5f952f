"""
Shared helpers for JSON:API payloads and collection rendering.
"""

from typing import Any, Dict, Iterable, List, Sequence

from testomatio_mcp.core.markup import format_resource
from testomatio_mcp.core.models import Resource


def data_elements(payload: Dict[str, Any]) -> List[Resource]:
    """
    Extract resources from a JSON:API collection payload.
    Raises ValueError if ``data`` is missing or not a list.
    """
    data = payload.get("data", [])
    if not isinstance(data, list):
        raise ValueError("Expected 'data' to be a list.")
    return [Resource.model_validate(e) for e in data if isinstance(e, dict)]


def data_element(payload: Dict[str, Any]) -> Resource:
    """Extract the single resource from a JSON:API document."""
    data = payload.get("data")
    if not isinstance(data, dict):
        raise ValueError("Expected 'data' to be an object.")
    return Resource.model_validate(data)


def render_resources(
    resources: Iterable[Resource], kind: str, fields: Sequence[str]
) -> str:
    return "\n\n".join(format_resource(r, kind, fields) for r in resources)


def render_collection(
    heading: str,
    resources: Sequence[Resource],
    kind: str,
    fields: Sequence[str],
    *,
    empty: str,
) -> str:
    """Heading plus joined markup, or the ``empty`` sentence for no results."""
    body = render_resources(resources, kind, fields) if resources else empty
    return f"{heading}:\n\n{body}"
