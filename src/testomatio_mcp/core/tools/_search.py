"""
Query-parameter and text helpers shared by the search/list tools.
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

ISSUE_KEY_RE = re.compile(r"^[A-Z]+-\d+$")
TITLE_TAG_RE = re.compile(r"@([\w-]+)")


def build_search_params(filters: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Keep the filters the API should see: None values and empty arrays or
    filter objects are dropped. Encoding (``name[]``, ``filter[key]``) is
    left to the client.
    """
    return {key: value for key, value in filters.items() if not _is_empty(value)}


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, (list, tuple, dict)) and not value


def describe_query(query: str) -> str:
    if query.startswith("@"):
        return f'tagged with "{query}"'
    if ISSUE_KEY_RE.match(query):
        return f'linked to Jira issue "{query}"'
    return f'containing "{query}"'


def describe_search(filters: Mapping[str, Any]) -> str:
    """Human-readable summary of the filters, e.g. ' (containing "login")'."""
    parts: List[str] = []

    if filters.get("query"):
        parts.append(describe_query(filters["query"]))
    if filters.get("tql"):
        parts.append(f'matching TQL: "{filters["tql"]}"')
    if filters.get("labels"):
        parts.append(f"with labels: {', '.join(filters['labels'])}")
    if filters.get("state"):
        parts.append(f"state: {filters['state']}")
    if filters.get("priority"):
        parts.append(f"priority: {filters['priority']}")

    extra = filters.get("filter")
    if isinstance(extra, dict) and extra:
        desc = ", ".join(f"{k}: {v}" for k, v in extra.items())
        parts.append(f"filtered by: {desc}")

    return f" ({', '.join(parts)})" if parts else ""


def extract_tags_from_title(title: Optional[str]) -> List[str]:
    """Collect ``@word`` tokens from a title, first-seen order, no duplicates."""
    tags: List[str] = []
    for match in TITLE_TAG_RE.finditer(title or ""):
        tag = match.group(1)
        if tag not in tags:
            tags.append(tag)
    return tags


def merge_tags(explicit: Optional[Iterable[str]], extracted: Iterable[str]) -> List[str]:
    """
    Explicit tags first (leading '@' stripped, order kept), then extracted
    tags not already present.
    """
    merged: List[str] = []
    for tag in explicit or []:
        tag = tag.strip().lstrip("@")
        if tag and tag not in merged:
            merged.append(tag)
    for tag in extracted:
        if tag not in merged:
            merged.append(tag)
    return merged
