"""
Render JSON:API resources as XML-like markup for language-model consumption.

The renderer is generic: callers pass an element name for the resource and an
ordered list of attribute names to project. A small set of named shapes is
checked before the generic rules:

- ARRAY_ITEM_TAGS: child element names for well-known array fields
- OBJECT_SHAPES: fixed sub-projections for well-known embedded objects
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Union

from .models import Resource, markup_name

INDENT = "  "

_ESCAPES = (
    ("&", "&amp;"),  # first, so entities below are not escaped twice
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)


def escape_markup(text: str) -> str:
    for raw, entity in _ESCAPES:
        text = text.replace(raw, entity)
    return text


def unescape_markup(text: str) -> str:
    for raw, entity in reversed(_ESCAPES):
        text = text.replace(entity, raw)
    return text


# --- Shape registry --------------------------------------------------------- #

ARRAY_ITEM_TAGS: Dict[str, str] = {
    "tags": "tag",
    "labels": "label",
    "tests_ids": "test_id",
}
DEFAULT_ITEM_TAG = "item"


@dataclass(frozen=True)
class ObjectShape:
    matches: Callable[[Mapping[str, Any]], bool]
    project: Callable[[Mapping[str, Any]], Dict[str, Any]]


def _embedded_test(obj: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": obj.get("id") or "",
        "title": obj.get("title") or "",
        "priority": obj.get("priority") or "normal",
        "tags": obj.get("tags") or [],
    }


OBJECT_SHAPES: Dict[str, ObjectShape] = {
    # Test reference embedded in testrun payloads.
    "test": ObjectShape(matches=lambda obj: bool(obj.get("id")), project=_embedded_test),
}


def array_item_tag(name: str) -> str:
    return ARRAY_ITEM_TAGS.get(markup_name(name), DEFAULT_ITEM_TAG)


# --- Rendering -------------------------------------------------------------- #


def format_value(value: Any, name: str = "", depth: int = 1) -> str:
    """Render the inner content of the element named ``name``."""
    if value is None:
        return ""

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, str):
        return escape_markup(value)

    if isinstance(value, (list, tuple)):
        item_tag = array_item_tag(name)
        return "".join(
            f"<{item_tag}>{format_value(item, item_tag, depth + 1)}</{item_tag}>"
            for item in value
        )

    if isinstance(value, Mapping):
        shape = OBJECT_SHAPES.get(markup_name(name))
        if shape is not None and shape.matches(value):
            value = shape.project(value)
        return _format_children(value.items(), depth)

    return str(value)


def _format_children(items: Iterable[tuple[str, Any]], depth: int) -> str:
    pad = INDENT * (depth + 1)
    lines = []
    for key, child in items:
        tag = markup_name(str(key))
        lines.append(f"{pad}<{tag}>{format_value(child, tag, depth + 1)}</{tag}>")
    if not lines:
        return ""
    return "\n" + "\n".join(lines) + "\n" + INDENT * depth


def format_resource(
    resource: Union[Resource, Mapping[str, Any]],
    kind: str,
    fields: Iterable[str],
) -> str:
    """
    Render one resource as ``<kind>`` with ``<id>`` first and one element per
    requested field, in order. Field lookup accepts either hyphenated or
    underscored names; element names always use underscores.
    """
    if not isinstance(resource, Resource):
        resource = Resource.model_validate(resource)

    lines = [f"<{kind}>", f"{INDENT}<id>{escape_markup(resource.id)}</id>"]
    for field in fields:
        tag = markup_name(field)
        content = format_value(resource.lookup(field), tag)
        lines.append(f"{INDENT}<{tag}>{content}</{tag}>")
    lines.append(f"</{kind}>")
    return "\n".join(lines)


__all__ = [
    "ARRAY_ITEM_TAGS",
    "OBJECT_SHAPES",
    "ObjectShape",
    "escape_markup",
    "unescape_markup",
    "format_value",
    "format_resource",
]
