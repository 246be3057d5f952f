from __future__ import annotations

from typing import Any, Dict, List, Optional

from testomatio_mcp.core.client import ApiClient
from testomatio_mcp.core.markup import format_resource
from testomatio_mcp.core.models import CreateLabelInput, LabelFieldInput
from testomatio_mcp.core.tools._collections import (
    data_element,
    data_elements,
    render_collection,
)

LABEL_FIELDS = ("title", "color", "scope", "visibility", "field")


async def get_labels(client: ApiClient) -> str:
    """Get all labels (and custom fields) defined in the project."""
    payload = await client.get("/labels", tool="get_labels")
    return render_collection(
        f"Labels for project {client.project_id}",
        data_elements(payload),
        "label",
        LABEL_FIELDS,
        empty="No labels found.",
    )


async def create_label(
    client: ApiClient,
    title: str,
    *,
    color: Optional[str] = None,
    scope: Optional[List[str]] = None,
    visibility: Optional[List[str]] = None,
    field: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Create a label. Pass ``field`` (e.g. {"type": "list", "short": true,
    "value": "Blocker\\nCritical\\nMajor"}) to make it a custom field.
    """
    data = CreateLabelInput(
        title=title,
        color=color,
        scope=scope,
        visibility=visibility,
        field=LabelFieldInput.model_validate(field) if field is not None else None,
    )
    payload = await client.post(
        "/labels",
        json={"data": {"type": "label", "attributes": data.attributes()}},
        tool="create_label",
    )
    label = data_element(payload)
    return (
        f'Successfully created label "{data.title}" (ID: {label.id}):\n\n'
        f"{format_resource(label, 'label', LABEL_FIELDS)}"
    )


async def link_label(
    client: ApiClient,
    label_slug: str,
    *,
    test_id: Optional[str] = None,
    suite_id: Optional[str] = None,
    value: Optional[str] = None,
) -> str:
    """
    Attach a label to exactly one test or one suite. ``value`` sets the
    custom-field value for labels that carry one.
    """
    if bool(test_id) == bool(suite_id):
        raise ValueError("Provide exactly one of test_id or suite_id.")

    target_key, target_id = ("test_id", test_id) if test_id else ("suite_id", suite_id)
    attributes: Dict[str, Any] = {target_key: target_id}
    if value is not None:
        attributes["value"] = value

    await client.post(
        f"/labels/{label_slug}/link",
        json={"data": {"type": "label_link", "attributes": attributes}},
        tool="link_label",
    )
    target = "test" if test_id else "suite"
    return f'Successfully linked label "{label_slug}" to {target} {target_id}.'
