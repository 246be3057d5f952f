from __future__ import annotations

from typing import Any, Dict, List, Optional

from testomatio_mcp.core.client import ApiClient
from testomatio_mcp.core.markup import format_resource
from testomatio_mcp.core.models import (
    CreateSuiteInput,
    PriorityLevel,
    StateFilter,
    UpdateSuiteInput,
)
from testomatio_mcp.core.tools._collections import (
    data_element,
    data_elements,
    render_collection,
    render_resources,
)
from testomatio_mcp.core.tools._search import build_search_params, describe_search
from testomatio_mcp.core.tools.tests import TEST_FIELDS

SUITE_FIELDS = ("title", "description", "test-count", "is-root", "file-type")


def _suite_body(
    attributes: Dict[str, Any], parent_id: Optional[str]
) -> Dict[str, Any]:
    data: Dict[str, Any] = {"type": "suites", "attributes": attributes}
    if parent_id:
        data["relationships"] = {
            "parent": {"data": {"type": "suites", "id": parent_id}}
        }
    return {"data": data}


async def search_suites(
    client: ApiClient,
    *,
    query: Optional[str] = None,
    labels: Optional[List[str]] = None,
    state: Optional[StateFilter] = None,
    priority: Optional[PriorityLevel] = None,
    page: Optional[int] = None,
) -> str:
    """
    Search suites and their tests by keywords, tags (@smoke), Jira issues
    (JIRA-123), labels, state and priority.
    """
    filters = {
        "query": query,
        "labels": labels,
        "state": state,
        "priority": priority,
        "page": page,
    }
    # filter=true makes the API match suites by the tests they contain.
    params = build_search_params({**filters, "filter": True})
    payload = await client.get("/suites", params=params, tool="search_suites")
    return render_collection(
        f"Search results for suites{describe_search(filters)}",
        data_elements(payload),
        "suite",
        SUITE_FIELDS,
        empty="No suites found matching the criteria.",
    )


async def get_root_suites(client: ApiClient) -> str:
    """Get all root-level suites for the project."""
    payload = await client.get("/suites", tool="get_root_suites")
    return render_collection(
        f"Root suites for project {client.project_id}",
        data_elements(payload),
        "suite",
        SUITE_FIELDS,
        empty="No suites found.",
    )


async def get_suite(client: ApiClient, suite_id: str) -> str:
    """Get a specific suite with its child suites and tests."""
    payload = await client.get(f"/suites/{suite_id}", tool="get_suite")
    suite = data_element(payload)

    text = f"Suite {suite_id}:\n\n{format_resource(suite, 'suite', SUITE_FIELDS)}"

    children = suite.related("children")
    if children:
        text += f"\n\nChild Suites:\n{render_resources(children, 'suite', SUITE_FIELDS)}"

    tests = suite.related("tests")
    if tests:
        text += f"\n\nTests:\n{render_resources(tests, 'test', TEST_FIELDS)}"

    return text


async def _create(
    client: ApiClient,
    *,
    kind: str,
    title: str,
    description: Optional[str],
    parent_id: Optional[str],
    tool: str,
) -> str:
    data = CreateSuiteInput(title=title, description=description, file_type=kind)
    payload = await client.post(
        "/suites", json=_suite_body(data.attributes(), parent_id), tool=tool
    )
    suite = data_element(payload)
    label = "folder" if kind == "folder" else "suite"
    return (
        f'Successfully created {label} "{data.title}" (ID: {suite.id}):\n\n'
        f"{format_resource(suite, 'suite', SUITE_FIELDS)}"
    )


async def create_suite(
    client: ApiClient,
    title: str,
    *,
    description: Optional[str] = None,
    parent_id: Optional[str] = None,
) -> str:
    """Create a suite (a container for tests), optionally inside a folder."""
    return await _create(
        client,
        kind="file",
        title=title,
        description=description,
        parent_id=parent_id,
        tool="create_suite",
    )


async def create_folder(
    client: ApiClient,
    title: str,
    *,
    description: Optional[str] = None,
    parent_id: Optional[str] = None,
) -> str:
    """Create a folder (a container for suites), optionally nested in another."""
    return await _create(
        client,
        kind="folder",
        title=title,
        description=description,
        parent_id=parent_id,
        tool="create_folder",
    )


async def update_suite(
    client: ApiClient,
    suite_id: str,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    parent_id: Optional[str] = None,
) -> str:
    """Rename, re-describe or move a suite. Only the provided fields are sent."""
    attributes = UpdateSuiteInput(title=title, description=description).attributes()
    if not attributes and not parent_id:
        raise ValueError("update_suite requires at least one field to change.")

    payload = await client.put(
        f"/suites/{suite_id}",
        json=_suite_body(attributes, parent_id),
        tool="update_suite",
    )
    suite = data_element(payload)
    return (
        f"Successfully updated suite {suite.id or suite_id}:\n\n"
        f"{format_resource(suite, 'suite', SUITE_FIELDS)}"
    )
