from __future__ import annotations

from typing import Any, Dict, List, Optional

from testomatio_mcp.core.client import ApiClient
from testomatio_mcp.core.markup import format_resource
from testomatio_mcp.core.models import (
    CreateTestInput,
    PriorityLevel,
    StateFilter,
    UpdateTestInput,
)
from testomatio_mcp.core.tools._collections import (
    data_element,
    data_elements,
    render_collection,
)
from testomatio_mcp.core.tools._search import (
    build_search_params,
    describe_search,
    extract_tags_from_title,
    merge_tags,
)

TEST_FIELDS = (
    "title",
    "description",
    "code",
    "priority",
    "state",
    "suite-id",
    "tags",
    "file",
)


def _test_body(
    attributes: Dict[str, Any], labels_ids: Optional[List[str]]
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"data": {"type": "tests", "attributes": attributes}}
    if labels_ids:
        body["labels_ids"] = list(labels_ids)
    return body


async def get_tests(
    client: ApiClient,
    *,
    plan: Optional[str] = None,
    query: Optional[str] = None,
    state: Optional[StateFilter] = None,
    suite_id: Optional[str] = None,
    tag: Optional[str] = None,
    labels: Optional[List[str]] = None,
) -> str:
    """
    Get all tests for the project with optional filtering by plan, text or
    query language (start with '='), state, suite, tag (e.g. @slow) or labels.
    """
    params = build_search_params(
        {
            "plan": plan,
            "query": query,
            "state": state,
            "suite_id": suite_id,
            "tag": tag,
            "labels": labels,
        }
    )
    payload = await client.get("/tests", params=params, tool="get_tests")
    return render_collection(
        f"Tests for project {client.project_id}",
        data_elements(payload),
        "test",
        TEST_FIELDS,
        empty="No tests found.",
    )


async def search_tests(
    client: ApiClient,
    *,
    query: Optional[str] = None,
    tql: Optional[str] = None,
    labels: Optional[List[str]] = None,
    state: Optional[StateFilter] = None,
    priority: Optional[PriorityLevel] = None,
    filter: Optional[Dict[str, Any]] = None,
    page: Optional[int] = None,
) -> str:
    """
    Search tests by keywords, tags (@smoke), Jira issues (JIRA-123), TQL
    queries (e.g. "tag == 'smoke' and state == 'manual'"), labels and an
    advanced filter hash (e.g. {"state": "manual", "priority": "high"}).
    """
    filters = {
        "query": query,
        "tql": tql,
        "labels": labels,
        "state": state,
        "priority": priority,
        "filter": filter,
        "page": page,
    }
    payload = await client.get(
        "/tests", params=build_search_params(filters), tool="search_tests"
    )
    return render_collection(
        f"Search results for tests{describe_search(filters)}",
        data_elements(payload),
        "test",
        TEST_FIELDS,
        empty="No tests found matching the criteria.",
    )


async def create_test(
    client: ApiClient,
    suite_id: str,
    title: str,
    *,
    description: Optional[str] = None,
    code: Optional[str] = None,
    priority: Optional[PriorityLevel] = None,
    state: Optional[StateFilter] = None,
    tags: Optional[List[str]] = None,
    labels_ids: Optional[List[str]] = None,
) -> str:
    """
    Create a test in a suite. Tags written as @word in the title are added to
    the explicit tags list.
    """
    data = CreateTestInput(
        suite_id=suite_id,
        title=title,
        description=description,
        code=code,
        priority=priority,
        state=state,
        tags=merge_tags(tags, extract_tags_from_title(title)) or None,
    )
    payload = await client.post(
        "/tests", json=_test_body(data.attributes(), labels_ids), tool="create_test"
    )
    test = data_element(payload)
    return (
        f'Successfully created test "{data.title}" (ID: {test.id}):\n\n'
        f"{format_resource(test, 'test', TEST_FIELDS)}"
    )


async def update_test(
    client: ApiClient,
    test_id: str,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    code: Optional[str] = None,
    priority: Optional[PriorityLevel] = None,
    state: Optional[StateFilter] = None,
    tags: Optional[List[str]] = None,
    suite_id: Optional[str] = None,
    labels_ids: Optional[List[str]] = None,
) -> str:
    """
    Update fields of an existing test (title, description, code, priority,
    state, tags, suite). Only the provided fields are sent.
    """
    title_tags = extract_tags_from_title(title)
    # An explicit empty list clears the test's tags.
    merged_tags = (
        merge_tags(tags, title_tags) if tags is not None or title_tags else None
    )

    data = UpdateTestInput(
        title=title,
        description=description,
        code=code,
        priority=priority,
        state=state,
        tags=merged_tags,
        suite_id=suite_id,
    )
    attributes = data.attributes()
    if not attributes and not labels_ids:
        raise ValueError("update_test requires at least one field to change.")

    payload = await client.put(
        f"/tests/{test_id}",
        json=_test_body(attributes, labels_ids),
        tool="update_test",
    )
    test = data_element(payload)
    return (
        f"Successfully updated test {test.id or test_id}:\n\n"
        f"{format_resource(test, 'test', TEST_FIELDS)}"
    )
