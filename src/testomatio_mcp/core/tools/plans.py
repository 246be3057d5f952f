from __future__ import annotations

from typing import List, Optional

from testomatio_mcp.core.client import ApiClient
from testomatio_mcp.core.markup import format_resource
from testomatio_mcp.core.tools._collections import (
    data_element,
    data_elements,
    render_collection,
)
from testomatio_mcp.core.tools._search import build_search_params

PLAN_FIELDS = ("title", "test-count", "kind", "created-at", "tests-ids", "labels")


async def get_plans(
    client: ApiClient,
    *,
    detail: Optional[bool] = None,
    labels: Optional[List[str]] = None,
    page: Optional[int] = None,
) -> str:
    """Get all test plans for the project, optionally filtered by labels."""
    params = build_search_params({"detail": detail, "labels": labels, "page": page})
    payload = await client.get("/plans", params=params, tool="get_plans")
    return render_collection(
        f"Test plans for project {client.project_id}",
        data_elements(payload),
        "plan",
        PLAN_FIELDS,
        empty="No plans found.",
    )


async def get_plan(client: ApiClient, plan_id: str) -> str:
    """Get a specific test plan with attached tests."""
    payload = await client.get(f"/plans/{plan_id}", tool="get_plan")
    plan = data_element(payload)
    return f"Test plan {plan_id}:\n\n{format_resource(plan, 'plan', PLAN_FIELDS)}"
