from __future__ import annotations

from typing import Optional

from testomatio_mcp.core.client import ApiClient
from testomatio_mcp.core.markup import format_resource
from testomatio_mcp.core.tools._collections import (
    data_element,
    data_elements,
    render_collection,
)

RUN_FIELDS = (
    "status",
    "title",
    "tests-count",
    "automated",
    "duration",
    "passed",
    "failed",
    "skipped",
    "created-at",
    "finished-at",
)

TESTRUN_FIELDS = ("status", "run-time", "message", "run-id", "test")


async def get_runs(client: ApiClient) -> str:
    """Get all test runs for the project."""
    payload = await client.get("/runs", tool="get_runs")
    return render_collection(
        f"Test runs for project {client.project_id}",
        data_elements(payload),
        "run",
        RUN_FIELDS,
        empty="No runs found.",
    )


async def get_run(client: ApiClient, run_id: str, tree: bool = False) -> str:
    """Get a specific test run; tree=true includes the list of tests."""
    params = {"tree": True} if tree else None
    payload = await client.get(f"/runs/{run_id}", params=params, tool="get_run")
    run = data_element(payload)
    return f"Test run {run_id}:\n\n{format_resource(run, 'run', RUN_FIELDS)}"


async def get_testruns(
    client: ApiClient,
    test_id: str,
    finished_at_date_range: Optional[str] = None,
) -> str:
    """
    Get run results of a single test, optionally limited to a finish date
    range (format: YYYY-MM-DD,YYYY-MM-DD).
    """
    params = {"test_id": test_id, "finished_at_date_range": finished_at_date_range}
    payload = await client.get("/testruns", params=params, tool="get_testruns")
    return render_collection(
        f"Test runs for test {test_id}",
        data_elements(payload),
        "testrun",
        TESTRUN_FIELDS,
        empty="No test runs found.",
    )
