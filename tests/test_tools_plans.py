import pytest
import respx
from httpx import Response
from testomatio_mcp.core.auth import SessionState
from testomatio_mcp.core.client import ApiClient
from testomatio_mcp.core.tools.plans import get_plan, get_plans

BASE = "https://mock-tm.io"
PLANS = f"{BASE}/api/proj-1/plans"

PLAN = {
    "id": "p1",
    "attributes": {
        "title": "Release 2.0",
        "test-count": 2,
        "kind": "manual",
        "tests-ids": ["t1", "t2"],
        "labels": ["release"],
    },
}


@pytest.fixture
def client():
    return ApiClient(
        api_token="tkn",
        project_id="proj-1",
        base_url=BASE,
        session=SessionState("jwt"),
    )


@pytest.mark.asyncio
@respx.mock
async def test_get_plans_sends_filters(client):
    route = respx.get(PLANS).mock(return_value=Response(200, json={"data": [PLAN]}))

    async with client:
        text = await get_plans(client, detail=True, labels=["release"], page=1)

    params = route.calls[0].request.url.params
    assert params["detail"] == "true"
    assert params.get_list("labels[]") == ["release"]
    assert params["page"] == "1"
    assert text.startswith("Test plans for project proj-1:\n\n<plan>")
    assert "<tests_ids><test_id>t1</test_id><test_id>t2</test_id></tests_ids>" in text
    assert "<labels><label>release</label></labels>" in text


@pytest.mark.asyncio
@respx.mock
async def test_get_plan(client):
    respx.get(f"{PLANS}/p1").mock(return_value=Response(200, json={"data": PLAN}))

    async with client:
        text = await get_plan(client, "p1")

    assert text.startswith("Test plan p1:\n\n<plan>\n  <id>p1</id>\n  <title>Release 2.0")
    assert "<kind>manual</kind>" in text
