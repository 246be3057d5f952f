import json

import pytest
import respx
from httpx import Response
from testomatio_mcp.core.auth import SessionState
from testomatio_mcp.core.client import ApiClient
from testomatio_mcp.core.tools.labels import create_label, get_labels, link_label

BASE = "https://mock-tm.io"
LABELS = f"{BASE}/api/proj-1/labels"


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
async def test_get_labels(client):
    respx.get(LABELS).mock(
        return_value=Response(
            200,
            json={
                "data": [
                    {
                        "id": "l1",
                        "attributes": {
                            "title": "Severity",
                            "color": "#ffe9ad",
                            "scope": ["tests", "suites"],
                        },
                    }
                ]
            },
        )
    )

    async with client:
        text = await get_labels(client)

    assert text.startswith("Labels for project proj-1:\n\n<label>")
    assert "<scope><item>tests</item><item>suites</item></scope>" in text


@pytest.mark.asyncio
@respx.mock
async def test_create_label_with_custom_field(client):
    field = {
        "type": "list",
        "short": True,
        "value": "Blocker\nCritical\nMajor",
    }
    route = respx.post(LABELS).mock(
        return_value=Response(
            201,
            json={
                "data": {
                    "id": "label-456",
                    "attributes": {"title": "Priority", "field": field},
                }
            },
        )
    )

    async with client:
        text = await create_label(
            client, "Priority", color="#ff6b6b", scope=["tests"], field=field
        )

    body = json.loads(route.calls[0].request.content)
    assert body == {
        "data": {
            "type": "label",
            "attributes": {
                "title": "Priority",
                "color": "#ff6b6b",
                "scope": ["tests"],
                "field": field,
            },
        }
    }
    assert 'Successfully created label "Priority" (ID: label-456)' in text
    assert "<type>list</type>" in text


@pytest.mark.asyncio
@respx.mock
async def test_create_label_minimal(client):
    route = respx.post(LABELS).mock(
        return_value=Response(
            201, json={"data": {"id": "label-789", "attributes": {"title": "Simple"}}}
        )
    )

    async with client:
        text = await create_label(client, "Simple")

    body = json.loads(route.calls[0].request.content)
    assert body["data"]["attributes"] == {"title": "Simple"}
    assert "Simple" in text


@pytest.mark.asyncio
@respx.mock
async def test_link_label_to_test(client):
    route = respx.post(f"{LABELS}/severity/link").mock(
        return_value=Response(200, json={})
    )

    async with client:
        text = await link_label(client, "severity", test_id="t1", value="Critical")

    assert json.loads(route.calls[0].request.content) == {
        "data": {
            "type": "label_link",
            "attributes": {"test_id": "t1", "value": "Critical"},
        }
    }
    assert text == 'Successfully linked label "severity" to test t1.'


@pytest.mark.asyncio
@respx.mock
async def test_link_label_to_suite(client):
    route = respx.post(f"{LABELS}/ui/link").mock(return_value=Response(204))

    async with client:
        text = await link_label(client, "ui", suite_id="s1")

    body = json.loads(route.calls[0].request.content)
    assert body["data"]["attributes"] == {"suite_id": "s1"}
    assert text.endswith("to suite s1.")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "targets", [{}, {"test_id": "t1", "suite_id": "s1"}]
)
async def test_link_label_requires_exactly_one_target(client, targets):
    async with client:
        with pytest.raises(ValueError):
            await link_label(client, "ui", **targets)
