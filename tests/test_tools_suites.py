import json

import pytest
import respx
from httpx import Response
from testomatio_mcp.core.auth import SessionState
from testomatio_mcp.core.client import ApiClient
from testomatio_mcp.core.tools.suites import (
    create_folder,
    create_suite,
    get_root_suites,
    get_suite,
    search_suites,
    update_suite,
)

BASE = "https://mock-tm.io"
SUITES = f"{BASE}/api/proj-1/suites"


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
async def test_get_root_suites(client):
    respx.get(SUITES).mock(
        return_value=Response(
            200,
            json={
                "data": [
                    {
                        "id": "s1",
                        "attributes": {
                            "title": "Auth",
                            "test-count": 4,
                            "is-root": True,
                            "file-type": "folder",
                        },
                    }
                ]
            },
        )
    )

    async with client:
        text = await get_root_suites(client)

    assert text.startswith("Root suites for project proj-1:\n\n<suite>")
    assert "<test_count>4</test_count>" in text
    assert "<is_root>true</is_root>" in text
    assert "<file_type>folder</file_type>" in text


@pytest.mark.asyncio
@respx.mock
async def test_search_suites_adds_filter_flag_and_handles_empty(client):
    route = respx.get(SUITES).mock(return_value=Response(200, json={"data": []}))

    async with client:
        text = await search_suites(client, query="checkout", labels=["ui"])

    params = route.calls[0].request.url.params
    assert params["filter"] == "true"
    assert params["query"] == "checkout"
    assert params.get_list("labels[]") == ["ui"]
    assert text == (
        'Search results for suites (containing "checkout", with labels: ui):\n\n'
        "No suites found matching the criteria."
    )


@pytest.mark.asyncio
@respx.mock
async def test_get_suite_includes_children_and_tests(client):
    respx.get(f"{SUITES}/s1").mock(
        return_value=Response(
            200,
            json={
                "data": {
                    "id": "s1",
                    "attributes": {"title": "Parent"},
                    "relationships": {
                        "children": {
                            "data": [{"id": "s2", "attributes": {"title": "Child"}}]
                        },
                        "tests": {
                            "data": [{"id": "t1", "attributes": {"title": "A test"}}]
                        },
                    },
                }
            },
        )
    )

    async with client:
        text = await get_suite(client, "s1")

    assert text.startswith("Suite s1:\n\n<suite>\n  <id>s1</id>")
    assert "\n\nChild Suites:\n<suite>\n  <id>s2</id>" in text
    assert "\n\nTests:\n<test>\n  <id>t1</id>" in text
    assert "<title>A test</title>" in text


@pytest.mark.asyncio
@respx.mock
async def test_get_suite_without_relationships(client):
    respx.get(f"{SUITES}/s1").mock(
        return_value=Response(200, json={"data": {"id": "s1", "attributes": {}}})
    )

    async with client:
        text = await get_suite(client, "s1")

    assert "Child Suites" not in text
    assert "Tests:" not in text


@pytest.mark.asyncio
@respx.mock
async def test_create_suite_and_folder_set_file_type(client):
    route = respx.post(SUITES).mock(
        side_effect=[
            Response(
                201,
                json={
                    "data": {
                        "id": "suite-123",
                        "attributes": {"title": "New Test Suite", "file-type": "file"},
                    }
                },
            ),
            Response(
                201,
                json={
                    "data": {
                        "id": "folder-123",
                        "attributes": {"title": "New Folder", "file-type": "folder"},
                    }
                },
            ),
        ]
    )

    async with client:
        suite_text = await create_suite(
            client, "New Test Suite", description="Test Description"
        )
        folder_text = await create_folder(client, "New Folder", parent_id="root-1")

    suite_body = json.loads(route.calls[0].request.content)
    assert suite_body == {
        "data": {
            "type": "suites",
            "attributes": {
                "title": "New Test Suite",
                "description": "Test Description",
                "file-type": "file",
            },
        }
    }
    folder_body = json.loads(route.calls[1].request.content)
    assert folder_body["data"]["attributes"]["file-type"] == "folder"
    assert folder_body["data"]["relationships"] == {
        "parent": {"data": {"type": "suites", "id": "root-1"}}
    }

    assert 'Successfully created suite "New Test Suite" (ID: suite-123)' in suite_text
    assert 'Successfully created folder "New Folder" (ID: folder-123)' in folder_text


@pytest.mark.asyncio
@respx.mock
async def test_update_suite(client):
    route = respx.put(f"{SUITES}/s1").mock(
        return_value=Response(
            200, json={"data": {"id": "s1", "attributes": {"title": "Renamed"}}}
        )
    )

    async with client:
        text = await update_suite(client, "s1", title="Renamed")

    assert json.loads(route.calls[0].request.content) == {
        "data": {"type": "suites", "attributes": {"title": "Renamed"}}
    }
    assert "Successfully updated suite s1" in text


@pytest.mark.asyncio
async def test_update_suite_without_changes_raises(client):
    async with client:
        with pytest.raises(ValueError):
            await update_suite(client, "s1")
