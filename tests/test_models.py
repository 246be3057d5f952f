import json
from pathlib import Path

import pytest
from pydantic import ValidationError
from testomatio_mcp.core.models import (
    CreateLabelInput,
    CreateSuiteInput,
    CreateTestInput,
    LabelFieldInput,
    Resource,
    UpdateTestInput,
    name_variants,
)


def load_fixture(name: str) -> dict:
    p = Path(__file__).parent / "fixtures" / name
    with open(p, encoding="utf-8") as f:
        return json.load(f)


def test_resource_parses_suite_document():
    suite = Resource.model_validate(load_fixture("suite.json")["data"])

    assert suite.id == "S1a2b3c4"
    assert suite.lookup("test_count") == 2
    assert suite.lookup("is-root") is True
    assert suite.related("children") == []
    assert [t.id for t in suite.related("tests")] == ["T1", "T2"]
    assert suite.related("missing") == []


def test_resource_tolerates_loose_payloads():
    res = Resource.model_validate({"id": 42, "attributes": None, "extra": "x"})

    assert res.id == "42"
    assert res.attributes == {}
    assert res.lookup("title") is None


def test_lookup_is_presence_based():
    res = Resource(id="1", attributes={"passed": 0, "automated": False})

    assert res.lookup("passed") == 0
    assert res.lookup("automated") is False


def test_name_variants():
    assert name_variants("suite_id") == ("suite_id", "suite-id")
    assert name_variants("suite-id") == ("suite-id", "suite_id")
    assert name_variants("title") == ("title",)


def test_create_test_input_uses_api_field_names():
    data = CreateTestInput(title="Login works", suite_id="S1", priority="high")

    assert data.attributes() == {
        "title": "Login works",
        "suite-id": "S1",
        "priority": "high",
    }


def test_create_test_input_rejects_unknown_priority_and_fields():
    with pytest.raises(ValidationError):
        CreateTestInput(title="x", suite_id="S1", priority="urgent")
    with pytest.raises(ValidationError):
        CreateTestInput(title="x", suite_id="S1", severity="high")
    with pytest.raises(ValidationError):
        CreateTestInput(title="", suite_id="S1")


def test_update_test_input_drops_unset_fields():
    assert UpdateTestInput(state="automated").attributes() == {"state": "automated"}
    assert UpdateTestInput().attributes() == {}


def test_create_suite_input_file_type():
    assert CreateSuiteInput(title="Folder", file_type="folder").attributes() == {
        "title": "Folder",
        "file-type": "folder",
    }
    with pytest.raises(ValidationError):
        CreateSuiteInput(title="x", file_type="directory")


def test_label_field_input_forbids_unknown_keys():
    label = CreateLabelInput(
        title="Severity",
        field=LabelFieldInput(short=True, value="Low\nHigh"),
    )

    assert label.attributes() == {
        "title": "Severity",
        "field": {"type": "list", "short": True, "value": "Low\nHigh"},
    }
    with pytest.raises(ValidationError):
        LabelFieldInput.model_validate({"kind": "list"})
