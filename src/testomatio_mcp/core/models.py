from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

StateFilter = Literal["manual", "automated"]
PriorityLevel = Literal["low", "normal", "high", "critical"]


# --- Field names ------------------------------------------------------------ #


def markup_name(name: str) -> str:
    """Element name for an attribute: hyphens become underscores."""
    return name.replace("-", "_")


def name_variants(name: str) -> Tuple[str, ...]:
    """
    Candidate attribute keys for a requested field name. The API uses
    hyphenated keys ("suite-id") while callers may ask for "suite_id".
    """
    variants = [name]
    for alt in (name.replace("_", "-"), name.replace("-", "_")):
        if alt not in variants:
            variants.append(alt)
    return tuple(variants)


# --- Wire models ------------------------------------------------------------ #


class Resource(BaseModel):
    """
    A JSON:API item as returned by Testomat.io: an id plus an attribute bag.
    Relationships are kept loosely typed; only a few tools read them.
    """

    id: str = ""
    type: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)
    relationships: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("attributes", "relationships", mode="before")
    @classmethod
    def _coerce_mapping(cls, value: Any) -> Dict[str, Any]:
        return value if isinstance(value, dict) else {}

    def lookup(self, name: str) -> Any:
        for key in name_variants(name):
            if key in self.attributes:
                return self.attributes[key]
        return None

    def related(self, rel: str) -> List["Resource"]:
        data = (self.relationships.get(rel) or {}).get("data")
        if not isinstance(data, list):
            return []
        return [Resource.model_validate(item) for item in data if isinstance(item, dict)]


# --- Input models (tool payloads) ------------------------------------------- #


class _AttributesInput(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def attributes(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CreateTestInput(_AttributesInput):
    title: str = Field(min_length=1)
    suite_id: str = Field(alias="suite-id", min_length=1)
    description: Optional[str] = None
    code: Optional[str] = None
    priority: Optional[PriorityLevel] = None
    state: Optional[StateFilter] = None
    tags: Optional[List[str]] = None


class UpdateTestInput(_AttributesInput):
    title: Optional[str] = None
    suite_id: Optional[str] = Field(default=None, alias="suite-id")
    description: Optional[str] = None
    code: Optional[str] = None
    priority: Optional[PriorityLevel] = None
    state: Optional[StateFilter] = None
    tags: Optional[List[str]] = None


class CreateSuiteInput(_AttributesInput):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    file_type: Literal["file", "folder"] = Field(default="file", alias="file-type")


class UpdateSuiteInput(_AttributesInput):
    title: Optional[str] = None
    description: Optional[str] = None


class LabelFieldInput(BaseModel):
    type: str = "list"
    short: Optional[bool] = None
    value: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class CreateLabelInput(_AttributesInput):
    title: str = Field(min_length=1)
    color: Optional[str] = None
    scope: Optional[List[str]] = None
    visibility: Optional[List[str]] = None
    field: Optional[LabelFieldInput] = None


__all__ = [
    "StateFilter",
    "PriorityLevel",
    "markup_name",
    "name_variants",
    "Resource",
    "CreateTestInput",
    "UpdateTestInput",
    "CreateSuiteInput",
    "UpdateSuiteInput",
    "LabelFieldInput",
    "CreateLabelInput",
]
