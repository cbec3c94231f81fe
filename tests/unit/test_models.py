import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from sundry_mcp.errors import ValidationError
from sundry_mcp.models import CONFIDENCE_LEVELS, ContextQuery, ContextResponse, SourcesResponse, ToolDescriptor


@pytest.mark.parametrize("arguments", [None, {}, {"query": None}, {"query": ""}])
def test_query_is_required(arguments):
    with pytest.raises(ValidationError, match="query is required"):
        ContextQuery.from_arguments(arguments)


def test_query_is_coerced_to_string():
    assert ContextQuery.from_arguments({"query": 42}).query == "42"
    assert ContextQuery.from_arguments({"query": "my open PRs"}).query == "my open PRs"


def test_response_serializes_exactly_what_the_backend_sent():
    payload = {
        "confidence": "tentative",
        "data": "Two issues match",
        "user_message": None,
        "trace": {"source": "github"},
    }
    resp = ContextResponse.from_payload(payload)
    assert json.loads(resp.to_json()) == payload
    assert resp.model_extra == {"trace": {"source": "github"}}


def test_optional_fields_are_not_invented():
    resp = ContextResponse.from_payload({"confidence": "certain", "data": "x"})
    assert json.loads(resp.to_json()) == {"confidence": "certain", "data": "x"}


def test_confidence_is_documented_not_enforced():
    assert set(CONFIDENCE_LEVELS) == {"certain", "optimistic", "tentative", "doubtful"}
    assert ContextResponse.from_payload({"confidence": "certain", "data": ""}).has_known_confidence
    odd = ContextResponse.from_payload({"confidence": "sure-ish", "data": ""})
    assert not odd.has_known_confidence


def test_tool_descriptor_to_mcp():
    tool = ToolDescriptor(name="t", description="d", input_schema={"type": "object"}).to_mcp()
    assert (tool.name, tool.description, tool.inputSchema) == ("t", "d", {"type": "object"})


@pytest.mark.parametrize(
    "payload",
    [
        {"confidence": "doubtful", "data": None, "error": "no matching source"},
        {"confidence": "doubtful", "error": "no matching source"},
        {"confidence": "certain", "data": {"issue": 42, "labels": ["bug"]}},
        {"confidence": 0.9, "data": "x"},
    ],
)
def test_any_json_object_is_relayed_unchanged(payload):
    assert json.loads(ContextResponse.from_payload(payload).to_json()) == payload


def test_non_string_confidence_is_not_known():
    assert not ContextResponse.from_payload({"confidence": 0.9, "data": "x"}).has_known_confidence


@pytest.mark.parametrize("payload", [["certain", "x"], "certain", None])
def test_non_object_reply_is_rejected(payload):
    with pytest.raises(PydanticValidationError):
        ContextResponse.from_payload(payload)


def test_sources_keep_non_string_capabilities():
    listing = {"github": [{"name": "issues"}], "slack": "messages"}
    assert SourcesResponse.model_validate({"sources": listing}).sources == listing
