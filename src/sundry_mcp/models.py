from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from mcp import types
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from sundry_mcp.errors import ValidationError


# Documented by the backend, not enforced here.
CONFIDENCE_LEVELS = ("certain", "optimistic", "tentative", "doubtful")


class ContextQuery(BaseModel):
    query: str = Field(min_length=1)

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any] | None) -> "ContextQuery":
        """Turn a loosely-typed tool arguments bag into a query, or raise ValidationError."""
        raw = (arguments or {}).get("query")
        query = "" if raw is None else str(raw)
        if not query:
            raise ValidationError("query is required")
        return cls(query=query)


class ContextResponse(BaseModel):
    # Relayed verbatim: field types are documented by the backend, not enforced here.
    model_config = ConfigDict(extra="allow")

    confidence: Any = None
    data: Any = None
    user_message: Any = None
    error: Any = None

    _raw: Dict[str, Any] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "ContextResponse":
        """Wrap a backend reply; anything but a JSON object fails validation."""
        resp = cls.model_validate(payload)
        resp._raw = dict(payload)
        return resp

    @property
    def has_known_confidence(self) -> bool:
        return isinstance(self.confidence, str) and self.confidence in CONFIDENCE_LEVELS

    def to_json(self) -> str:
        """Serialize the object exactly as the backend sent it."""
        return json.dumps(self._raw, ensure_ascii=False)


class SourcesResponse(BaseModel):
    # capability lists are embedded in the tool description as-is
    sources: Dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=dict)

    def to_mcp(self) -> types.Tool:
        return types.Tool(name=self.name, description=self.description, inputSchema=self.input_schema)
