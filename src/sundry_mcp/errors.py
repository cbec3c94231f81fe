"""Exception hierarchy for the Sundry MCP server.

Every failure below startup is raised to the immediate caller of the
operation; the MCP transport turns it into a failed tool invocation.
"""

from __future__ import annotations

from typing import Any

from sundry_common.errors import typed_error


class SundryError(Exception):
    """Base class; ``code`` is the short machine-readable error code."""

    code = "internal"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return typed_error(self.code, self.message, details=self.details or None)


class ConfigurationError(SundryError):
    """A required credential or setting is missing. Fatal at startup."""

    code = "config_missing"


class ValidationError(SundryError):
    """The tool invocation is malformed (bad arguments)."""

    code = "bad_request"


class UnknownToolError(ValidationError):
    code = "unknown_tool"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}", details={"tool": name})
        self.tool_name = name


class BackendError(SundryError):
    """The backend call failed or returned something we cannot use."""

    code = "upstream_error"


class BackendUnavailable(BackendError):
    """Transport-level failure: connection refused, timeout, non-2xx status."""

    code = "upstream_unavailable"

    def __init__(self, message: str, *, status: int | None = None, details: dict[str, Any] | None = None) -> None:
        merged = dict(details or {})
        if status is not None:
            merged["status"] = status
        super().__init__(message, details=merged)
        self.status = status
