"""MCP server exposing the Sundry context backend as a single `get_context` tool."""

__version__ = "0.1.0"
