from __future__ import annotations

import asyncio
from typing import Any, List, Mapping

from mcp import types

from sundry_mcp.backend import SundryClient
from sundry_mcp.errors import UnknownToolError
from sundry_mcp.models import ContextQuery
from sundry_mcp.tools import GET_CONTEXT


class RequestDispatcher:
    """Routes a tool call by name to the backend and wraps the result as text content."""

    def __init__(self, backend: SundryClient) -> None:
        self.backend = backend

    async def dispatch(self, name: str, arguments: Mapping[str, Any] | None) -> List[types.TextContent]:
        if name != GET_CONTEXT:
            raise UnknownToolError(name)
        return await self.get_context(ContextQuery.from_arguments(arguments))

    async def get_context(self, query: ContextQuery) -> List[types.TextContent]:
        # Backend errors propagate; the transport reports them to the caller.
        response = await asyncio.to_thread(self.backend.submit_query, query)
        return [types.TextContent(type="text", text=response.to_json())]
