from __future__ import annotations

import asyncio
import copy
import json
from typing import Any, Dict, List

from mcp import types

from sundry_mcp.backend import SundryClient
from sundry_mcp.models import SourcesResponse, ToolDescriptor


GET_CONTEXT = "get_context"

GET_CONTEXT_INPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {
            "type": "string",
            "description": "The user context related query to search for in plain text",
        }
    },
    "required": ["query"],
    "additionalProperties": False,
}

# Guidance for the calling model; not enforced anywhere at runtime.
GET_CONTEXT_GUIDANCE = """\
IMPORTANT: ALWAYS phrase queries AS IF YOU ARE THE USER asking about their own data
IMPORTANT: ALWAYS communicate assumptions from the user_message to the user in a natural way

✓ Use natural language queries like:
- "my most recent github issue"
- "any github issues assigned to me"
- "find discussions about the auth bug"
- "who commented on my latest PR"

❌ Avoid technical queries like:
- "query=issues.latest"
- "GET /issues?state=open"

Returns:
- data matching your query
- confidence level (certain/optimistic/tentative/doubtful)
- user_message with important context assumptions

Key requirements:
- Phrase queries from the user's perspective ("my", "I", "me")
- Always communicate the user_message to explain how the query was interpreted
- Low confidence + assumptions means more specific queries needed
- Use conversational language and mirror user's intent
- If errors occur, suggest alternatives"""


def describe_get_context(sources: SourcesResponse) -> str:
    listing = json.dumps(sources.sources, ensure_ascii=False, separators=(",", ":"))
    return f"Query information about the user's: {listing}\n\n{GET_CONTEXT_GUIDANCE}"


def get_context_descriptor(sources: SourcesResponse) -> ToolDescriptor:
    return ToolDescriptor(
        name=GET_CONTEXT,
        description=describe_get_context(sources),
        input_schema=copy.deepcopy(GET_CONTEXT_INPUT_SCHEMA),
    )


class ToolRegistry:
    """Advertises the single `get_context` tool.

    The description embeds the user's sources, fetched live on every listing.
    """

    def __init__(self, backend: SundryClient) -> None:
        self.backend = backend

    async def descriptors(self) -> List[ToolDescriptor]:
        sources = await asyncio.to_thread(self.backend.fetch_sources)
        return [get_context_descriptor(sources)]

    async def list_tools(self) -> List[types.Tool]:
        return [d.to_mcp() for d in await self.descriptors()]
