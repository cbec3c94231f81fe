"""
Smoke script for the Sundry MCP server against a running backend.

It performs:
 1) Spawns `python -m sundry_mcp.server` over stdio (credentials come from env / .env)
 2) Lists tools and prints the get_context description
 3) Calls get_context with SUNDRY_SMOKE_QUERY (default: "my latest github issue")
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any

# Ensure src/ is on sys.path BEFORE importing repo packages
_THIS_FILE = Path(__file__).resolve()
_REPO_ROOT = _THIS_FILE.parents[1]
if str(_REPO_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT / "src"))

from sundry_config.settings import base_url, init_runtime  # noqa: E402


def _pretty(x: Any) -> str:
    if isinstance(x, str):
        s = x.strip()
        if s.startswith("{") or s.startswith("["):
            try:
                return json.dumps(json.loads(s), indent=2, ensure_ascii=False)
            except ValueError:
                return x
        return x
    return json.dumps(x, indent=2, ensure_ascii=False, default=str)


async def smoke() -> bool:
    # Lazy import so --help style failures stay cheap
    from mcp import ClientSession
    from mcp.client.stdio import StdioServerParameters, stdio_client

    python_cmd = os.getenv("MCP_PYTHON") or sys.executable
    query = os.getenv("SUNDRY_SMOKE_QUERY", "my latest github issue")

    print(f"[smoke] Repo root: {_REPO_ROOT}")
    print(f"[smoke] Backend: {base_url()}")
    print(f"[smoke] Python: {python_cmd}")

    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(p for p in (str(_REPO_ROOT / "src"), env.get("PYTHONPATH")) if p)
    server = StdioServerParameters(command=python_cmd, args=["-m", "sundry_mcp.server"], env=env)

    async with stdio_client(server) as (read, write):
        async with ClientSession(read, write) as session:
            await session.initialize()

            tools = await session.list_tools()
            print("\n[smoke] TOOLS:")
            for t in tools.tools:
                print(f" - {t.name}")
                print(t.description)

            res = await session.call_tool("get_context", {"query": query})
            text = getattr(res.content[0], "text", res.content[0]) if res.content else ""
            print(f"\n[smoke] CALL get_context({query!r}) isError={res.isError}:")
            print(_pretty(text))
            return not res.isError


def main() -> int:
    init_runtime()
    ok = asyncio.run(smoke())
    print("\n[smoke] OK" if ok else "\n[smoke] FAILED")
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
