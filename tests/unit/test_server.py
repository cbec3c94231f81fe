import json

import pytest
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session

import sundry_mcp.server as server_mod
from sundry_mcp.server import build_server, initialization_options
from tests.helpers.fakes import SAMPLE_CONTEXT, SAMPLE_CONTEXT_ERROR, unavailable
from tests.helpers.mcp_runtime import result_text


def test_initialization_options_advertise_capabilities(fake_backend):
    opts = initialization_options(build_server(fake_backend))
    assert opts.server_name == "Sundry"
    assert opts.server_version == "0.1.0"
    caps = opts.capabilities
    assert caps.tools is not None
    assert caps.resources is not None
    assert caps.prompts is not None


@pytest.mark.asyncio
async def test_list_tools_over_mcp(fake_backend):
    async with create_connected_server_and_client_session(build_server(fake_backend)) as client:
        tools = await client.list_tools()

    assert fake_backend.source_calls == 1
    assert [t.name for t in tools.tools] == ["get_context"]
    assert tools.tools[0].inputSchema["required"] == ["query"]
    assert tools.tools[0].inputSchema["additionalProperties"] is False


@pytest.mark.asyncio
async def test_call_get_context_over_mcp(fake_backend):
    async with create_connected_server_and_client_session(build_server(fake_backend)) as client:
        res = await client.call_tool("get_context", {"query": "my latest github issue"})

    assert not res.isError
    assert json.loads(result_text(res)) == SAMPLE_CONTEXT
    assert fake_backend.queries == [{"query": "my latest github issue"}]


@pytest.mark.asyncio
async def test_backend_reported_error_is_a_successful_call(fake_backend):
    fake_backend.context = SAMPLE_CONTEXT_ERROR
    async with create_connected_server_and_client_session(build_server(fake_backend)) as client:
        res = await client.call_tool("get_context", {"query": "my open PRs"})

    assert not res.isError
    assert json.loads(result_text(res)) == SAMPLE_CONTEXT_ERROR


@pytest.mark.asyncio
async def test_validation_errors_are_failed_calls(fake_backend):
    async with create_connected_server_and_client_session(build_server(fake_backend)) as client:
        empty = await client.call_tool("get_context", {"query": ""})
        unknown = await client.call_tool("get_weather", {"query": "rain?"})

    assert empty.isError
    assert "query is required" in result_text(empty)
    assert unknown.isError
    assert "Unknown tool" in result_text(unknown)
    assert fake_backend.queries == []


@pytest.mark.asyncio
async def test_backend_failure_is_reported_and_server_keeps_serving(fake_backend):
    fake_backend.fail_next_query = unavailable()
    async with create_connected_server_and_client_session(build_server(fake_backend)) as client:
        failed = await client.call_tool("get_context", {"query": "my open PRs"})
        ok = await client.call_tool("get_context", {"query": "my open PRs"})

    assert failed.isError
    assert "Failed to fetch context" in result_text(failed)
    assert "Max retries exceeded" in result_text(failed)
    assert not ok.isError
    assert json.loads(result_text(ok)) == SAMPLE_CONTEXT


@pytest.mark.asyncio
async def test_list_tools_failure_is_a_protocol_error(fake_backend):
    fake_backend.fail_sources = unavailable("sources")
    async with create_connected_server_and_client_session(build_server(fake_backend)) as client:
        with pytest.raises(McpError, match="Failed to fetch sources"):
            await client.list_tools()


def test_main_exits_1_without_credentials(monkeypatch, capsys):
    served = []
    monkeypatch.setattr(server_mod.settings, "init_runtime", lambda: None)
    monkeypatch.setattr(server_mod, "serve", lambda backend: served.append(backend))

    with pytest.raises(SystemExit) as exc:
        server_mod.main()

    assert exc.value.code == 1
    assert served == []
    assert capsys.readouterr().out == ""


def test_main_builds_backend_from_environment(monkeypatch):
    seen = {}

    async def fake_serve(backend):
        seen["headers"] = dict(backend.http.session.headers)
        seen["base_url"] = backend.http.config.base_url

    monkeypatch.setattr(server_mod.settings, "init_runtime", lambda: None)
    monkeypatch.setattr(server_mod, "serve", fake_serve)
    monkeypatch.setenv("SUNDRY_USER_API_KEY", "u-key")
    monkeypatch.setenv("SUNDRY_APPLICATION_API_KEY", "a-key")
    monkeypatch.setenv("SUNDRY_BASE_URL", "http://sundry.test/v1")

    server_mod.main()

    assert seen["base_url"] == "http://sundry.test/v1"
    assert seen["headers"]["Authorization"] == "Bearer u-key"
    assert seen["headers"]["X-API-Key"] == "a-key"
