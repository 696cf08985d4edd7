"""Tests for tool registration and dispatch."""
import httpx
import pytest
import respx
from mcp.types import CallToolRequest, ListToolsRequest

from openproject_mcp import server, tools
from openproject_mcp.handlers import HANDLERS

from tests.payloads import API_URL, status_collection, work_package


class TestTools:
    """Test the advertised tool surface."""

    def test_every_tool_has_a_handler(self):
        names = [tool.name for tool in tools.get_tools()]
        assert names == [
            "get_work_package_detail",
            "change_work_package_status",
            "download_work_package_attachments",
        ]
        assert set(names) == set(HANDLERS)

    def test_work_package_id_is_required_integer(self):
        for tool in tools.get_tools():
            assert "work_package_id" in tool.inputSchema["required"]
            assert tool.inputSchema["properties"]["work_package_id"]["type"] == "integer"


class TestRegistration:
    """Test that handlers are registered on the low-level server."""

    def test_list_and_call_handlers_registered(self):
        assert ListToolsRequest in server.app.request_handlers
        assert CallToolRequest in server.app.request_handlers


class TestDispatch:
    """Test dispatch_tool with a per-call HTTP client."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self, settings):
        result = await server.dispatch_tool("delete_everything", {}, settings)

        assert result.isError
        assert result.content[0].text == "Unknown tool: delete_everything"

    @respx.mock
    @pytest.mark.asyncio
    async def test_dispatches_with_credentials(self, settings):
        route = respx.get(f"{API_URL}/work_packages/42").mock(
            return_value=httpx.Response(200, json=work_package())
        )
        respx.get(f"{API_URL}/statuses").mock(return_value=httpx.Response(200, json=status_collection()))

        result = await server.dispatch_tool("get_work_package_detail", {"work_package_id": 42}, settings)

        assert not result.isError
        assert route.calls.last.request.headers["Authorization"].startswith("Basic ")

    @pytest.mark.asyncio
    async def test_none_arguments(self, settings):
        result = await server.dispatch_tool("get_work_package_detail", None, settings)

        assert result.isError


class TestMain:
    """Test startup configuration checks."""

    def test_refuses_to_start_without_api_key(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("OPENPROJECT_API_URL", "placeholder")
        monkeypatch.delenv("OPENPROJECT_API_URL")
        monkeypatch.setenv("OPENPROJECT_API_KEY", "placeholder")
        monkeypatch.delenv("OPENPROJECT_API_KEY")
        monkeypatch.chdir(tmp_path)

        exit_code = server.main(["--api-url", "https://op.example.com"])

        assert exit_code == 1
        assert "API key is required" in capsys.readouterr().err
