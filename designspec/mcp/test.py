"""Unit tests for MCP server module.

Tests cover:
- Server configuration
- Server instance creation
- Tool registration and calls over the in-memory MCP client
"""

import pytest
from fastmcp.exceptions import ToolError

from .lib import (
    SERVER_NAME,
    ServerConfig,
    TransportType,
    get_server_capabilities,
    get_server_version,
)
from .server import create_server, mcp

# =============================================================================
# Configuration Tests
# =============================================================================


class TestServerConfig:
    """Tests for ServerConfig dataclass."""

    @pytest.mark.unit
    def test_default_config(self):
        """Default config has expected values."""
        config = ServerConfig()

        assert config.transport == TransportType.STDIO
        assert config.host == "0.0.0.0"
        assert config.port == 18080
        assert config.path == "/mcp"
        assert not config.is_network
        assert config.run_kwargs() == {}

    @pytest.mark.unit
    def test_from_env(self, monkeypatch):
        """from_env reads host and port."""
        monkeypatch.setenv("MCP_HOST", "127.0.0.1")
        monkeypatch.setenv("MCP_PORT", "9000")
        config = ServerConfig.from_env(transport="http")

        assert config.transport == TransportType.HTTP
        assert config.endpoint == "http://127.0.0.1:9000/mcp"
        assert config.run_kwargs() == {
            "transport": "http",
            "host": "127.0.0.1",
            "port": 9000,
            "path": "/mcp",
        }

    @pytest.mark.unit
    def test_explicit_arguments_win(self, monkeypatch):
        """Explicit host and port override the environment."""
        monkeypatch.setenv("MCP_PORT", "9000")
        config = ServerConfig.from_env(TransportType.SSE, host="localhost", port=8081)

        assert config.endpoint == "http://localhost:8081"
        assert config.run_kwargs() == {"transport": "sse", "host": "localhost", "port": 8081}


class TestTransportType:
    """Tests for TransportType enum."""

    @pytest.mark.unit
    def test_transport_from_string(self):
        """Transport can be created from string."""
        assert TransportType("stdio") == TransportType.STDIO
        assert TransportType("http") == TransportType.HTTP
        assert TransportType("sse") == TransportType.SSE


class TestServerUtilities:
    """Tests for server utility functions."""

    @pytest.mark.unit
    def test_get_server_version(self):
        """Server version is the package version."""
        from designspec import __version__

        assert get_server_version() == __version__

    @pytest.mark.unit
    def test_get_server_capabilities(self):
        """Capabilities list the registered tools and the schema resource."""
        caps = get_server_capabilities()
        assert caps["tools"] == ["generate_design_spec", "validate_design_spec", "status"]
        assert caps["resources"] == ["schema://design-spec"]


class TestServerInstance:
    """Tests for FastMCP server instance."""

    @pytest.mark.unit
    def test_create_server_returns_mcp(self):
        """create_server returns the mcp instance."""
        assert create_server() is mcp

    @pytest.mark.unit
    def test_server_has_name(self):
        """Server has correct name."""
        assert mcp.name == SERVER_NAME


# =============================================================================
# MCP Protocol Tests
# =============================================================================


@pytest.mark.mcp
class TestMCPProtocol:
    """Integration tests using the in-memory MCP client."""

    @pytest.mark.asyncio
    async def test_tools_registered(self, mcp_client):
        """Exactly the three public tools are exposed."""
        tools = await mcp_client.list_tools()
        assert {t.name for t in tools} == {
            "generate_design_spec",
            "validate_design_spec",
            "status",
        }

    @pytest.mark.asyncio
    async def test_schema_resource(self, mcp_client):
        """The DesignSpec JSON schema is published as a resource."""
        resources = await mcp_client.list_resources()
        assert "schema://design-spec" in {str(r.uri) for r in resources}

    @pytest.mark.asyncio
    async def test_status(self, mcp_client, no_api_key):
        """Without a key the server is degraded but dry runs work."""
        result = await mcp_client.call_tool("status", {})
        data = result.data

        assert data["status"] == "degraded"
        assert data["capabilities"]["dry_run"] is True
        assert data["capabilities"]["generate_design_spec"] is False
        assert any("OPENAI_API_KEY" in a for a in data["action_required"])

    @pytest.mark.asyncio
    async def test_generate_dry_run(self, mcp_client, no_api_key):
        """A dry run returns the repaired mock spec."""
        result = await mcp_client.call_tool(
            "generate_design_spec", {"prompt": "Create a login form", "dry_run": True}
        )
        spec = result.data["spec"]

        assert spec["page"] == "Mock Page"
        assert spec["frame"]["height"] == 800
        assert spec["nodes"][2]["background"] == "#2563EB"

    @pytest.mark.asyncio
    async def test_generate_invalid_request(self, mcp_client):
        """An empty prompt is a client error."""
        with pytest.raises(ToolError, match="invalid_request"):
            await mcp_client.call_tool("generate_design_spec", {"prompt": "", "dry_run": True})

    @pytest.mark.asyncio
    async def test_validate(self, mcp_client, sample_spec_dict):
        """Validation reports a clean login screen."""
        result = await mcp_client.call_tool("validate_design_spec", {"spec": sample_spec_dict})
        assert result.data["valid"] is True
        assert result.data["warnings"] == []
        assert result.data["analysis"]["nodes_count"] == 7
