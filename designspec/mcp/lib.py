"""Server settings and metadata for the designspec MCP server."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from designspec.config import EnvVar, get_environment

SERVER_NAME = "designspec-generator"
HTTP_PATH = "/mcp"
SCHEMA_RESOURCE_URI = "schema://design-spec"
TOOL_NAMES: tuple[str, ...] = ("generate_design_spec", "validate_design_spec", "status")


class TransportType(str, Enum):
    """Supported MCP transport types."""

    STDIO = "stdio"
    HTTP = "http"
    SSE = "sse"


@dataclass(frozen=True)
class ServerConfig:
    """Resolved settings for one server run.

    Attributes:
        transport: How clients connect.
        host: Bind address, ignored for STDIO.
        port: Bind port, ignored for STDIO.
        path: Endpoint path, used by the HTTP transport only.
    """

    transport: TransportType = TransportType.STDIO
    host: str = "0.0.0.0"
    port: int = 18080
    path: str = HTTP_PATH

    @classmethod
    def from_env(
        cls,
        transport: TransportType | str = TransportType.STDIO,
        host: str | None = None,
        port: int | None = None,
    ) -> "ServerConfig":
        """Resolve settings: explicit arguments win over MCP_HOST / MCP_PORT."""
        return cls(
            transport=TransportType(transport),
            host=host or get_environment(EnvVar.MCP_HOST),
            port=port or get_environment(EnvVar.MCP_PORT),
        )

    @property
    def is_network(self) -> bool:
        return self.transport != TransportType.STDIO

    @property
    def endpoint(self) -> str:
        """Human-readable address, for startup logs."""
        if self.transport == TransportType.HTTP:
            return f"http://{self.host}:{self.port}{self.path}"
        if self.transport == TransportType.SSE:
            return f"http://{self.host}:{self.port}"
        return "stdio"

    def run_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``FastMCP.run``."""
        if self.transport == TransportType.HTTP:
            return {"transport": "http", "host": self.host, "port": self.port, "path": self.path}
        if self.transport == TransportType.SSE:
            return {"transport": "sse", "host": self.host, "port": self.port}
        return {}


def get_server_version() -> str:
    """Package version, reported by ``status`` and the startup banner."""
    from designspec import __version__

    return __version__


def get_server_capabilities() -> dict[str, Any]:
    """Describe what the server exposes.

    Returns:
        Tool names, resource URIs and the protocol features in use.
    """
    return {
        "tools": list(TOOL_NAMES),
        "resources": [SCHEMA_RESOURCE_URI],
        "prompts": False,
        "logging": True,
    }


__all__ = [
    "SERVER_NAME",
    "HTTP_PATH",
    "SCHEMA_RESOURCE_URI",
    "TOOL_NAMES",
    "TransportType",
    "ServerConfig",
    "get_server_version",
    "get_server_capabilities",
]
