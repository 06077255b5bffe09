"""MCP (Model Context Protocol) server for designspec.

Exposes DesignSpec generation and validation to MCP clients.

Example:
    >>> from designspec.mcp import run_server, TransportType
    >>> run_server(transport=TransportType.HTTP, port=18080)

Tools:
    - generate_design_spec: Generate a repaired DesignSpec from a prompt
    - validate_design_spec: Schema issues, visual warnings and metrics
    - status: Readiness of the backend and rule documents

Resources:
    - schema://design-spec: JSON Schema of the DesignSpec document
"""

from .lib import (
    SCHEMA_RESOURCE_URI,
    SERVER_NAME,
    TOOL_NAMES,
    ServerConfig,
    TransportType,
    get_server_capabilities,
    get_server_version,
)
from .server import create_server, mcp, run_server

__all__ = [
    "mcp",
    "create_server",
    "run_server",
    "SERVER_NAME",
    "SCHEMA_RESOURCE_URI",
    "TOOL_NAMES",
    "ServerConfig",
    "TransportType",
    "get_server_version",
    "get_server_capabilities",
]
