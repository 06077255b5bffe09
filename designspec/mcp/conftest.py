"""Pytest fixtures for MCP server tests.

This module provides:
- Server and client fixtures for protocol testing
- A generator fixture backed by the mock LLM backend
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncGenerator

import pytest

if TYPE_CHECKING:
    from fastmcp import Client, FastMCP


# =============================================================================
# Server Fixtures
# =============================================================================


@pytest.fixture
def mcp_server() -> FastMCP:
    """Create MCP server instance for testing.

    Returns:
        Configured FastMCP server instance.
    """
    from .server import create_server

    return create_server()


@pytest.fixture
async def mcp_client(mcp_server: FastMCP) -> AsyncGenerator[Client, None]:
    """Create connected MCP client for testing.

    Args:
        mcp_server: The MCP server instance.

    Yields:
        Connected in-memory Client instance.
    """
    from fastmcp import Client

    async with Client(mcp_server) as client:
        yield client


@pytest.fixture
def mock_generator(mock_rules_dir):
    """DesignSpecGenerator wired to the mock backend and mock rules."""
    from designspec.llm import DesignSpecGenerator
    from designspec.llm.conftest import MockLLMBackend
    from designspec.rules import RuleCache, RuleLoader

    return DesignSpecGenerator(
        backend=MockLLMBackend(),
        loader=RuleLoader(rules_dir=mock_rules_dir, cache=RuleCache()),
    )
