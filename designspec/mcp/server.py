"""FastMCP server instance for designspec.

This module provides the MCP server that exposes DesignSpec generation to
LLM clients. The API is intentionally minimal:

    1. generate_design_spec: prompt → repaired DesignSpec + warnings
    2. validate_design_spec: DesignSpec → schema issues + warnings + metrics
    3. status: readiness check

Usage:
    # STDIO mode (for desktop MCP clients)
    python -m designspec.mcp.server

    # HTTP mode
    python -m designspec.mcp.server --transport http --port 18080

    # Via CLI
    python . mcp serve --transport http
"""

import argparse
import json
import logging
import sys
from functools import lru_cache
from typing import Any

from fastmcp import FastMCP

from designspec.config import EnvVar, get_environment
from designspec.core.log import setup_logging

from .lib import (
    SCHEMA_RESOURCE_URI,
    SERVER_NAME,
    ServerConfig,
    TransportType,
    get_server_version,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Server Instructions (LLM Guidance)
# =============================================================================

SERVER_INSTRUCTIONS = """\
## DesignSpec Generator

Turns a short natural-language description of a UI screen into a DesignSpec:
a JSON tree of a root frame plus text, button and container nodes that a
design-tool plugin can draw.

### Quick Start
1. `status()` → check readiness
2. `generate_design_spec("Create a login form")` → get a spec
3. `validate_design_spec(spec)` → check an edited spec

### Options
- `generation_context.targetLayout`: mobile | tablet | desktop
- `generation_context.uiStrictness`: strict | balanced
- `dry_run=True`: fixed mock spec, no API key needed

### Warnings
Visual-usage warnings flag containers that carry background, borderRadius
or border while looking like layout-only grouping. They never block output.
"""

# =============================================================================
# Server Instance
# =============================================================================

mcp = FastMCP(
    name=SERVER_NAME,
    instructions=SERVER_INSTRUCTIONS,
)


# =============================================================================
# Core Tools
# =============================================================================


@mcp.tool
def generate_design_spec(
    prompt: str,
    generation_context: dict[str, Any] | None = None,
    dry_run: bool = False,
) -> dict[str, Any]:
    """Generate a DesignSpec from a natural-language UI description.

    Args:
        prompt: What to build, e.g. "Create a login form with email and password".
        generation_context: Optional settings in camelCase:
            targetLayout ("mobile", "tablet", "desktop"),
            uiStrictness ("strict", "balanced"),
            uxPatterns {groupElements, formContainer, helperText},
            visualBaseline (bool), strictLayout (bool).
        dry_run: Return a fixed mock spec without calling the model.

    Returns:
        Dictionary with:
        - spec: DesignSpec JSON with visual defaults filled in
        - warnings: Visual-usage warnings (diagnostic only)
        - analysis: Node count, depth, surface count
        - requestId: Correlation id for server logs
    """
    from .tools.generate import generate_design_spec as _generate

    return _generate(
        prompt=prompt,
        generation_context=generation_context,
        dry_run=dry_run,
    )


@mcp.tool
def validate_design_spec(
    spec: dict[str, Any],
    repair: bool = False,
    target_layout: str = "mobile",
) -> dict[str, Any]:
    """Validate a DesignSpec and report visual-usage warnings.

    Args:
        spec: DesignSpec JSON.
        repair: Fill empty text and visual defaults first and return the
            repaired spec. Default: False
        target_layout: Device class used for defaults when repairing.

    Returns:
        Dictionary with:
        - valid: True if the DesignSpec satisfies the schema
        - errors: Schema issues with path and message
        - warnings: Visual-usage warnings
        - analysis: Structural metrics
    """
    if target_layout not in ("mobile", "tablet", "desktop"):
        raise ValueError(f"target_layout must be mobile, tablet or desktop, got {target_layout}")

    from .tools.validate import validate_design_spec as _validate

    return _validate(spec=spec, repair=repair, target_layout=target_layout)


# =============================================================================
# Status Tools
# =============================================================================


@mcp.tool
def status() -> dict[str, Any]:
    """Check server readiness.

    Use this FIRST to verify generation will work.

    Returns:
        Dictionary with:
        - status: "healthy", "degraded" (dry runs only) or "unhealthy"
        - version: Server version
        - capabilities: Which tools will work
        - services: Backend and rule-document status
        - action_required: What to fix when not healthy
    """
    from .health import HealthStatus, get_server_health

    health = get_server_health()
    result = health.to_dict()

    actions = []
    if not health.llm_backend.available:
        actions.append("Configure backend: set OPENAI_API_KEY in .env")
    if not health.rules.available:
        actions.append("Fix rules: set SPEC_RULES_DIR to a directory containing base.json")
    if actions:
        result["action_required"] = actions

    if health.status == HealthStatus.HEALTHY:
        result["next_steps"] = ["Ready! Call generate_design_spec(prompt)."]
    elif health.can_dry_run:
        result["next_steps"] = ["Only dry runs work: generate_design_spec(prompt, dry_run=True)."]
    else:
        result["next_steps"] = ["Server not ready. Review action_required items above."]

    return result


# =============================================================================
# Resources
# =============================================================================


@lru_cache(maxsize=1)
def _cached_design_spec_schema() -> str:
    """Cache the DesignSpec JSON schema."""
    from designspec.schema import export_json_schema

    return json.dumps(export_json_schema(), indent=2)


@mcp.resource(SCHEMA_RESOURCE_URI)
def get_design_spec_schema() -> str:
    """JSON Schema of the DesignSpec document."""
    return _cached_design_spec_schema()


# =============================================================================
# Server Factory & Runner
# =============================================================================


def create_server() -> FastMCP:
    """Create and configure the MCP server instance.

    Returns:
        Configured FastMCP server instance.
    """
    return mcp


def run_server(
    transport: TransportType | str = TransportType.STDIO,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Run the MCP server with specified transport.

    Args:
        transport: Transport type (stdio, http, sse).
        host: Bind address for HTTP/SSE. Defaults to MCP_HOST.
        port: Port for HTTP/SSE. Defaults to MCP_PORT.
    """
    from .health import log_startup_status

    config = ServerConfig.from_env(transport, host=host, port=port)

    logger.info(f"Starting {SERVER_NAME} server v{get_server_version()}")
    logger.info(f"Transport: {config.transport.value}")

    log_startup_status()

    logger.info(f"Serving at {config.endpoint}")
    mcp.run(**config.run_kwargs())


# =============================================================================
# CLI Entry Point
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for MCP server.

    Args:
        argv: Command line arguments (uses sys.argv if None).

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="MCP server for prompt-to-DesignSpec generation",
    )
    parser.add_argument(
        "--transport",
        "-t",
        type=str,
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="Transport type (default: stdio)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Bind address for HTTP/SSE (default: MCP_HOST)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=None,
        help="Port for HTTP/SSE (default: MCP_PORT)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else get_environment(EnvVar.LOG_LEVEL))

    try:
        run_server(
            transport=TransportType(args.transport),
            host=args.host,
            port=args.port,
        )
        return 0
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        return 0
    except Exception as e:
        logger.error(f"Server error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
