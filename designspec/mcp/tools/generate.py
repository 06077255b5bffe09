"""Generate DesignSpec tool for MCP server.

Turns a natural-language prompt into a repaired, schema-valid DesignSpec.
Request problems are reported as client errors with the offending fields;
backend, response and schema failures collapse into one upstream error so
no partially repaired spec ever leaves the server.
"""

import json
import logging
from typing import Any

from fastmcp.exceptions import ToolError

from designspec.llm import DesignSpecGenerator, LLMError
from designspec.schema import (
    RequestValidationError,
    SpecValidationError,
    parse_prompt_request,
)

logger = logging.getLogger(__name__)

INVALID_REQUEST = "invalid_request"
UPSTREAM_FAILURE = "upstream_failure"


def tool_error(code: str, message: str, details: list[dict[str, Any]] | None = None) -> ToolError:
    """Build a ToolError whose message is a JSON error payload."""
    payload: dict[str, Any] = {"error": code, "message": message}
    if details is not None:
        payload["details"] = details
    return ToolError(json.dumps(payload))


def generate_design_spec(
    prompt: str,
    generation_context: dict[str, Any] | None = None,
    dry_run: bool = False,
    generator: DesignSpecGenerator | None = None,
) -> dict[str, Any]:
    """Generate a DesignSpec from a natural-language description.

    Args:
        prompt: Description of the screen, e.g. "Create a login form".
        generation_context: Optional wire-format GenerationContext
            (targetLayout, uiStrictness, uxPatterns, visualBaseline,
            strictLayout).
        dry_run: Return the repaired mock spec without calling the backend.
        generator: Generator to use; a default one is created if None.

    Returns:
        Dictionary containing:
        - requestId: Correlation id for log lookup
        - spec: The repaired DesignSpec in wire format
        - warnings: Visual-usage warnings
        - warningsSummary: Count, types and sample paths
        - analysis: Node count, depth and surface count
        - stats: Model, tokens, retries and duration

    Raises:
        ToolError: With ``invalid_request`` for malformed input, or
            ``upstream_failure`` when generation failed.

    Example:
        >>> result = generate_design_spec("Create a login form", dry_run=True)
        >>> print(result["spec"]["page"])
        Mock Page
    """
    body: dict[str, Any] = {"prompt": prompt}
    if generation_context is not None:
        body["generationContext"] = generation_context

    try:
        request = parse_prompt_request(body)
    except RequestValidationError as e:
        logger.info(f"Rejected generation request: {e}")
        raise tool_error(
            INVALID_REQUEST,
            "Invalid request",
            [issue.to_dict() for issue in e.issues],
        ) from e

    generator = generator or DesignSpecGenerator()

    try:
        output = generator.generate(request, dry_run=dry_run)
    except (LLMError, SpecValidationError) as e:
        logger.error(f"Generation failed: {e}")
        raise tool_error(UPSTREAM_FAILURE, "Failed to generate DesignSpec") from e

    result = output.to_dict()
    result["stats"] = {
        "model": output.stats.model,
        "dryRun": output.stats.dry_run,
        "totalTokens": output.stats.total_tokens,
        "retryCount": output.stats.retry_count,
        "durationMs": round(output.stats.duration_ms),
        "backendRequestId": output.stats.backend_request_id,
    }
    return result


__all__ = [
    "INVALID_REQUEST",
    "UPSTREAM_FAILURE",
    "tool_error",
    "generate_design_spec",
]
