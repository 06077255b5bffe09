"""Validate DesignSpec tool for MCP server.

Checks a DesignSpec against the schema, then reports visual-usage warnings
and structural metrics. Optionally runs the repair pipeline first.
"""

import logging
from typing import Any

from designspec.analysis import aggregate_warnings, analyze_spec
from designspec.repair import run_repair_pipeline
from designspec.schema import (
    DEFAULT_GENERATION_CONTEXT,
    TargetLayout,
    serialize_design_spec,
    validate_design_spec as validate_schema,
)
from designspec.validation import validate_visual_usage

logger = logging.getLogger(__name__)


def validate_design_spec(
    spec: dict[str, Any],
    repair: bool = False,
    target_layout: str = TargetLayout.MOBILE.value,
) -> dict[str, Any]:
    """Validate a DesignSpec document.

    Args:
        spec: DesignSpec JSON in wire format.
        repair: Fill empty text and visual defaults before checking, and
            return the repaired spec.
        target_layout: Device class for the default frame height when
            repairing.

    Returns:
        Dictionary containing:
        - valid: Whether the document satisfies the schema
        - errors: Schema issues with path and message
        - warnings: Visual-usage warnings (empty when invalid)
        - warningsSummary: Count, types and sample paths
        - analysis: Node count, depth and surface count (None when invalid)
        - spec: The repaired spec, only when ``repair`` is set

    Example:
        >>> result = validate_design_spec(spec)
        >>> if not result["valid"]:
        ...     for error in result["errors"]:
        ...         print(f"{error['path']}: {error['message']}")
    """
    result = validate_schema(spec)
    if not result.ok:
        logger.debug(f"DesignSpec invalid with {len(result.issues)} issue(s)")
        return {
            "valid": False,
            "errors": [issue.to_dict() for issue in result.issues],
            "warnings": [],
            "warningsSummary": aggregate_warnings([]).to_dict(),
            "analysis": None,
        }

    checked = result.spec
    response: dict[str, Any] = {"valid": True, "errors": []}

    if repair:
        context = DEFAULT_GENERATION_CONTEXT.model_copy(
            update={"target_layout": TargetLayout(target_layout).value}
        )
        repaired = run_repair_pipeline(checked, context)
        checked = repaired.spec
        warnings = repaired.warnings
        response["spec"] = serialize_design_spec(checked)
    else:
        warnings = validate_visual_usage(checked)

    response["warnings"] = [w.to_dict() for w in warnings]
    response["warningsSummary"] = aggregate_warnings(warnings).to_dict()
    response["analysis"] = analyze_spec(checked).to_dict()
    return response


__all__ = ["validate_design_spec"]
