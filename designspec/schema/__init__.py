"""Schema module - authoritative source for the DesignSpec wire contract.

This module provides:
- The recursive DesignSpec model and its node union
- Inbound request models and the default generation context
- Non-raising validation with path-addressed issues
- Serialization, JSON Schema export and tree traversal

Example usage:
    >>> from designspec.schema import validate_design_spec
    >>> result = validate_design_spec({"page": "Home", "frame": {}, "nodes": []})
    >>> result.ok
    False
"""

from .lib import (
    DEFAULT_GENERATION_CONTEXT,
    HEX_COLOR_PATTERN,
    NODE_TYPES,
    Border,
    ButtonNode,
    ContainerNode,
    DesignSpec,
    Frame,
    GenerationContext,
    Layout,
    Node,
    PromptRequest,
    RequestValidationError,
    SpecValidationError,
    SpecValidationResult,
    TargetLayout,
    TextNode,
    UiStrictness,
    UxPatterns,
    ValidationIssue,
    export_json_schema,
    format_error_path,
    is_valid_design_spec,
    iter_nodes,
    parse_design_spec,
    parse_prompt_request,
    serialize_design_spec,
    validate_design_spec,
)

__all__ = [
    # Enums
    "Layout",
    "TargetLayout",
    "UiStrictness",
    "NODE_TYPES",
    "HEX_COLOR_PATTERN",
    # DesignSpec model
    "Border",
    "Frame",
    "TextNode",
    "ButtonNode",
    "ContainerNode",
    "Node",
    "DesignSpec",
    # Request model
    "UxPatterns",
    "GenerationContext",
    "DEFAULT_GENERATION_CONTEXT",
    "PromptRequest",
    # Validation
    "ValidationIssue",
    "SpecValidationResult",
    "SpecValidationError",
    "RequestValidationError",
    "format_error_path",
    "validate_design_spec",
    "parse_design_spec",
    "is_valid_design_spec",
    "parse_prompt_request",
    "serialize_design_spec",
    "export_json_schema",
    # Traversal
    "iter_nodes",
]
