"""designspec: prompt-to-DesignSpec generation service."""

from designspec.schema import (
    DesignSpec,
    PromptRequest,
    export_json_schema,
    parse_design_spec,
    validate_design_spec,
)
from designspec.validation import VisualUsageWarning, validate_visual_usage

__version__ = "0.1.0"

__all__ = [
    # Schema
    "DesignSpec",
    "PromptRequest",
    "export_json_schema",
    "parse_design_spec",
    "validate_design_spec",
    # Validation
    "VisualUsageWarning",
    "validate_visual_usage",
    "__version__",
]
