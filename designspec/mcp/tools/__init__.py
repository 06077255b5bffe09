"""MCP tools for designspec.

Tools:
    - generate_design_spec: Generate a repaired DesignSpec from a prompt
    - validate_design_spec: Schema check, visual warnings and metrics
"""

from .generate import generate_design_spec
from .validate import validate_design_spec

__all__ = [
    "generate_design_spec",
    "validate_design_spec",
]
