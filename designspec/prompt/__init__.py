"""Prompt building module for DesignSpec generation.

Provides PromptBuilder for assembling the rule-driven system directive
and the fixed chat messages sent to the generation backend.
"""

from designspec.prompt.lib import (
    ASSISTANT_PROMPT,
    HEADER_LINES,
    STRICT_LAYOUT_MARKER,
    UX_FALLBACK_LINE,
    PromptAssemblyOptions,
    PromptBuilder,
    PromptContext,
    assemble_system_prompt,
    build_messages,
    select_layout_rules,
    ux_pattern_lines,
)

__all__ = [
    "ASSISTANT_PROMPT",
    "HEADER_LINES",
    "STRICT_LAYOUT_MARKER",
    "UX_FALLBACK_LINE",
    "PromptAssemblyOptions",
    "PromptContext",
    "PromptBuilder",
    "assemble_system_prompt",
    "build_messages",
    "select_layout_rules",
    "ux_pattern_lines",
]
