"""Visual-usage validation utilities."""

from designspec.validation.lib import (
    LAYOUT_ONLY_REASON,
    VisualUsageWarning,
    describe_visual_properties,
    has_visual_styling,
    is_card_like_container,
    is_input_like_container,
    is_surface_container,
    validate_visual_usage,
)

__all__ = [
    "LAYOUT_ONLY_REASON",
    "VisualUsageWarning",
    "has_visual_styling",
    "is_input_like_container",
    "is_card_like_container",
    "is_surface_container",
    "describe_visual_properties",
    "validate_visual_usage",
]
