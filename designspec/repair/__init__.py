"""Repair and default-filling passes for generated DesignSpecs."""

from designspec.repair.lib import (
    BUTTON_BACKGROUND,
    BUTTON_BORDER_RADIUS,
    BUTTON_TEXT_COLOR,
    CONTAINER_BACKGROUND,
    CONTAINER_BORDER_RADIUS,
    FRAME_BACKGROUND,
    FRAME_BORDER_RADIUS,
    FRAME_HEIGHTS,
    INPUT_BACKGROUND,
    INPUT_BORDER,
    PLACEHOLDER_TEXTS,
    TEXT_PLACEHOLDER_COLOR,
    TEXT_PRIMARY_COLOR,
    RepairResult,
    apply_visual_defaults,
    is_input_like_for_defaults,
    looks_like_placeholder,
    repair_empty_text,
    run_repair_pipeline,
)

__all__ = [
    "PLACEHOLDER_TEXTS",
    "FRAME_HEIGHTS",
    "FRAME_BACKGROUND",
    "FRAME_BORDER_RADIUS",
    "TEXT_PRIMARY_COLOR",
    "TEXT_PLACEHOLDER_COLOR",
    "BUTTON_BACKGROUND",
    "BUTTON_TEXT_COLOR",
    "BUTTON_BORDER_RADIUS",
    "INPUT_BORDER",
    "INPUT_BACKGROUND",
    "CONTAINER_BACKGROUND",
    "CONTAINER_BORDER_RADIUS",
    "RepairResult",
    "repair_empty_text",
    "looks_like_placeholder",
    "is_input_like_for_defaults",
    "apply_visual_defaults",
    "run_repair_pipeline",
]
