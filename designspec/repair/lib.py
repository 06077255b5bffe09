"""Repair and normalization passes for generated DesignSpecs.

Each pass takes a schema-valid DesignSpec and returns a new one; inputs are
never mutated. The pipeline runs them in a fixed order:

1. ``repair_empty_text`` - empty or whitespace text gets placeholder content.
2. ``apply_visual_defaults`` - unset visual attributes get defaults.
3. ``validate_visual_usage`` - diagnostics on the fully-defaulted tree.
"""

import logging
from dataclasses import dataclass, field
from itertools import count

from designspec.schema import (
    DEFAULT_GENERATION_CONTEXT,
    Border,
    ButtonNode,
    ContainerNode,
    DesignSpec,
    GenerationContext,
    TargetLayout,
    TextNode,
)
from designspec.validation import VisualUsageWarning, validate_visual_usage

logger = logging.getLogger(__name__)


# =============================================================================
# Defaults
# =============================================================================

PLACEHOLDER_TEXTS: tuple[str, ...] = ("Label", "Text", "Description", "Value")

FRAME_HEIGHTS: dict[str, int] = {
    TargetLayout.MOBILE.value: 800,
    TargetLayout.TABLET.value: 900,
    TargetLayout.DESKTOP.value: 900,
}
FRAME_BACKGROUND = "#FFFFFF"
FRAME_BORDER_RADIUS = 0

TEXT_PRIMARY_COLOR = "#111827"
TEXT_PLACEHOLDER_COLOR = "#9CA3AF"
PLACEHOLDER_TEXT_MARKERS: tuple[str, ...] = ("enter", "placeholder", "hint", "helper")

BUTTON_BACKGROUND = "#2563EB"
BUTTON_TEXT_COLOR = "#FFFFFF"
BUTTON_BORDER_RADIUS = 8

INPUT_BORDER = Border(color="#D1D5DB", width=1)
INPUT_BACKGROUND = "#FFFFFF"
INPUT_CHILD_MARKERS: tuple[str, ...] = ("enter", "placeholder")

CONTAINER_BACKGROUND = "#F9FAFB"
CONTAINER_BORDER_RADIUS = 12


@dataclass
class RepairResult:
    """Repaired spec plus the visual-usage diagnostics computed on it."""

    spec: DesignSpec
    warnings: list[VisualUsageWarning] = field(default_factory=list)


# =============================================================================
# Empty text
# =============================================================================


def repair_empty_text(spec: DesignSpec) -> DesignSpec:
    """Replace empty or whitespace-only text content with placeholders.

    Placeholders rotate through ``PLACEHOLDER_TEXTS`` using one counter for
    the whole tree, in depth-first pre-order.

    Args:
        spec: Schema-valid DesignSpec.

    Returns:
        A new DesignSpec; the input is unchanged.
    """
    counter = count()

    def repair(node):
        if isinstance(node, TextNode):
            if node.content.strip():
                return node
            placeholder = PLACEHOLDER_TEXTS[next(counter) % len(PLACEHOLDER_TEXTS)]
            return node.model_copy(update={"content": placeholder})
        if isinstance(node, ContainerNode):
            return node.model_copy(update={"children": [repair(c) for c in node.children]})
        return node

    nodes = [repair(node) for node in spec.nodes]
    return spec.model_copy(update={"nodes": nodes})


# =============================================================================
# Visual defaults
# =============================================================================


def _unset(node, **defaults) -> dict:
    """Keep only the defaults whose attribute is currently None."""
    return {name: value for name, value in defaults.items() if getattr(node, name) is None}


def looks_like_placeholder(content: str) -> bool:
    lowered = content.lower()
    return any(marker in lowered for marker in PLACEHOLDER_TEXT_MARKERS)


def is_input_like_for_defaults(node: ContainerNode) -> bool:
    """Input detection used when filling defaults.

    Looser than the validation check: any border counts, as does a direct
    text child mentioning "enter" or "placeholder".
    """
    if node.border is not None:
        return True
    return any(
        isinstance(child, TextNode)
        and any(marker in child.content.lower() for marker in INPUT_CHILD_MARKERS)
        for child in node.children
    )


def _fill_node(node):
    if isinstance(node, TextNode):
        color = TEXT_PLACEHOLDER_COLOR if looks_like_placeholder(node.content) else TEXT_PRIMARY_COLOR
        update = _unset(node, color=color)
        return node.model_copy(update=update) if update else node

    if isinstance(node, ButtonNode):
        update = _unset(
            node,
            background=BUTTON_BACKGROUND,
            text_color=BUTTON_TEXT_COLOR,
            border_radius=BUTTON_BORDER_RADIUS,
        )
        return node.model_copy(update=update) if update else node

    if is_input_like_for_defaults(node):
        update = _unset(node, border=INPUT_BORDER, background=INPUT_BACKGROUND)
    else:
        update = _unset(
            node,
            background=CONTAINER_BACKGROUND,
            border_radius=CONTAINER_BORDER_RADIUS,
        )
    update["children"] = [_fill_node(child) for child in node.children]
    return node.model_copy(update=update)


def apply_visual_defaults(
    spec: DesignSpec, target_layout: TargetLayout | str = TargetLayout.MOBILE
) -> DesignSpec:
    """Fill unset visual attributes across the frame and every node.

    Attributes that are already set are never overwritten, so applying the
    pass twice gives the same result as applying it once.

    Args:
        spec: Schema-valid DesignSpec.
        target_layout: Device class used for the default frame height.

    Returns:
        A new DesignSpec with defaults filled.
    """
    layout = TargetLayout(target_layout).value
    frame_update = _unset(
        spec.frame,
        height=FRAME_HEIGHTS[layout],
        background=FRAME_BACKGROUND,
        border_radius=FRAME_BORDER_RADIUS,
    )
    frame = spec.frame.model_copy(update=frame_update) if frame_update else spec.frame

    return spec.model_copy(
        update={"frame": frame, "nodes": [_fill_node(node) for node in spec.nodes]}
    )


# =============================================================================
# Pipeline
# =============================================================================


def run_repair_pipeline(
    spec: DesignSpec, context: GenerationContext | None = None
) -> RepairResult:
    """Run empty-text repair, default filling and visual-usage checks.

    Args:
        spec: Schema-valid DesignSpec straight from the backend.
        context: Generation context; defaults to DEFAULT_GENERATION_CONTEXT.

    Returns:
        RepairResult with the repaired spec and its warnings.

    Example:
        >>> result = run_repair_pipeline(parse_design_spec(raw), context)
        >>> print(len(result.warnings))
    """
    context = context or DEFAULT_GENERATION_CONTEXT

    repaired = repair_empty_text(spec)
    repaired = apply_visual_defaults(repaired, context.target_layout)
    warnings = validate_visual_usage(repaired)

    if warnings:
        logger.debug(f"Visual usage warnings at: {', '.join(w.path for w in warnings)}")

    return RepairResult(spec=repaired, warnings=warnings)


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
