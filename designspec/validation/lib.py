"""Visual-usage validation for DesignSpec trees.

Detects containers that carry visual styling (background, borderRadius,
border) while looking like layout-only grouping. Only surface containers
(cards, inputs) should be styled. Warnings are diagnostics; the DesignSpec is
never modified.
"""

from dataclasses import dataclass, field

from designspec.schema import ContainerNode, DesignSpec, TextNode

LAYOUT_ONLY_REASON = (
    "Container appears to be layout-only (grouping/alignment) but has visual styling. "
    "Layout containers should not have background, borderRadius, or border properties. "
    "Only surface containers (cards, inputs) should have visual styling."
)

INPUT_TEXT_MARKERS: tuple[str, ...] = ("enter", "placeholder", "hint")
CARD_MIN_PADDING = 16
CARD_MIN_CHILDREN = 2


@dataclass
class VisualUsageWarning:
    """Visual styling found on a layout-only container.

    Attributes:
        path: Tree location, e.g. ``nodes[0].children[2]``.
        properties: Offending attributes, e.g. ``background="#F9FAFB"``.
        reason: Why this is likely a violation.
    """

    path: str
    properties: list[str] = field(default_factory=list)
    reason: str = LAYOUT_ONLY_REASON

    def to_dict(self) -> dict:
        return {"path": self.path, "properties": list(self.properties), "reason": self.reason}


def has_visual_styling(node: ContainerNode) -> bool:
    """Whether a container sets background, a non-zero borderRadius or border."""
    return bool(node.background or node.border_radius or node.border)


def is_input_like_container(node: ContainerNode) -> bool:
    """A bordered container with placeholder-like text among its direct children."""
    if not node.border:
        return False
    return any(
        isinstance(child, TextNode)
        and any(marker in child.content.lower() for marker in INPUT_TEXT_MARKERS)
        for child in node.children
    )


def is_card_like_container(node: ContainerNode) -> bool:
    """A filled, rounded container with real padding or several children.

    Requires background and a non-zero borderRadius, then either
    ``padding >= 16`` or ``padding > 0`` with at least two children.
    """
    if not node.background or not node.border_radius:
        return False
    if node.padding >= CARD_MIN_PADDING:
        return True
    return node.padding > 0 and len(node.children) >= CARD_MIN_CHILDREN


def is_surface_container(node: ContainerNode) -> bool:
    """Styled containers that pass the input-like or card-like test."""
    return has_visual_styling(node) and (
        is_input_like_container(node) or is_card_like_container(node)
    )


def describe_visual_properties(node: ContainerNode) -> list[str]:
    """Describe the styling attributes a container sets."""
    properties: list[str] = []
    if node.background:
        properties.append(f'background="{node.background}"')
    if node.border_radius is not None:
        properties.append(f"borderRadius={node.border_radius}")
    if node.border:
        properties.append("border")
    return properties


def validate_visual_usage(spec: DesignSpec) -> list[VisualUsageWarning]:
    """Find styled containers that look like layout-only grouping.

    Every container is visited; a flagged container does not stop its
    children from being checked.

    Args:
        spec: A schema-valid DesignSpec, normally after default filling.

    Returns:
        Warnings in traversal order. Empty if every styled container is a
        surface.

    Example:
        >>> for warning in validate_visual_usage(spec):
        ...     print(f"{warning.path}: {', '.join(warning.properties)}")
    """
    warnings: list[VisualUsageWarning] = []

    def visit(node, path: str) -> None:
        if not isinstance(node, ContainerNode):
            return

        if has_visual_styling(node) and not is_surface_container(node):
            warnings.append(
                VisualUsageWarning(path=path, properties=describe_visual_properties(node))
            )

        for index, child in enumerate(node.children):
            visit(child, f"{path}.children[{index}]")

    for index, node in enumerate(spec.nodes):
        visit(node, f"nodes[{index}]")

    return warnings


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
