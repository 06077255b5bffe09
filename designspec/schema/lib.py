"""Authoritative Schema Module for DesignSpec documents.

This module serves as the single source of truth for the DesignSpec wire
contract consumed by the design-tool executor. It provides:
- The recursive DesignSpec model (page, frame, text/button/container nodes)
- Inbound request models (PromptRequest, GenerationContext)
- Non-raising structural validation with accumulated, path-addressed issues
- Serialization and JSON Schema export

Python code uses snake_case attributes; the wire format is camelCase
(``fontSize``, ``borderRadius``, ``targetLayout``).
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, Field, StrictBool, StrictInt, StrictStr
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

# === ENUMS ===


class Layout(str, Enum):
    """Main axis of a frame or container's children."""

    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class TargetLayout(str, Enum):
    """Device class the generated screen targets."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


class UiStrictness(str, Enum):
    """How strictly the layout-intent rules are applied."""

    STRICT = "strict"
    BALANCED = "balanced"


NODE_TYPES: tuple[str, ...] = ("text", "button", "container")

HEX_COLOR_PATTERN = r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$"


def _integral_float_to_int(value: Any) -> Any:
    """Accept JSON numbers like ``400.0`` where an integer is required."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


WireInt = Annotated[StrictInt, BeforeValidator(_integral_float_to_int)]
HexColor = Annotated[StrictStr, Field(pattern=HEX_COLOR_PATTERN)]
PositiveInt = Annotated[WireInt, Field(gt=0)]
NonNegativeInt = Annotated[WireInt, Field(ge=0)]

_MODEL_CONFIG = {
    "alias_generator": to_camel,
    "populate_by_name": True,
    "frozen": True,
    "use_enum_values": True,
}


# === DESIGNSPEC MODEL ===


class Border(BaseModel):
    """Stroke applied to a frame or container."""

    color: HexColor
    width: NonNegativeInt

    model_config = _MODEL_CONFIG


class Frame(BaseModel):
    """Root visual container of a page.

    Attributes:
        name: Frame name shown in the design tool.
        width: Frame width in pixels.
        height: Optional frame height; filled per device by the repair pass.
        layout: Main axis of the frame's children.
        gap: Spacing between children in pixels.
        padding: Internal padding in pixels.
        background: Optional fill colour.
        border_radius: Optional corner radius.
        border: Optional stroke.
    """

    name: StrictStr = Field(..., min_length=1)
    width: PositiveInt
    height: PositiveInt | None = None
    layout: Layout
    gap: NonNegativeInt
    padding: NonNegativeInt
    background: HexColor | None = None
    border_radius: NonNegativeInt | None = None
    border: Border | None = None

    model_config = _MODEL_CONFIG


class TextNode(BaseModel):
    """Text leaf. Content may be empty on input; repair fills it."""

    type: Literal["text"] = "text"
    content: StrictStr
    font_size: PositiveInt | None = None
    color: HexColor | None = None

    model_config = _MODEL_CONFIG


class ButtonNode(BaseModel):
    """Button leaf with a non-empty label."""

    type: Literal["button"] = "button"
    label: StrictStr = Field(..., min_length=1)
    background: HexColor | None = None
    text_color: HexColor | None = None
    border_radius: NonNegativeInt | None = None

    model_config = _MODEL_CONFIG


class ContainerNode(BaseModel):
    """Grouping node owning an ordered, non-empty list of children."""

    type: Literal["container"] = "container"
    layout: Layout
    gap: NonNegativeInt
    padding: NonNegativeInt
    children: list[Node] = Field(..., min_length=1)
    background: HexColor | None = None
    border_radius: NonNegativeInt | None = None
    border: Border | None = None

    model_config = _MODEL_CONFIG


Node = Annotated[
    Union[TextNode, ButtonNode, ContainerNode], Field(discriminator="type")
]

ContainerNode.model_rebuild()


class DesignSpec(BaseModel):
    """A complete generated screen: page name, root frame and node tree."""

    page: StrictStr = Field(..., min_length=1)
    frame: Frame
    nodes: list[Node] = Field(..., min_length=1)

    model_config = _MODEL_CONFIG


# === REQUEST MODEL ===


class UxPatterns(BaseModel):
    """UX guidance toggles for the prompt assembler."""

    group_elements: StrictBool
    form_container: StrictBool
    helper_text: StrictBool

    model_config = _MODEL_CONFIG


class GenerationContext(BaseModel):
    """Options that drive rule selection and default filling."""

    target_layout: TargetLayout
    ui_strictness: UiStrictness
    ux_patterns: UxPatterns
    visual_baseline: StrictBool = True
    strict_layout: StrictBool = False

    model_config = _MODEL_CONFIG


DEFAULT_GENERATION_CONTEXT = GenerationContext(
    target_layout=TargetLayout.MOBILE,
    ui_strictness=UiStrictness.STRICT,
    ux_patterns=UxPatterns(
        group_elements=True,
        form_container=True,
        helper_text=False,
    ),
    visual_baseline=True,
    strict_layout=False,
)


class PromptRequest(BaseModel):
    """Inbound generation request."""

    prompt: StrictStr = Field(..., min_length=1)
    generation_context: GenerationContext | None = None

    model_config = _MODEL_CONFIG

    def resolved_context(self) -> GenerationContext:
        """Return the request context, or the default when none was sent."""
        return self.generation_context or DEFAULT_GENERATION_CONTEXT


# === VALIDATION ===


@dataclass
class ValidationIssue:
    """A single schema violation.

    Attributes:
        path: Location in the document, e.g. ``nodes[0].children[1].gap``.
        message: Human-readable description.
    """

    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


@dataclass
class SpecValidationResult:
    """Outcome of validating an untrusted value against the DesignSpec model."""

    spec: DesignSpec | None = None
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.spec is not None and not self.issues


class SpecValidationError(ValueError):
    """Backend output does not satisfy the DesignSpec schema."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        summary = "; ".join(f"{i.path}: {i.message}" for i in issues[:5])
        super().__init__(f"Invalid DesignSpec: {summary}")


class RequestValidationError(ValueError):
    """Inbound request is malformed; generation must not be attempted."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        summary = "; ".join(f"{i.path}: {i.message}" for i in issues[:5])
        super().__init__(f"Invalid request: {summary}")


def format_error_path(loc: tuple[str | int, ...]) -> str:
    """Render a pydantic error location as ``nodes[0].children[1].gap``.

    Discriminated unions insert the tag name after a list index; those
    segments are dropped so paths only describe document structure.
    """
    path = ""
    previous: str | int | None = None
    for segment in loc:
        if isinstance(segment, int):
            path += f"[{segment}]"
        elif isinstance(previous, int) and segment in NODE_TYPES:
            pass
        else:
            path = f"{path}.{segment}" if path else str(segment)
        previous = segment
    return path or "root"


def _issues_from(exc: PydanticValidationError) -> list[ValidationIssue]:
    return [
        ValidationIssue(path=format_error_path(error["loc"]), message=error["msg"])
        for error in exc.errors()
    ]


def validate_design_spec(value: Any) -> SpecValidationResult:
    """Validate an arbitrary parsed JSON value as a DesignSpec.

    Every violation is reported, not just the first. Never raises for
    malformed input.

    Args:
        value: Parsed JSON (usually a dict) or an existing DesignSpec.

    Returns:
        SpecValidationResult with the model on success or the issue list.
    """
    if isinstance(value, DesignSpec):
        return SpecValidationResult(spec=value)

    try:
        spec = DesignSpec.model_validate(value)
    except PydanticValidationError as e:
        return SpecValidationResult(issues=_issues_from(e))

    return SpecValidationResult(spec=spec)


def parse_design_spec(value: Any) -> DesignSpec:
    """Validate a value and return the DesignSpec.

    Raises:
        SpecValidationError: If the value is not a valid DesignSpec.
    """
    result = validate_design_spec(value)
    if not result.ok:
        raise SpecValidationError(result.issues)
    return result.spec


def is_valid_design_spec(value: Any) -> bool:
    return validate_design_spec(value).ok


def parse_prompt_request(body: Any) -> PromptRequest:
    """Validate an inbound request body.

    Raises:
        RequestValidationError: With every field violation.
    """
    try:
        return PromptRequest.model_validate(body)
    except PydanticValidationError as e:
        raise RequestValidationError(_issues_from(e)) from e


def serialize_design_spec(spec: DesignSpec) -> dict[str, Any]:
    """Dump a DesignSpec to its camelCase wire form, omitting unset optionals."""
    return spec.model_dump(mode="json", by_alias=True, exclude_none=True)


def export_json_schema() -> dict[str, Any]:
    """Export the DesignSpec JSON Schema (wire field names).

    Returns:
        JSON Schema dict suitable for tooling or prompt injection.
    """
    return DesignSpec.model_json_schema(by_alias=True)


# === TRAVERSAL ===


def iter_nodes(spec: DesignSpec) -> Iterator[tuple[str, TextNode | ButtonNode | ContainerNode]]:
    """Walk every node depth-first in pre-order.

    Yields:
        ``(path, node)`` pairs, path in ``nodes[0].children[2]`` notation.
    """

    def walk(nodes: list, prefix: str):
        for index, node in enumerate(nodes):
            path = f"{prefix}[{index}]"
            yield path, node
            if isinstance(node, ContainerNode):
                yield from walk(node.children, f"{path}.children")

    yield from walk(spec.nodes, "nodes")


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
