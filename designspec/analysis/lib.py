"""Observability helpers for generated DesignSpecs.

Structural metrics, warning summaries, budget alerts and content hashes.
Hashes let logs identify prompts and specs without storing their text.
"""

import hashlib
import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from designspec.config import EnvVar, get_environment
from designspec.schema import ButtonNode, ContainerNode, DesignSpec, TextNode
from designspec.validation import VisualUsageWarning, has_visual_styling

logger = logging.getLogger(__name__)

LAYOUT_WARNING_TYPE = "visual_styling_on_layout_container"
UNKNOWN_WARNING_TYPE = "unknown_warning"


# =============================================================================
# Spec analysis
# =============================================================================


@dataclass
class SpecAnalysis:
    """Structural metrics of a DesignSpec tree.

    Attributes:
        nodes_count: Total number of nodes, containers included.
        depth: Maximum nesting depth; top-level nodes are depth 1.
        surface_nodes_count: Text, buttons and styled containers.
    """

    nodes_count: int
    depth: int
    surface_nodes_count: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def is_layout_only_node(node) -> bool:
    """An unstyled container with no direct text or button children."""
    if not isinstance(node, ContainerNode):
        return False
    has_leaf_child = any(isinstance(c, (TextNode, ButtonNode)) for c in node.children)
    return not has_visual_styling(node) and not has_leaf_child


def is_surface_node(node) -> bool:
    if isinstance(node, ContainerNode):
        return has_visual_styling(node) and not is_layout_only_node(node)
    return isinstance(node, (TextNode, ButtonNode))


def analyze_spec(spec: DesignSpec) -> SpecAnalysis:
    """Count nodes, depth and surface nodes.

    Example:
        >>> analyze_spec(spec).to_dict()
        {'nodes_count': 7, 'depth': 3, 'surface_nodes_count': 7}
    """
    nodes_count = 0
    max_depth = 0
    surface_count = 0

    def visit(node, depth: int) -> None:
        nonlocal nodes_count, max_depth, surface_count
        nodes_count += 1
        max_depth = max(max_depth, depth)
        if is_surface_node(node):
            surface_count += 1
        if isinstance(node, ContainerNode):
            for child in node.children:
                visit(child, depth + 1)

    for node in spec.nodes:
        visit(node, 1)

    return SpecAnalysis(
        nodes_count=nodes_count, depth=max_depth, surface_nodes_count=surface_count
    )


# =============================================================================
# Warning aggregation
# =============================================================================


@dataclass
class AggregatedWarnings:
    """Summary of visual-usage warnings for logs and responses."""

    warnings_count: int = 0
    warnings_types: list[str] = field(default_factory=list)
    warnings_paths_sample: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def warning_type(warning: VisualUsageWarning) -> str:
    if "layout-only" in warning.reason:
        return LAYOUT_WARNING_TYPE
    return UNKNOWN_WARNING_TYPE


def aggregate_warnings(
    warnings: list[VisualUsageWarning], paths_sample_size: int = 3
) -> AggregatedWarnings:
    """Summarize warnings as a count, unique types and a path sample.

    Args:
        warnings: Warnings in traversal order.
        paths_sample_size: How many leading paths to keep.

    Returns:
        AggregatedWarnings; types keep first-seen order.
    """
    types: list[str] = []
    for warning in warnings:
        kind = warning_type(warning)
        if kind not in types:
            types.append(kind)

    return AggregatedWarnings(
        warnings_count=len(warnings),
        warnings_types=types,
        warnings_paths_sample=[w.path for w in warnings[:paths_sample_size]],
    )


# =============================================================================
# Budget alerts
# =============================================================================


@dataclass
class BudgetMetrics:
    """Usage figures of one completion."""

    total_tokens: int
    prompt_tokens: int
    completion_tokens: int
    duration_ms: float
    model: str
    prompt_hash: str | None = None
    spec_hash: str | None = None

    @classmethod
    def from_usage(
        cls,
        usage: dict[str, int],
        duration_ms: float,
        model: str,
        prompt_hash: str | None = None,
        spec_hash: str | None = None,
    ) -> "BudgetMetrics":
        prompt_tokens = int(usage.get("prompt_tokens", 0))
        completion_tokens = int(usage.get("completion_tokens", 0))
        return cls(
            total_tokens=int(usage.get("total_tokens", prompt_tokens + completion_tokens)),
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            duration_ms=duration_ms,
            model=model,
            prompt_hash=prompt_hash,
            spec_hash=spec_hash,
        )


@dataclass
class BudgetLimits:
    """Thresholds above which a completion triggers an alert."""

    max_tokens: int = 8000
    max_duration_ms: int = 8000
    max_completion_ratio: float = 3.0

    @classmethod
    def from_env(cls) -> "BudgetLimits":
        return cls(
            max_tokens=get_environment(EnvVar.BUDGET_MAX_TOKENS),
            max_duration_ms=get_environment(EnvVar.BUDGET_MAX_DURATION_MS),
            max_completion_ratio=get_environment(EnvVar.BUDGET_MAX_COMPLETION_RATIO),
        )


@dataclass
class BudgetAlert:
    """An exceeded budget.

    Attributes:
        event: ``budget.alert.tokens``, ``budget.alert.duration`` or
            ``budget.alert.ratio``.
        message: Human-readable summary.
        value: Observed value.
        limit: Configured limit.
    """

    event: str
    message: str
    value: float
    limit: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def check_budget_alerts(
    metrics: BudgetMetrics,
    limits: BudgetLimits | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> list[BudgetAlert]:
    """Compare usage against limits and log a warning per exceeded budget.

    Alerts are informational; nothing is blocked.

    Args:
        metrics: Usage of one completion.
        limits: Thresholds. Defaults to environment.
        log: Logger to report through, e.g. a RequestLogger.

    Returns:
        The alerts raised, possibly empty.
    """
    limits = limits or BudgetLimits.from_env()
    log = log or logger
    alerts: list[BudgetAlert] = []

    if metrics.total_tokens > limits.max_tokens:
        alerts.append(
            BudgetAlert(
                event="budget.alert.tokens",
                message="Budget alert: token limit exceeded",
                value=metrics.total_tokens,
                limit=limits.max_tokens,
            )
        )

    if metrics.duration_ms > limits.max_duration_ms:
        alerts.append(
            BudgetAlert(
                event="budget.alert.duration",
                message="Budget alert: duration limit exceeded",
                value=metrics.duration_ms,
                limit=limits.max_duration_ms,
            )
        )

    if metrics.prompt_tokens > 0:
        ratio = metrics.completion_tokens / metrics.prompt_tokens
        if ratio > limits.max_completion_ratio:
            alerts.append(
                BudgetAlert(
                    event="budget.alert.ratio",
                    message="Budget alert: completion ratio limit exceeded",
                    value=ratio,
                    limit=limits.max_completion_ratio,
                )
            )

    for alert in alerts:
        log.warning(
            f"{alert.message} (event={alert.event}, model={metrics.model}, "
            f"value={alert.value}, limit={alert.limit}, prompt_hash={metrics.prompt_hash})",
            extra={"event": alert.event},
        )

    return alerts


# =============================================================================
# Hashing
# =============================================================================


def compute_hash(text: str) -> str:
    """SHA-256 hex digest of a UTF-8 string."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def compute_object_hash(obj: Any) -> str:
    """Hash of a JSON-serializable object's compact JSON form."""
    return compute_hash(json.dumps(obj, separators=(",", ":"), ensure_ascii=False))


__all__ = [
    "LAYOUT_WARNING_TYPE",
    "UNKNOWN_WARNING_TYPE",
    "SpecAnalysis",
    "is_layout_only_node",
    "is_surface_node",
    "analyze_spec",
    "AggregatedWarnings",
    "warning_type",
    "aggregate_warnings",
    "BudgetMetrics",
    "BudgetLimits",
    "BudgetAlert",
    "check_budget_alerts",
    "compute_hash",
    "compute_object_hash",
]
