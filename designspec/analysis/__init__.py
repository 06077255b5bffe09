"""Spec metrics, warning summaries, budget alerts and hashing."""

from designspec.analysis.lib import (
    LAYOUT_WARNING_TYPE,
    UNKNOWN_WARNING_TYPE,
    AggregatedWarnings,
    BudgetAlert,
    BudgetLimits,
    BudgetMetrics,
    SpecAnalysis,
    aggregate_warnings,
    analyze_spec,
    check_budget_alerts,
    compute_hash,
    compute_object_hash,
    is_layout_only_node,
    is_surface_node,
    warning_type,
)

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
