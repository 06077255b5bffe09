"""Tests for analysis helpers."""

import logging

import pytest

from designspec.schema import parse_design_spec
from designspec.validation import LAYOUT_ONLY_REASON, VisualUsageWarning

from .lib import (
    LAYOUT_WARNING_TYPE,
    UNKNOWN_WARNING_TYPE,
    BudgetLimits,
    BudgetMetrics,
    aggregate_warnings,
    analyze_spec,
    check_budget_alerts,
    compute_hash,
    compute_object_hash,
)


class TestAnalyzeSpec:
    """Tests for analyze_spec."""

    @pytest.mark.unit
    def test_sample_spec(self, sample_spec):
        """Counts, depth and surfaces of the login screen."""
        analysis = analyze_spec(sample_spec)
        assert analysis.nodes_count == 7
        assert analysis.depth == 3
        assert analysis.surface_nodes_count == 7

    @pytest.mark.unit
    def test_unstyled_containers_not_surfaces(self):
        """Plain wrappers count as nodes but not as surfaces."""
        spec = parse_design_spec(
            {
                "page": "P",
                "frame": {"name": "F", "width": 400, "layout": "vertical", "gap": 0, "padding": 0},
                "nodes": [
                    {
                        "type": "container",
                        "layout": "vertical",
                        "gap": 0,
                        "padding": 0,
                        "children": [
                            {
                                "type": "container",
                                "layout": "horizontal",
                                "gap": 0,
                                "padding": 0,
                                "children": [{"type": "text", "content": "x"}],
                            }
                        ],
                    }
                ],
            }
        )
        assert analyze_spec(spec).to_dict() == {
            "nodes_count": 3,
            "depth": 3,
            "surface_nodes_count": 1,
        }


class TestAggregateWarnings:
    """Tests for aggregate_warnings."""

    @pytest.mark.unit
    def test_empty(self):
        """No warnings give an empty summary."""
        summary = aggregate_warnings([])
        assert summary.warnings_count == 0
        assert summary.warnings_types == []
        assert summary.warnings_paths_sample == []

    @pytest.mark.unit
    def test_types_and_sample(self):
        """Types are unique and the path sample is truncated."""
        warnings = [VisualUsageWarning(path=f"nodes[{i}]") for i in range(5)]
        warnings.append(VisualUsageWarning(path="nodes[9]", reason="Something else"))

        summary = aggregate_warnings(warnings)
        assert summary.warnings_count == 6
        assert summary.warnings_types == [LAYOUT_WARNING_TYPE, UNKNOWN_WARNING_TYPE]
        assert summary.warnings_paths_sample == ["nodes[0]", "nodes[1]", "nodes[2]"]

    @pytest.mark.unit
    def test_sample_size(self):
        """Sample size is configurable."""
        warnings = [VisualUsageWarning(path="a", reason=LAYOUT_ONLY_REASON)] * 2
        assert aggregate_warnings(warnings, paths_sample_size=1).warnings_paths_sample == ["a"]


class TestBudgetAlerts:
    """Tests for check_budget_alerts."""

    LIMITS = BudgetLimits(max_tokens=1000, max_duration_ms=2000, max_completion_ratio=2.0)

    @pytest.mark.unit
    def test_within_budget(self, caplog):
        """No alert and no log inside the limits."""
        metrics = BudgetMetrics(900, 600, 300, 1500.0, "gpt-5-nano")
        with caplog.at_level(logging.WARNING):
            assert check_budget_alerts(metrics, self.LIMITS) == []
        assert caplog.records == []

    @pytest.mark.unit
    def test_all_alerts(self, caplog):
        """Every exceeded limit raises and logs its own alert."""
        metrics = BudgetMetrics(1500, 300, 1200, 2500.0, "gpt-5-nano", prompt_hash="abc")
        with caplog.at_level(logging.WARNING):
            alerts = check_budget_alerts(metrics, self.LIMITS)

        assert [a.event for a in alerts] == [
            "budget.alert.tokens",
            "budget.alert.duration",
            "budget.alert.ratio",
        ]
        assert alerts[2].value == pytest.approx(4.0)
        assert len(caplog.records) == 3
        assert "token limit exceeded" in caplog.records[0].getMessage()

    @pytest.mark.unit
    def test_ratio_skipped_without_prompt_tokens(self):
        """Zero prompt tokens never trigger the ratio alert."""
        metrics = BudgetMetrics(10, 0, 10, 10.0, "m")
        assert check_budget_alerts(metrics, self.LIMITS) == []

    @pytest.mark.unit
    def test_limits_from_env(self, monkeypatch):
        """Limits come from the environment."""
        monkeypatch.setenv("BUDGET_MAX_TOKENS", "500")
        monkeypatch.setenv("BUDGET_MAX_COMPLETION_RATIO", "1.5")
        limits = BudgetLimits.from_env()
        assert limits.max_tokens == 500
        assert limits.max_completion_ratio == 1.5

    @pytest.mark.unit
    def test_metrics_from_usage(self):
        """Usage dicts map onto metrics."""
        metrics = BudgetMetrics.from_usage(
            {"prompt_tokens": 100, "completion_tokens": 50}, 12.5, "m"
        )
        assert metrics.total_tokens == 150
        assert metrics.duration_ms == 12.5


class TestHashing:
    """Tests for hash helpers."""

    @pytest.mark.unit
    def test_compute_hash(self):
        """SHA-256 hex of UTF-8 input."""
        assert compute_hash("") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )
        assert compute_hash("hello") == (
            "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
        )

    @pytest.mark.unit
    def test_object_hash_uses_compact_json(self):
        """Objects hash through their compact JSON text."""
        assert compute_object_hash({"a": 1, "b": [1, 2]}) == compute_hash('{"a":1,"b":[1,2]}')
