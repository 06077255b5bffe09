"""Unit tests for health checking module."""

import pytest

from designspec.rules import RuleCache, RuleLoader

from .health import (
    HealthStatus,
    ServiceStatus,
    check_llm_backend,
    check_rules,
    format_startup_banner,
    get_server_health,
)


class TestHealthStatus:
    """Tests for HealthStatus enum."""

    @pytest.mark.unit
    def test_status_is_string_enum(self):
        """HealthStatus inherits from str for JSON serialization."""
        assert isinstance(HealthStatus.HEALTHY, str)
        assert HealthStatus.DEGRADED == "degraded"


class TestServiceStatus:
    """Tests for ServiceStatus dataclass."""

    @pytest.mark.unit
    def test_to_dict_merges_details(self):
        """Details are flattened into the dict."""
        status = ServiceStatus(available=True, message="OK", details={"path": "/rules"})
        assert status.to_dict() == {"available": True, "message": "OK", "path": "/rules"}


class TestCheckLLMBackend:
    """Tests for check_llm_backend."""

    @pytest.mark.unit
    def test_missing_key(self, no_api_key):
        """No key means no live generation."""
        status = check_llm_backend()
        assert status.available is False
        assert "OPENAI_API_KEY" in status.message
        assert status.details["model"] == "gpt-5-nano"

    @pytest.mark.unit
    def test_configured(self, monkeypatch):
        """A key makes the backend available."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert check_llm_backend().available is True


class TestCheckRules:
    """Tests for check_rules."""

    @pytest.mark.unit
    def test_mock_rules(self, mock_rules_dir):
        """A complete rule directory is available."""
        status = check_rules(RuleLoader(rules_dir=mock_rules_dir, cache=RuleCache()))
        assert status.available is True
        assert status.details["path"] == str(mock_rules_dir)

    @pytest.mark.unit
    def test_missing_rules(self, tmp_path):
        """An empty directory is reported, not raised."""
        status = check_rules(RuleLoader(rules_dir=tmp_path, cache=RuleCache()))
        assert status.available is False
        assert "base.json" in status.message


class TestServerHealth:
    """Tests for get_server_health and the banner."""

    @pytest.mark.unit
    def test_healthy(self, monkeypatch, mock_rules_dir):
        """Key plus rules is healthy."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        health = get_server_health(RuleLoader(rules_dir=mock_rules_dir, cache=RuleCache()))
        assert health.status == HealthStatus.HEALTHY
        assert health.to_dict()["capabilities"]["generate_design_spec"] is True

    @pytest.mark.unit
    def test_degraded(self, no_api_key, mock_rules_dir):
        """Rules without a key allow dry runs only."""
        health = get_server_health(RuleLoader(rules_dir=mock_rules_dir, cache=RuleCache()))
        assert health.status == HealthStatus.DEGRADED
        assert health.can_dry_run is True

    @pytest.mark.unit
    def test_unhealthy(self, no_api_key, tmp_path):
        """Missing rules make the server unhealthy."""
        health = get_server_health(RuleLoader(rules_dir=tmp_path, cache=RuleCache()))
        assert health.status == HealthStatus.UNHEALTHY

        banner = format_startup_banner(health)
        assert "UNHEALTHY" in banner
        assert "SPEC_RULES_DIR" in banner
