"""Tests for centralized environment configuration."""

from pathlib import Path

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    _convert_value,
    _parse_bool,
    _parse_list,
    get_environment,
    get_environment_info,
    get_no_temperature_models,
    get_retry_settings,
    get_rules_dir,
    list_environment_variables,
)

# =============================================================================
# Tests for type conversion helpers
# =============================================================================


class TestParseBool:
    """Tests for boolean parsing."""

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["true", "TRUE", "1", "yes", " Yes "])
    def test_truthy_values(self, value):
        """Recognized truthy strings parse to True."""
        assert _parse_bool(value) is True

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["false", "0", "no", "NO"])
    def test_falsy_values(self, value):
        """Recognized falsy strings parse to False."""
        assert _parse_bool(value) is False

    @pytest.mark.unit
    def test_unrecognized_returns_none(self):
        """Unrecognized strings return None."""
        assert _parse_bool("maybe") is None


class TestConvertValue:
    """Tests for raw string conversion."""

    @pytest.mark.unit
    def test_none_returns_default(self):
        """Missing value falls back to default."""
        assert _convert_value(None, int, 42) == 42

    @pytest.mark.unit
    def test_int_conversion(self):
        """Integer strings are converted."""
        assert _convert_value("1500", int, 0) == 1500

    @pytest.mark.unit
    def test_invalid_int_returns_default(self):
        """Non-numeric strings fall back to default."""
        assert _convert_value("soon", int, 7) == 7

    @pytest.mark.unit
    def test_float_conversion(self):
        """Float strings are converted."""
        assert _convert_value("2.5", float, 0.0) == 2.5

    @pytest.mark.unit
    def test_path_conversion(self):
        """Path strings become Path objects."""
        assert _convert_value("/tmp/rules", Path, None) == Path("/tmp/rules")

    @pytest.mark.unit
    def test_list_conversion(self):
        """Comma-separated strings become lists."""
        assert _convert_value("a, b,,c", list, []) == ["a", "b", "c"]

    @pytest.mark.unit
    def test_parse_list_empty(self):
        """Empty input yields an empty list."""
        assert _parse_list("") == []


# =============================================================================
# Tests for get_environment
# =============================================================================


class TestGetEnvironment:
    """Tests for the main resolution function."""

    @pytest.mark.unit
    def test_default_used(self, monkeypatch):
        """Default returned when env var is not set."""
        monkeypatch.delenv("OPENAI_RETRY_MAX", raising=False)
        assert get_environment(EnvVar.OPENAI_RETRY_MAX) == 2

    @pytest.mark.unit
    def test_env_var_used(self, monkeypatch):
        """Environment value is converted to the declared type."""
        monkeypatch.setenv("OPENAI_TIMEOUT_MS", "5000")
        assert get_environment(EnvVar.OPENAI_TIMEOUT_MS) == 5000

    @pytest.mark.unit
    def test_override_beats_env(self, monkeypatch):
        """Override takes precedence over environment variable."""
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o")
        assert get_environment(EnvVar.OPENAI_MODEL, override="o3") == "o3"

    @pytest.mark.unit
    def test_bool_env_var(self, monkeypatch):
        """Boolean env vars parse recognized strings."""
        monkeypatch.setenv("LOG_DEBUG_PAYLOADS", "yes")
        assert get_environment(EnvVar.LOG_DEBUG_PAYLOADS) is True

    @pytest.mark.unit
    def test_get_environment_info(self):
        """Metadata is exposed as EnvConfig."""
        info = get_environment_info(EnvVar.MCP_PORT)
        assert isinstance(info, EnvConfig)
        assert info.name == "MCP_PORT"
        assert info.default == 18080


class TestListEnvironmentVariables:
    """Tests for variable introspection."""

    @pytest.mark.unit
    def test_returns_all_variables(self):
        """Returns all EnvVar members when no category."""
        result = list_environment_variables()
        assert len(result) == len(EnvVar)

    @pytest.mark.unit
    def test_filter_by_category(self):
        """Filters by category correctly."""
        retry_vars = list_environment_variables("retry")
        assert EnvVar.OPENAI_TIMEOUT_MS in retry_vars
        assert EnvVar.OPENAI_RETRY_BASE_MS in retry_vars
        assert EnvVar.OPENAI_API_KEY not in retry_vars


# =============================================================================
# Tests for convenience functions
# =============================================================================


class TestGetRulesDir:
    """Tests for rule directory resolution."""

    @pytest.mark.unit
    def test_override_takes_priority(self, tmp_path, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("SPEC_RULES_DIR", "/elsewhere")
        assert get_rules_dir(str(tmp_path)) == tmp_path

    @pytest.mark.unit
    def test_env_var_used(self, tmp_path, monkeypatch):
        """SPEC_RULES_DIR used when no override."""
        monkeypatch.setenv("SPEC_RULES_DIR", str(tmp_path))
        assert get_rules_dir() == tmp_path

    @pytest.mark.unit
    def test_unset_returns_none(self, monkeypatch):
        """Unset variable leaves discovery to the caller."""
        monkeypatch.delenv("SPEC_RULES_DIR", raising=False)
        assert get_rules_dir() is None


class TestRetrySettings:
    """Tests for retry policy helpers."""

    @pytest.mark.unit
    def test_defaults_in_seconds(self, monkeypatch):
        """Millisecond settings are converted to seconds."""
        for name in ("OPENAI_TIMEOUT_MS", "OPENAI_RETRY_BASE_MS", "OPENAI_RETRY_MAX"):
            monkeypatch.delenv(name, raising=False)
        settings = get_retry_settings()
        assert settings == {"timeout": 30.0, "base_delay": 1.0, "max_retries": 2}

    @pytest.mark.unit
    def test_no_temperature_models_from_env(self, monkeypatch):
        """Model exclusion list is read from a comma-separated variable."""
        monkeypatch.setenv("OPENAI_NO_TEMPERATURE_MODELS", "o1, custom-model")
        assert get_no_temperature_models() == frozenset({"o1", "custom-model"})

    @pytest.mark.unit
    def test_no_temperature_models_default(self, monkeypatch):
        """Default exclusion list contains the reasoning models."""
        monkeypatch.delenv("OPENAI_NO_TEMPERATURE_MODELS", raising=False)
        models = get_no_temperature_models()
        assert "gpt-5-nano" in models
        assert "o3-mini" in models
