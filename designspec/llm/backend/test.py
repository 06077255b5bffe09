"""Tests for generation backend implementations."""

import pytest

from designspec.llm.conftest import FakeOpenAIClient, FakeStatusError, make_completion
from designspec.prompt import ASSISTANT_PROMPT

from ..generator.retry import RetryConfig
from .base import (
    AuthenticationError,
    GenerationConfig,
    GenerationResult,
    UpstreamError,
    UpstreamTimeoutError,
)
from .factory import create_llm_backend
from .openai import OpenAIBackend, supports_temperature

FAST_RETRY = RetryConfig(max_retries=2, base_delay=0.0, timeout=5.0)


def _backend(client, **kwargs):
    kwargs.setdefault("retry_config", FAST_RETRY)
    return OpenAIBackend(api_key="test-key", client=client, **kwargs)


class TestGenerationTypes:
    """Tests for backend dataclasses."""

    @pytest.mark.unit
    def test_config_defaults(self):
        """Default config requests JSON with the backend temperature."""
        config = GenerationConfig()
        assert config.json_mode is True
        assert config.temperature is None
        assert config.assistant_prompt is None

    @pytest.mark.unit
    def test_result_defaults(self):
        """Results default to a successful, un-retried request."""
        result = GenerationResult(content="{}", finish_reason="stop", usage={}, model="m")
        assert result.outcome == "success"
        assert result.retry_count == 0
        assert result.backend_request_id is None


class TestSupportsTemperature:
    """Tests for the temperature exclusion list."""

    @pytest.mark.unit
    def test_default_exclusions(self):
        """Reasoning models reject a custom temperature."""
        assert not supports_temperature("gpt-5-nano")
        assert not supports_temperature("o3-mini")
        assert supports_temperature("gpt-4o-mini")

    @pytest.mark.unit
    def test_explicit_exclusions(self):
        """An explicit list overrides the environment."""
        assert supports_temperature("gpt-5-nano", excluded=[])
        assert not supports_temperature("custom", excluded=["custom"])


class TestOpenAIBackend:
    """Tests for OpenAIBackend with a fake client."""

    @pytest.mark.unit
    def test_requires_api_key(self, no_api_key):
        """Missing key without a client raises AuthenticationError."""
        with pytest.raises(AuthenticationError, match="OPENAI_API_KEY"):
            OpenAIBackend()

    @pytest.mark.unit
    def test_model_from_env(self, monkeypatch):
        """Model falls back to OPENAI_MODEL."""
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
        backend = _backend(FakeOpenAIClient(make_completion("{}")))
        assert backend.model_name == "gpt-4o-mini"
        assert backend.name == "openai:gpt-4o-mini"

    @pytest.mark.unit
    def test_params_without_temperature(self):
        """Excluded models get no temperature; JSON mode is requested."""
        backend = _backend(FakeOpenAIClient(make_completion("{}")), model="gpt-5-nano")
        params = backend.build_params(
            "Create a login form",
            system_prompt="SYSTEM",
            config=GenerationConfig(assistant_prompt=ASSISTANT_PROMPT),
        )
        assert params["model"] == "gpt-5-nano"
        assert params["response_format"] == {"type": "json_object"}
        assert "temperature" not in params
        assert [m["role"] for m in params["messages"]] == ["system", "assistant", "user"]
        assert params["messages"][2]["content"] == "Create a login form"

    @pytest.mark.unit
    def test_params_with_temperature(self):
        """Models that accept temperature get the configured value."""
        backend = _backend(FakeOpenAIClient(make_completion("{}")), model="gpt-4o-mini", temperature=0.3)
        assert backend.build_params("x")["temperature"] == 0.3
        assert backend.build_params("x", config=GenerationConfig(temperature=0.9))["temperature"] == 0.9

    @pytest.mark.unit
    def test_params_carry_only_request_fields(self):
        """Only model, messages, response format and temperature are sent."""
        backend = _backend(FakeOpenAIClient(make_completion("{}")), model="gpt-4o-mini")
        params = backend.build_params("x", config=GenerationConfig(temperature=0.2))
        assert set(params) == {"model", "messages", "response_format", "temperature"}

    @pytest.mark.unit
    def test_generate_success(self):
        """Content, usage and request id are surfaced."""
        client = FakeOpenAIClient(make_completion('{"page": "Home"}', request_id="req_123"))
        result = _backend(client).generate("Create a page", system_prompt="SYSTEM")

        assert result.content == '{"page": "Home"}'
        assert result.backend_request_id == "req_123"
        assert result.usage == {"prompt_tokens": 1200, "completion_tokens": 300, "total_tokens": 1500}
        assert result.outcome == "success"
        assert result.duration_ms >= 0
        assert len(client.calls) == 1

    @pytest.mark.unit
    def test_generate_counts_retries(self):
        """Retries performed by the retry client are reported."""
        client = FakeOpenAIClient(FakeStatusError(503), make_completion("{}"))
        result = _backend(client).generate("x")
        assert result.retry_count == 1

    @pytest.mark.unit
    def test_empty_content_returned_as_empty_string(self):
        """Missing content is returned as an empty string."""
        result = _backend(FakeOpenAIClient(make_completion(None))).generate("x")
        assert result.content == ""

    @pytest.mark.unit
    def test_timeout_raises_upstream_timeout(self):
        """A timed-out request raises UpstreamTimeoutError."""
        client = FakeOpenAIClient(TimeoutError("Request timeout"))
        with pytest.raises(UpstreamTimeoutError) as exc_info:
            _backend(client).generate("x")
        assert exc_info.value.outcome == "timeout"
        assert len(client.calls) == 1

    @pytest.mark.unit
    def test_error_raises_upstream_error(self):
        """Exhausted retries raise UpstreamError with the retry count."""
        client = FakeOpenAIClient(FakeStatusError(500, "Internal Server Error"))
        with pytest.raises(UpstreamError) as exc_info:
            _backend(client).generate("x")
        assert not isinstance(exc_info.value, UpstreamTimeoutError)
        assert exc_info.value.outcome == "error"
        assert exc_info.value.retry_count == 2
        assert len(client.calls) == 3


class TestFactory:
    """Tests for create_llm_backend."""

    @pytest.mark.unit
    def test_creates_openai_backend(self, mock_api_key):
        """The default provider is OpenAI."""
        backend = create_llm_backend("gpt-4o-mini", api_key=mock_api_key)
        assert isinstance(backend, OpenAIBackend)
        assert backend.model_name == "gpt-4o-mini"

    @pytest.mark.unit
    def test_unknown_provider(self, mock_api_key):
        """Unknown providers are rejected."""
        with pytest.raises(ValueError, match="Unknown provider"):
            create_llm_backend(provider="anthropic", api_key=mock_api_key)

    @pytest.mark.unit
    def test_missing_key(self, no_api_key):
        """Factory propagates the authentication error."""
        with pytest.raises(AuthenticationError):
            create_llm_backend()
