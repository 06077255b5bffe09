"""Tests for LLM generator module.

Covers:
- RetryStrategy and request_completion: timeout, retry and backoff logic
- DesignSpecGenerator: orchestration with mocked backends
"""

import json
import logging

import httpx
import pytest

from designspec.analysis import BudgetLimits, compute_hash, compute_object_hash
from designspec.llm.conftest import (
    MOCK_LOGIN_SPEC,
    FakeOpenAIClient,
    FakeStatusError,
    MockLLMBackend,
    make_completion,
    slow_call,
)
from designspec.prompt import ASSISTANT_PROMPT
from designspec.rules import RuleCache, RuleLoader
from designspec.schema import (
    RequestValidationError,
    SpecValidationError,
    serialize_design_spec,
)

from ..backend.base import EmptyResponseError, InvalidJSONError, UpstreamTimeoutError
from ..backend.openai import OpenAIBackend
from .lib import DesignSpecGenerator, GenerationStats, GeneratorConfig, build_mock_spec
from .retry import (
    RequestOutcome,
    RetryConfig,
    RetryStrategy,
    extract_request_id,
    request_completion,
)

# =============================================================================
# RetryStrategy Tests
# =============================================================================


class TestRetryConfig:
    """Tests for RetryConfig dataclass."""

    @pytest.mark.unit
    def test_default_config(self):
        """Test default configuration values."""
        config = RetryConfig()
        assert config.max_retries == 2
        assert config.base_delay == 1.0
        assert config.max_delay == 30.0
        assert config.timeout == 30.0
        assert config.exponential_backoff is True

    @pytest.mark.unit
    def test_from_env(self, monkeypatch):
        """Milliseconds in the environment become seconds."""
        monkeypatch.setenv("OPENAI_RETRY_MAX", "4")
        monkeypatch.setenv("OPENAI_RETRY_BASE_MS", "250")
        monkeypatch.setenv("OPENAI_TIMEOUT_MS", "5000")
        config = RetryConfig.from_env()
        assert config.max_retries == 4
        assert config.base_delay == 0.25
        assert config.timeout == 5.0

    @pytest.mark.unit
    def test_from_env_matches_retry_settings(self, monkeypatch):
        """from_env mirrors the shared retry settings."""
        from designspec.config import get_retry_settings

        monkeypatch.setenv("OPENAI_RETRY_BASE_MS", "400")
        config = RetryConfig.from_env()
        settings = get_retry_settings()

        assert config.max_retries == settings["max_retries"] == 2
        assert config.base_delay == settings["base_delay"] == 0.4
        assert config.timeout == settings["timeout"] == 30.0


class TestRetryStrategy:
    """Tests for failure classification and backoff."""

    @pytest.fixture
    def strategy(self):
        return RetryStrategy(RetryConfig(base_delay=1.0, max_delay=30.0))

    @pytest.mark.unit
    def test_backoff_doubles(self, strategy):
        """Delay doubles per attempt."""
        assert [strategy.get_backoff_delay(a) for a in range(3)] == [1.0, 2.0, 4.0]

    @pytest.mark.unit
    def test_backoff_capped(self):
        """Delay never exceeds max_delay."""
        strategy = RetryStrategy(RetryConfig(base_delay=10.0, max_delay=30.0))
        assert strategy.get_backoff_delay(3) == 30.0

    @pytest.mark.unit
    def test_fixed_backoff(self):
        """Without exponential backoff the base delay is used."""
        strategy = RetryStrategy(RetryConfig(base_delay=2.0, exponential_backoff=False))
        assert strategy.get_backoff_delay(5) == 2.0

    @pytest.mark.unit
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable_status(self, strategy, status):
        """Rate limits and server errors are retried."""
        assert strategy.is_retryable(FakeStatusError(status))

    @pytest.mark.unit
    @pytest.mark.parametrize("status", [400, 401, 404, 422])
    def test_client_errors_not_retryable(self, strategy, status):
        """Client errors fail immediately."""
        assert not strategy.is_retryable(FakeStatusError(status, "Bad Request"))

    @pytest.mark.unit
    def test_network_errors_retryable(self, strategy):
        """Connection resets are retried."""
        assert strategy.is_retryable(Exception("read ECONNRESET"))
        assert strategy.is_retryable(Exception("Connection reset by peer"))
        assert not strategy.is_retryable(Exception("boom"))

    @pytest.mark.unit
    def test_timeout_detection(self, strategy):
        """Timeout types and messages count as timeouts; status errors never do."""
        assert strategy.is_timeout(TimeoutError("Request timeout"))
        assert strategy.is_timeout(httpx.ReadTimeout("read operation"))
        assert strategy.is_timeout(Exception("Request timed out."))
        assert not strategy.is_timeout(FakeStatusError(504, "Gateway Timeout"))
        assert not strategy.is_timeout(Exception("read ECONNRESET"))

    @pytest.mark.unit
    def test_classify_final(self, strategy):
        """Network failures report as timeout, everything else as error."""
        assert strategy.classify_final(Exception("read ECONNRESET")) == RequestOutcome.TIMEOUT
        assert strategy.classify_final(FakeStatusError(503)) == RequestOutcome.ERROR
        assert strategy.classify_final(Exception("boom")) == RequestOutcome.ERROR
        assert strategy.classify_final(None) == RequestOutcome.ERROR


class TestRequestCompletion:
    """Tests for request_completion with a scripted client."""

    CONFIG = RetryConfig(max_retries=2, base_delay=0.5, timeout=5.0)

    @pytest.fixture
    def delays(self):
        return []

    @pytest.mark.unit
    def test_success_after_transient_errors(self, delays):
        """Two 503s then success: two retries with doubling delays."""
        client = FakeOpenAIClient(
            FakeStatusError(503),
            FakeStatusError(503),
            make_completion("{}", request_id="req_abc"),
        )
        result = request_completion(client, {"model": "m"}, config=self.CONFIG, sleep=delays.append)

        assert result.outcome == RequestOutcome.SUCCESS
        assert result.ok
        assert result.retry_count == 2
        assert result.backend_request_id == "req_abc"
        assert delays == [0.5, 1.0]
        assert len(client.calls) == 3

    @pytest.mark.unit
    def test_retries_exhausted(self, delays):
        """Persistent 503s end as error after max_retries retries."""
        client = FakeOpenAIClient(FakeStatusError(503))
        result = request_completion(client, {}, config=self.CONFIG, sleep=delays.append)

        assert result.outcome == RequestOutcome.ERROR
        assert result.retry_count == 2
        assert len(client.calls) == 3
        assert result.completion is None

    @pytest.mark.unit
    def test_timeout_not_retried(self, delays):
        """A timeout returns at once with no retry."""
        client = FakeOpenAIClient(TimeoutError("Request timeout"))
        result = request_completion(client, {}, config=self.CONFIG, sleep=delays.append)

        assert result.outcome == RequestOutcome.TIMEOUT
        assert result.retry_count == 0
        assert len(client.calls) == 1
        assert delays == []

    @pytest.mark.unit
    def test_sdk_timeout_not_retried(self, delays):
        """An httpx timeout from the SDK transport is a timeout too."""
        client = FakeOpenAIClient(httpx.ConnectTimeout("connect"))
        result = request_completion(client, {}, config=self.CONFIG, sleep=delays.append)
        assert result.outcome == RequestOutcome.TIMEOUT
        assert len(client.calls) == 1

    @pytest.mark.unit
    def test_per_attempt_timeout(self, delays):
        """A call slower than the timeout is abandoned as a timeout."""
        client = FakeOpenAIClient(slow_call(1.0, make_completion("{}")))
        config = RetryConfig(max_retries=2, base_delay=0.0, timeout=0.05)
        result = request_completion(client, {}, config=config, sleep=delays.append)

        assert result.outcome == RequestOutcome.TIMEOUT
        assert result.retry_count == 0
        assert len(client.calls) == 1

    @pytest.mark.unit
    def test_non_retryable_error(self, delays):
        """A 400 fails without retry."""
        client = FakeOpenAIClient(FakeStatusError(400, "Bad Request"))
        result = request_completion(client, {}, config=self.CONFIG, sleep=delays.append)

        assert result.outcome == RequestOutcome.ERROR
        assert result.retry_count == 0
        assert len(client.calls) == 1
        assert str(result.error) == "Bad Request"

    @pytest.mark.unit
    def test_connection_reset_exhausted_is_timeout(self, delays):
        """Exhausted connection resets report as timeout."""
        client = FakeOpenAIClient(Exception("read ECONNRESET"))
        result = request_completion(client, {}, config=self.CONFIG, sleep=delays.append)

        assert result.outcome == RequestOutcome.TIMEOUT
        assert result.retry_count == 2
        assert len(client.calls) == 3

    @pytest.mark.unit
    def test_gateway_timeout_is_retried(self, delays):
        """504 is a status error: retried, then reported as error."""
        client = FakeOpenAIClient(FakeStatusError(504, "Gateway Timeout"), make_completion("{}"))
        result = request_completion(client, {}, config=self.CONFIG, sleep=delays.append)
        assert result.outcome == RequestOutcome.SUCCESS
        assert result.retry_count == 1

    @pytest.mark.unit
    def test_params_forwarded(self, delays):
        """Parameters reach the client unchanged."""
        client = FakeOpenAIClient(make_completion("{}"))
        params = {"model": "gpt-5-nano", "messages": [{"role": "user", "content": "hi"}]}
        request_completion(client, params, config=self.CONFIG, sleep=delays.append)
        assert client.calls == [params]


class TestExtractRequestId:
    """Tests for request id extraction."""

    @pytest.mark.unit
    def test_sdk_attribute_first(self):
        """The SDK request id wins over headers."""
        completion = make_completion("{}", request_id="req_sdk", headers={"x-request-id": "hdr"})
        assert extract_request_id(completion) == "req_sdk"

    @pytest.mark.unit
    def test_headers(self):
        """openai-request-id is preferred over x-request-id."""
        completion = make_completion(
            "{}", headers={"x-request-id": "x", "openai-request-id": "openai"}
        )
        assert extract_request_id(completion) == "openai"
        assert extract_request_id(make_completion("{}", headers={"x-request-id": "x"})) == "x"

    @pytest.mark.unit
    def test_embedded_id(self):
        """The completion id is the last resort."""
        assert extract_request_id(make_completion("{}")) == "chatcmpl-fake"
        assert extract_request_id({"id": "from-dict"}) == "from-dict"

    @pytest.mark.unit
    def test_absent(self):
        """Missing ids give None."""
        assert extract_request_id(make_completion("{}", completion_id=None)) is None
        assert extract_request_id(None) is None


# =============================================================================
# DesignSpecGenerator Tests
# =============================================================================


class TestGeneratorTypes:
    """Tests for generator dataclasses."""

    @pytest.mark.unit
    def test_default_config(self):
        """Defaults send the fixed assistant prompt."""
        config = GeneratorConfig()
        assert config.assistant_prompt == ASSISTANT_PROMPT
        assert config.temperature is None
        assert config.paths_sample_size == 3

    @pytest.mark.unit
    def test_default_stats(self):
        """Test default statistics values."""
        stats = GenerationStats()
        assert stats.total_tokens == 0
        assert stats.retry_count == 0
        assert stats.budget_alerts == []

    @pytest.mark.unit
    def test_mock_spec(self):
        """The dry-run spec is unrepaired."""
        spec = build_mock_spec()
        assert spec.page == "Mock Page"
        assert spec.frame.width == 400
        assert spec.frame.height is None
        assert [n.type for n in spec.nodes] == ["text", "container", "button"]


class TestDryRun:
    """Tests for dry-run generation."""

    @pytest.mark.unit
    def test_login_form_dry_run(self, no_api_key):
        """Dry runs need no key and still pass through repair."""
        output = DesignSpecGenerator().generate("Create a login form", dry_run=True)
        spec = output.spec

        assert spec.page == "Mock Page"
        assert spec.frame.height == 800
        assert len(spec.nodes) == 3
        text, container, button = spec.nodes
        assert text.color == "#111827"
        assert container.background == "#F9FAFB"
        assert container.border_radius == 12
        assert button.background == "#2563EB"
        assert output.warnings == []
        assert output.stats.dry_run is True
        assert output.stats.model == "mock"
        assert output.prompt_context is None

    @pytest.mark.unit
    def test_dry_run_skips_backend(self, mock_llm_backend):
        """An injected backend is not called in dry-run mode."""
        DesignSpecGenerator(backend=mock_llm_backend).generate("x", dry_run=True)
        assert mock_llm_backend.calls == []

    @pytest.mark.unit
    def test_dry_run_uses_context(self):
        """The request context drives the defaults."""
        request = {
            "prompt": "Create a login form",
            "generationContext": {
                "targetLayout": "tablet",
                "uiStrictness": "balanced",
                "uxPatterns": {"groupElements": True, "formContainer": False, "helperText": True},
            },
        }
        output = DesignSpecGenerator().generate(request, dry_run=True)
        assert output.spec.frame.height == 900

    @pytest.mark.unit
    def test_invalid_request(self):
        """Malformed requests are rejected before generation."""
        with pytest.raises(RequestValidationError):
            DesignSpecGenerator().generate({"prompt": ""}, dry_run=True)


class TestLiveGeneration:
    """Tests for generation with mocked backends."""

    @pytest.fixture
    def loader(self, mock_rules_dir):
        return RuleLoader(rules_dir=mock_rules_dir, cache=RuleCache())

    @pytest.mark.unit
    def test_generate_success(self, mock_llm_backend, loader):
        """Backend content is validated, repaired and analyzed."""
        generator = DesignSpecGenerator(backend=mock_llm_backend, loader=loader)
        output = generator.generate("Create a login form")

        assert output.spec.page == "Login"
        assert output.spec.frame.height == 800
        assert output.spec.nodes[1].children[2].content == "Label"
        assert output.spec.nodes[2].background == "#2563EB"
        assert output.warnings == []
        assert output.analysis.nodes_count == 7
        assert output.stats.backend_request_id == "req-mock-1"
        assert output.stats.total_tokens == 1900
        assert output.stats.model == "mock-model-v1"
        assert output.prompt_context.pattern_names == ["auth-form"]

    @pytest.mark.unit
    def test_backend_receives_prompts(self, mock_llm_backend, loader):
        """System directive and assistant prompt are passed to the backend."""
        DesignSpecGenerator(backend=mock_llm_backend, loader=loader).generate("Create a login form")

        call = mock_llm_backend.calls[0]
        assert call["prompt"] == "Create a login form"
        assert "=== GLOBAL RULES ===" in call["system_prompt"]
        assert "- Auth rule 1" in call["system_prompt"]
        assert call["config"].assistant_prompt == ASSISTANT_PROMPT
        assert call["config"].json_mode is True

    @pytest.mark.unit
    def test_hashes(self, mock_llm_backend, loader):
        """Prompt and spec hashes identify the request in logs."""
        output = DesignSpecGenerator(backend=mock_llm_backend, loader=loader).generate(
            "Create a login form"
        )
        assert output.stats.prompt_hash == compute_hash("Create a login form")
        assert output.stats.spec_hash == compute_object_hash(serialize_design_spec(output.spec))

    @pytest.mark.unit
    def test_empty_response(self, loader):
        """Missing content raises EmptyResponseError."""
        generator = DesignSpecGenerator(backend=MockLLMBackend(content=""), loader=loader)
        with pytest.raises(EmptyResponseError, match="Empty response"):
            generator.generate("x")

    @pytest.mark.unit
    def test_invalid_json(self, loader):
        """Non-JSON content raises InvalidJSONError."""
        generator = DesignSpecGenerator(backend=MockLLMBackend(content="not json"), loader=loader)
        with pytest.raises(InvalidJSONError, match="Invalid JSON"):
            generator.generate("x")

    @pytest.mark.unit
    def test_schema_failure(self, loader):
        """JSON that is not a DesignSpec raises SpecValidationError."""
        generator = DesignSpecGenerator(
            backend=MockLLMBackend(content='{"page": ""}'), loader=loader
        )
        with pytest.raises(SpecValidationError, match="Invalid DesignSpec") as exc_info:
            generator.generate("x")
        assert {issue.path for issue in exc_info.value.issues} >= {"page", "frame", "nodes"}

    @pytest.mark.unit
    def test_upstream_failure_logged(self, loader, caplog):
        """Backend failures propagate and are logged with the request id."""
        backend = MockLLMBackend(error=UpstreamTimeoutError(retry_count=0))
        generator = DesignSpecGenerator(backend=backend, loader=loader)

        with caplog.at_level(logging.INFO), pytest.raises(UpstreamTimeoutError):
            generator.generate("Create a login form")

        failed = [r for r in caplog.records if "generation.failed" in r.getMessage()]
        assert len(failed) == 1
        assert failed[0].getMessage().startswith("[")

    @pytest.mark.unit
    def test_budget_alerts(self, loader):
        """Exceeded budgets are recorded on the stats."""
        backend = MockLLMBackend(
            usage={"prompt_tokens": 100, "completion_tokens": 900, "total_tokens": 1000},
            duration_ms=9000.0,
        )
        config = GeneratorConfig(
            budget_limits=BudgetLimits(max_tokens=500, max_duration_ms=8000, max_completion_ratio=3.0)
        )
        output = DesignSpecGenerator(backend=backend, loader=loader, config=config).generate("x")
        assert output.stats.budget_alerts == [
            "budget.alert.tokens",
            "budget.alert.duration",
            "budget.alert.ratio",
        ]

    @pytest.mark.unit
    def test_payloads_hidden_by_default(self, mock_llm_backend, loader, caplog):
        """Raw prompt text stays out of logs unless enabled."""
        generator = DesignSpecGenerator(
            backend=mock_llm_backend, loader=loader, config=GeneratorConfig(debug_payloads=False)
        )
        with caplog.at_level(logging.DEBUG):
            generator.generate("Secret product idea")
        assert "Secret product idea" not in caplog.text

    @pytest.mark.unit
    def test_payloads_logged_when_enabled(self, mock_llm_backend, loader, caplog):
        """Debug payload logging includes the backend content."""
        generator = DesignSpecGenerator(
            backend=mock_llm_backend, loader=loader, config=GeneratorConfig(debug_payloads=True)
        )
        with caplog.at_level(logging.DEBUG):
            generator.generate("Create a login form")
        assert "Received content" in caplog.text

    @pytest.mark.unit
    def test_output_to_dict(self, mock_llm_backend, loader):
        """The transport form carries the wire-format spec."""
        output = DesignSpecGenerator(backend=mock_llm_backend, loader=loader).generate("login")
        data = output.to_dict()
        assert data["requestId"] == output.request_id
        assert data["spec"]["frame"]["height"] == 800
        assert data["warningsSummary"]["warnings_count"] == 0

    @pytest.mark.unit
    def test_openai_backend_end_to_end(self, loader):
        """The OpenAI backend with a fake client retries and succeeds."""
        client = FakeOpenAIClient(
            FakeStatusError(503),
            make_completion(json.dumps(MOCK_LOGIN_SPEC), request_id="req_live"),
        )
        backend = OpenAIBackend(
            api_key="test-key",
            model="gpt-5-nano",
            client=client,
            retry_config=RetryConfig(max_retries=2, base_delay=0.0, timeout=5.0),
        )
        output = DesignSpecGenerator(backend=backend, loader=loader).generate("Create a login form")

        assert output.stats.retry_count == 1
        assert output.stats.backend_request_id == "req_live"
        assert output.spec.page == "Login"
        roles = [m["role"] for m in client.calls[-1]["messages"]]
        assert roles == ["system", "assistant", "user"]
        assert "temperature" not in client.calls[-1]
