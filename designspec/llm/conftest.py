"""LLM module test fixtures.

Fakes stand in for the OpenAI SDK so no test touches the network.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from designspec.llm.backend.base import GenerationConfig, GenerationResult


# =============================================================================
# Fake OpenAI SDK objects
# =============================================================================


class FakeStatusError(Exception):
    """API error carrying an HTTP status, like ``openai.APIStatusError``."""

    def __init__(self, status_code: int, message: str = "Service Unavailable"):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class FakeMessage:
    content: str | None


@dataclass
class FakeChoice:
    message: FakeMessage
    finish_reason: str = "stop"


@dataclass
class FakeUsage:
    prompt_tokens: int = 1200
    completion_tokens: int = 300
    total_tokens: int = 1500


@dataclass
class FakeResponse:
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class FakeCompletion:
    """Minimal ``ChatCompletion`` lookalike."""

    choices: list[FakeChoice]
    usage: FakeUsage | None = field(default_factory=FakeUsage)
    model: str = "gpt-5-nano"
    id: str | None = "chatcmpl-fake"
    _request_id: str | None = None
    _response: FakeResponse | None = None


def make_completion(
    content: str | None,
    *,
    request_id: str | None = None,
    headers: dict[str, str] | None = None,
    completion_id: str | None = "chatcmpl-fake",
    usage: FakeUsage | None = None,
) -> FakeCompletion:
    """Build a completion with one choice."""
    return FakeCompletion(
        choices=[FakeChoice(message=FakeMessage(content=content))],
        usage=usage or FakeUsage(),
        id=completion_id,
        _request_id=request_id,
        _response=FakeResponse(headers=headers) if headers is not None else None,
    )


class FakeCompletions:
    """Scripted ``client.chat.completions``.

    Each call consumes the next outcome; the last one repeats. An outcome is
    an exception to raise, a callable to invoke, or a completion to return.
    """

    def __init__(self, outcomes: list[Any]):
        self._outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    def create(self, **params: Any) -> Any:
        self.calls.append(params)
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return outcome()
        return outcome


class FakeChat:
    def __init__(self, completions: FakeCompletions):
        self.completions = completions


class FakeOpenAIClient:
    """Stand-in for ``openai.OpenAI`` with scripted outcomes."""

    def __init__(self, *outcomes: Any):
        self.chat = FakeChat(FakeCompletions(list(outcomes)))

    @property
    def calls(self) -> list[dict[str, Any]]:
        return self.chat.completions.calls


def slow_call(seconds: float, result: Any = None):
    """Outcome that blocks longer than a short timeout."""

    def _call():
        time.sleep(seconds)
        return result

    return _call


# =============================================================================
# Mock LLM Backend
# =============================================================================

MOCK_LOGIN_SPEC: dict[str, Any] = {
    "page": "Login",
    "frame": {"name": "Login", "width": 390, "layout": "vertical", "gap": 24, "padding": 24},
    "nodes": [
        {"type": "text", "content": "Welcome back", "fontSize": 24},
        {
            "type": "container",
            "layout": "vertical",
            "gap": 12,
            "padding": 24,
            "children": [
                {"type": "text", "content": "Email", "fontSize": 14},
                {
                    "type": "container",
                    "layout": "horizontal",
                    "gap": 0,
                    "padding": 12,
                    "border": {"color": "#E5E7EB", "width": 1},
                    "children": [{"type": "text", "content": "Enter your email"}],
                },
                {"type": "text", "content": "  "},
            ],
        },
        {"type": "button", "label": "Log In"},
    ],
}


class MockLLMBackend:
    """Mock generation backend for testing without API keys.

    Returns a fixed content string (a login DesignSpec by default) and
    records every call.
    """

    def __init__(
        self,
        content: str | None = None,
        *,
        usage: dict[str, int] | None = None,
        duration_ms: float = 1200.0,
        error: Exception | None = None,
    ):
        self.content = json.dumps(MOCK_LOGIN_SPEC) if content is None else content
        self.usage = usage or {"prompt_tokens": 1500, "completion_tokens": 400, "total_tokens": 1900}
        self.duration_ms = duration_ms
        self.error = error
        self.calls: list[dict[str, Any]] = []

    @property
    def model_name(self) -> str:
        """Return mock model name."""
        return "mock-model-v1"

    @property
    def provider(self) -> str:
        """Return mock provider name."""
        return "mock"

    @property
    def name(self) -> str:
        return f"{self.provider}:{self.model_name}"

    def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        """Return the configured content, or raise the configured error."""
        from designspec.llm.backend.base import GenerationResult

        self.calls.append({"prompt": prompt, "system_prompt": system_prompt, "config": config})
        if self.error is not None:
            raise self.error

        return GenerationResult(
            content=self.content,
            finish_reason="stop",
            usage=dict(self.usage),
            model=self.model_name,
            retry_count=0,
            backend_request_id="req-mock-1",
            duration_ms=self.duration_ms,
        )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_llm_backend() -> MockLLMBackend:
    """Create a mock backend returning the login DesignSpec.

    Returns:
        MockLLMBackend instance.
    """
    return MockLLMBackend()


@pytest.fixture
def mock_api_key() -> str:
    """Provide a mock API key for testing.

    Returns:
        A test API key string.
    """
    return "test-api-key-12345"
