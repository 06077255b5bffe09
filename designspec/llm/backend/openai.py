"""OpenAI chat-completions backend implementation.

Retries and timeouts are handled by ``request_completion``; the SDK's own
retry loop is disabled.
"""

import logging
import time
from collections.abc import Iterable
from typing import Any

from designspec.config import EnvVar, get_environment, get_no_temperature_models
from designspec.prompt import build_messages

from ..generator.retry import RequestOutcome, RetryConfig, request_completion
from .base import (
    AuthenticationError,
    GenerationConfig,
    GenerationResult,
    LLMBackend,
    UpstreamError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)


def supports_temperature(model: str, excluded: Iterable[str] | None = None) -> bool:
    """Whether a model accepts a custom temperature.

    Args:
        model: Model identifier.
        excluded: Models that reject temperature. Defaults to
            OPENAI_NO_TEMPERATURE_MODELS.
    """
    excluded = get_no_temperature_models() if excluded is None else frozenset(excluded)
    return model not in excluded


def _usage_dict(usage: Any) -> dict[str, int]:
    if usage is None:
        return {}
    keys = ("prompt_tokens", "completion_tokens", "total_tokens")
    if isinstance(usage, dict):
        return {k: int(usage[k]) for k in keys if usage.get(k) is not None}
    return {k: int(getattr(usage, k)) for k in keys if getattr(usage, k, None) is not None}


class OpenAIBackend(LLMBackend):
    """OpenAI chat-completions backend.

    Environment:
        OPENAI_API_KEY: API key (required if not passed to constructor).
        OPENAI_MODEL: Model identifier (default gpt-5-nano).
        OPENAI_BASE_URL: Optional custom endpoint.
        OPENAI_TEMPERATURE: Temperature for models that accept one.

    Example:
        >>> backend = OpenAIBackend()
        >>> result = backend.generate("Create a login form", system_prompt=directive)
        >>> print(result.backend_request_id)
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        retry_config: RetryConfig | None = None,
        temperature: float | None = None,
        no_temperature_models: Iterable[str] | None = None,
        client: Any = None,
    ):
        """Initialize OpenAI backend.

        Args:
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
            model: Model name. Falls back to OPENAI_MODEL.
            base_url: Optional custom API endpoint.
            retry_config: Timeout and retry policy. Defaults to environment.
            temperature: Default temperature. Falls back to OPENAI_TEMPERATURE.
            no_temperature_models: Models that reject a custom temperature.
            client: Pre-built OpenAI-compatible client (skips SDK setup).

        Raises:
            AuthenticationError: If no API key and no client are available.
        """
        self._api_key = api_key or get_environment(EnvVar.OPENAI_API_KEY)
        if not self._api_key and client is None:
            raise AuthenticationError(
                "OpenAI API key required. Set OPENAI_API_KEY environment "
                "variable or pass api_key parameter."
            )

        self._model = model or get_environment(EnvVar.OPENAI_MODEL)
        self._base_url = base_url or get_environment(EnvVar.OPENAI_BASE_URL)
        self._retry_config = retry_config or RetryConfig.from_env()
        self._temperature = (
            temperature
            if temperature is not None
            else get_environment(EnvVar.OPENAI_TEMPERATURE)
        )
        self._no_temperature_models = (
            frozenset(no_temperature_models)
            if no_temperature_models is not None
            else get_no_temperature_models()
        )
        self._client: Any = client

    def _get_client(self) -> Any:
        """Lazily initialize OpenAI client.

        Returns:
            OpenAI client instance.
        """
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._retry_config.timeout,
                max_retries=0,
            )
        return self._client

    @property
    def model_name(self) -> str:
        """Get the model identifier."""
        return self._model

    @property
    def provider(self) -> str:
        """Get the provider identifier."""
        return "openai"

    @property
    def retry_config(self) -> RetryConfig:
        return self._retry_config

    def build_params(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> dict[str, Any]:
        """Build chat-completion parameters for a request."""
        config = config or GenerationConfig()

        params: dict[str, Any] = {
            "model": self._model,
            "messages": build_messages(system_prompt, prompt, config.assistant_prompt),
        }

        if config.json_mode:
            params["response_format"] = {"type": "json_object"}

        if supports_temperature(self._model, self._no_temperature_models):
            params["temperature"] = (
                config.temperature if config.temperature is not None else self._temperature
            )

        return params

    def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        """Generate text using the OpenAI API.

        Args:
            prompt: User prompt text.
            system_prompt: Optional system directive.
            config: Generation configuration.

        Returns:
            GenerationResult with content and request metadata.

        Raises:
            UpstreamTimeoutError: If the request timed out.
            UpstreamError: If the request failed.
        """
        params = self.build_params(prompt, system_prompt=system_prompt, config=config)

        started = time.perf_counter()
        result = request_completion(self._get_client(), params, config=self._retry_config)
        duration_ms = (time.perf_counter() - started) * 1000

        if result.outcome == RequestOutcome.TIMEOUT:
            raise UpstreamTimeoutError(retry_count=result.retry_count)
        if result.outcome == RequestOutcome.ERROR:
            raise UpstreamError(
                f"Completion request failed: {result.error}",
                outcome=RequestOutcome.ERROR.value,
                retry_count=result.retry_count,
            )

        completion = result.completion
        choices = getattr(completion, "choices", None) or []
        choice = choices[0] if choices else None
        message = getattr(choice, "message", None)

        return GenerationResult(
            content=getattr(message, "content", None) or "",
            finish_reason=getattr(choice, "finish_reason", None) or "unknown",
            usage=_usage_dict(getattr(completion, "usage", None)),
            model=getattr(completion, "model", None) or self._model,
            retry_count=result.retry_count,
            backend_request_id=result.backend_request_id,
            outcome=result.outcome.value,
            duration_ms=duration_ms,
            raw_response=completion,
        )


__all__ = ["OpenAIBackend", "supports_temperature"]
