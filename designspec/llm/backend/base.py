"""Abstract base class for generation backends.

Defines the interface that backend implementations must follow and the
exception hierarchy raised for backend failures.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class GenerationConfig:
    """Configuration for one completion request.

    Attributes:
        temperature: Sampling temperature. None uses the backend default;
            dropped for models that reject a custom temperature.
        json_mode: Whether to request a JSON-object-only response.
        assistant_prompt: Fixed assistant message placed between the system
            directive and the user prompt.
    """

    temperature: float | None = None
    json_mode: bool = True
    assistant_prompt: str | None = None


@dataclass
class GenerationResult:
    """Result from a completion request.

    Attributes:
        content: Generated text content (may be empty).
        finish_reason: Why generation stopped ('stop', 'length', ...).
        usage: Token usage dict (prompt_tokens, completion_tokens, total_tokens).
        model: Model identifier that was used.
        retry_count: Retries performed before the successful attempt.
        backend_request_id: Backend-assigned request id, when available.
        outcome: Request outcome ('success' for returned results).
        duration_ms: Wall time of the request including retries.
        raw_response: Provider-specific raw response for debugging.
    """

    content: str
    finish_reason: str
    usage: dict[str, int]
    model: str
    retry_count: int = 0
    backend_request_id: str | None = None
    outcome: str = "success"
    duration_ms: float = 0.0
    raw_response: Any = field(default=None, repr=False)


class LLMBackend(ABC):
    """Abstract interface for DesignSpec generation backends.

    Example:
        >>> backend = OpenAIBackend(model="gpt-5-nano")
        >>> result = backend.generate("Create a login form", system_prompt=directive)
        >>> print(result.content)
    """

    @abstractmethod
    def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        """Generate text from a prompt.

        Args:
            prompt: User prompt text.
            system_prompt: Optional system directive.
            config: Generation configuration options.

        Returns:
            GenerationResult with generated content and metadata.

        Raises:
            UpstreamTimeoutError: If the request timed out.
            UpstreamError: If the request failed after retries.
        """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model identifier."""

    @property
    @abstractmethod
    def provider(self) -> str:
        """Get the provider identifier."""

    @property
    def name(self) -> str:
        """Get backend identifier for logging.

        Returns:
            String in format 'provider:model'.
        """
        return f"{self.provider}:{self.model_name}"


class LLMError(Exception):
    """Base exception for generation backend errors."""


class UpstreamError(LLMError):
    """The backend call failed (non-retryable error or retries exhausted).

    Attributes:
        outcome: Classified outcome ('timeout' or 'error').
        retry_count: Retries performed before giving up.
    """

    def __init__(self, message: str, outcome: str = "error", retry_count: int = 0):
        super().__init__(message)
        self.outcome = outcome
        self.retry_count = retry_count


class UpstreamTimeoutError(UpstreamError):
    """The backend call timed out."""

    def __init__(self, message: str = "Request timeout", retry_count: int = 0):
        super().__init__(message, outcome="timeout", retry_count=retry_count)


class InvalidResponseError(LLMError):
    """Raised when the response content cannot be used."""


class EmptyResponseError(InvalidResponseError):
    """The backend returned no content."""


class InvalidJSONError(InvalidResponseError):
    """The backend content is not valid JSON."""


class AuthenticationError(LLMError):
    """Raised when API authentication fails (invalid or missing key)."""


__all__ = [
    "LLMBackend",
    "GenerationConfig",
    "GenerationResult",
    "LLMError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "InvalidResponseError",
    "EmptyResponseError",
    "InvalidJSONError",
    "AuthenticationError",
]
