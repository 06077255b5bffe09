"""Generation backend implementations.

Provides the abstract backend interface, the OpenAI implementation and
the exception hierarchy for backend failures.
"""

from .base import (
    AuthenticationError,
    EmptyResponseError,
    GenerationConfig,
    GenerationResult,
    InvalidJSONError,
    InvalidResponseError,
    LLMBackend,
    LLMError,
    UpstreamError,
    UpstreamTimeoutError,
)
from .factory import SUPPORTED_PROVIDERS, create_llm_backend

__all__ = [
    # Base classes and types
    "LLMBackend",
    "GenerationConfig",
    "GenerationResult",
    # Exceptions
    "LLMError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "InvalidResponseError",
    "EmptyResponseError",
    "InvalidJSONError",
    "AuthenticationError",
    # Factory
    "SUPPORTED_PROVIDERS",
    "create_llm_backend",
]
