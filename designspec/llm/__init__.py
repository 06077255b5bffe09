"""LLM integration layer for DesignSpec generation.

Main components:
- DesignSpecGenerator: Orchestrates prompt assembly, backend calls,
  validation and repair
- LLMBackend: Abstract interface for generation backends
- create_llm_backend: Factory function for creating backends
- request_completion: Timeout and retry handling for completion calls

Example:
    >>> from designspec.llm import DesignSpecGenerator
    >>> generator = DesignSpecGenerator()
    >>> output = generator.generate("Create a login form")
    >>> print(output.spec.page)

    >>> # Without an API key
    >>> output = generator.generate("Create a login form", dry_run=True)
"""

from .backend import (
    SUPPORTED_PROVIDERS,
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
    create_llm_backend,
)
from .generator import (
    DesignSpecGenerator,
    GenerationOutput,
    GenerationStats,
    GeneratorConfig,
    RequestOutcome,
    RetryConfig,
    RetryResult,
    RetryStrategy,
    build_mock_spec,
    request_completion,
)

__all__ = [
    # Main API
    "DesignSpecGenerator",
    "create_llm_backend",
    "build_mock_spec",
    # Generator types
    "GeneratorConfig",
    "GenerationStats",
    "GenerationOutput",
    "RequestOutcome",
    "RetryConfig",
    "RetryResult",
    "RetryStrategy",
    "request_completion",
    # Backend types
    "LLMBackend",
    "GenerationConfig",
    "GenerationResult",
    "SUPPORTED_PROVIDERS",
    # Exceptions
    "LLMError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "InvalidResponseError",
    "EmptyResponseError",
    "InvalidJSONError",
    "AuthenticationError",
]
