"""DesignSpec generation orchestrator.

Provides the DesignSpecGenerator class that integrates PromptBuilder, the
generation backend, validation and repair, plus the retrying completion
client used by backends.
"""

from .lib import (
    DesignSpecGenerator,
    GenerationOutput,
    GenerationStats,
    GeneratorConfig,
    build_mock_spec,
)
from .retry import (
    RequestOutcome,
    RetryConfig,
    RetryResult,
    RetryStrategy,
    extract_request_id,
    request_completion,
)

__all__ = [
    "DesignSpecGenerator",
    "GeneratorConfig",
    "GenerationStats",
    "GenerationOutput",
    "build_mock_spec",
    "RequestOutcome",
    "RetryConfig",
    "RetryResult",
    "RetryStrategy",
    "extract_request_id",
    "request_completion",
]
