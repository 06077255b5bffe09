"""Centralized configuration management for designspec.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from designspec.config import EnvVar, get_environment
    >>>
    >>> # Get any environment variable with automatic type conversion
    >>> model = get_environment(EnvVar.OPENAI_MODEL)  # Returns str: "gpt-5-nano"
    >>> api_key = get_environment(EnvVar.OPENAI_API_KEY)  # Returns str | None
    >>>
    >>> # List available variables by category
    >>> for var in list_environment_variables("budget"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    llm: Backend API key, model, temperature policy
    retry: Per-attempt timeout and exponential backoff
    rules: Rule document directory override
    logging: Log level and raw payload logging
    budget: Token/duration/ratio alert thresholds
    service: MCP server host and port
"""

from .lib import (
    # Core types
    EnvConfig,
    EnvVar,
    # Main interface
    get_environment,
    get_environment_info,
    get_no_temperature_models,
    get_retry_settings,
    get_rules_dir,
    # Introspection
    list_environment_variables,
)

__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Convenience functions
    "get_rules_dir",
    "get_no_temperature_models",
    "get_retry_settings",
    # Introspection
    "list_environment_variables",
]
