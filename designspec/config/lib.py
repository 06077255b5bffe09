"""Centralized environment configuration management for designspec.

Provides a unified interface for all environment variables with:
- Single `get_environment()` function for all configuration
- Type-safe enum with metadata (default, type, description)
- Consistent resolution: override > environment > default

Example:
    >>> from designspec.config import EnvVar, get_environment
    >>>
    >>> # Get values with automatic type conversion
    >>> timeout_ms = get_environment(EnvVar.OPENAI_TIMEOUT_MS)  # Returns int
    >>> api_key = get_environment(EnvVar.OPENAI_API_KEY)  # Returns str | None
    >>>
    >>> # Override at runtime
    >>> retries = get_environment(EnvVar.OPENAI_RETRY_MAX, override=5)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "OPENAI_TIMEOUT_MS").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str, int, float, bool,
            Path, list).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by designspec.

    Each member contains an EnvConfig with name, default, type, and description.
    Use with `get_environment()` for type-safe access.

    Categories:
        - llm: Generation backend credentials and model selection
        - retry: Timeout and retry policy for backend calls
        - rules: Rule document location
        - logging: Log level and payload logging
        - budget: Budget alert thresholds
        - service: MCP server bind address and port
    """

    # -------------------------------------------------------------------------
    # Generation Backend
    # -------------------------------------------------------------------------
    OPENAI_API_KEY = EnvConfig(
        name="OPENAI_API_KEY",
        default=None,
        var_type=str,
        description="OpenAI API key for DesignSpec generation",
        category="llm",
    )
    OPENAI_MODEL = EnvConfig(
        name="OPENAI_MODEL",
        default="gpt-5-nano",
        var_type=str,
        description="Model identifier used for every generation request",
        category="llm",
    )
    OPENAI_BASE_URL = EnvConfig(
        name="OPENAI_BASE_URL",
        default=None,
        var_type=str,
        description="Optional custom OpenAI-compatible endpoint",
        category="llm",
    )
    OPENAI_TEMPERATURE = EnvConfig(
        name="OPENAI_TEMPERATURE",
        default=0.3,
        var_type=float,
        description="Sampling temperature (sent only to models that accept it)",
        category="llm",
    )
    OPENAI_NO_TEMPERATURE_MODELS = EnvConfig(
        name="OPENAI_NO_TEMPERATURE_MODELS",
        default=[
            "gpt-5-nano",
            "gpt-5-mini",
            "gpt-5",
            "o1",
            "o1-mini",
            "o3",
            "o3-mini",
            "o4-mini",
        ],
        var_type=list,
        description="Comma-separated models that reject a custom temperature",
        category="llm",
    )

    # -------------------------------------------------------------------------
    # Retry Policy
    # -------------------------------------------------------------------------
    OPENAI_TIMEOUT_MS = EnvConfig(
        name="OPENAI_TIMEOUT_MS",
        default=30000,
        var_type=int,
        description="Per-attempt timeout for backend calls (milliseconds)",
        category="retry",
    )
    OPENAI_RETRY_MAX = EnvConfig(
        name="OPENAI_RETRY_MAX",
        default=2,
        var_type=int,
        description="Maximum retries for transient backend failures",
        category="retry",
    )
    OPENAI_RETRY_BASE_MS = EnvConfig(
        name="OPENAI_RETRY_BASE_MS",
        default=1000,
        var_type=int,
        description="Base delay for exponential backoff (milliseconds)",
        category="retry",
    )

    # -------------------------------------------------------------------------
    # Rule Documents
    # -------------------------------------------------------------------------
    SPEC_RULES_DIR = EnvConfig(
        name="SPEC_RULES_DIR",
        default=None,  # Discovered from the package location
        var_type=Path,
        description="Directory containing base/layout/devices rule documents",
        category="rules",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    LOG_LEVEL = EnvConfig(
        name="LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        category="logging",
    )
    LOG_DEBUG_PAYLOADS = EnvConfig(
        name="LOG_DEBUG_PAYLOADS",
        default=False,
        var_type=bool,
        description="Log raw prompts and backend content (otherwise hashes only)",
        category="logging",
    )

    # -------------------------------------------------------------------------
    # Budget Alerts
    # -------------------------------------------------------------------------
    BUDGET_MAX_TOKENS = EnvConfig(
        name="BUDGET_MAX_TOKENS",
        default=8000,
        var_type=int,
        description="Alert when a completion uses more tokens than this",
        category="budget",
    )
    BUDGET_MAX_DURATION_MS = EnvConfig(
        name="BUDGET_MAX_DURATION_MS",
        default=8000,
        var_type=int,
        description="Alert when a completion takes longer than this",
        category="budget",
    )
    BUDGET_MAX_COMPLETION_RATIO = EnvConfig(
        name="BUDGET_MAX_COMPLETION_RATIO",
        default=3.0,
        var_type=float,
        description="Alert when completion/prompt token ratio exceeds this",
        category="budget",
    )

    # -------------------------------------------------------------------------
    # Service Configuration
    # -------------------------------------------------------------------------
    MCP_HOST = EnvConfig(
        name="MCP_HOST",
        default="0.0.0.0",
        var_type=str,
        description="MCP server bind address",
        category="service",
    )
    MCP_PORT = EnvConfig(
        name="MCP_PORT",
        default=18080,
        var_type=int,
        description="MCP server port (avoids 8080)",
        category="service",
    )


# =============================================================================
# Type Conversion Helpers
# =============================================================================


def _parse_bool(value: str) -> bool | None:
    """Parse string to boolean.

    Recognizes: true/false, 1/0, yes/no (case-insensitive).
    Returns None for unrecognized values.
    """
    normalized = value.lower().strip()
    if normalized in ("true", "1", "yes"):
        return True
    if normalized in ("false", "0", "no"):
        return False
    return None


def _parse_list(value: str) -> list[str]:
    """Split a comma-separated value, dropping blanks."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert string value to target type.

    Args:
        value: Raw string value from environment (or None).
        var_type: Target Python type.
        default: Default value if conversion fails or value is None.

    Returns:
        Converted value or default.
    """
    if value is None:
        return default

    if var_type is str:
        return value

    if var_type is int:
        try:
            return int(value)
        except ValueError:
            return default

    if var_type is float:
        try:
            return float(value)
        except ValueError:
            return default

    if var_type is bool:
        result = _parse_bool(value)
        return result if result is not None else default

    if var_type is Path:
        return Path(value)

    if var_type is list:
        return _parse_list(value)

    # Unknown type, return as-is
    return value


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: bool) -> bool: ...
@overload
def get_environment(env_var: EnvVar, override: Path) -> Path: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Get environment variable value with type conversion.

    Resolution priority:
        1. Explicit override parameter (highest)
        2. Environment variable value
        3. Default from EnvConfig (lowest)

    Args:
        env_var: Environment variable enum member.
        override: Optional override value (bypasses env lookup).

    Returns:
        Value converted to the appropriate type.

    Example:
        >>> get_environment(EnvVar.OPENAI_RETRY_MAX)
        2
        >>> get_environment(EnvVar.OPENAI_RETRY_MAX, override=4)
        4
    """
    config: EnvConfig = env_var.value

    # Override takes highest priority
    if override is not None:
        return override

    raw_value = os.environ.get(config.name)
    return _convert_value(raw_value, config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Get metadata for an environment variable.

    Args:
        env_var: Environment variable enum member.

    Returns:
        EnvConfig with name, default, type, and description.
    """
    return env_var.value


# =============================================================================
# Convenience Functions
# =============================================================================


def get_rules_dir(override: Path | str | None = None) -> Path | None:
    """Get the explicitly configured rule directory.

    Resolution: override > SPEC_RULES_DIR > None (caller discovers).
    """
    if override is not None:
        return Path(override)

    return get_environment(EnvVar.SPEC_RULES_DIR)


def get_no_temperature_models() -> frozenset[str]:
    """Get the models that must not receive a temperature parameter."""
    return frozenset(get_environment(EnvVar.OPENAI_NO_TEMPERATURE_MODELS))


def get_retry_settings() -> dict[str, float | int]:
    """Get the backend retry policy in seconds.

    Returns:
        Dict with timeout, base_delay (seconds) and max_retries.
    """
    return {
        "timeout": get_environment(EnvVar.OPENAI_TIMEOUT_MS) / 1000.0,
        "base_delay": get_environment(EnvVar.OPENAI_RETRY_BASE_MS) / 1000.0,
        "max_retries": get_environment(EnvVar.OPENAI_RETRY_MAX),
    }


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List all environment variables, optionally filtered by category.

    Args:
        category: Filter by category (llm, retry, rules, logging, budget,
            service). None returns all variables.

    Returns:
        List of EnvVar enum members.
    """
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


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
