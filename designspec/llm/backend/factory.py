"""Backend factory for creating generation backends.

Provides a unified entry point for creating the configured backend.
"""

from .base import LLMBackend

SUPPORTED_PROVIDERS: tuple[str, ...] = ("openai",)


def create_llm_backend(
    model: str | None = None,
    *,
    provider: str = "openai",
    api_key: str | None = None,
    base_url: str | None = None,
    **kwargs,
) -> LLMBackend:
    """Create a generation backend.

    Args:
        model: Model name. Falls back to OPENAI_MODEL.
        provider: Backend provider. Only "openai" is supported.
        api_key: API key. Falls back to the environment.
        base_url: Optional custom API endpoint.
        **kwargs: Additional arguments passed to the backend constructor
            (e.g., retry_config, client).

    Returns:
        Configured LLMBackend instance.

    Raises:
        ValueError: If the provider is unknown.
        AuthenticationError: If an API key is required but not provided.

    Example:
        >>> backend = create_llm_backend()
        >>> backend = create_llm_backend("gpt-4o-mini", api_key="sk-...")
    """
    if provider == "openai":
        from .openai import OpenAIBackend

        return OpenAIBackend(api_key=api_key, model=model, base_url=base_url, **kwargs)

    raise ValueError(
        f"Unknown provider '{provider}'. Supported: {', '.join(SUPPORTED_PROVIDERS)}"
    )


__all__ = ["SUPPORTED_PROVIDERS", "create_llm_backend"]
