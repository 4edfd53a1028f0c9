"""Factory for creating LLM providers."""

from typing import Any

from .base import LLMProvider

SUPPORTED_PROVIDERS = ("openai",)


def create_llm_provider(provider: str = "openai", **config: Any) -> LLMProvider:
    """Create an LLM provider.

    Args:
        provider: Provider name ("openai")
        **config: Provider-specific configuration. OpenAI takes
            ``api_key`` (required), ``model``, ``base_url``, ``timeout``
            and ``max_retries``.

    Raises:
        ValueError: If the provider is not supported or required
            configuration is missing

    Example:
        >>> llm = create_llm_provider("openai", api_key="sk-...", model="gpt-4o-mini")
    """
    name = provider.lower()

    if name == "openai":
        if not config.get("api_key"):
            raise ValueError("OpenAI provider requires an api_key")
        from .providers.openai import OpenAIProvider
        return OpenAIProvider(**config)

    raise ValueError(
        f"Unsupported LLM provider: {provider}. "
        f"Supported providers: {', '.join(SUPPORTED_PROVIDERS)}"
    )
