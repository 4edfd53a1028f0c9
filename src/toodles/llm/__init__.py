"""Language model access for classification and reply generation."""

from .base import LLMProvider
from .factory import SUPPORTED_PROVIDERS, create_llm_provider
from .models import LLMResponse, TokenUsage

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "SUPPORTED_PROVIDERS",
    "TokenUsage",
    "create_llm_provider",
]
