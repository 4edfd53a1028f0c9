"""Response types returned by language model providers."""

from pydantic import BaseModel, ConfigDict, Field


class TokenUsage(BaseModel):
    """Token accounting for one completion."""

    model_config = ConfigDict(frozen=True)

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)


class LLMResponse(BaseModel):
    """Text produced by one chat completion."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text, empty if the model sent none")
    model: str = Field(description="Model that generated the response")
    finish_reason: str | None = None
    usage: TokenUsage | None = None
