"""Completion client and session configuration with environment variable loading.

Pydantic-based configuration for the model behind the chat session.
Supports OpenAI (and OpenAI-compatible APIs via custom base URL) and Gemini.
"""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()

Provider = Literal["openai", "gemini"]

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "gemini": "gemini-2.5-flash",
}
DEFAULT_MAX_GROUNDING_CHARS = 400_000
DEFAULT_MAX_SESSIONS = 100


def _env_provider() -> str:
    return os.getenv("LLM_PROVIDER", "openai").strip().lower()


def _env_api_key() -> str:
    return (
        os.getenv("LLM_API_KEY")
        or os.getenv("OPENAI_API_KEY")
        or os.getenv("GEMINI_API_KEY")
        or ""
    )


class AgentConfig(BaseModel):
    """Configuration for the completion client.

    Attributes:
        provider: Model provider, ``openai`` or ``gemini``.
        api_key: API key for model access.
        base_url: API base URL (None for the provider default, OpenAI only).
        model_name: Model identifier; defaults per provider.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in generated response.
        timeout: Seconds to wait for one completion.
    """

    provider: Provider = Field(
        default_factory=_env_provider,
        validate_default=True,
        description="LLM provider",
    )
    api_key: str = Field(
        default_factory=_env_api_key,
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or None,
        description="API base URL (None for provider default)",
    )
    model_name: str | None = Field(
        default_factory=lambda: os.getenv("LLM_MODEL") or None,
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default=1024,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )
    timeout: float = Field(
        default=120.0,
        gt=0,
        description="Seconds to wait for a completion",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("API key required. Set LLM_API_KEY in .env")
        return v.strip()

    @model_validator(mode="after")
    def default_model_for_provider(self) -> "AgentConfig":
        if not self.model_name:
            self.model_name = DEFAULT_MODELS[self.provider]
        return self


class SessionConfig(BaseModel):
    """Limits shared by all conversation sessions.

    Needs no API key, so the app can validate it at startup.

    Attributes:
        max_grounding_chars: Document characters sent with the first question (0 = unlimited).
        max_sessions: Sessions kept in memory; the least recently used is dropped first.
    """

    max_grounding_chars: int = Field(
        default_factory=lambda: os.getenv("MAX_GROUNDING_CHARS", str(DEFAULT_MAX_GROUNDING_CHARS)),
        validate_default=True,
        ge=0,
        description="Maximum document characters injected into the grounding turn",
    )
    max_sessions: int = Field(
        default_factory=lambda: os.getenv("MAX_SESSIONS", str(DEFAULT_MAX_SESSIONS)),
        validate_default=True,
        ge=1,
        description="Maximum number of sessions kept in memory",
    )


def get_agent_config() -> AgentConfig:
    """Create agent configuration from environment.

    Returns:
        Configured AgentConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return AgentConfig()


def get_session_config() -> SessionConfig:
    """Create session limits from environment.

    Raises:
        ValueError: If a limit is not an integer or out of range.
    """
    return SessionConfig()
