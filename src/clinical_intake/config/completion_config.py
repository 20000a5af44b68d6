# ============================================================================
# src/clinical_intake/config/completion_config.py
# ============================================================================
"""
Remote Completion Endpoint Configuration
- Endpoint URL and bearer key
- Model identifier
- Sampling temperature / token budget
- Per-attempt timeout schedule
"""

from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CompletionSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    COMPLETION_API_URL: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions",
        description="OpenAI-compatible chat completions endpoint"
    )
    COMPLETION_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("COMPLETION_API_KEY", "OPENROUTER_API_KEY"),
        description="Bearer token for the completion endpoint"
    )
    COMPLETION_MODEL: str = Field(
        default="tngtech/deepseek-r1t-chimera:free",
        description="Model identifier sent with every request"
    )
    COMPLETION_TEMPERATURE: float = Field(
        default=0.01,
        description="Temperature for patient extraction (near-deterministic)"
    )
    COMPLETION_MAX_TOKENS: int = Field(
        default=2000,
        description="Maximum tokens in the completion"
    )
    COMPLETION_ATTEMPT_TIMEOUTS: List[float] = Field(
        default=[60.0, 65.0, 70.0],
        description="Timeout (seconds) for each attempt; length = attempt count"
    )
    COMPLETION_RETRY_DELAY: float = Field(
        default=2.0,
        description="Pause between failed attempts (seconds)"
    )
    COMPLETION_REFERER: str = Field(
        default="http://localhost:3000",
        description="HTTP-Referer header (required by OpenRouter)"
    )
    COMPLETION_TITLE: str = Field(
        default="Medical Data Extraction",
        description="X-Title header"
    )

    @field_validator("COMPLETION_ATTEMPT_TIMEOUTS")
    @classmethod
    def validate_timeouts(cls, v):
        if not v:
            raise ValueError("At least one attempt timeout is required")
        if any(t <= 0 for t in v):
            raise ValueError("Attempt timeouts must be positive")
        return v


completion_settings = CompletionSettings()
