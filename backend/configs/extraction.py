"""
Document extraction configuration settings.

Settings for the Claude Messages API calls used to identify and
extract trade documents.

Dependencies: pydantic_settings
System role: LLM extraction configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from backend.configs.base import BaseSettings


class ExtractionSettings(BaseSettings):
    """Claude extraction configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EXTRACTION_",
        case_sensitive=False,
        extra="ignore",
    )

    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model used for multi-step PDF extraction",
    )
    matching_model: str = Field(
        default="claude-3-haiku-20240307",
        description="Model used for AI process matching",
    )
    max_tokens: int = Field(default=32000, description="Max output tokens per step")
    temperature: float = Field(default=0.1, description="Sampling temperature")
    timeout_seconds: float = Field(default=300.0, description="Per-request API timeout")
    request_ttl_seconds: int = Field(
        default=900,
        description="How long finished extraction requests stay pollable (default 15 min)",
    )
