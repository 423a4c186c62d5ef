"""Configuration management for LLM Visibility."""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""

    # Provider API keys
    openai_api_key: str = Field("", description="OpenAI API key")
    anthropic_api_key: str = Field("", description="Anthropic API key")
    gemini_api_key: str = Field("", description="Google Gemini API key")

    # Provider models
    openai_model: str = Field("gpt-4o-mini", description="OpenAI chat model")
    anthropic_model: str = Field("claude-3-5-sonnet-latest", description="Anthropic messages model")
    gemini_model: str = Field("gemini-1.5-flash", description="Gemini model")

    # Visibility scoring
    visibility_scoring_enabled: bool = Field(True, description="Use LLM-based structured scoring")
    visibility_scoring_provider: Optional[str] = Field(None, description="Preferred scoring provider")
    visibility_scoring_weights: str = Field("", description="JSON-encoded scoring weight override")
    scoring_weights_file: Optional[str] = Field(None, description="YAML file with scoring weights")

    # Question generation and recommendations
    question_generation_provider: str = Field("openai", description="Provider used to generate questions")
    recommendation_provider: str = Field("openai", description="Provider used to enrich recommendations")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    # Network settings
    max_retries: int = Field(3, description="Maximum retry attempts")
    retry_delay: float = Field(1.0, description="Base retry delay in seconds")
    retry_backoff: float = Field(2.0, description="Retry backoff multiplier")
    request_timeout: float = Field(60.0, description="Timeout for provider requests in seconds")
    metadata_timeout: float = Field(5.0, description="Timeout for website metadata fetch in seconds")

    # Response cache
    llm_cache_enabled: bool = Field(False, description="Cache provider responses on disk")
    cache_dir: str = Field("cache/llm_cache", description="Directory for the response cache")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
