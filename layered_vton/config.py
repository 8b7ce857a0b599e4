"""Configuration management for the layered try-on pipeline."""

import logging
from pathlib import Path
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class FashnConfig(BaseModel):
    """Remote transform API connection settings."""
    base_url: str = "https://api.fashn.ai"
    api_key: str | None = None
    model_name: str = "tryon-v1.6"
    moderation_level: str = "none"  # "conservative", "permissive", or "none"
    request_timeout: float = 30.0  # per HTTP call


class PollingConfig(BaseModel):
    """Job polling and retry settings."""
    max_attempts: int = Field(default=30, ge=1)
    poll_interval: float = 2.0
    overall_timeout: float = 90.0  # hard ceiling per job, seconds
    expected_duration: float = 60.0  # used for progress estimation only
    retry_backoff: float = 1.0
    max_backoff: float = 10.0
    submit_retries: int = Field(default=2, ge=0)


class LayeringConfig(BaseModel):
    """Sequential layering settings."""
    layer_delay: float = 0.5  # pause between remote submissions (rate limits)


class CacheConfig(BaseModel):
    """Result cache settings."""
    path: Path = Path("output/cache/tryon_cache.json")


class PipelineConfig(BaseSettings):
    """Main pipeline configuration."""

    # Sub-configs
    fashn: FashnConfig = Field(default_factory=FashnConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    layering: LayeringConfig = Field(default_factory=LayeringConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = ""
        env_nested_delimiter = "__"
        extra = "ignore"


def load_config() -> PipelineConfig:
    """Load configuration from environment and defaults."""
    return PipelineConfig()


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for the service entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
