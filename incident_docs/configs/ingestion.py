"""
Ingestion and retry pipeline settings.

Retry budget, backoff base, fetch limits and sweep pacing. An instance is
passed explicitly to the orchestrator and sweeper so tests can shrink limits
and delays.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestionSettings(BaseSettings):
    """Settings for the document ingestion pipeline and retry sweeper."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    # Retry budget
    max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts allowed per document before it is permanently failed",
    )
    base_retry_delay_seconds: float = Field(
        default=300.0,
        ge=0,
        description="Backoff base; delay is base * 2^(retry_count - 1)",
    )

    # Fetch limits
    max_file_bytes: int = Field(
        default=10 * 1024 * 1024,
        gt=0,
        description="Hard cap on downloaded file size",
    )
    fetch_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Wall-clock timeout for one download",
    )
    default_content_type: str = Field(
        default="image/jpeg",
        description="Content type assumed when the source omits one",
    )
    user_agent: str = Field(
        default="incident-docs/0.1",
        description="User-Agent header sent to source hosts",
    )

    # Sweeper
    sweep_batch_limit: int = Field(
        default=10,
        gt=0,
        description="Records picked per sweep when no limit is given",
    )
    sweep_pacing_seconds: float = Field(
        default=0.1,
        ge=0,
        description="Pause between records within one sweep",
    )


@lru_cache
def get_ingestion_settings() -> IngestionSettings:
    """
    Get cached ingestion settings instance.

    Returns:
        IngestionSettings: Singleton settings loaded from environment
    """
    return IngestionSettings()
