"""
Object storage configuration.

Bucket names, S3-compatible endpoint and signed URL lifetimes for stored
incident documents and session staging uploads.

Dependencies: pydantic_settings
System role: Blob store configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Settings for document bucket operations."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    region: str = Field(
        default="eu-west-2",
        description="Region of the storage buckets",
    )
    endpoint_url: str | None = Field(
        default=None,
        description="Custom S3-compatible endpoint (None for AWS S3)",
    )
    user_documents_bucket: str = Field(
        default="user-documents",
        description="Bucket for signup and general user documents",
    )
    incident_bucket: str = Field(
        default="incident-images",
        description="Bucket for incident report photos and screenshots",
    )
    signed_url_ttl_seconds: int = Field(
        default=31_536_000,
        description="Lifetime of signed URLs issued at ingestion (365 days)",
    )
    staging_ttl_hours: int = Field(
        default=24,
        description="Hours a staged upload stays claimable",
    )
