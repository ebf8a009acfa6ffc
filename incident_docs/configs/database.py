"""
Metadata store configuration.

Connection parameters for the PostgreSQL database that holds document and
staging records.

Dependencies: pydantic, pydantic_settings
System role: Async engine configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from incident_docs.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection and pool settings (POSTGRES_*)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    user: str = Field(default="postgres")
    password: str = Field(default="postgres")
    db: str = Field(default="incident_docs", description="Database holding the documents table")

    pool_size: int = Field(default=10, description="Persistent connections per process")
    max_overflow: int = Field(default=20, description="Burst connections above pool_size")
    echo_sql: bool = Field(default=False, description="Log every SQL statement")
    ssl_required: bool = Field(default=False, description="Require TLS (managed Postgres)")

    @property
    def async_database_url(self) -> str:
        """asyncpg URL for create_async_engine."""
        url = f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"{url}?ssl=require" if self.ssl_required else url
