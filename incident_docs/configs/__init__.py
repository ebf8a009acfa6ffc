"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from incident_docs.configs.database import DatabaseSettings
from incident_docs.configs.ingestion import IngestionSettings, get_ingestion_settings
from incident_docs.configs.settings import Settings, get_settings
from incident_docs.configs.storage import StorageSettings

__all__ = [
    "DatabaseSettings",
    "IngestionSettings",
    "Settings",
    "StorageSettings",
    "get_ingestion_settings",
    "get_settings",
]
