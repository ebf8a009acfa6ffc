"""
Observability module.

Provides stdlib logging configuration, structured logging helpers and
correlation ID tracking.
"""

from incident_docs.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from incident_docs.observability.logger import configure_logging, get_logger

__all__ = [
    "clear_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
]
