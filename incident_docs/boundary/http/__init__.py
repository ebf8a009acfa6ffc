"""Outbound HTTP adapters."""

from incident_docs.boundary.http.remote_fetcher import (
    FetchedFile,
    RemoteFetcher,
    classify_http_status,
    classify_transport_error,
)

__all__ = ["FetchedFile", "RemoteFetcher", "classify_http_status", "classify_transport_error"]
