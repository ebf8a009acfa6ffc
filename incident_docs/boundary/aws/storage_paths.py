"""
Object key scheme for stored documents.

Deterministic, hierarchical keys:
    {owner}/{kind}/{timestamp_ms}_{kind}.{ext}                 first-class uploads
    temp/{session_id}/{field}_{timestamp_ms}.{ext}             session staging
    permanent/{owner}/{associated_id}/{category}/{file_name}   claimed staging

Dependencies: re, mimetypes (stdlib)
System role: Path scheme shared by the orchestrator and staging workflow
"""

import mimetypes
import posixpath
import re
import time

_UNSAFE = re.compile(r"[^a-z0-9_-]", re.IGNORECASE)

_EXTENSION_OVERRIDES = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/heic": "heic",
    "image/webp": "webp",
    "application/pdf": "pdf",
}


def _now_ms() -> int:
    return int(time.time() * 1000)


def sanitize_segment(value: str) -> str:
    """Replace every character outside [a-z0-9_-] with an underscore."""
    return _UNSAFE.sub("_", value) or "_"


def resolve_extension(file_name: str | None, content_type: str | None, default: str = "jpg") -> str:
    """
    Pick a lowercase file extension without the dot.

    File name suffix wins, then a known content type, then `default`.
    """
    if file_name:
        suffix = posixpath.splitext(file_name)[1].lstrip(".").lower()
        if suffix and suffix.isalnum() and len(suffix) <= 10:
            return suffix
    if content_type:
        mime = content_type.split(";", 1)[0].strip().lower()
        if mime in _EXTENSION_OVERRIDES:
            return _EXTENSION_OVERRIDES[mime]
        guessed = mimetypes.guess_extension(mime)
        if guessed:
            return guessed.lstrip(".")
    return default


def document_object_key(
    owner_id: str,
    document_kind: str,
    extension: str,
    timestamp_ms: int | None = None,
) -> str:
    """Key for a document fetched by the ingestion orchestrator."""
    kind = sanitize_segment(document_kind)
    ts = timestamp_ms if timestamp_ms is not None else _now_ms()
    return f"{owner_id}/{kind}/{ts}_{kind}.{extension}"


def staging_object_key(
    session_id: str,
    field_name: str,
    extension: str,
    timestamp_ms: int | None = None,
) -> str:
    """Key for a session-scoped upload before it is claimed."""
    ts = timestamp_ms if timestamp_ms is not None else _now_ms()
    return f"temp/{sanitize_segment(session_id)}/{sanitize_segment(field_name)}_{ts}.{extension}"


def permanent_object_key(
    owner_id: str,
    associated_id: str,
    category: str,
    staged_key: str,
) -> str:
    """Final key for a claimed staged upload; keeps the staged file name."""
    return (
        f"permanent/{owner_id}/{sanitize_segment(associated_id)}/"
        f"{sanitize_segment(category)}/{posixpath.basename(staged_key)}"
    )
