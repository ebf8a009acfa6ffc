"""
Content digests for stored documents.

Dependencies: hashlib (stdlib)
System role: Integrity fingerprint recorded on every document
"""

import hashlib

CHECKSUM_ALGORITHM = "sha256"


def compute_checksum(data: bytes) -> str:
    """SHA-256 hex digest (64 lowercase hex characters) of `data`."""
    return hashlib.sha256(data).hexdigest()

