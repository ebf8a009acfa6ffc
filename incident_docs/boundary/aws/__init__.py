"""Object storage adapters and the document key scheme."""

from incident_docs.boundary.aws.s3_client import S3BlobStore

__all__ = ["S3BlobStore"]
