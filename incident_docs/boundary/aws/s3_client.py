"""
S3 blob store client.

Put, get, move, delete and sign objects in the document buckets. boto3 is
blocking, so every call runs in a worker thread.

Dependencies: boto3, botocore
System role: Durable object storage for fetched and staged documents
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from incident_docs.configs.storage import StorageSettings
from incident_docs.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class S3BlobStore:
    """
    Blob store over S3 or an S3-compatible endpoint.

    Every method takes an optional bucket; without one the user-documents
    bucket is used.
    """

    def __init__(self, settings: StorageSettings, client=None) -> None:
        """
        Initialize S3 client for the document buckets.

        Args:
            settings: Bucket names, region and endpoint
            client: Pre-built boto3 S3 client (tests pass a mock)
        """
        self._settings = settings
        self._default_bucket = settings.user_documents_bucket
        self._s3_client = client or boto3.client(
            "s3",
            region_name=settings.region,
            endpoint_url=settings.endpoint_url,
        )

    def _bucket(self, bucket: str | None) -> str:
        return bucket or self._default_bucket

    async def _call(self, operation: str, path: str, func, **kwargs):
        try:
            return await asyncio.to_thread(func, **kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                f"{__name__}:{operation} - {type(e).__name__}: {e}",
                extra={"path": path, "bucket": kwargs.get("Bucket")},
            )
            raise StorageError(
                f"Storage {operation} failed: {e}",
                operation=operation,
                path=path,
            ) from e

    async def put(
        self,
        data: bytes,
        path: str,
        content_type: str,
        bucket: str | None = None,
    ) -> str:
        """
        Upload bytes, overwriting any object already at `path`.

        Args:
            data: Object body
            path: Object key
            content_type: MIME type stored with the object
            bucket: Target bucket

        Returns:
            str: The object key written

        Raises:
            StorageError: Upload rejected or endpoint unreachable
        """
        await self._call(
            "put",
            path,
            self._s3_client.put_object,
            Bucket=self._bucket(bucket),
            Key=path,
            Body=data,
            ContentType=content_type,
            CacheControl="max-age=3600",
        )
        logger.info(
            f"{__name__}:put - Stored object",
            extra={"path": path, "bucket": self._bucket(bucket), "size": len(data)},
        )
        return path

    async def get(self, path: str, bucket: str | None = None) -> bytes:
        """Read an object's full body."""
        response = await self._call(
            "get",
            path,
            self._s3_client.get_object,
            Bucket=self._bucket(bucket),
            Key=path,
        )
        body = response["Body"]
        try:
            return await asyncio.to_thread(body.read)
        finally:
            body.close()

    async def move(self, old_path: str, new_path: str, bucket: str | None = None) -> None:
        """
        Move an object within one bucket (copy, then delete the source).

        Raises:
            StorageError: Copy or delete failed; on a failed delete the
                object exists at both keys
        """
        target = self._bucket(bucket)
        await self._call(
            "move",
            old_path,
            self._s3_client.copy_object,
            Bucket=target,
            Key=new_path,
            CopySource={"Bucket": target, "Key": old_path},
        )
        await self.delete(old_path, bucket=target)
        logger.info(
            f"{__name__}:move - Moved object",
            extra={"from_path": old_path, "to_path": new_path, "bucket": target},
        )

    async def delete(self, path: str, bucket: str | None = None) -> None:
        """Delete an object; deleting a missing key is not an error."""
        await self._call(
            "delete",
            path,
            self._s3_client.delete_object,
            Bucket=self._bucket(bucket),
            Key=path,
        )

    async def sign(
        self,
        path: str,
        ttl_seconds: int,
        bucket: str | None = None,
    ) -> tuple[str, datetime]:
        """
        Generate a presigned download URL.

        Args:
            path: Object key
            ttl_seconds: URL lifetime
            bucket: Bucket holding the object

        Returns:
            tuple[str, datetime]: (signed_url, expires_at)

        Raises:
            StorageError: If presigned URL generation fails
        """
        url = await self._call(
            "sign",
            path,
            self._s3_client.generate_presigned_url,
            ClientMethod="get_object",
            Params={"Bucket": self._bucket(bucket), "Key": path},
            ExpiresIn=ttl_seconds,
        )
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)
        return url, expires_at
