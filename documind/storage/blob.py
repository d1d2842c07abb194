"""
Blob Store — S3-compatible object storage for raw document bytes.

Any S3 API endpoint works (MinIO locally, AWS S3 in the cloud); the
endpoint, credentials and region come from settings.

Object layout:
    s3://<STORAGE_BUCKET>/<uuid4>-<sanitized filename>

Keys are built by the ingestion service, never accepted from the client,
and are never overwritten: every upload gets a fresh uuid prefix.

Every operation opens its own client from one shared aioboto3.Session,
so a single BlobStore instance is safe to share between concurrent
requests. Botocore failures are re-raised as StorageError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from documind.core.config import Settings
from documind.core.errors import StorageError

logger = logging.getLogger(__name__)

# Error codes S3/MinIO return for a bucket that is missing
_MISSING_BUCKET_CODES = frozenset({"404", "NoSuchBucket", "NotFound"})
# Error codes meaning the bucket already exists; treated as success
_BUCKET_EXISTS_CODES = frozenset({"BucketAlreadyOwnedByYou", "BucketAlreadyExists"})


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StoredObject:
    """Returned by put_object."""
    bucket:       str
    key:          str
    size_bytes:   int
    content_type: str
    etag:         str


# ---------------------------------------------------------------------------
# Blob store
# ---------------------------------------------------------------------------

class BlobStore:
    """Async wrapper around the handful of S3 calls the pipeline needs."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._session = aioboto3.Session()

    @property
    def default_bucket(self) -> str:
        return self._settings.storage_bucket

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self):
        """Return a scoped async S3 client context manager."""
        return self._session.client(
            "s3",
            endpoint_url=self._settings.storage_endpoint_url or None,
            region_name=self._settings.storage_region,
            aws_access_key_id=self._settings.storage_access_key or None,
            aws_secret_access_key=self._settings.storage_secret_key or None,
        )

    # ------------------------------------------------------------------
    # Buckets
    # ------------------------------------------------------------------

    async def bucket_exists(self, bucket: str) -> bool:
        async with self._client() as s3:
            try:
                await s3.head_bucket(Bucket=bucket)
                return True
            except ClientError as exc:
                if _error_code(exc) in _MISSING_BUCKET_CODES:
                    return False
                raise StorageError(f"Could not check bucket '{bucket}': {exc}") from exc
            except BotoCoreError as exc:
                raise StorageError(f"Could not check bucket '{bucket}': {exc}") from exc

    async def make_bucket(self, bucket: str, region: str | None = None) -> None:
        """
        Create the bucket. Losing a creation race to a concurrent request
        (BucketAlreadyOwnedByYou / BucketAlreadyExists) counts as success.
        """
        region = region or self._settings.storage_region
        params: dict = {"Bucket": bucket}
        # us-east-1 is the one region S3 rejects an explicit LocationConstraint for
        if region and region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}

        async with self._client() as s3:
            try:
                await s3.create_bucket(**params)
            except ClientError as exc:
                if _error_code(exc) in _BUCKET_EXISTS_CODES:
                    logger.debug("Bucket already exists | bucket=%s", bucket)
                    return
                raise StorageError(f"Could not create bucket '{bucket}': {exc}") from exc
            except BotoCoreError as exc:
                raise StorageError(f"Could not create bucket '{bucket}': {exc}") from exc

        logger.info("Bucket created | bucket=%s region=%s", bucket, region)

    async def ensure_bucket(self, bucket: str | None = None) -> str:
        bucket = bucket or self.default_bucket
        if not await self.bucket_exists(bucket):
            await self.make_bucket(bucket, self._settings.storage_region)
        return bucket

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
    ) -> StoredObject:
        """
        Store `data` under `key`.

        Args:
            bucket:       Target bucket (must exist, see ensure_bucket).
            key:          Object key; callers guarantee uniqueness.
            data:         Raw file bytes.
            content_type: MIME type recorded on the object.
        """
        async with self._client() as s3:
            try:
                resp = await s3.put_object(
                    Bucket=bucket,
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                )
            except (ClientError, BotoCoreError) as exc:
                raise StorageError(f"Failed to store object '{key}': {exc}") from exc

        logger.info("Blob upload ok | bucket=%s key=%s size=%d", bucket, key, len(data))

        return StoredObject(
            bucket=bucket,
            key=key,
            size_bytes=len(data),
            content_type=content_type,
            etag=resp.get("ETag", "").strip('"'),
        )

    async def get_object(self, bucket: str, key: str) -> bytes:
        """
        Download the full object body. The stream is drained completely and
        closed before returning, on success and on failure alike. Reads go
        through the StreamingBody itself so truncated bodies and read
        timeouts surface as botocore errors.
        """
        async with self._client() as s3:
            try:
                resp = await s3.get_object(Bucket=bucket, Key=key)
            except ClientError as exc:
                if _error_code(exc) in ("NoSuchKey", "404"):
                    raise StorageError(f"Object not found: {key}") from exc
                raise StorageError(f"Failed to fetch object '{key}': {exc}") from exc
            except BotoCoreError as exc:
                raise StorageError(f"Failed to fetch object '{key}': {exc}") from exc

            body = resp["Body"]
            try:
                async with body:
                    data = await body.read()
            except (ClientError, BotoCoreError, OSError) as exc:
                raise StorageError(f"Failed to read object '{key}': {exc}") from exc

        logger.debug("Blob download ok | bucket=%s key=%s size=%d", bucket, key, len(data))
        return data
