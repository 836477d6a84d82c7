"""S3 object store.

Writes go through ``PutObject`` with a private ACL; reads are handed out as
SigV4 presigned ``GetObject`` URLs. The boto3 client is created on first use
and cached; boto3 clients are safe to share across threads, but creating one
is not, so first use is serialized.
"""
import logging
import threading
from typing import Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..config import StorageSettings
from ..exceptions import StorageWriteError, UrlGenerationError
from .base import ObjectStore

logger = logging.getLogger(__name__)


class S3ObjectStore(ObjectStore):
    """ObjectStore backed by an S3 bucket.

    Args:
        bucket:                Target bucket name.
        region_name:           AWS region.  ``None`` → boto3 default resolution.
        aws_access_key_id:     AWS access key.  ``None`` → default credential chain.
        aws_secret_access_key: AWS secret access key.
        endpoint_url:          Custom endpoint (MinIO, LocalStack, …).
    """

    def __init__(
        self,
        bucket: str,
        region_name: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ) -> None:
        self._bucket     = bucket
        self._region     = region_name
        self._access_key = aws_access_key_id
        self._secret_key = aws_secret_access_key
        self._endpoint   = endpoint_url
        self._client: Optional[object] = None
        self._client_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "S3ObjectStore":
        return cls(
            bucket=settings.bucket_name,
            region_name=settings.region,
            aws_access_key_id=settings.access_key_id,
            aws_secret_access_key=settings.secret_access_key,
            endpoint_url=settings.endpoint_url,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _get_client(self) -> object:
        """Return a cached boto3 s3 client, building it once under a lock."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = boto3.client("s3", **self._client_kwargs())
        return self._client

    def _client_kwargs(self) -> dict:
        kwargs: dict = {"config": BotoConfig(signature_version="s3v4")}
        if self._region:
            kwargs["region_name"] = self._region
        if self._access_key and self._secret_key:
            kwargs["aws_access_key_id"]     = self._access_key
            kwargs["aws_secret_access_key"] = self._secret_key
        if self._endpoint:
            kwargs["endpoint_url"] = self._endpoint
        return kwargs

    # -----------------------------------------------------------------------
    # ObjectStore implementation
    # -----------------------------------------------------------------------

    def put_object(self, key: str, body: bytes, content_type: str) -> None:
        client = self._get_client()
        try:
            client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
                ACL="private",
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageWriteError(
                f"Failed to write s3://{self._bucket}/{key}: {exc}"
            ) from exc

        logger.info("Stored s3://%s/%s (%d bytes, %s)", self._bucket, key, len(body), content_type)

    def presigned_get_url(self, key: str, expires_in: int) -> str:
        client = self._get_client()
        try:
            url = client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            raise UrlGenerationError(
                f"Failed to presign s3://{self._bucket}/{key}: {exc}"
            ) from exc

        logger.debug("Presigned s3://%s/%s for %ds", self._bucket, key, expires_in)
        return url
