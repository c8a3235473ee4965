"""
S3-compatible object storage backend.

Uses boto3, so it works against AWS S3, Cloudflare R2, MinIO or any other
S3-compatible endpoint. The fixed container name doubles as the bucket
name.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    ReadTimeoutError,
)

from ...core.blobs.gateway import CONTAINER_NAME
from ...core.blobs.models import DEFAULT_CONTENT_TYPE, BlobContent, ErrorKind, StorageError
from .base import TRANSIENT_HTTP_STATUSES, run_blocking, storage_error

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchBucket", "NotFound", "404"}
_PERMISSION_CODES = {
    "AccessDenied",
    "Forbidden",
    "403",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
}
_TRANSIENT_CODES = {
    "SlowDown",
    "RequestTimeout",
    "ServiceUnavailable",
    "InternalError",
    "Throttling",
}
_TRANSIENT_EXCEPTIONS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ConnectTimeoutError,
    ReadTimeoutError,
)


@dataclass
class S3StorageConfig:
    """
    Configuration for S3-compatible storage.

    Using a dataclass instead of raw parameters means:
    - Configuration is explicit and documented
    - Easy to validate at construction time
    - Simple to create test configurations
    """
    access_key_id: str
    secret_access_key: str
    endpoint_url: Optional[str] = None  # None means AWS S3
    region: str = "auto"  # R2 uses 'auto' for region
    bucket_name: str = CONTAINER_NAME


def classify_s3_error(
    error: Exception,
    action: str,
    blob_name: Optional[str] = None,
) -> StorageError:
    """Map a boto3/botocore exception onto a StorageError with the right kind."""
    kind = ErrorKind.FAILURE

    if isinstance(error, ClientError):
        code = str(error.response.get("Error", {}).get("Code", ""))
        status_code = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")

        if code in _NOT_FOUND_CODES or status_code == 404:
            kind = ErrorKind.NOT_FOUND
        elif code in _PERMISSION_CODES or status_code in (401, 403):
            kind = ErrorKind.PERMISSION_DENIED
        elif code in _TRANSIENT_CODES or status_code in TRANSIENT_HTTP_STATUSES:
            kind = ErrorKind.TRANSIENT_IO
    elif isinstance(error, _TRANSIENT_EXCEPTIONS):
        kind = ErrorKind.TRANSIENT_IO
    elif isinstance(error, NoCredentialsError):
        kind = ErrorKind.PERMISSION_DENIED

    return storage_error(kind, action, blob_name, str(error))


class S3BlobStore:
    """
    S3-compatible object storage client.

    All methods are async to match the BlobStore protocol even though
    boto3 is synchronous; each call runs in the default executor.
    """

    name = "s3"

    def __init__(self, config: S3StorageConfig) -> None:
        self._config = config

        # v4 signatures and path-style addressing work across AWS, R2 and MinIO
        boto_config = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path'},
        )

        self._s3_client = boto3.client(
            's3',
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
            }
        )

    @property
    def bucket(self) -> str:
        return self._config.bucket_name

    async def ensure_container(self) -> None:
        """Create the bucket if it is missing."""
        if await self.container_exists():
            return

        params = {"Bucket": self.bucket}
        if self._config.region not in ("auto", "us-east-1"):
            params["CreateBucketConfiguration"] = {"LocationConstraint": self._config.region}

        try:
            await run_blocking(self._s3_client.create_bucket, **params)
        except (BotoCoreError, ClientError) as e:
            raise classify_s3_error(e, "create container", self.bucket) from e

        logger.info("Created bucket", extra={"bucket": self.bucket})

    async def container_exists(self) -> bool:
        try:
            await run_blocking(self._s3_client.head_bucket, Bucket=self.bucket)
            return True
        except (BotoCoreError, ClientError) as e:
            error = classify_s3_error(e, "check container", self.bucket)
            if error.kind is ErrorKind.NOT_FOUND:
                return False
            raise error from e

    async def list_names(self) -> list[str]:
        def _list() -> list[str]:
            paginator = self._s3_client.get_paginator('list_objects_v2')
            return [
                obj['Key']
                for page in paginator.paginate(Bucket=self.bucket)
                for obj in page.get('Contents', [])
            ]

        try:
            return await run_blocking(_list)
        except (BotoCoreError, ClientError) as e:
            raise classify_s3_error(e, "get list of blobs") from e

    async def exists(self, blob_name: str) -> bool:
        try:
            await run_blocking(
                self._s3_client.head_object,
                Bucket=self.bucket,
                Key=blob_name,
            )
            return True
        except (BotoCoreError, ClientError) as e:
            error = classify_s3_error(e, "check", blob_name)
            if error.kind is ErrorKind.NOT_FOUND:
                return False
            raise error from e

    async def upload(self, blob_name: str, data: bytes, content_type: str) -> None:
        try:
            await run_blocking(
                self._s3_client.put_object,
                Bucket=self.bucket,
                Key=blob_name,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            raise classify_s3_error(e, "upload", blob_name) from e

        logger.debug(
            "Uploaded object",
            extra={"blob_name": blob_name, "size_bytes": len(data)},
        )

    async def download(self, blob_name: str) -> BlobContent:
        def _read() -> BlobContent:
            response = self._s3_client.get_object(Bucket=self.bucket, Key=blob_name)
            return BlobContent(
                name=blob_name,
                data=response['Body'].read(),
                content_type=response.get('ContentType') or DEFAULT_CONTENT_TYPE,
            )

        try:
            return await run_blocking(_read)
        except (BotoCoreError, ClientError) as e:
            raise classify_s3_error(e, "download", blob_name) from e

    async def delete(self, blob_name: str) -> None:
        try:
            await run_blocking(
                self._s3_client.delete_object,
                Bucket=self.bucket,
                Key=blob_name,
            )
        except (BotoCoreError, ClientError) as e:
            raise classify_s3_error(e, "delete", blob_name) from e

        logger.debug("Deleted object", extra={"blob_name": blob_name})

    async def signed_url(self, blob_name: str, expires_in: timedelta) -> str:
        """
        Generate a presigned GET URL.

        The signature covers the HTTP method, so the URL can't be replayed
        as a PUT or DELETE.
        """
        try:
            return self._s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket, 'Key': blob_name},
                ExpiresIn=int(expires_in.total_seconds()),
            )
        except (BotoCoreError, ClientError) as e:
            raise classify_s3_error(e, "generate sas", blob_name) from e

    async def close(self) -> None:
        self._s3_client.close()
