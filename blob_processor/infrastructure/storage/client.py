"""
Blob store selection and the in-memory store.

Supports Azure Blob Storage (the default), any S3-compatible service, and
an in-memory store for local development and tests.

Mock mode keeps blobs in a dictionary, enabling API testing without
provisioning a storage account.
"""

import logging
from datetime import datetime, timedelta, timezone
from urllib.parse import quote, urlencode

from ...config.settings import Settings
from ...core.blobs.gateway import CONTAINER_NAME, BlobStore
from ...core.blobs.models import BlobContent, BlobNotFoundError
from .azure import AzureBlobStore
from .s3 import S3BlobStore, S3StorageConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class InMemoryBlobStore:
    """
    In-memory storage for local development.

    Blobs are stored in a dictionary and signed "URLs" are memory:// URIs
    that carry the same permission and expiry fields a real SAS would.

    Not suitable for production, but perfect for development and testing.
    """

    name = "memory"

    def __init__(self, container_name: str = CONTAINER_NAME) -> None:
        # {blob_name: (data, content_type)}
        self._blobs: dict[str, tuple[bytes, str]] = {}
        self._container_name = container_name
        logger.info("Initialized mock storage client (in-memory)")

    async def ensure_container(self) -> None:
        return None

    async def container_exists(self) -> bool:
        return True

    async def list_names(self) -> list[str]:
        return list(self._blobs)

    async def exists(self, blob_name: str) -> bool:
        return blob_name in self._blobs

    async def upload(self, blob_name: str, data: bytes, content_type: str) -> None:
        self._blobs[blob_name] = (bytes(data), content_type)

        logger.debug(
            "Stored blob in mock storage",
            extra={"blob_name": blob_name, "size_bytes": len(data)},
        )

    async def download(self, blob_name: str) -> BlobContent:
        if blob_name not in self._blobs:
            raise BlobNotFoundError(blob_name, f"Unable to download {blob_name}, blob not found")

        data, content_type = self._blobs[blob_name]
        return BlobContent(name=blob_name, data=data, content_type=content_type)

    async def delete(self, blob_name: str) -> None:
        if self._blobs.pop(blob_name, None) is None:
            raise BlobNotFoundError(blob_name, f"Unable to delete {blob_name}, blob not found")

    async def signed_url(self, blob_name: str, expires_in: timedelta) -> str:
        if blob_name not in self._blobs:
            raise BlobNotFoundError(blob_name, f"Unable to generate sas {blob_name}, blob not found")

        expiry = datetime.now(timezone.utc) + expires_in
        query = urlencode({
            "sp": "r",
            "sr": "b",
            "se": expiry.strftime("%Y-%m-%dT%H:%M:%SZ"),
        })
        return f"memory://{self._container_name}/{quote(blob_name)}?{query}"

    async def close(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_blob_store(settings: Settings) -> BlobStore:
    """
    Create the blob store selected by configuration.

    Factory function pattern because:
    - Centralizes client creation logic
    - Makes mock vs real decision explicit
    - Keeps the lifespan handler free of backend details

    Args:
        settings: Application settings

    Returns:
        BlobStore implementation (Azure, S3 or in-memory)
    """
    backend = settings.backend

    if backend == "memory":
        return InMemoryBlobStore()

    if backend == "s3":
        config = S3StorageConfig(
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
            endpoint_url=settings.s3_endpoint_url,
            region=settings.s3_region,
        )
        return S3BlobStore(config)

    return AzureBlobStore(settings.storage_connection_string)
