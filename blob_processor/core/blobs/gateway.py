"""
Blob gateway: the six storage verbs behind the HTTP API.

The gateway is framework-agnostic. It doesn't know about FastAPI or about
which cloud it talks to; it delegates to a BlobStore and turns store
failures into StorageResult values that callers can branch on.

Missing blobs are handled the same way everywhere: download, update,
delete and signed-URL generation all report NOT_FOUND when the name is
absent. Existence is checked first, and a NOT_FOUND raised by the store
during the call itself (blob removed between the check and the call) is
reported the same way.
"""

import logging
from datetime import timedelta
from typing import Awaitable, Optional, Protocol, TypeVar

from .models import (
    DEFAULT_CONTENT_TYPE,
    BlobContent,
    BlobNotFoundError,
    StorageError,
    StorageResult,
)

logger = logging.getLogger(__name__)

CONTAINER_NAME = "filecontainer"
SIGNED_URL_TTL = timedelta(hours=1)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class BlobStore(Protocol):
    """
    Interface for object storage backends.

    Implementations raise StorageError (with a classified ErrorKind) and
    nothing else for storage failures.
    """

    name: str

    async def ensure_container(self) -> None:
        """Create the container if it doesn't exist yet."""
        ...

    async def container_exists(self) -> bool:
        ...

    async def list_names(self) -> list[str]:
        """Names of all blobs in the container."""
        ...

    async def exists(self, blob_name: str) -> bool:
        ...

    async def upload(self, blob_name: str, data: bytes, content_type: str) -> None:
        """Write bytes under a name, overwriting any existing blob."""
        ...

    async def download(self, blob_name: str) -> BlobContent:
        ...

    async def delete(self, blob_name: str) -> None:
        ...

    async def signed_url(self, blob_name: str, expires_in: timedelta) -> str:
        """Read-only URL for one blob, valid for expires_in."""
        ...

    async def close(self) -> None:
        ...


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------

class BlobGateway:
    """
    Entry point for blob operations.

    Built once at application startup and injected into request handlers.
    Holds no state of its own beyond the store reference, so concurrent
    requests need no coordination here.
    """

    def __init__(self, store: BlobStore, signed_url_ttl: timedelta = SIGNED_URL_TTL) -> None:
        self._store = store
        self._signed_url_ttl = signed_url_ttl

    @property
    def store(self) -> BlobStore:
        return self._store

    async def check_container(self) -> StorageResult[bool]:
        """Whether the container is reachable and present."""
        return await self._call("check container", None, self._store.container_exists())

    async def list_blobs(self) -> StorageResult[list[str]]:
        return await self._call("list", None, self._store.list_names())

    async def exists(self, blob_name: str) -> StorageResult[bool]:
        return await self._call("check", blob_name, self._store.exists(blob_name))

    async def upload(
        self,
        blob_name: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> StorageResult[None]:
        """Upload bytes under a name. Always overwrites."""
        logger.info(
            "Uploading blob",
            extra={"blob_name": blob_name, "size_bytes": len(data)},
        )
        return await self._call(
            "upload",
            blob_name,
            self._store.upload(blob_name, data, content_type or DEFAULT_CONTENT_TYPE),
        )

    async def download(self, blob_name: str) -> StorageResult[BlobContent]:
        logger.info("Downloading blob", extra={"blob_name": blob_name})
        missing = await self._require_existing(blob_name)
        if missing is not None:
            return missing
        return await self._call("download", blob_name, self._store.download(blob_name))

    async def update(
        self,
        blob_name: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> StorageResult[None]:
        """Overwrite an existing blob. NOT_FOUND if there is nothing to update."""
        missing = await self._require_existing(blob_name)
        if missing is not None:
            return missing
        return await self._call(
            "upload",
            blob_name,
            self._store.upload(blob_name, data, content_type or DEFAULT_CONTENT_TYPE),
        )

    async def delete(self, blob_name: str) -> StorageResult[None]:
        missing = await self._require_existing(blob_name)
        if missing is not None:
            return missing
        return await self._call("delete", blob_name, self._store.delete(blob_name))

    async def generate_signed_url(self, blob_name: str) -> StorageResult[str]:
        """Read-only URL for the blob, valid for one hour."""
        missing = await self._require_existing(blob_name)
        if missing is not None:
            return missing
        return await self._call(
            "generate sas",
            blob_name,
            self._store.signed_url(blob_name, self._signed_url_ttl),
        )

    async def _require_existing(self, blob_name: str) -> Optional[StorageResult]:
        """None if the blob exists, otherwise the failure result to return."""
        result = await self.exists(blob_name)
        if not result.ok:
            return result
        if not result.value:
            return StorageResult.failure(BlobNotFoundError(blob_name))
        return None

    async def _call(
        self,
        action: str,
        blob_name: Optional[str],
        operation: Awaitable[T],
    ) -> StorageResult[T]:
        try:
            value = await operation
        except StorageError as e:
            logger.warning(
                "Storage operation failed",
                extra={
                    "action": action,
                    "blob_name": blob_name,
                    "kind": e.kind.value,
                    "error": e.message,
                },
            )
            return StorageResult.failure(e)

        logger.debug("Storage operation succeeded", extra={"action": action, "blob_name": blob_name})
        return StorageResult.success(value)
