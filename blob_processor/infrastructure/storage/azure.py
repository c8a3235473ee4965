"""
Azure Blob Storage backend.

Talks to a single container in the account named by the connection
string. The SDK client is created on first use rather than in the
constructor, so a missing connection string is logged at startup and
surfaces as a failed request instead of a process that never starts.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    HttpResponseError,
    ResourceExistsError,
    ResourceNotFoundError,
    ServiceRequestError,
    ServiceResponseError,
)
from azure.storage.blob import (
    BlobSasPermissions,
    BlobServiceClient,
    ContainerClient,
    ContentSettings,
    generate_blob_sas,
)

from ...core.blobs.gateway import CONTAINER_NAME
from ...core.blobs.models import DEFAULT_CONTENT_TYPE, BlobContent, ErrorKind, StorageError
from .base import TRANSIENT_HTTP_STATUSES, run_blocking, storage_error

logger = logging.getLogger(__name__)


def classify_azure_error(
    error: AzureError,
    action: str,
    blob_name: Optional[str] = None,
) -> StorageError:
    """Map an Azure SDK exception onto a StorageError with the right kind."""
    detail = getattr(error, "message", None) or str(error)

    if isinstance(error, ResourceNotFoundError):
        kind = ErrorKind.NOT_FOUND
    elif isinstance(error, ClientAuthenticationError):
        kind = ErrorKind.PERMISSION_DENIED
    elif isinstance(error, (ServiceRequestError, ServiceResponseError)):
        kind = ErrorKind.TRANSIENT_IO
    elif isinstance(error, HttpResponseError):
        status_code = error.status_code
        if status_code == 404:
            kind = ErrorKind.NOT_FOUND
        elif status_code in (401, 403):
            kind = ErrorKind.PERMISSION_DENIED
        elif status_code in TRANSIENT_HTTP_STATUSES:
            kind = ErrorKind.TRANSIENT_IO
        else:
            kind = ErrorKind.FAILURE
    else:
        kind = ErrorKind.FAILURE

    return storage_error(kind, action, blob_name, detail)


class AzureBlobStore:
    """
    Azure Blob Storage client for one container.

    All methods are async to match the BlobStore protocol. The SDK is
    synchronous, so each call runs in the default executor.
    """

    name = "azure"

    def __init__(
        self,
        connection_string: str,
        container_name: str = CONTAINER_NAME,
    ) -> None:
        self._connection_string = connection_string
        self._container_name = container_name
        self._service_client: Optional[BlobServiceClient] = None
        self._container_client: Optional[ContainerClient] = None

    @property
    def container_name(self) -> str:
        return self._container_name

    @property
    def service_client(self) -> BlobServiceClient:
        """Get or create the BlobServiceClient."""
        if self._service_client is None:
            if not self._connection_string:
                raise StorageError(
                    ErrorKind.FAILURE,
                    "Unable to get connection string",
                )
            try:
                self._service_client = BlobServiceClient.from_connection_string(
                    self._connection_string
                )
            except ValueError as e:
                raise StorageError(
                    ErrorKind.FAILURE,
                    f"Invalid connection string, {e}",
                ) from e

            logger.info(
                "Initialized Azure blob storage client",
                extra={
                    "account": self._service_client.account_name,
                    "container": self._container_name,
                }
            )
        return self._service_client

    @property
    def container_client(self) -> ContainerClient:
        if self._container_client is None:
            self._container_client = self.service_client.get_container_client(
                self._container_name
            )
        return self._container_client

    async def ensure_container(self) -> None:
        """Create the container if it is missing."""
        container = self.container_client
        try:
            await run_blocking(container.create_container)
            logger.info("Created blob container", extra={"container": self._container_name})
        except ResourceExistsError:
            logger.debug("Blob container already exists", extra={"container": self._container_name})
        except AzureError as e:
            raise classify_azure_error(e, "create container", self._container_name) from e

    async def container_exists(self) -> bool:
        container = self.container_client
        try:
            return await run_blocking(container.exists)
        except AzureError as e:
            raise classify_azure_error(e, "check container", self._container_name) from e

    async def list_names(self) -> list[str]:
        container = self.container_client
        try:
            return await run_blocking(
                lambda: [blob.name for blob in container.list_blobs()]
            )
        except AzureError as e:
            raise classify_azure_error(e, "get list of blobs") from e

    async def exists(self, blob_name: str) -> bool:
        blob_client = self.container_client.get_blob_client(blob_name)
        try:
            return await run_blocking(blob_client.exists)
        except AzureError as e:
            raise classify_azure_error(e, "check", blob_name) from e

    async def upload(self, blob_name: str, data: bytes, content_type: str) -> None:
        blob_client = self.container_client.get_blob_client(blob_name)
        try:
            await run_blocking(
                blob_client.upload_blob,
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
        except AzureError as e:
            raise classify_azure_error(e, "upload", blob_name) from e

        logger.debug(
            "Uploaded blob",
            extra={"blob_name": blob_name, "size_bytes": len(data)},
        )

    async def download(self, blob_name: str) -> BlobContent:
        blob_client = self.container_client.get_blob_client(blob_name)

        def _read() -> BlobContent:
            downloader = blob_client.download_blob()
            data = downloader.readall()
            settings = downloader.properties.content_settings
            content_type = (settings.content_type if settings else None) or DEFAULT_CONTENT_TYPE
            return BlobContent(name=blob_name, data=data, content_type=content_type)

        try:
            return await run_blocking(_read)
        except AzureError as e:
            raise classify_azure_error(e, "download", blob_name) from e

    async def delete(self, blob_name: str) -> None:
        blob_client = self.container_client.get_blob_client(blob_name)
        try:
            await run_blocking(blob_client.delete_blob)
        except AzureError as e:
            raise classify_azure_error(e, "delete", blob_name) from e

        logger.debug("Deleted blob", extra={"blob_name": blob_name})

    async def signed_url(self, blob_name: str, expires_in: timedelta) -> str:
        return self.build_sas_url(blob_name, expires_in)

    def build_sas_url(
        self,
        blob_name: str,
        expires_in: timedelta,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Build a read-only, blob-scoped SAS URL.

        Signing happens locally with the account key, so this makes no
        network call. Connection strings that carry a SAS token instead of
        an account key can't mint new signatures.
        """
        service_client = self.service_client
        account_key = getattr(service_client.credential, "account_key", None)
        if not account_key:
            raise storage_error(
                ErrorKind.PERMISSION_DENIED,
                "generate sas",
                blob_name,
                "connection string has no account key",
            )

        expiry = (now or datetime.now(timezone.utc)) + expires_in
        sas_token = generate_blob_sas(
            account_name=service_client.account_name,
            container_name=self._container_name,
            blob_name=blob_name,
            account_key=account_key,
            permission=BlobSasPermissions(read=True),
            expiry=expiry,
        )

        blob_url = self.container_client.get_blob_client(blob_name).url
        return f"{blob_url}?{sas_token}"

    async def close(self) -> None:
        if self._service_client is not None:
            self._service_client.close()
            self._service_client = None
            self._container_client = None
