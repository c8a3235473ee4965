"""
Unit tests for the Azure Blob Storage backend.

No network access: SAS signing is local, and SDK calls are replaced with
MagicMock container clients. The connection string is the well-known
Azurite development account.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

import pytest
from azure.core.exceptions import (
    ClientAuthenticationError,
    HttpResponseError,
    ResourceExistsError,
    ResourceNotFoundError,
    ServiceRequestError,
)

from blob_processor.core.blobs.models import ErrorKind, StorageError
from blob_processor.infrastructure.storage.azure import AzureBlobStore, classify_azure_error

AZURITE_CONNECTION_STRING = (
    "DefaultEndpointsProtocol=http;"
    "AccountName=devstoreaccount1;"
    "AccountKey=Eby8vdM02xNOcqFlqUwJPLlmEtlCDXJ1OUzFT50uSRZ6IFsuFq2UVErCz4I6tq/K1SZFPTOtr/KBHBeksoGMGw==;"
    "BlobEndpoint=http://127.0.0.1:10000/devstoreaccount1;"
)


@pytest.fixture
def store():
    return AzureBlobStore(AZURITE_CONNECTION_STRING)


@pytest.fixture
def mocked_store():
    """Store whose container client is a MagicMock."""
    store = AzureBlobStore(AZURITE_CONNECTION_STRING)
    store._container_client = MagicMock()
    return store


def _http_error(status_code: int) -> HttpResponseError:
    error = HttpResponseError(message=f"status {status_code}")
    error.status_code = status_code
    return error


# ---------------------------------------------------------------------------
# Error Classification
# ---------------------------------------------------------------------------

class TestClassifyAzureError:
    """SDK exceptions map onto error kinds."""

    def test_resource_not_found(self):
        error = classify_azure_error(
            ResourceNotFoundError("The specified blob does not exist."),
            "download",
            "a.txt",
        )
        assert error.kind is ErrorKind.NOT_FOUND
        assert error.message.startswith("Unable to download a.txt, ")
        assert "does not exist" in error.message

    def test_authentication_failure(self):
        error = classify_azure_error(ClientAuthenticationError("bad signature"), "upload", "a.txt")
        assert error.kind is ErrorKind.PERMISSION_DENIED

    def test_connection_failure_is_transient(self):
        error = classify_azure_error(ServiceRequestError("connection refused"), "check", "a.txt")
        assert error.kind is ErrorKind.TRANSIENT_IO

    @pytest.mark.parametrize("status_code,kind", [
        (403, ErrorKind.PERMISSION_DENIED),
        (404, ErrorKind.NOT_FOUND),
        (429, ErrorKind.TRANSIENT_IO),
        (503, ErrorKind.TRANSIENT_IO),
        (400, ErrorKind.FAILURE),
        (409, ErrorKind.FAILURE),
    ])
    def test_http_status_codes(self, status_code, kind):
        assert classify_azure_error(_http_error(status_code), "upload", "a.txt").kind is kind

    def test_list_failure_message_has_no_blob_name(self):
        error = classify_azure_error(ServiceRequestError("timed out"), "get list of blobs")
        assert error.message == "Unable to get list of blobs, timed out"


# ---------------------------------------------------------------------------
# Signed URLs
# ---------------------------------------------------------------------------

class TestSasUrl:
    """SAS URLs are blob-scoped, read-only and expire after the given time."""

    def test_url_points_at_the_blob(self, store):
        url = store.build_sas_url("hello.txt", timedelta(hours=1))

        parsed = urlparse(url)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == (
            "http://127.0.0.1:10000/devstoreaccount1/filecontainer/hello.txt"
        )

    def test_token_is_read_only_and_blob_scoped(self, store):
        query = parse_qs(urlparse(store.build_sas_url("hello.txt", timedelta(hours=1))).query)

        assert query["sp"] == ["r"]
        assert query["sr"] == ["b"]
        assert "sig" in query

    def test_expiry_is_now_plus_ttl(self, store):
        now = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

        url = store.build_sas_url("hello.txt", timedelta(hours=1), now=now)

        query = parse_qs(urlparse(url).query)
        assert query["se"] == ["2026-01-01T13:00:00Z"]

    def test_sas_connection_string_cannot_sign(self):
        """Without an account key there is nothing to sign with."""
        store = AzureBlobStore(
            "BlobEndpoint=https://example.blob.core.windows.net/;"
            "SharedAccessSignature=sv=2022-11-02&ss=b&srt=co&sp=rl&sig=abc"
        )

        with pytest.raises(StorageError) as exc_info:
            store.build_sas_url("hello.txt", timedelta(hours=1))
        assert exc_info.value.kind is ErrorKind.PERMISSION_DENIED


# ---------------------------------------------------------------------------
# SDK Calls
# ---------------------------------------------------------------------------

class TestBlobCalls:
    """Each store method makes the expected SDK call."""

    @pytest.mark.asyncio
    async def test_upload_overwrites_with_content_type(self, mocked_store):
        blob_client = mocked_store._container_client.get_blob_client.return_value

        await mocked_store.upload("a.txt", b"hi", "text/plain")

        args, kwargs = blob_client.upload_blob.call_args
        assert args == (b"hi",)
        assert kwargs["overwrite"] is True
        assert kwargs["content_settings"].content_type == "text/plain"

    @pytest.mark.asyncio
    async def test_download_returns_bytes_and_content_type(self, mocked_store):
        downloader = mocked_store._container_client.get_blob_client.return_value.download_blob.return_value
        downloader.readall.return_value = b"hi"
        downloader.properties.content_settings.content_type = "text/plain"

        blob = await mocked_store.download("a.txt")

        assert blob.name == "a.txt"
        assert blob.data == b"hi"
        assert blob.content_type == "text/plain"

    @pytest.mark.asyncio
    async def test_list_names(self, mocked_store):
        mocked_store._container_client.list_blobs.return_value = [
            SimpleNamespace(name="a.txt"),
            SimpleNamespace(name="b.txt"),
        ]

        assert await mocked_store.list_names() == ["a.txt", "b.txt"]

    @pytest.mark.asyncio
    async def test_exists_failure_is_classified(self, mocked_store):
        blob_client = mocked_store._container_client.get_blob_client.return_value
        blob_client.exists.side_effect = ServiceRequestError("connection reset")

        with pytest.raises(StorageError) as exc_info:
            await mocked_store.exists("a.txt")

        assert exc_info.value.kind is ErrorKind.TRANSIENT_IO
        assert exc_info.value.message == "Unable to check a.txt, connection reset"

    @pytest.mark.asyncio
    async def test_delete_missing_blob_is_not_found(self, mocked_store):
        blob_client = mocked_store._container_client.get_blob_client.return_value
        blob_client.delete_blob.side_effect = ResourceNotFoundError("The specified blob does not exist.")

        with pytest.raises(StorageError) as exc_info:
            await mocked_store.delete("a.txt")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_ensure_container_tolerates_existing_container(self, mocked_store):
        mocked_store._container_client.create_container.side_effect = ResourceExistsError("exists")

        await mocked_store.ensure_container()

        mocked_store._container_client.create_container.assert_called_once()


class TestMissingConnectionString:
    """A missing connection string fails requests rather than startup."""

    def test_construction_does_not_raise(self):
        AzureBlobStore("")

    @pytest.mark.asyncio
    async def test_calls_report_missing_connection_string(self):
        store = AzureBlobStore("")

        with pytest.raises(StorageError) as exc_info:
            await store.list_names()

        assert exc_info.value.kind is ErrorKind.FAILURE
        assert exc_info.value.message == "Unable to get connection string"
