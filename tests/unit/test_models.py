"""
Unit tests for the blob domain types.

These tests verify the core types without touching external services
(no storage SDKs, no HTTP, no file system).

Testing philosophy:
- Test behavior, not implementation
- Each test should have a clear "given/when/then" structure
- Use descriptive names that explain what we're testing
- Prefer real objects over mocks where practical
"""

import pytest

from blob_processor.core.blobs.models import (
    DEFAULT_CONTENT_TYPE,
    BlobContent,
    BlobNotFoundError,
    ErrorKind,
    StorageError,
    StorageResult,
)


# ---------------------------------------------------------------------------
# BlobContent Tests
# ---------------------------------------------------------------------------

class TestBlobContent:
    """Tests for the BlobContent value object."""

    def test_size_is_byte_length(self):
        blob = BlobContent(name="hello.txt", data=b"hi")
        assert blob.size == 2

    def test_defaults_to_octet_stream(self):
        """Uploads without a content type are served as opaque bytes."""
        blob = BlobContent(name="data.bin", data=b"\x00\x01")
        assert blob.content_type == DEFAULT_CONTENT_TYPE

    def test_rejects_empty_name(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            BlobContent(name="", data=b"x")

    def test_is_immutable(self):
        """A download is a snapshot; mutating it would be misleading."""
        blob = BlobContent(name="a", data=b"x")
        with pytest.raises(AttributeError):
            blob.data = b"y"


# ---------------------------------------------------------------------------
# StorageError Tests
# ---------------------------------------------------------------------------

class TestStorageError:
    """Tests for error classification."""

    def test_only_transient_errors_are_retryable(self):
        assert StorageError(ErrorKind.TRANSIENT_IO, "timeout").is_retryable
        assert not StorageError(ErrorKind.NOT_FOUND, "gone").is_retryable
        assert not StorageError(ErrorKind.PERMISSION_DENIED, "no").is_retryable
        assert not StorageError(ErrorKind.FAILURE, "boom").is_retryable

    def test_message_is_exception_text(self):
        error = StorageError(ErrorKind.FAILURE, "Unable to upload a.txt, boom", blob_name="a.txt")
        assert str(error) == "Unable to upload a.txt, boom"
        assert error.blob_name == "a.txt"

    def test_not_found_error_has_default_message(self):
        error = BlobNotFoundError("hello.txt")
        assert error.kind is ErrorKind.NOT_FOUND
        assert error.message == "Blob hello.txt not found."
        assert isinstance(error, StorageError)


# ---------------------------------------------------------------------------
# StorageResult Tests
# ---------------------------------------------------------------------------

class TestStorageResult:
    """Tests for the StorageResult wrapper."""

    def test_success_carries_value(self):
        result = StorageResult.success(["a", "b"])

        assert result.ok
        assert result.kind is None
        assert result.unwrap() == ["a", "b"]

    def test_success_without_value(self):
        """Upload and delete succeed with nothing to return."""
        result = StorageResult.success()
        assert result.ok
        assert result.value is None

    def test_failure_exposes_kind(self):
        result = StorageResult.failure(BlobNotFoundError("x"))

        assert not result.ok
        assert result.kind is ErrorKind.NOT_FOUND
        assert result.value is None

    def test_unwrap_raises_carried_error(self):
        error = StorageError(ErrorKind.TRANSIENT_IO, "connection reset")
        result = StorageResult.failure(error)

        with pytest.raises(StorageError) as exc_info:
            result.unwrap()
        assert exc_info.value is error
