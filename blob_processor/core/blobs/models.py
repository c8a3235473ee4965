"""
Domain models for blob storage.

A blob is just a name and some bytes with a content type. Everything else
(existence, consistency, durability) belongs to the storage account, so
these types only describe what crosses the boundary between our code and
the store.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

DEFAULT_CONTENT_TYPE = "application/octet-stream"

T = TypeVar("T")


class ErrorKind(Enum):
    """
    Classification of storage failures.

    Callers branch on the kind instead of parsing SDK messages. Only
    TRANSIENT_IO is worth retrying; the others will fail the same way again.
    """
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    TRANSIENT_IO = "transient_io"
    FAILURE = "failure"


class StorageError(Exception):
    """Raised by blob stores when an SDK call fails."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        blob_name: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.blob_name = blob_name

    @property
    def is_retryable(self) -> bool:
        return self.kind is ErrorKind.TRANSIENT_IO

    def __repr__(self) -> str:
        return f"StorageError(kind={self.kind.value!r}, message={self.message!r})"


class BlobNotFoundError(StorageError):
    """The named blob does not exist in the container."""

    def __init__(self, blob_name: str, message: Optional[str] = None) -> None:
        super().__init__(
            ErrorKind.NOT_FOUND,
            message or f"Blob {blob_name} not found.",
            blob_name=blob_name,
        )


@dataclass(frozen=True)
class BlobContent:
    """
    Downloaded blob: bytes plus the content type they were stored with.

    Frozen because a download is a snapshot, not a handle to the live blob.
    """
    name: str
    data: bytes
    content_type: str = DEFAULT_CONTENT_TYPE

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Blob name cannot be empty")

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class StorageResult(Generic[T]):
    """
    Outcome of a gateway operation: either a value or a classified error.

    The gateway returns these instead of raising so route handlers can map
    each ErrorKind to a response without try/except around every call.
    """
    value: Optional[T] = None
    error: Optional[StorageError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "StorageResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: StorageError) -> "StorageResult[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
