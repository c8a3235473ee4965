"""
Blob storage domain.

Contains the blob types, the error classification, and the gateway that
route handlers call.
"""

from .gateway import CONTAINER_NAME, SIGNED_URL_TTL, BlobGateway, BlobStore
from .models import (
    DEFAULT_CONTENT_TYPE,
    BlobContent,
    BlobNotFoundError,
    ErrorKind,
    StorageError,
    StorageResult,
)

__all__ = [
    "CONTAINER_NAME",
    "DEFAULT_CONTENT_TYPE",
    "SIGNED_URL_TTL",
    "BlobContent",
    "BlobGateway",
    "BlobNotFoundError",
    "BlobStore",
    "ErrorKind",
    "StorageError",
    "StorageResult",
]
