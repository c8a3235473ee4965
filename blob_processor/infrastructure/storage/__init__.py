"""
Object storage integration for blobs.

Supports Azure Blob Storage and S3-compatible services (AWS S3, R2, MinIO).
Includes mock mode for local development without credentials.
"""

from .azure import AzureBlobStore
from .client import InMemoryBlobStore, create_blob_store
from .s3 import S3BlobStore, S3StorageConfig

__all__ = [
    "AzureBlobStore",
    "InMemoryBlobStore",
    "S3BlobStore",
    "S3StorageConfig",
    "create_blob_store",
]
