"""
Blob Processor - an HTTP API over a cloud object-storage container.

This package contains the complete application:
- core: Framework-agnostic blob gateway and domain types
- infrastructure: Storage SDK integrations (Azure Blob, S3, in-memory)
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
