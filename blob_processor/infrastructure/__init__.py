"""
Infrastructure layer - external service integrations.

- storage: Object storage (Azure Blob, S3-compatible, in-memory)

These wrappers translate between SDK types and exceptions and our domain
models.
"""
