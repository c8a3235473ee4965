"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

The storage account is identified by a single connection string, read from
the same variable the Azure Functions host uses (AzureWebJobsStorage).
Mock mode enables local development without a storage account.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


StorageBackendName = Literal["azure", "s3", "memory"]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Blob Processor API"

    # Storage Configuration
    storage_connection_string: str = Field(
        default="",
        validation_alias=AliasChoices("AzureWebJobsStorage", "storage_connection_string"),
        description="Storage account connection string. Required for the azure backend."
    )
    storage_backend: StorageBackendName = Field(
        default="azure",
        description="Which object store to talk to: azure, s3 (any S3-compatible endpoint) or memory."
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use the in-memory store regardless of storage_backend. Enables local dev without a storage account."
    )

    # S3-compatible storage (only read when storage_backend is s3)
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="Endpoint for R2, MinIO, etc. Leave unset for AWS S3."
    )
    s3_access_key_id: str = Field(
        default="",
        description="S3 access key ID"
    )
    s3_secret_access_key: str = Field(
        default="",
        description="S3 secret access key"
    )
    s3_region: str = Field(
        default="auto",
        description="S3 region. R2 uses 'auto'."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def backend(self) -> StorageBackendName:
        """The backend actually in use, taking mock mode into account."""
        if self.storage_mock_mode:
            return "memory"
        return self.storage_backend

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set for the selected backend.

        Returns list of missing required fields.
        This is separate from Pydantic validation because requirements
        depend on which backend is in use.
        """
        missing = []

        if self.backend == "azure":
            if not self.storage_connection_string:
                missing.append("AzureWebJobsStorage")
        elif self.backend == "s3":
            if not self.s3_access_key_id:
                missing.append("S3_ACCESS_KEY_ID")
            if not self.s3_secret_access_key:
                missing.append("S3_SECRET_ACCESS_KEY")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    This is safe because settings don't change during runtime.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
