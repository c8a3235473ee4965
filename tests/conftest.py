"""
Shared test fixtures.
"""

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for name in (
        "AzureWebJobsStorage",
        "STORAGE_BACKEND",
        "STORAGE_MOCK_MODE",
        "S3_ENDPOINT_URL",
        "S3_ACCESS_KEY_ID",
        "S3_SECRET_ACCESS_KEY",
        "S3_REGION",
        "CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
