"""Fixtures for live storage tests.

These tests require a reachable storage account, configured via environment
variables:
- AZURE_STORAGE_CONNECTION_STRING: connection string for a real account, or
  ``UseDevelopmentStorage=true`` for a local emulator
- AZURE_STORAGE_CONTAINER_NAME (optional): container to use, created if missing
"""

import os
import time
import uuid
from collections.abc import Generator

import pytest

from simple_storage.blob import BlobClient, ClientOptions


def has_storage_credentials() -> bool:
    """Check if a storage connection string is available."""
    return bool(os.getenv("AZURE_STORAGE_CONNECTION_STRING"))


requires_storage_credentials = pytest.mark.skipif(
    not has_storage_credentials(),
    reason="Requires AZURE_STORAGE_CONNECTION_STRING environment variable",
)


@pytest.fixture
def connection_string() -> str:
    """Get the storage connection string from environment."""
    value = os.getenv("AZURE_STORAGE_CONNECTION_STRING")
    if not value:
        pytest.skip("AZURE_STORAGE_CONNECTION_STRING environment variable not set")
    return value


@pytest.fixture
def container_name() -> str:
    return os.getenv("AZURE_STORAGE_CONTAINER_NAME") or "simple-storage-live-tests"


@pytest.fixture
def live_options() -> ClientOptions:
    return ClientOptions(create_container_if_not_exists=True)


@pytest.fixture
def unique_blob_name() -> str:
    """Generate a unique blob name for testing.

    Format: test/{timestamp}-{uuid}/file.txt
    """
    timestamp = int(time.time())
    unique_id = uuid.uuid4().hex[:8]
    return f"test/{timestamp}-{unique_id}/file.txt"


@pytest.fixture
def cleanup_blobs(connection_string, container_name) -> Generator[list[str], None, None]:
    """Blob names appended to the yielded list are deleted after the test."""
    names: list[str] = []
    yield names

    if not names:
        return
    with BlobClient(connection_string, container_name) as client:
        for name in names:
            if client.exists(name):
                client.delete(name)
