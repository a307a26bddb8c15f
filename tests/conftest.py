"""Shared fixtures for all tests."""

import uuid
from collections.abc import Generator, Iterator
from datetime import datetime, timezone
from typing import Any

import pytest

from simple_storage.blob import AsyncBlobClient, BlobClient
from simple_storage.blob.types import BlobItem, BlobMetadata, DownloadStream
from simple_storage.blob.utils import await_if_necessary

DEV_STORAGE = "UseDevelopmentStorage=true"
TEST_CONTAINER = "test-container"


class FakeStorageError(Exception):
    """Shaped like the SDK's HttpResponseError: status_code, error_code, message."""

    def __init__(self, status_code: int | None, error_code: str | None = None, message: str = "boom"):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.message = message


class InMemoryBlobBackend:
    """Blocking backend keeping blobs in a dict.

    ``failures`` maps a method name to an exception raised on its next call.
    """

    def __init__(self, container_name: str = TEST_CONTAINER, *, chunk_size: int = 4) -> None:
        self.container_name = container_name
        self.chunk_size = chunk_size
        self.blobs: dict[str, dict[str, Any]] = {}
        self.container_exists = True
        self.failures: dict[str, Exception] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.container_client = object()
        self.close_count = 0
        self.missing_body = False

    def _record(self, method: str, **kwargs: Any) -> None:
        self.calls.append((method, kwargs))
        error = self.failures.pop(method, None)
        if error is not None:
            raise error

    def _require_container(self) -> None:
        if not self.container_exists:
            raise FakeStorageError(404, "ContainerNotFound", "The specified container does not exist.")

    def _require_blob(self, blob_name: str) -> dict[str, Any]:
        self._require_container()
        if blob_name not in self.blobs:
            raise FakeStorageError(404, "BlobNotFound", "The specified blob does not exist.")
        return self.blobs[blob_name]

    def _chunks(self, data: bytes) -> Iterator[bytes]:
        for i in range(0, len(data), self.chunk_size):
            yield data[i : i + self.chunk_size]

    def _store(self, blob_name: str, data: Any, *, content_type: str, metadata: Any, tags: Any, overwrite: bool) -> bytes:
        self._require_container()
        if not overwrite and blob_name in self.blobs:
            raise FakeStorageError(409, "BlobAlreadyExists", "The specified blob already exists.")
        payload = data if isinstance(data, bytes) else data.read()
        self.blobs[blob_name] = {
            "data": payload,
            "content_type": content_type,
            "metadata": dict(metadata or {}),
            "tags": dict(tags or {}),
            "last_modified": datetime.now(tz=timezone.utc),
            "etag": f'"0x{uuid.uuid4().hex[:12].upper()}"',
        }
        return payload

    def _stream(self, blob_name: str, offset: int | None, length: int | None) -> DownloadStream:
        data = self._require_blob(blob_name)["data"]
        if offset is not None:
            data = data[offset : offset + length if length is not None else None]
        if self.missing_body:
            return DownloadStream(size=len(data), chunks=None)
        return DownloadStream(size=len(data), chunks=self._chunks(data))

    def _properties(self, blob_name: str) -> BlobMetadata:
        blob = self._require_blob(blob_name)
        return BlobMetadata(
            content_type=blob["content_type"],
            content_length=len(blob["data"]),
            last_modified=blob["last_modified"],
            etag=blob["etag"],
            metadata=dict(blob["metadata"]),
        )

    def _items(self, prefix: str | None, include_metadata: bool) -> list[BlobItem]:
        self._require_container()
        return [
            BlobItem(
                name=name,
                size=len(blob["data"]),
                last_modified=blob["last_modified"],
                content_type=blob["content_type"],
                metadata=dict(blob["metadata"]) if include_metadata else None,
                etag=blob["etag"],
            )
            for name, blob in sorted(self.blobs.items())
            if prefix is None or name.startswith(prefix)
        ]

    def create_container_if_not_exists(self) -> None:
        self._record("create_container_if_not_exists")
        self.container_exists = True

    def upload(self, blob_name, data, *, length, content_type, metadata, tags, overwrite, progress_hook):
        self._record("upload", blob_name=blob_name, length=length, content_type=content_type, overwrite=overwrite)
        payload = self._store(
            blob_name, data, content_type=content_type, metadata=metadata, tags=tags, overwrite=overwrite
        )
        if progress_hook is not None:
            for end in range(self.chunk_size, len(payload), self.chunk_size):
                progress_hook(end, length)

    def download(self, blob_name, *, offset, length):
        self._record("download", blob_name=blob_name, offset=offset, length=length)
        return self._stream(blob_name, offset, length)

    def exists(self, blob_name):
        self._record("exists", blob_name=blob_name)
        self._require_container()
        return blob_name in self.blobs

    def delete(self, blob_name):
        self._record("delete", blob_name=blob_name)
        self._require_blob(blob_name)
        del self.blobs[blob_name]

    def get_properties(self, blob_name):
        self._record("get_properties", blob_name=blob_name)
        return self._properties(blob_name)

    def get_tags(self, blob_name):
        self._record("get_tags", blob_name=blob_name)
        return dict(self._require_blob(blob_name)["tags"])

    def set_metadata(self, blob_name, metadata):
        self._record("set_metadata", blob_name=blob_name)
        self._require_blob(blob_name)["metadata"] = dict(metadata)

    def list_blobs(self, *, prefix, include_metadata, results_per_page):
        self._record(
            "list_blobs", prefix=prefix, include_metadata=include_metadata, results_per_page=results_per_page
        )
        yield from self._items(prefix, include_metadata)

    def get_container_client(self):
        return self.container_client

    def close(self):
        self.close_count += 1


class AsyncInMemoryBlobBackend(InMemoryBlobBackend):
    """asyncio flavour of :class:`InMemoryBlobBackend`; bodies are async iterators."""

    async def _achunks(self, data: bytes):
        for chunk in self._chunks(data):
            yield chunk

    async def create_container_if_not_exists(self):
        super().create_container_if_not_exists()

    async def upload(self, blob_name, data, *, length, content_type, metadata, tags, overwrite, progress_hook):
        self._record("upload", blob_name=blob_name, length=length, content_type=content_type, overwrite=overwrite)
        payload = self._store(
            blob_name, data, content_type=content_type, metadata=metadata, tags=tags, overwrite=overwrite
        )
        if progress_hook is not None:
            for end in range(self.chunk_size, len(payload), self.chunk_size):
                await await_if_necessary(progress_hook(end, length))

    async def download(self, blob_name, *, offset, length):
        stream = super().download(blob_name, offset=offset, length=length)
        if stream.chunks is None:
            return stream
        return DownloadStream(size=stream.size, chunks=self._achunks(b"".join(stream.chunks)))

    async def exists(self, blob_name):
        return super().exists(blob_name)

    async def delete(self, blob_name):
        super().delete(blob_name)

    async def get_properties(self, blob_name):
        return super().get_properties(blob_name)

    async def get_tags(self, blob_name):
        return super().get_tags(blob_name)

    async def set_metadata(self, blob_name, metadata):
        super().set_metadata(blob_name, metadata)

    async def list_blobs(self, *, prefix, include_metadata, results_per_page):
        for item in super().list_blobs(
            prefix=prefix, include_metadata=include_metadata, results_per_page=results_per_page
        ):
            yield item

    async def close(self):
        super().close()


@pytest.fixture
def mock_env_clear(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear all storage-related environment variables for testing.

    This ensures tests don't accidentally use real credentials from the environment.
    """
    env_vars_to_clear = [
        "AZURE_STORAGE_CONNECTION_STRING",
        "AZURE_STORAGE_ACCOUNT_URL",
        "AZURE_STORAGE_ACCOUNT_NAME",
        "AZURE_STORAGE_CONTAINER_NAME",
        "DEBUG",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def memory_backend() -> InMemoryBlobBackend:
    return InMemoryBlobBackend()


@pytest.fixture
def async_memory_backend() -> AsyncInMemoryBlobBackend:
    return AsyncInMemoryBlobBackend()


@pytest.fixture
def blob_client(memory_backend: InMemoryBlobBackend) -> BlobClient:
    """Blocking client wired to the in-memory backend."""
    return BlobClient(DEV_STORAGE, TEST_CONTAINER, backend=memory_backend)


@pytest.fixture
def async_blob_client(async_memory_backend: AsyncInMemoryBlobBackend) -> AsyncBlobClient:
    """asyncio client wired to the in-memory backend."""
    return AsyncBlobClient(DEV_STORAGE, TEST_CONTAINER, backend=async_memory_backend)


