from __future__ import annotations

from collections.abc import Callable, Mapping
from os import PathLike
from typing import Any, TypeVar

from .._iter_coroutine import iter_coroutine
from ._backend import BlobBackend, create_async_blob_backend, create_blob_backend
from ._core import RangeArg, _BlobClientCore
from ._endpoint import EndpointPlan, resolve_endpoint, split_credential_and_options
from .errors import BlobError
from .types import BlobItem, BlobMetadata, ClientOptions, OnProgressCallback
from .utils import get_container_name_from_env, get_descriptor_from_env

_ClientT = TypeVar("_ClientT", bound="_BaseBlobClient")


class _BaseBlobClient:
    _core: _BlobClientCore
    _closed: bool

    def __init__(
        self,
        descriptor: str,
        container_name: str,
        credential_or_options: Any = None,
        options: ClientOptions | Mapping[str, Any] | None = None,
        *,
        backend: BlobBackend | None,
        backend_factory: Callable[[EndpointPlan], BlobBackend],
        await_progress_callback: bool,
    ) -> None:
        credential, client_options = split_credential_and_options(credential_or_options, options)
        endpoint = resolve_endpoint(descriptor, container_name, credential, client_options)
        self._core = _BlobClientCore(
            backend=backend if backend is not None else backend_factory(endpoint),
            endpoint=endpoint,
            options=client_options,
            await_progress_callback=await_progress_callback,
        )
        self._closed = False

    @classmethod
    def from_env(
        cls: type[_ClientT],
        container_name: str | None = None,
        *,
        credential: Any = None,
        options: ClientOptions | Mapping[str, Any] | None = None,
    ) -> _ClientT:
        """Build a client from the ``AZURE_STORAGE_*`` environment variables."""
        return cls(
            get_descriptor_from_env(),
            get_container_name_from_env(container_name),
            credential,
            options,
        )

    @property
    def container_name(self) -> str:
        return self._core.container_name

    @property
    def endpoint(self) -> EndpointPlan:
        return self._core._endpoint

    @property
    def options(self) -> ClientOptions:
        return self._core._options

    def _ensure_open(self) -> None:
        if self._closed:
            raise BlobError("Client is closed")

    def get_container_client(self) -> Any:
        """Return the underlying SDK container client."""
        self._ensure_open()
        return self._core.get_container_client()


class BlobClient(_BaseBlobClient):
    """Blocking client for a single storage container.

    ``descriptor`` is a connection string, a storage account name, or an
    account or container URL (optionally carrying a SAS token). The third
    argument is either a credential or client options.

    Example:
        >>> with BlobClient(conn_str, "reports") as client:
        ...     client.upload_from_string("hello.txt", "hi")
        ...     client.download_as_string("hello.txt")
        'hi'
    """

    def __init__(
        self,
        descriptor: str,
        container_name: str,
        credential_or_options: Any = None,
        options: ClientOptions | Mapping[str, Any] | None = None,
        *,
        backend: BlobBackend | None = None,
    ) -> None:
        super().__init__(
            descriptor,
            container_name,
            credential_or_options,
            options,
            backend=backend,
            backend_factory=create_blob_backend,
            await_progress_callback=False,
        )

    def upload_from_string(
        self,
        blob_name: str,
        content: str,
        *,
        content_type: str | None = None,
        metadata: Mapping[str, str] | None = None,
        tags: Mapping[str, str] | None = None,
        overwrite: bool = True,
        on_progress: OnProgressCallback | None = None,
    ) -> None:
        self._ensure_open()
        iter_coroutine(
            self._core.upload_from_string(
                blob_name,
                content,
                content_type=content_type,
                metadata=metadata,
                tags=tags,
                overwrite=overwrite,
                on_progress=on_progress,
            )
        )

    def upload_from_bytes(
        self,
        blob_name: str,
        data: bytes | bytearray | memoryview,
        *,
        content_type: str | None = None,
        metadata: Mapping[str, str] | None = None,
        tags: Mapping[str, str] | None = None,
        overwrite: bool = True,
        on_progress: OnProgressCallback | None = None,
    ) -> None:
        self._ensure_open()
        iter_coroutine(
            self._core.upload_from_bytes(
                blob_name,
                data,
                content_type=content_type,
                metadata=metadata,
                tags=tags,
                overwrite=overwrite,
                on_progress=on_progress,
            )
        )

    def upload_from_file(
        self,
        blob_name: str,
        file_path: str | PathLike,
        *,
        content_type: str | None = None,
        metadata: Mapping[str, str] | None = None,
        tags: Mapping[str, str] | None = None,
        overwrite: bool = True,
        on_progress: OnProgressCallback | None = None,
    ) -> None:
        self._ensure_open()
        iter_coroutine(
            self._core.upload_from_file(
                blob_name,
                file_path,
                content_type=content_type,
                metadata=metadata,
                tags=tags,
                overwrite=overwrite,
                on_progress=on_progress,
            )
        )

    def upload_json(
        self,
        blob_name: str,
        data: Any,
        *,
        metadata: Mapping[str, str] | None = None,
        tags: Mapping[str, str] | None = None,
        overwrite: bool = True,
        on_progress: OnProgressCallback | None = None,
    ) -> None:
        self._ensure_open()
        iter_coroutine(
            self._core.upload_json(
                blob_name,
                data,
                metadata=metadata,
                tags=tags,
                overwrite=overwrite,
                on_progress=on_progress,
            )
        )

    def download_as_string(
        self,
        blob_name: str,
        encoding: str = "utf-8",
        *,
        byte_range: RangeArg = None,
        on_progress: OnProgressCallback | None = None,
    ) -> str:
        self._ensure_open()
        return iter_coroutine(
            self._core.download_as_string(
                blob_name, encoding, byte_range=byte_range, on_progress=on_progress
            )
        )

    def download_as_bytes(
        self,
        blob_name: str,
        *,
        byte_range: RangeArg = None,
        on_progress: OnProgressCallback | None = None,
    ) -> bytes:
        self._ensure_open()
        return iter_coroutine(
            self._core.download_as_bytes(
                blob_name, byte_range=byte_range, on_progress=on_progress
            )
        )

    def download_as_json(
        self,
        blob_name: str,
        *,
        byte_range: RangeArg = None,
        on_progress: OnProgressCallback | None = None,
    ) -> Any:
        self._ensure_open()
        return iter_coroutine(
            self._core.download_as_json(
                blob_name, byte_range=byte_range, on_progress=on_progress
            )
        )

    def download_to_file(
        self,
        blob_name: str,
        file_path: str | PathLike,
        *,
        byte_range: RangeArg = None,
        on_progress: OnProgressCallback | None = None,
    ) -> int:
        """Stream a blob into ``file_path`` and return the number of bytes written."""
        self._ensure_open()
        return iter_coroutine(
            self._core.download_to_file(
                blob_name, file_path, byte_range=byte_range, on_progress=on_progress
            )
        )

    def exists(self, blob_name: str) -> bool:
        self._ensure_open()
        return iter_coroutine(self._core.exists(blob_name))

    def delete(self, blob_name: str) -> None:
        self._ensure_open()
        iter_coroutine(self._core.delete(blob_name))

    def list_blobs(
        self,
        prefix: str | None = None,
        *,
        max_results: int | None = None,
        include_metadata: bool = True,
    ) -> list[BlobItem]:
        self._ensure_open()
        return iter_coroutine(
            self._core.list_blobs(
                prefix, max_results=max_results, include_metadata=include_metadata
            )
        )

    def get_metadata(self, blob_name: str, *, include_tags: bool = False) -> BlobMetadata:
        self._ensure_open()
        return iter_coroutine(self._core.get_metadata(blob_name, include_tags=include_tags))

    def set_metadata(self, blob_name: str, metadata: Mapping[str, str]) -> None:
        self._ensure_open()
        iter_coroutine(self._core.set_metadata(blob_name, metadata))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        iter_coroutine(self._core.close())

    def __enter__(self) -> BlobClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class AsyncBlobClient(_BaseBlobClient):
    """asyncio client for a single storage container.

    Same surface as :class:`BlobClient`; progress callbacks may be coroutine
    functions.
    """

    def __init__(
        self,
        descriptor: str,
        container_name: str,
        credential_or_options: Any = None,
        options: ClientOptions | Mapping[str, Any] | None = None,
        *,
        backend: BlobBackend | None = None,
    ) -> None:
        super().__init__(
            descriptor,
            container_name,
            credential_or_options,
            options,
            backend=backend,
            backend_factory=create_async_blob_backend,
            await_progress_callback=True,
        )

    async def upload_from_string(
        self,
        blob_name: str,
        content: str,
        *,
        content_type: str | None = None,
        metadata: Mapping[str, str] | None = None,
        tags: Mapping[str, str] | None = None,
        overwrite: bool = True,
        on_progress: OnProgressCallback | None = None,
    ) -> None:
        self._ensure_open()
        await self._core.upload_from_string(
            blob_name,
            content,
            content_type=content_type,
            metadata=metadata,
            tags=tags,
            overwrite=overwrite,
            on_progress=on_progress,
        )

    async def upload_from_bytes(
        self,
        blob_name: str,
        data: bytes | bytearray | memoryview,
        *,
        content_type: str | None = None,
        metadata: Mapping[str, str] | None = None,
        tags: Mapping[str, str] | None = None,
        overwrite: bool = True,
        on_progress: OnProgressCallback | None = None,
    ) -> None:
        self._ensure_open()
        await self._core.upload_from_bytes(
            blob_name,
            data,
            content_type=content_type,
            metadata=metadata,
            tags=tags,
            overwrite=overwrite,
            on_progress=on_progress,
        )

    async def upload_from_file(
        self,
        blob_name: str,
        file_path: str | PathLike,
        *,
        content_type: str | None = None,
        metadata: Mapping[str, str] | None = None,
        tags: Mapping[str, str] | None = None,
        overwrite: bool = True,
        on_progress: OnProgressCallback | None = None,
    ) -> None:
        self._ensure_open()
        await self._core.upload_from_file(
            blob_name,
            file_path,
            content_type=content_type,
            metadata=metadata,
            tags=tags,
            overwrite=overwrite,
            on_progress=on_progress,
        )

    async def upload_json(
        self,
        blob_name: str,
        data: Any,
        *,
        metadata: Mapping[str, str] | None = None,
        tags: Mapping[str, str] | None = None,
        overwrite: bool = True,
        on_progress: OnProgressCallback | None = None,
    ) -> None:
        self._ensure_open()
        await self._core.upload_json(
            blob_name,
            data,
            metadata=metadata,
            tags=tags,
            overwrite=overwrite,
            on_progress=on_progress,
        )

    async def download_as_string(
        self,
        blob_name: str,
        encoding: str = "utf-8",
        *,
        byte_range: RangeArg = None,
        on_progress: OnProgressCallback | None = None,
    ) -> str:
        self._ensure_open()
        return await self._core.download_as_string(
            blob_name, encoding, byte_range=byte_range, on_progress=on_progress
        )

    async def download_as_bytes(
        self,
        blob_name: str,
        *,
        byte_range: RangeArg = None,
        on_progress: OnProgressCallback | None = None,
    ) -> bytes:
        self._ensure_open()
        return await self._core.download_as_bytes(
            blob_name, byte_range=byte_range, on_progress=on_progress
        )

    async def download_as_json(
        self,
        blob_name: str,
        *,
        byte_range: RangeArg = None,
        on_progress: OnProgressCallback | None = None,
    ) -> Any:
        self._ensure_open()
        return await self._core.download_as_json(
            blob_name, byte_range=byte_range, on_progress=on_progress
        )

    async def download_to_file(
        self,
        blob_name: str,
        file_path: str | PathLike,
        *,
        byte_range: RangeArg = None,
        on_progress: OnProgressCallback | None = None,
    ) -> int:
        self._ensure_open()
        return await self._core.download_to_file(
            blob_name, file_path, byte_range=byte_range, on_progress=on_progress
        )

    async def exists(self, blob_name: str) -> bool:
        self._ensure_open()
        return await self._core.exists(blob_name)

    async def delete(self, blob_name: str) -> None:
        self._ensure_open()
        await self._core.delete(blob_name)

    async def list_blobs(
        self,
        prefix: str | None = None,
        *,
        max_results: int | None = None,
        include_metadata: bool = True,
    ) -> list[BlobItem]:
        self._ensure_open()
        return await self._core.list_blobs(
            prefix, max_results=max_results, include_metadata=include_metadata
        )

    async def get_metadata(self, blob_name: str, *, include_tags: bool = False) -> BlobMetadata:
        self._ensure_open()
        return await self._core.get_metadata(blob_name, include_tags=include_tags)

    async def set_metadata(self, blob_name: str, metadata: Mapping[str, str]) -> None:
        self._ensure_open()
        await self._core.set_metadata(blob_name, metadata)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._core.close()

    async def __aenter__(self) -> AsyncBlobClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


__all__ = ["AsyncBlobClient", "BlobClient"]
