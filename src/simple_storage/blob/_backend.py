"""Storage backends the blob client delegates to.

The client core only talks to a :class:`BlobBackend`. Methods may return plain
values (blocking backend) or awaitables (asyncio backend); the core awaits when
needed. The Azure adapters below are the production implementations.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterator, Mapping
from datetime import datetime, timezone
from typing import Any, BinaryIO, Protocol

from azure.core.credentials import AzureNamedKeyCredential
from azure.core.exceptions import ResourceExistsError
from azure.storage.blob import BlobServiceClient, ContainerClient, ContentSettings
from azure.storage.blob.aio import (
    BlobServiceClient as AsyncBlobServiceClient,
    ContainerClient as AsyncContainerClient,
)

from ._endpoint import EndpointKind, EndpointPlan
from .types import BlobItem, BlobMetadata, CredentialKind, DownloadStream
from .utils import await_if_necessary, debug

ProgressHook = Callable[[int, int | None], Any]
UploadBody = bytes | BinaryIO


class BlobBackend(Protocol):
    container_name: str

    def create_container_if_not_exists(self) -> Any: ...

    def upload(
        self,
        blob_name: str,
        data: UploadBody,
        *,
        length: int | None,
        content_type: str,
        metadata: dict[str, str] | None,
        tags: dict[str, str] | None,
        overwrite: bool,
        progress_hook: ProgressHook | None,
    ) -> Any: ...

    def download(
        self, blob_name: str, *, offset: int | None, length: int | None
    ) -> Any: ...

    def exists(self, blob_name: str) -> Any: ...

    def delete(self, blob_name: str) -> Any: ...

    def get_properties(self, blob_name: str) -> Any: ...

    def get_tags(self, blob_name: str) -> Any: ...

    def set_metadata(self, blob_name: str, metadata: dict[str, str]) -> Any: ...

    def list_blobs(
        self,
        *,
        prefix: str | None,
        include_metadata: bool,
        results_per_page: int | None,
    ) -> Any: ...

    def get_container_client(self) -> Any: ...

    def close(self) -> Any: ...


def _last_modified(value: datetime | None) -> datetime:
    return value or datetime.now(tz=timezone.utc)


def _content_type(props: Any) -> str | None:
    settings = getattr(props, "content_settings", None)
    return getattr(settings, "content_type", None)


def build_blob_item(props: Any) -> BlobItem:
    return BlobItem(
        name=props.name,
        size=getattr(props, "size", None) or 0,
        last_modified=_last_modified(getattr(props, "last_modified", None)),
        content_type=_content_type(props),
        metadata=getattr(props, "metadata", None),
        etag=getattr(props, "etag", None),
        tags=getattr(props, "tags", None),
    )


def build_blob_metadata(props: Any) -> BlobMetadata:
    return BlobMetadata(
        content_type=_content_type(props),
        content_length=getattr(props, "size", None) or 0,
        last_modified=_last_modified(getattr(props, "last_modified", None)),
        etag=getattr(props, "etag", None) or "",
        metadata=dict(getattr(props, "metadata", None) or {}),
    )


def _list_include(include_metadata: bool) -> list[str] | None:
    return ["metadata"] if include_metadata else None


class AzureBlobBackend:
    """Blocking backend over ``azure.storage.blob.ContainerClient``."""

    def __init__(self, container_client: ContainerClient, *, owned_credential: Any = None) -> None:
        self._container = container_client
        self._owned_credential = owned_credential
        self.container_name = container_client.container_name

    def create_container_if_not_exists(self) -> None:
        try:
            self._container.create_container()
        except ResourceExistsError:
            debug(f"container '{self.container_name}' already exists")

    def upload(
        self,
        blob_name: str,
        data: UploadBody,
        *,
        length: int | None,
        content_type: str,
        metadata: dict[str, str] | None,
        tags: dict[str, str] | None,
        overwrite: bool,
        progress_hook: ProgressHook | None,
    ) -> None:
        self._container.get_blob_client(blob_name).upload_blob(
            data,
            length=length,
            overwrite=overwrite,
            content_settings=ContentSettings(content_type=content_type),
            metadata=metadata,
            tags=tags,
            progress_hook=progress_hook,
        )

    def download(
        self, blob_name: str, *, offset: int | None, length: int | None
    ) -> DownloadStream:
        downloader = self._container.get_blob_client(blob_name).download_blob(
            offset=offset, length=length
        )
        return DownloadStream(size=downloader.size, chunks=downloader.chunks())

    def exists(self, blob_name: str) -> bool:
        return self._container.get_blob_client(blob_name).exists()

    def delete(self, blob_name: str) -> None:
        self._container.get_blob_client(blob_name).delete_blob()

    def get_properties(self, blob_name: str) -> BlobMetadata:
        return build_blob_metadata(
            self._container.get_blob_client(blob_name).get_blob_properties()
        )

    def get_tags(self, blob_name: str) -> dict[str, str]:
        return dict(self._container.get_blob_client(blob_name).get_blob_tags())

    def set_metadata(self, blob_name: str, metadata: dict[str, str]) -> None:
        self._container.get_blob_client(blob_name).set_blob_metadata(metadata)

    def list_blobs(
        self,
        *,
        prefix: str | None,
        include_metadata: bool,
        results_per_page: int | None,
    ) -> Iterator[BlobItem]:
        pages = self._container.list_blobs(
            name_starts_with=prefix,
            include=_list_include(include_metadata),
            results_per_page=results_per_page,
        )
        for props in pages:
            yield build_blob_item(props)

    def get_container_client(self) -> ContainerClient:
        return self._container

    def close(self) -> None:
        self._container.close()
        if self._owned_credential is not None:
            self._owned_credential.close()


def _awaitable_hook(progress_hook: ProgressHook) -> Callable[[int, int | None], Any]:
    # the asyncio SDK awaits its progress hook
    async def hook(current: int, total: int | None) -> None:
        await await_if_necessary(progress_hook(current, total))

    return hook


class AsyncAzureBlobBackend:
    """asyncio backend over ``azure.storage.blob.aio.ContainerClient``."""

    def __init__(
        self, container_client: AsyncContainerClient, *, owned_credential: Any = None
    ) -> None:
        self._container = container_client
        self._owned_credential = owned_credential
        self.container_name = container_client.container_name

    async def create_container_if_not_exists(self) -> None:
        try:
            await self._container.create_container()
        except ResourceExistsError:
            debug(f"container '{self.container_name}' already exists")

    async def upload(
        self,
        blob_name: str,
        data: UploadBody,
        *,
        length: int | None,
        content_type: str,
        metadata: dict[str, str] | None,
        tags: dict[str, str] | None,
        overwrite: bool,
        progress_hook: ProgressHook | None,
    ) -> None:
        hook = _awaitable_hook(progress_hook) if progress_hook is not None else None
        await self._container.get_blob_client(blob_name).upload_blob(
            data,
            length=length,
            overwrite=overwrite,
            content_settings=ContentSettings(content_type=content_type),
            metadata=metadata,
            tags=tags,
            progress_hook=hook,
        )

    async def download(
        self, blob_name: str, *, offset: int | None, length: int | None
    ) -> DownloadStream:
        downloader = await self._container.get_blob_client(blob_name).download_blob(
            offset=offset, length=length
        )
        return DownloadStream(size=downloader.size, chunks=downloader.chunks())

    async def exists(self, blob_name: str) -> bool:
        return await self._container.get_blob_client(blob_name).exists()

    async def delete(self, blob_name: str) -> None:
        await self._container.get_blob_client(blob_name).delete_blob()

    async def get_properties(self, blob_name: str) -> BlobMetadata:
        props = await self._container.get_blob_client(blob_name).get_blob_properties()
        return build_blob_metadata(props)

    async def get_tags(self, blob_name: str) -> dict[str, str]:
        return dict(await self._container.get_blob_client(blob_name).get_blob_tags())

    async def set_metadata(self, blob_name: str, metadata: dict[str, str]) -> None:
        await self._container.get_blob_client(blob_name).set_blob_metadata(metadata)

    async def list_blobs(
        self,
        *,
        prefix: str | None,
        include_metadata: bool,
        results_per_page: int | None,
    ) -> AsyncIterator[BlobItem]:
        pages = self._container.list_blobs(
            name_starts_with=prefix,
            include=_list_include(include_metadata),
            results_per_page=results_per_page,
        )
        async for props in pages:
            yield build_blob_item(props)

    def get_container_client(self) -> AsyncContainerClient:
        return self._container

    async def close(self) -> None:
        await self._container.close()
        if self._owned_credential is not None:
            await self._owned_credential.close()


def _sdk_credential(plan: EndpointPlan) -> Any:
    """Unwrap the plan's credential into something the SDK clients accept."""
    if plan.credential is None:
        return None
    value = plan.credential.value
    if plan.credential.kind is CredentialKind.SHARED_KEY and isinstance(value, Mapping):
        return AzureNamedKeyCredential(value["account_name"], value["account_key"])
    return value


def create_blob_backend(plan: EndpointPlan) -> AzureBlobBackend:
    if plan.kind is EndpointKind.CONNECTION_STRING:
        service = BlobServiceClient.from_connection_string(plan.target)
        return AzureBlobBackend(service.get_container_client(plan.container_name))

    if plan.kind is EndpointKind.CONTAINER_URL:
        return AzureBlobBackend(
            ContainerClient.from_container_url(plan.target, credential=_sdk_credential(plan))
        )

    credential = _sdk_credential(plan)
    owned_credential = None
    if plan.use_default_credential:
        from azure.identity import DefaultAzureCredential

        credential = owned_credential = DefaultAzureCredential()
    service = BlobServiceClient(account_url=plan.target, credential=credential)
    return AzureBlobBackend(
        service.get_container_client(plan.container_name),
        owned_credential=owned_credential,
    )


def create_async_blob_backend(plan: EndpointPlan) -> AsyncAzureBlobBackend:
    if plan.kind is EndpointKind.CONNECTION_STRING:
        service = AsyncBlobServiceClient.from_connection_string(plan.target)
        return AsyncAzureBlobBackend(service.get_container_client(plan.container_name))

    if plan.kind is EndpointKind.CONTAINER_URL:
        return AsyncAzureBlobBackend(
            AsyncContainerClient.from_container_url(
                plan.target, credential=_sdk_credential(plan)
            )
        )

    credential = _sdk_credential(plan)
    owned_credential = None
    if plan.use_default_credential:
        from azure.identity.aio import DefaultAzureCredential

        credential = owned_credential = DefaultAzureCredential()
    service = AsyncBlobServiceClient(account_url=plan.target, credential=credential)
    return AsyncAzureBlobBackend(
        service.get_container_client(plan.container_name),
        owned_credential=owned_credential,
    )


__all__ = [
    "AsyncAzureBlobBackend",
    "AzureBlobBackend",
    "BlobBackend",
    "build_blob_item",
    "build_blob_metadata",
    "create_async_blob_backend",
    "create_blob_backend",
]
