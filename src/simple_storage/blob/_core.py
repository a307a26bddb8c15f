from __future__ import annotations

import json
import os
from collections.abc import Iterator, Mapping
from contextlib import aclosing, contextmanager
from dataclasses import replace
from os import PathLike
from typing import Any, BinaryIO

from ._backend import BlobBackend
from ._endpoint import EndpointPlan
from ._stream import (
    _emit_progress,
    iterate,
    stream_to_bytes,
    stream_to_file,
    stream_to_string,
)
from .errors import (
    BlobDownloadError,
    BlobError,
    BlobNotFoundError,
    BlobOperation,
    ConfigurationError,
    ContainerNotFoundError,
    map_container_error,
    map_storage_error,
)
from .types import (
    BlobItem,
    BlobMetadata,
    ByteRange,
    ClientOptions,
    DownloadStream,
    OnProgressCallback,
)
from .utils import (
    await_if_necessary,
    debug,
    get_content_type_from_extension,
    make_progress_event,
    validate_range,
)

DEFAULT_TEXT_CONTENT_TYPE = "text/plain"
DEFAULT_BINARY_CONTENT_TYPE = "application/octet-stream"
JSON_CONTENT_TYPE = "application/json"
MAX_RESULTS_PER_PAGE = 5000

RangeArg = ByteRange | tuple[int, int] | None


class _UploadProgress:
    """Progress hook handed to the backend, rescaled against the payload size."""

    def __init__(self, callback: OnProgressCallback, total: int) -> None:
        self._callback = callback
        self._total = total
        self.loaded: int | None = None

    def __call__(self, current: int, _total: int | None = None) -> Any:
        self.loaded = min(current, self._total)
        return self._callback(make_progress_event(self.loaded, self._total))


def _validate_max_results(max_results: Any) -> None:
    if max_results is None:
        return
    if isinstance(max_results, bool) or not isinstance(max_results, int):
        raise ConfigurationError(
            f"max_results must be a non-negative integer, got {max_results!r}"
        )
    if max_results < 0:
        raise ConfigurationError(
            f"max_results must be a non-negative integer, got {max_results}"
        )


def _resolve_content_type(
    explicit: str | None, default: str, *names: str | PathLike
) -> str:
    if explicit:
        return explicit
    for name in names:
        detected = get_content_type_from_extension(os.fspath(name))
        if detected:
            return detected
    return default


def _dump_json(data: Any) -> str:
    try:
        return json.dumps(data, indent=2, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Failed to serialize data to JSON: {exc}", exc) from exc


class _BlobClientCore:
    """Shared implementation behind ``BlobClient`` and ``AsyncBlobClient``.

    Every backend call goes through ``await_if_necessary`` so the same
    coroutines run under an event loop or, with a blocking backend, to
    completion in a single step.
    """

    _backend: BlobBackend
    _await_progress_callback: bool

    def __init__(
        self,
        *,
        backend: BlobBackend,
        endpoint: EndpointPlan,
        options: ClientOptions,
        await_progress_callback: bool = True,
    ) -> None:
        self._backend = backend
        self._endpoint = endpoint
        self._options = options
        self._await_progress_callback = await_progress_callback

    @property
    def container_name(self) -> str:
        return self._endpoint.container_name

    def _storage_error(
        self, exc: Exception, blob_name: str, operation: BlobOperation
    ) -> BlobError:
        error = map_storage_error(exc, blob_name, self.container_name, operation)
        debug(f"{operation} of '{blob_name}' failed: {error.code}")
        return error

    def _container_error(self, exc: Exception, operation: str) -> BlobError:
        error = map_container_error(exc, self.container_name, operation)
        debug(f"{operation} failed: {error.code}")
        return error

    @contextmanager
    def _translate(self, blob_name: str, operation: BlobOperation) -> Iterator[None]:
        try:
            yield
        except BlobError:
            raise
        except Exception as exc:
            raise self._storage_error(exc, blob_name, operation) from exc

    @contextmanager
    def _translate_container(self, operation: str) -> Iterator[None]:
        try:
            yield
        except BlobError:
            raise
        except Exception as exc:
            raise self._container_error(exc, operation) from exc

    async def _ensure_container(self) -> None:
        if not self._options.create_container_if_not_exists:
            return
        with self._translate_container("create container"):
            await await_if_necessary(self._backend.create_container_if_not_exists())

    async def _upload(
        self,
        blob_name: str,
        body: bytes | BinaryIO,
        total: int,
        *,
        content_type: str,
        metadata: Mapping[str, str] | None,
        tags: Mapping[str, str] | None,
        overwrite: bool,
        on_progress: OnProgressCallback | None,
    ) -> None:
        tracker = _UploadProgress(on_progress, total) if on_progress is not None else None
        with self._translate(blob_name, "upload"):
            await await_if_necessary(
                self._backend.upload(
                    blob_name,
                    body,
                    length=total,
                    content_type=content_type,
                    metadata=dict(metadata) if metadata else None,
                    tags=dict(tags) if tags else None,
                    overwrite=overwrite,
                    progress_hook=tracker,
                )
            )
        if tracker is not None and tracker.loaded != total:
            await _emit_progress(
                on_progress,
                make_progress_event(total, total),
                await_callback=self._await_progress_callback,
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
        default_content_type: str = DEFAULT_BINARY_CONTENT_TYPE,
    ) -> None:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ConfigurationError(
                f"Expected bytes, bytearray or memoryview, got {type(data).__name__!r}"
            )
        payload = bytes(data)
        await self._ensure_container()
        await self._upload(
            blob_name,
            payload,
            len(payload),
            content_type=_resolve_content_type(content_type, default_content_type, blob_name),
            metadata=metadata,
            tags=tags,
            overwrite=overwrite,
            on_progress=on_progress,
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
        if not isinstance(content, str):
            raise ConfigurationError(f"Expected str content, got {type(content).__name__!r}")
        await self.upload_from_bytes(
            blob_name,
            content.encode("utf-8"),
            content_type=content_type,
            metadata=metadata,
            tags=tags,
            overwrite=overwrite,
            on_progress=on_progress,
            default_content_type=DEFAULT_TEXT_CONTENT_TYPE,
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
        await self.upload_from_string(
            blob_name,
            _dump_json(data),
            content_type=JSON_CONTENT_TYPE,
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
        src = os.fspath(file_path)
        if not os.path.exists(src):
            raise ConfigurationError(f"Local file not found: {src}")
        if not os.path.isfile(src):
            raise ConfigurationError(f"Local path is not a file: {src}")

        size = os.path.getsize(src)
        resolved_type = _resolve_content_type(
            content_type, DEFAULT_BINARY_CONTENT_TYPE, blob_name, src
        )
        await self._ensure_container()
        with open(src, "rb") as f:
            await self._upload(
                blob_name,
                f,
                size,
                content_type=resolved_type,
                metadata=metadata,
                tags=tags,
                overwrite=overwrite,
                on_progress=on_progress,
            )

    async def _open_download(
        self, blob_name: str, span: tuple[int, int] | None
    ) -> DownloadStream:
        offset, length = span if span is not None else (None, None)
        stream: DownloadStream = await await_if_necessary(
            self._backend.download(blob_name, offset=offset, length=length)
        )
        if stream.chunks is None:
            raise BlobDownloadError(blob_name, self.container_name, "No readable stream returned")
        return stream

    async def download_as_bytes(
        self,
        blob_name: str,
        *,
        byte_range: RangeArg = None,
        on_progress: OnProgressCallback | None = None,
    ) -> bytes:
        span = validate_range(byte_range)
        with self._translate(blob_name, "download"):
            stream = await self._open_download(blob_name, span)
            return await stream_to_bytes(
                stream.chunks,
                stream.size,
                on_progress,
                await_callback=self._await_progress_callback,
            )

    async def download_as_string(
        self,
        blob_name: str,
        encoding: str = "utf-8",
        *,
        byte_range: RangeArg = None,
        on_progress: OnProgressCallback | None = None,
    ) -> str:
        span = validate_range(byte_range)
        with self._translate(blob_name, "download"):
            stream = await self._open_download(blob_name, span)
            return await stream_to_string(
                stream.chunks,
                encoding,
                stream.size,
                on_progress,
                await_callback=self._await_progress_callback,
            )

    async def download_as_json(
        self,
        blob_name: str,
        *,
        byte_range: RangeArg = None,
        on_progress: OnProgressCallback | None = None,
    ) -> Any:
        text = await self.download_as_string(
            blob_name, byte_range=byte_range, on_progress=on_progress
        )
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise BlobDownloadError(
                blob_name, self.container_name, "Content is not valid JSON", exc
            ) from exc

    async def download_to_file(
        self,
        blob_name: str,
        file_path: str | PathLike,
        *,
        byte_range: RangeArg = None,
        on_progress: OnProgressCallback | None = None,
    ) -> int:
        span = validate_range(byte_range)
        with self._translate(blob_name, "download"):
            stream = await self._open_download(blob_name, span)
            return await stream_to_file(
                stream.chunks,
                file_path,
                stream.size,
                on_progress,
                await_callback=self._await_progress_callback,
            )

    async def exists(self, blob_name: str) -> bool:
        try:
            return bool(await await_if_necessary(self._backend.exists(blob_name)))
        except BlobError:
            raise
        except Exception as exc:
            error = self._storage_error(exc, blob_name, "other")
            if isinstance(error, (BlobNotFoundError, ContainerNotFoundError)):
                return False
            raise error from exc

    async def delete(self, blob_name: str) -> None:
        with self._translate(blob_name, "other"):
            await await_if_necessary(self._backend.delete(blob_name))

    async def list_blobs(
        self,
        prefix: str | None = None,
        *,
        max_results: int | None = None,
        include_metadata: bool = True,
    ) -> list[BlobItem]:
        _validate_max_results(max_results)
        if max_results == 0:
            return []

        page_size = min(max_results, MAX_RESULTS_PER_PAGE) if max_results else None
        blobs: list[BlobItem] = []
        with self._translate_container("list blobs"):
            pages = await await_if_necessary(
                self._backend.list_blobs(
                    prefix=prefix,
                    include_metadata=include_metadata,
                    results_per_page=page_size,
                )
            )
            async with aclosing(iterate(pages)) as items:
                async for item in items:
                    blobs.append(item)
                    if max_results is not None and len(blobs) >= max_results:
                        debug(f"list stopped after {max_results} results")
                        break
        return blobs

    async def get_metadata(self, blob_name: str, *, include_tags: bool = False) -> BlobMetadata:
        with self._translate(blob_name, "other"):
            metadata: BlobMetadata = await await_if_necessary(
                self._backend.get_properties(blob_name)
            )
            if include_tags:
                tags = await await_if_necessary(self._backend.get_tags(blob_name))
                metadata = replace(metadata, tags=dict(tags or {}))
        return metadata

    async def set_metadata(self, blob_name: str, metadata: Mapping[str, str]) -> None:
        with self._translate(blob_name, "other"):
            await await_if_necessary(self._backend.set_metadata(blob_name, dict(metadata)))

    def get_container_client(self) -> Any:
        return self._backend.get_container_client()

    async def close(self) -> None:
        await await_if_necessary(self._backend.close())
