from __future__ import annotations

import inspect
import math
import os
from collections.abc import Awaitable
from typing import Any, cast

from .errors import ConfigurationError
from .types import ByteRange, ProgressEvent

CONNECTION_STRING_ENV = "AZURE_STORAGE_CONNECTION_STRING"
ACCOUNT_URL_ENV = "AZURE_STORAGE_ACCOUNT_URL"
ACCOUNT_NAME_ENV = "AZURE_STORAGE_ACCOUNT_NAME"
CONTAINER_NAME_ENV = "AZURE_STORAGE_CONTAINER_NAME"

CONTENT_TYPES: dict[str, str] = {
    # text
    "txt": "text/plain",
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "csv": "text/csv",
    "xml": "application/xml",
    "md": "text/markdown",
    # scripts / data
    "js": "application/javascript",
    "mjs": "application/javascript",
    "ts": "application/typescript",
    "json": "application/json",
    "yaml": "application/yaml",
    "yml": "application/yaml",
    "wasm": "application/wasm",
    # images
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "ico": "image/x-icon",
    "bmp": "image/bmp",
    # documents
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    # archives
    "zip": "application/zip",
    "gz": "application/gzip",
    "tar": "application/x-tar",
    "7z": "application/x-7z-compressed",
    "rar": "application/vnd.rar",
    # media
    "mp3": "audio/mpeg",
    "mp4": "video/mp4",
    "mpeg": "video/mpeg",
    "webm": "video/webm",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
}


def debug(message: str, *args: Any) -> None:
    try:
        debug_env = os.getenv("DEBUG", "")
        if "blob" in debug_env:
            print(f"simple-storage: {message}", *args)
    except Exception:
        pass


async def await_if_necessary(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await cast(Awaitable[Any], value)
    return value


def get_content_type_from_extension(filename: str) -> str | None:
    """Map the extension of ``filename`` to a MIME type, or ``None`` if unknown."""
    _, dot, ext = filename.lower().rpartition(".")
    if not dot or "/" in ext:
        return None
    return CONTENT_TYPES.get(ext)


def make_progress_event(loaded: int, total: int | None) -> ProgressEvent:
    if total is None:
        return ProgressEvent(loaded_bytes=loaded)
    if total <= 0:
        return ProgressEvent(loaded_bytes=loaded, total_bytes=0, percent_complete=100)
    # half-up, like the service's own progress reporting
    percent = math.floor(loaded / total * 100 + 0.5)
    return ProgressEvent(
        loaded_bytes=loaded,
        total_bytes=total,
        percent_complete=max(0, min(100, percent)),
    )


def validate_range(byte_range: ByteRange | tuple[int, int] | None) -> tuple[int, int] | None:
    """Return ``(offset, length)`` for an inclusive range, or ``None`` for the whole blob."""
    if byte_range is None:
        return None
    if isinstance(byte_range, ByteRange):
        start, end = byte_range.start, byte_range.end
    else:
        try:
            start, end = byte_range
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                "Invalid range: expected a ByteRange or a (start, end) pair"
            ) from exc
    for bound in (start, end):
        if isinstance(bound, bool) or not isinstance(bound, int):
            raise ConfigurationError(
                f"Invalid range: start and end must be integers, got {start!r} and {end!r}"
            )
    if start < 0 or end < 0:
        raise ConfigurationError(
            f"Invalid range: start and end must be non-negative, got {start} and {end}"
        )
    if end < start:
        raise ConfigurationError(
            f"Invalid range: end ({end}) must be greater than or equal to start ({start})"
        )
    return start, end - start + 1


def get_container_name_from_env(container_name: str | None = None) -> str:
    name = container_name or os.getenv(CONTAINER_NAME_ENV)
    if not name:
        raise ConfigurationError(
            f"No container name found. Either configure the `{CONTAINER_NAME_ENV}` "
            "environment variable, or pass `container_name`."
        )
    return name


def get_descriptor_from_env() -> str:
    for env_name in (CONNECTION_STRING_ENV, ACCOUNT_URL_ENV, ACCOUNT_NAME_ENV):
        value = os.getenv(env_name)
        if value:
            debug(f"using connection descriptor from {env_name}")
            return value
    raise ConfigurationError(
        "No storage account configured. Set one of "
        f"`{CONNECTION_STRING_ENV}`, `{ACCOUNT_URL_ENV}` or `{ACCOUNT_NAME_ENV}`."
    )
