from __future__ import annotations

from collections.abc import AsyncIterable, Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(slots=True)
class ProgressEvent:
    loaded_bytes: int
    total_bytes: int | None = None
    percent_complete: int | None = None


OnProgressCallback = (
    Callable[[ProgressEvent], None] | Callable[[ProgressEvent], Awaitable[None]]
)


@dataclass(frozen=True, slots=True)
class ClientOptions:
    create_container_if_not_exists: bool = False
    allow_path_style_endpoints: bool = False


@dataclass(frozen=True, slots=True)
class ByteRange:
    """Inclusive byte range: ``ByteRange(0, 99)`` is the first 100 bytes."""

    start: int
    end: int


class CredentialKind(str, Enum):
    TOKEN = "token"
    SHARED_KEY = "shared_key"


@dataclass(frozen=True, slots=True)
class BlobCredential:
    """A credential tagged with how the storage service should use it."""

    kind: CredentialKind
    value: Any

    @classmethod
    def token(cls, credential: Any) -> BlobCredential:
        return cls(CredentialKind.TOKEN, credential)

    @classmethod
    def shared_key(cls, credential: Any) -> BlobCredential:
        return cls(CredentialKind.SHARED_KEY, credential)


@dataclass(slots=True)
class BlobItem:
    name: str
    size: int
    last_modified: datetime
    content_type: str | None = None
    metadata: dict[str, str] | None = None
    etag: str | None = None
    tags: dict[str, str] | None = None


@dataclass(slots=True)
class BlobMetadata:
    content_type: str | None
    content_length: int
    last_modified: datetime
    etag: str
    metadata: dict[str, str] = field(default_factory=dict)
    tags: dict[str, str] | None = None


@dataclass(slots=True)
class DownloadStream:
    """Body of a download response. ``chunks`` may be sync or async."""

    size: int | None
    chunks: Iterable[bytes] | AsyncIterable[bytes] | None


__all__ = [
    "BlobCredential",
    "BlobItem",
    "BlobMetadata",
    "ByteRange",
    "ClientOptions",
    "CredentialKind",
    "DownloadStream",
    "OnProgressCallback",
    "ProgressEvent",
]
