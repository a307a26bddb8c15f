from .client import AsyncBlobClient
from ._backend import AsyncAzureBlobBackend
from .errors import (
    AuthenticationError,
    BlobDownloadError,
    BlobError,
    BlobErrorKind,
    BlobNotFoundError,
    BlobUploadError,
    ConfigurationError,
    ContainerNotFoundError,
    ContainerOperationError,
)
from .types import (
    BlobCredential,
    BlobItem,
    BlobMetadata,
    ByteRange,
    ClientOptions,
    OnProgressCallback,
    ProgressEvent,
)

__all__ = [
    # client
    "AsyncBlobClient",
    "AsyncAzureBlobBackend",
    # errors
    "AuthenticationError",
    "BlobDownloadError",
    "BlobError",
    "BlobErrorKind",
    "BlobNotFoundError",
    "BlobUploadError",
    "ConfigurationError",
    "ContainerNotFoundError",
    "ContainerOperationError",
    # types
    "BlobCredential",
    "BlobItem",
    "BlobMetadata",
    "ByteRange",
    "ClientOptions",
    "OnProgressCallback",
    "ProgressEvent",
]
