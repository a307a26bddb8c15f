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
    map_container_error,
    map_storage_error,
)

from ._backend import AzureBlobBackend, AsyncAzureBlobBackend, BlobBackend
from ._endpoint import EndpointKind, EndpointPlan, resolve_endpoint
from .client import AsyncBlobClient, BlobClient
from .types import (
    BlobCredential,
    BlobItem,
    BlobMetadata,
    ByteRange,
    ClientOptions,
    CredentialKind,
    DownloadStream,
    OnProgressCallback,
    ProgressEvent,
)
from .utils import get_content_type_from_extension

__all__ = [
    "AuthenticationError",
    "BlobDownloadError",
    "BlobError",
    "BlobErrorKind",
    "BlobNotFoundError",
    "BlobUploadError",
    "ConfigurationError",
    "ContainerNotFoundError",
    "ContainerOperationError",
    "map_container_error",
    "map_storage_error",
    "AzureBlobBackend",
    "AsyncAzureBlobBackend",
    "BlobBackend",
    "EndpointKind",
    "EndpointPlan",
    "resolve_endpoint",
    "AsyncBlobClient",
    "BlobClient",
    "BlobCredential",
    "BlobItem",
    "BlobMetadata",
    "ByteRange",
    "ClientOptions",
    "CredentialKind",
    "DownloadStream",
    "OnProgressCallback",
    "ProgressEvent",
    "get_content_type_from_extension",
]
