"""Single-call helpers over Azure Blob Storage."""

from .blob import AsyncBlobClient, BlobClient, BlobError, ClientOptions, ProgressEvent

__version__ = "0.1.0"

__all__ = [
    "AsyncBlobClient",
    "BlobClient",
    "BlobError",
    "ClientOptions",
    "ProgressEvent",
    "__version__",
]
