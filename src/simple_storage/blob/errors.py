from __future__ import annotations

from enum import Enum
from typing import Any, Literal


BlobOperation = Literal["upload", "download", "other"]


class BlobErrorKind(str, Enum):
    BLOB_NOT_FOUND = "BLOB_NOT_FOUND"
    CONTAINER_NOT_FOUND = "CONTAINER_NOT_FOUND"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    BLOB_UPLOAD_ERROR = "BLOB_UPLOAD_ERROR"
    BLOB_DOWNLOAD_ERROR = "BLOB_DOWNLOAD_ERROR"
    CONTAINER_OPERATION_ERROR = "CONTAINER_OPERATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UNKNOWN = "UNKNOWN_ERROR"


class BlobError(Exception):
    """Base class for every error raised by the blob client.

    ``kind`` identifies the failure category; ``cause`` keeps the low-level
    failure (also chained as ``__cause__`` where the client raises it).
    """

    kind: BlobErrorKind = BlobErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        blob_name: str | None = None,
        container_name: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.blob_name = blob_name
        self.container_name = container_name
        self.operation = operation

    @property
    def code(self) -> str:
        return self.kind.value


class BlobNotFoundError(BlobError):
    kind = BlobErrorKind.BLOB_NOT_FOUND

    def __init__(
        self, blob_name: str, container_name: str, cause: BaseException | None = None
    ) -> None:
        super().__init__(
            f"Failed to access blob '{blob_name}' in container '{container_name}': "
            "Blob not found. Verify the blob name exists in the container.",
            cause=cause,
            blob_name=blob_name,
            container_name=container_name,
        )


class ContainerNotFoundError(BlobError):
    kind = BlobErrorKind.CONTAINER_NOT_FOUND

    def __init__(self, container_name: str, cause: BaseException | None = None) -> None:
        super().__init__(
            f"Container '{container_name}' not found. Verify the container name and "
            "that it exists in the storage account.",
            cause=cause,
            container_name=container_name,
        )


class AuthenticationError(BlobError):
    kind = BlobErrorKind.AUTHENTICATION_ERROR

    def __init__(
        self,
        reason: str,
        cause: BaseException | None = None,
        *,
        blob_name: str | None = None,
        container_name: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(
            f"Authentication failed: {reason}. Check your connection string, "
            "credentials, or managed identity configuration.",
            cause=cause,
            blob_name=blob_name,
            container_name=container_name,
            operation=operation,
        )


class BlobUploadError(BlobError):
    kind = BlobErrorKind.BLOB_UPLOAD_ERROR

    def __init__(
        self,
        blob_name: str,
        container_name: str,
        reason: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            f"Failed to upload blob '{blob_name}' to container '{container_name}': {reason}",
            cause=cause,
            blob_name=blob_name,
            container_name=container_name,
            operation="upload",
        )


class BlobDownloadError(BlobError):
    kind = BlobErrorKind.BLOB_DOWNLOAD_ERROR

    def __init__(
        self,
        blob_name: str,
        container_name: str,
        reason: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            f"Failed to download blob '{blob_name}' from container '{container_name}': {reason}",
            cause=cause,
            blob_name=blob_name,
            container_name=container_name,
            operation="download",
        )


class ContainerOperationError(BlobError):
    kind = BlobErrorKind.CONTAINER_OPERATION_ERROR

    def __init__(
        self,
        container_name: str,
        operation: str,
        reason: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            f"Failed to {operation} in container '{container_name}': {reason}",
            cause=cause,
            container_name=container_name,
            operation=operation,
        )


class ConfigurationError(BlobError):
    """Raised for caller misuse detected locally, before any network call."""

    kind = BlobErrorKind.CONFIGURATION_ERROR

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message, cause=cause)


def _status_code(error: Any) -> int | None:
    status = getattr(error, "status_code", None)
    if status is None:
        response = getattr(error, "response", None)
        status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def _error_code(error: Any) -> str | None:
    code = getattr(error, "error_code", None)
    if code is None:
        return None
    # the SDK may hand back an enum member
    return str(getattr(code, "value", code))


def _error_message(error: Any) -> str:
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or "Unknown error"


def map_storage_error(
    error: BaseException,
    blob_name: str,
    container_name: str,
    operation: BlobOperation,
) -> BlobError:
    """Translate a backend failure raised during a blob-scoped call."""
    status = _status_code(error)
    code = _error_code(error)

    if status == 404:
        if code == "ContainerNotFound":
            return ContainerNotFoundError(container_name, error)
        # no usable code: assume the blob is what is missing
        return BlobNotFoundError(blob_name, container_name, error)

    if status in (401, 403):
        return AuthenticationError(
            getattr(error, "message", None) or "Access denied",
            error,
            blob_name=blob_name,
            container_name=container_name,
            operation=operation,
        )

    message = _error_message(error)
    if operation == "upload":
        return BlobUploadError(blob_name, container_name, message, error)
    if operation == "download":
        return BlobDownloadError(blob_name, container_name, message, error)
    return BlobError(
        message,
        cause=error,
        blob_name=blob_name,
        container_name=container_name,
        operation=operation,
    )


def map_container_error(
    error: BaseException,
    container_name: str,
    operation: str,
) -> BlobError:
    """Translate a backend failure raised during a container-scoped call.

    A 404 here always means the container: list and create cannot tell
    anything else apart.
    """
    status = _status_code(error)

    if status == 404:
        return ContainerNotFoundError(container_name, error)

    if status in (401, 403):
        return AuthenticationError(
            getattr(error, "message", None) or "Access denied",
            error,
            container_name=container_name,
            operation=operation,
        )

    return ContainerOperationError(container_name, operation, _error_message(error), error)


__all__ = [
    "AuthenticationError",
    "BlobDownloadError",
    "BlobError",
    "BlobErrorKind",
    "BlobNotFoundError",
    "BlobOperation",
    "BlobUploadError",
    "ConfigurationError",
    "ContainerNotFoundError",
    "ContainerOperationError",
    "map_container_error",
    "map_storage_error",
]
