"""Connection descriptor classification.

A descriptor is one of:

- a connection string (``...AccountName=...`` or ``UseDevelopmentStorage=true``),
- a URL: account root, account root plus SAS, container, container plus SAS,
  or the path-style variants of those used by local emulators,
- a bare storage account name.

``resolve_endpoint`` turns a descriptor into an :class:`EndpointPlan` without
touching the network; the backend factory builds SDK clients from the plan.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from .errors import ConfigurationError
from .types import BlobCredential, ClientOptions, CredentialKind
from .utils import debug

LOCALHOST_HOSTNAMES = frozenset(
    {
        "localhost",
        "127.0.0.1",
        "::1",
        "0.0.0.0",
        "host.docker.internal",
    }
)

ACCOUNT_NAME_MARKER = "AccountName="
DEVELOPMENT_STORAGE_MARKER = "UseDevelopmentStorage=true"

DEVELOPMENT_STORAGE_ACCOUNT = "devstoreaccount1"
DEVELOPMENT_STORAGE_CONNECTION_STRING = (
    "DefaultEndpointsProtocol=http;"
    f"AccountName={DEVELOPMENT_STORAGE_ACCOUNT};"
    "AccountKey=Eby8vdM02xNOcqFlqUwJPLlmEtlCDXJ1OUzFT50uSRZ6IFsuFq2UVErCz4I6tq/K1SZFPTOtr/KBHBeksoGMGw==;"
    f"BlobEndpoint=http://127.0.0.1:10000/{DEVELOPMENT_STORAGE_ACCOUNT};"
)

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")


class EndpointKind(str, Enum):
    CONNECTION_STRING = "connection_string"
    CONTAINER_URL = "container_url"
    ACCOUNT_URL = "account_url"
    ACCOUNT_NAME = "account_name"


@dataclass(frozen=True, slots=True)
class EndpointPlan:
    kind: EndpointKind
    # connection string for CONNECTION_STRING, a URL otherwise
    target: str
    container_name: str
    credential: BlobCredential | None = None
    use_default_credential: bool = False


def is_localhost(hostname: str | None) -> bool:
    return bool(hostname) and hostname.lower() in LOCALHOST_HOSTNAMES


def build_account_url(account_name: str) -> str:
    return f"https://{account_name}.blob.core.windows.net"


def _is_shared_key_mapping(value: Any) -> bool:
    return isinstance(value, Mapping) and "account_name" in value and "account_key" in value


def tag_credential(credential: Any) -> BlobCredential:
    """Wrap a raw SDK credential in a :class:`BlobCredential`.

    Token credentials expose ``get_token``. Shared key credentials are an
    ``AzureNamedKeyCredential`` (``named_key``), an object carrying
    ``account_name``, or a mapping with ``account_name`` and ``account_key``.
    """
    if isinstance(credential, BlobCredential):
        return credential
    if hasattr(credential, "get_token"):
        return BlobCredential(CredentialKind.TOKEN, credential)
    if _is_shared_key_mapping(credential):
        return BlobCredential(CredentialKind.SHARED_KEY, dict(credential))
    if hasattr(credential, "named_key") or hasattr(credential, "account_name"):
        return BlobCredential(CredentialKind.SHARED_KEY, credential)
    raise ConfigurationError(
        f"Unsupported credential type {type(credential).__name__!r}: expected a token "
        "credential or a shared key credential"
    )


def _coerce_options(options: ClientOptions | Mapping[str, Any] | None) -> ClientOptions:
    if options is None:
        return ClientOptions()
    if isinstance(options, ClientOptions):
        return options
    if isinstance(options, Mapping):
        try:
            return ClientOptions(**options)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid client options: {exc}") from exc
    raise ConfigurationError(
        f"Invalid client options of type {type(options).__name__!r}"
    )


def split_credential_and_options(
    credential_or_options: Any = None,
    options: ClientOptions | Mapping[str, Any] | None = None,
) -> tuple[BlobCredential | None, ClientOptions]:
    """Decide whether the third constructor argument is a credential or options."""
    if credential_or_options is None:
        return None, _coerce_options(options)
    if _is_shared_key_mapping(credential_or_options):
        return tag_credential(credential_or_options), _coerce_options(options)
    if isinstance(credential_or_options, (ClientOptions, Mapping)):
        return None, _coerce_options(credential_or_options)
    return tag_credential(credential_or_options), _coerce_options(options)


def _is_connection_string(descriptor: str) -> bool:
    return ACCOUNT_NAME_MARKER in descriptor or DEVELOPMENT_STORAGE_MARKER in descriptor


def _resolve_url(
    descriptor: str,
    container_name: str,
    credential: BlobCredential | None,
    options: ClientOptions,
) -> EndpointPlan:
    parsed = urlsplit(descriptor)
    if parsed.scheme.lower() not in ("http", "https"):
        raise ConfigurationError(
            f"Unsupported URL scheme '{parsed.scheme}': only http and https endpoints are supported."
        )
    if not parsed.hostname:
        raise ConfigurationError(f"Invalid storage URL '{descriptor}': missing host name.")

    path_parts = [part for part in parsed.path.split("/") if part]
    allow_path_style = options.allow_path_style_endpoints or is_localhost(parsed.hostname)
    max_path_segments = 2 if allow_path_style else 1
    container_segment_index = 1 if allow_path_style else 0

    if len(path_parts) > max_path_segments:
        raise ConfigurationError(
            "Blob-level SAS URLs are not supported. The URL contains a blob path: "
            f"'{parsed.path}'. This client operates at the container level. Please use a "
            "container-level or account-level SAS URL instead."
        )

    if len(path_parts) == max_path_segments:
        url_container_name = path_parts[container_segment_index]
        if url_container_name != container_name:
            raise ConfigurationError(
                f"Container name mismatch: URL contains '{url_container_name}' but "
                f"container_name parameter is '{container_name}'. These must match. Either "
                "update the container_name parameter or use an account-level URL."
            )
        return EndpointPlan(
            EndpointKind.CONTAINER_URL, descriptor, container_name, credential
        )

    return EndpointPlan(EndpointKind.ACCOUNT_URL, descriptor, container_name, credential)


def resolve_endpoint(
    descriptor: str,
    container_name: str,
    credential: BlobCredential | None = None,
    options: ClientOptions | None = None,
) -> EndpointPlan:
    if not isinstance(descriptor, str) or not descriptor.strip():
        raise ConfigurationError(
            "A connection string, account name, or storage URL is required."
        )
    if not isinstance(container_name, str) or not container_name:
        raise ConfigurationError("container_name is required.")
    options = options or ClientOptions()

    if _is_connection_string(descriptor):
        if ACCOUNT_NAME_MARKER not in descriptor:
            descriptor = DEVELOPMENT_STORAGE_CONNECTION_STRING
        plan = EndpointPlan(EndpointKind.CONNECTION_STRING, descriptor, container_name)
    elif _SCHEME_RE.match(descriptor):
        plan = _resolve_url(descriptor, container_name, credential, options)
    else:
        plan = EndpointPlan(
            EndpointKind.ACCOUNT_NAME,
            build_account_url(descriptor),
            container_name,
            credential,
            use_default_credential=credential is None,
        )

    debug(f"resolved endpoint as {plan.kind.value} for container '{container_name}'")
    return plan


__all__ = [
    "DEVELOPMENT_STORAGE_CONNECTION_STRING",
    "EndpointKind",
    "EndpointPlan",
    "LOCALHOST_HOSTNAMES",
    "build_account_url",
    "is_localhost",
    "resolve_endpoint",
    "split_credential_and_options",
    "tag_credential",
]
