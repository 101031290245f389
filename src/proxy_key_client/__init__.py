"""Proxy Key Client - manage access keys on a proxy management server.

This package talks to the server's management API over certificate-pinned
HTTPS to list keys with their transfer usage, create and rename keys, and
set per-key data limits. A small command line is included.
"""

__version__ = "0.1.0"

from proxy_key_client.core.client import ApiClient
from proxy_key_client.core.config import Config
from proxy_key_client.core.models import KeyRecord
from proxy_key_client.core.transport import PinnedTransport
from proxy_key_client.core.exceptions import (
    ProxyKeyClientError,
    ConfigurationError,
    ValidationError,
    HttpError,
    NoResponseError,
    FingerprintMismatch,
    ServerError,
)

__all__ = [
    "ApiClient",
    "Config",
    "KeyRecord",
    "PinnedTransport",
    "ProxyKeyClientError",
    "ConfigurationError",
    "ValidationError",
    "HttpError",
    "NoResponseError",
    "FingerprintMismatch",
    "ServerError",
    "__version__",
]
