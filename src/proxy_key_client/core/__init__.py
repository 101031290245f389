"""Core functionality for the access-key client."""

from .client import ApiClient
from .config import Config
from .exceptions import (
    ProxyKeyClientError,
    ConfigurationError,
    ValidationError,
    HttpError,
    NoResponseError,
    FingerprintMismatch,
    ServerError,
)
from .models import KeyRecord
from .transport import PinnedTransport

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
]
