from .client import GowaClient
from .config_types import ClientConfig, RetryPolicy
from .errors import (
    AuthError,
    ConfigError,
    DecodeError,
    GowaClientError,
    HTTPStatusError,
    NetworkError,
    RequestCancelled,
    TransportError,
    UploadError,
    ValidationError,
)

__all__ = [
    "GowaClient",
    "ClientConfig",
    "RetryPolicy",
    "GowaClientError",
    "ConfigError",
    "ValidationError",
    "TransportError",
    "NetworkError",
    "RequestCancelled",
    "HTTPStatusError",
    "AuthError",
    "DecodeError",
    "UploadError",
]
