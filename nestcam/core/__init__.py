from .config import Settings, get_settings
from .exceptions import (
    NestCameraError,
    ConfigValidationError,
    InvalidArgumentError,
    CredentialError,
    CredentialExchangeError,
    MissingCredentialError,
    NotInitializedError,
    TransportError,
)

__all__ = [
    "Settings",
    "get_settings",
    "NestCameraError",
    "ConfigValidationError",
    "InvalidArgumentError",
    "CredentialError",
    "CredentialExchangeError",
    "MissingCredentialError",
    "NotInitializedError",
    "TransportError",
]
