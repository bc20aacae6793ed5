"""
Nest camera client.

Turns the pull-only Nest/Dropcam camera API into two subscribable streams
(motion/sound events and the latest image) and manages the OAuth -> JWT
credential chain behind them.
"""
from .application import NestCamera
from .core.config import Settings, get_settings
from .core.exceptions import (
    NestCameraError,
    ConfigValidationError,
    InvalidArgumentError,
    CredentialExchangeError,
    MissingCredentialError,
    NotInitializedError,
    TransportError,
)
from .domain.models import CameraConfig, StreamKind

__version__ = "1.0.0"

__all__ = [
    "NestCamera",
    "CameraConfig",
    "StreamKind",
    "Settings",
    "get_settings",
    "NestCameraError",
    "ConfigValidationError",
    "InvalidArgumentError",
    "CredentialExchangeError",
    "MissingCredentialError",
    "NotInitializedError",
    "TransportError",
]
