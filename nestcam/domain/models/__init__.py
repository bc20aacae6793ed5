"""Domain models for the camera client"""

from .camera_config import CameraConfig
from .credentials import TokenKind
from .stream_kind import StreamKind

__all__ = [
    "CameraConfig",
    "TokenKind",
    "StreamKind",
]
