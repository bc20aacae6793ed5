"""Application layer: the camera client facade"""

from .nest_camera import NestCamera

__all__ = ["NestCamera"]
