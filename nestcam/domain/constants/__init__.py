"""Constants for camera API paths and payload field names"""

from .auth_fields import OAuthFields, JwtFields
from .endpoints import NestEndpoints

__all__ = [
    "OAuthFields",
    "JwtFields",
    "NestEndpoints",
]
