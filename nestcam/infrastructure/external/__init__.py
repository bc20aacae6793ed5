"""External service clients for the authorization and camera APIs"""

from .auth_client import AuthClient
from .fetch_source import FetchSource, ResponseMode

__all__ = [
    "AuthClient",
    "FetchSource",
    "ResponseMode",
]
