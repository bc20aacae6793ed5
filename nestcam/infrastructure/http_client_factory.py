"""HTTP client factory for connection pooling."""
import httpx
import logging
from typing import Optional

from ..core.config import get_settings

logger = logging.getLogger(__name__)

# Global shared HTTP client instance
_shared_client: Optional[httpx.AsyncClient] = None


def create_http_client(timeout: Optional[float] = None) -> httpx.AsyncClient:
    """
    Create a pooled async HTTP client for the camera and authorization APIs.

    Args:
        timeout: Request timeout in seconds. Defaults to NEST_HTTP_TIMEOUT.

    Returns:
        New AsyncClient instance (caller owns it and must close it)
    """
    return httpx.AsyncClient(
        timeout=timeout if timeout is not None else get_settings().http_timeout,
        limits=httpx.Limits(
            max_keepalive_connections=10,
            max_connections=20,
            keepalive_expiry=30.0,
        ),
        http2=True,
    )


def get_shared_http_client() -> httpx.AsyncClient:
    """
    Get or create shared async HTTP client for connection pooling.

    Both polling streams and the token exchanges of every camera client in
    the process go through this client, so keep-alive connections to the
    camera API are reused between ticks.

    Returns:
        Shared AsyncClient instance
    """
    global _shared_client

    if _shared_client is None or _shared_client.is_closed:
        _shared_client = create_http_client()
        logger.info("Created shared HTTP client for connection pooling")

    return _shared_client


async def close_shared_http_client() -> None:
    """
    Close shared HTTP client (call on application shutdown).
    """
    global _shared_client

    if _shared_client is not None:
        await _shared_client.aclose()
        _shared_client = None
        logger.info("Closed shared HTTP client")
