# Standard library imports
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

# External package imports
import httpx

# Local application imports
from ...core.exceptions import MissingCredentialError, TransportError
from ...core.security import CredentialManager

logger = logging.getLogger(__name__)

Params = Union[Dict[str, str], Callable[[], Dict[str, str]], None]


class ResponseMode(str, Enum):
    """How the response body is consumed"""
    JSON = "json"  # buffered, parsed
    BYTES = "bytes"  # streamed, collected into bytes


@dataclass
class FetchSource:
    """
    One authenticated GET against the camera API.

    The JWT is read from the credential manager on every call, so a source
    built before init() starts working as soon as tokens are available.
    A failed call schedules a background token refresh, since an expired
    JWT is the usual cause, and then raises; it never retries by itself.
    """
    name: str
    credentials: CredentialManager
    http_client: httpx.AsyncClient
    base_url: str
    path: str
    params: Params = None
    response_mode: ResponseMode = ResponseMode.JSON
    rotate_on_failure: bool = True

    method = "GET"

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.path}"

    def resolve_params(self) -> Dict[str, str]:
        if callable(self.params):
            return self.params()
        return dict(self.params or {})

    async def execute(self) -> Any:
        """
        Run the request.

        Returns:
            Parsed JSON for ResponseMode.JSON, bytes for ResponseMode.BYTES

        Raises:
            MissingCredentialError: If no JWT is cached
            TransportError: If the request fails or the body cannot be decoded
        """
        try:
            token = self.credentials.require_derived_token()
        except MissingCredentialError:
            logger.warning(f"[{self.name}] No JWT token available, requesting token refresh")
            self.credentials.refresh_in_background()
            raise

        headers = {"Authorization": f"Basic {token}"}
        params = self.resolve_params()

        try:
            if self.response_mode is ResponseMode.BYTES:
                return await self._fetch_bytes(headers, params)
            return await self._fetch_json(headers, params)
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"[{self.name}] HTTP error fetching {self.path}: {status_code}")
            self._refresh_after_failure()
            raise TransportError(str(e), status_code=status_code) from e
        except httpx.HTTPError as e:
            logger.error(f"[{self.name}] Failed to fetch {self.path}: {e}")
            self._refresh_after_failure()
            raise TransportError(str(e)) from e
        except ValueError as e:
            logger.error(f"[{self.name}] Undecodable response from {self.path}: {e}")
            self._refresh_after_failure()
            raise TransportError(f"Invalid JSON response from {self.path}") from e

    async def _fetch_json(self, headers: Dict[str, str], params: Dict[str, str]) -> Any:
        response = await self.http_client.request(
            self.method, self.url, params=params, headers=headers
        )
        response.raise_for_status()
        return response.json()

    async def _fetch_bytes(self, headers: Dict[str, str], params: Dict[str, str]) -> bytes:
        async with self.http_client.stream(
            self.method, self.url, params=params, headers=headers
        ) as response:
            response.raise_for_status()
            chunks = [chunk async for chunk in response.aiter_bytes()]
        data = b"".join(chunks)
        logger.debug(f"[{self.name}] Received {len(data)} bytes from {self.path}")
        return data

    def _refresh_after_failure(self) -> None:
        logger.info(f"[{self.name}] Refreshing OAuth & JWT tokens after failed request")
        self.credentials.refresh_in_background(force=self.rotate_on_failure)
