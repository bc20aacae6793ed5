# Standard library imports
import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, Optional, Set

# Local application imports
from .exceptions import MissingCredentialError
from ..domain.models.camera_config import CameraConfig
from ..domain.models.credentials import TokenKind

if TYPE_CHECKING:
    from ..infrastructure.external.auth_client import AuthClient

logger = logging.getLogger(__name__)


class CredentialManager:
    """
    Owns the OAuth access token -> JWT chain of one camera client.

    Each slot is filled lazily and then returned from cache. Concurrent
    callers that find a slot empty share one in-flight exchange. A failed
    exchange leaves the slot as it was.
    """

    def __init__(self, auth_client: "AuthClient", config: CameraConfig):
        self._auth_client = auth_client
        self._config = config
        self._primary_token: Optional[str] = None
        self._derived_token: Optional[str] = None
        self._pending: Dict[TokenKind, asyncio.Task] = {}
        self._rotation: Optional[asyncio.Task] = None
        self._background: Set[asyncio.Task] = set()

    @property
    def primary_token(self) -> Optional[str]:
        return self._primary_token

    @property
    def derived_token(self) -> Optional[str]:
        return self._derived_token

    def require_derived_token(self) -> str:
        """
        Return the cached JWT without fetching.

        Raises:
            MissingCredentialError: If no JWT has been retrieved yet
        """
        if not self._derived_token:
            raise MissingCredentialError(
                "JWT token is not set. Call refresh() to retrieve a new JSON web token."
            )
        return self._derived_token

    async def get_primary_token(self) -> str:
        """
        Get the OAuth access token, exchanging the refresh token if none is cached.

        Returns:
            OAuth access token

        Raises:
            CredentialExchangeError: If the exchange fails
        """
        if self._primary_token:
            return self._primary_token
        return await self._single_flight(TokenKind.PRIMARY, self._fill_primary)

    async def get_derived_token(self, primary_token: str) -> str:
        """
        Get the JWT, exchanging the given access token if none is cached.

        Args:
            primary_token: OAuth access token to exchange

        Returns:
            JWT token

        Raises:
            MissingCredentialError: If no JWT is cached and primary_token is empty
            CredentialExchangeError: If the exchange fails
        """
        if self._derived_token:
            return self._derived_token
        if not primary_token:
            raise MissingCredentialError(
                "Cannot retrieve a JWT token without an OAuth access token."
            )
        return await self._single_flight(
            TokenKind.DERIVED, lambda: self._fill_derived(primary_token)
        )

    async def refresh(self, force: bool = False) -> str:
        """
        Make sure both tokens are present.

        Without force this only fills empty slots, so once both tokens are
        cached it returns immediately. With force both exchanges run again and
        the new pair replaces the old one only if both succeed.

        Args:
            force: Rotate the tokens even if they are cached

        Returns:
            The current JWT token

        Raises:
            CredentialExchangeError: If an exchange fails
        """
        logger.debug(f"Refreshing OAuth & JWT tokens for camera {self._config.nest_id} (force={force})")
        try:
            if force:
                return await self._rotate()
            primary = await self.get_primary_token()
            return await self.get_derived_token(primary)
        except Exception:
            logger.error(f"Failed to refresh OAuth or JWT tokens for camera {self._config.nest_id}")
            raise

    def refresh_in_background(self, force: bool = False) -> asyncio.Task:
        """
        Start refresh() without waiting for it.

        Failures are logged; the task is kept referenced until it finishes.
        """
        task = asyncio.create_task(self.refresh(force=force))
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    async def wait_for_background(self) -> None:
        """Wait until all background refreshes have finished."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Background token refresh failed: {error}")
        else:
            logger.info(f"Background token refresh completed for camera {self._config.nest_id}")

    async def _single_flight(self, kind: TokenKind, factory: Callable[[], Awaitable[str]]) -> str:
        task = self._pending.get(kind)
        if task is None:
            task = asyncio.create_task(factory())
            self._pending[kind] = task

            def _clear(done: asyncio.Task, kind: TokenKind = kind) -> None:
                if self._pending.get(kind) is done:
                    del self._pending[kind]

            task.add_done_callback(_clear)
        else:
            logger.debug(f"Joining in-flight {kind.value} token exchange")
        return await asyncio.shield(task)

    async def _fill_primary(self) -> str:
        token = await self._auth_client.exchange_refresh_token(
            self._config.refresh_token, self._config.client_id
        )
        self._primary_token = token
        logger.info(f"Retrieved OAuth access token for camera {self._config.nest_id}")
        return token

    async def _fill_derived(self, primary_token: str) -> str:
        token = await self._auth_client.issue_jwt(primary_token, self._config.api_key)
        self._derived_token = token
        logger.info(f"Retrieved JWT token for camera {self._config.nest_id}")
        return token

    async def _rotate(self) -> str:
        if self._rotation is None or self._rotation.done():
            self._rotation = asyncio.create_task(self._exchange_pair())
        return await asyncio.shield(self._rotation)

    async def _exchange_pair(self) -> str:
        primary = await self._auth_client.exchange_refresh_token(
            self._config.refresh_token, self._config.client_id
        )
        derived = await self._auth_client.issue_jwt(primary, self._config.api_key)
        self._primary_token = primary
        self._derived_token = derived
        logger.info(f"Rotated OAuth & JWT tokens for camera {self._config.nest_id}")
        return derived
