# Standard library imports
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

# External package imports
import httpx

# Local application imports
from ..core.config import Settings, get_settings
from ..core.exceptions import InvalidArgumentError, NotInitializedError
from ..core.security import CredentialManager
from ..domain.constants import NestEndpoints
from ..domain.models import CameraConfig, StreamKind
from ..infrastructure.external import AuthClient, FetchSource, ResponseMode
from ..infrastructure.http_client_factory import get_shared_http_client
from ..infrastructure.streaming import (
    ChangeFilter,
    MulticastChannel,
    PollScheduler,
    Subscription,
    SubscriptionRegistry,
)
from ..utils.datetime_utils import today_window_ms

logger = logging.getLogger(__name__)

MISSING_UNSUBSCRIBE_TYPE = (
    'You must specify the type of stream to unsubscribe from. Either "event", or "snapshot".'
)
INVALID_UNSUBSCRIBE_TYPE = (
    'You must specify a type of event to unsubscribe from either: "event" or "snapshot"'
)
EVENTS_NOT_INITIALIZED = (
    "Access token is not set. Call init() to retrieve new OAuth and JWT tokens."
)
SNAPSHOT_NOT_INITIALIZED = (
    "JWT token is not set. Call init() to retrieve a new JSON web token."
)


class NestCamera:
    """
    Client for one Nest camera.

    Exposes the camera's motion/sound events and its latest image both as
    one-shot calls and as polled streams. Each stream is polled by a single
    shared loop that runs only while someone is subscribed to it.

    Example:
        async with NestCamera(options) as camera:
            await camera.init()
            camera.subscribe("event", print)
    """

    def __init__(
        self,
        options: Optional[Mapping[str, Any]],
        *,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        auth_client: Optional[AuthClient] = None,
    ):
        """
        Validate options and build (but do not start) both streams.

        Args:
            options: Mapping with nest_id, refresh_token, api_key, client_id and
                optionally host, event_interval and snapshot_interval (ms).
            settings: Service settings. If None, reads from env.
            http_client: AsyncClient for all requests. If None, the process-wide
                shared client is used.
            auth_client: Authorization client. If None, one is built on http_client.

        Raises:
            ConfigValidationError: If options are missing or incomplete
        """
        self._config = CameraConfig.from_options(options)
        self.settings = settings or get_settings()
        self.http_client = http_client or get_shared_http_client()
        self.host = self._config.host or self.settings.nexus_host

        self._credentials = CredentialManager(
            auth_client or AuthClient(self.http_client, self.settings),
            self._config,
        )
        self._registry = SubscriptionRegistry()

        events_source = self._source(
            "events",
            NestEndpoints.events_path(self._config.nest_id),
            params=self._today_params,
        )
        snapshot_source = self._source(
            "latest-snapshot",
            NestEndpoints.latest_image_path(),
            params=NestEndpoints.latest_image_params(self._config.nest_id),
            response_mode=ResponseMode.BYTES,
        )
        self._channels: Dict[StreamKind, MulticastChannel] = {
            StreamKind.EVENT: MulticastChannel(
                PollScheduler(events_source, self._config.event_interval),
                change_filter=ChangeFilter(),
                name="events",
            ),
            StreamKind.SNAPSHOT: MulticastChannel(
                PollScheduler(snapshot_source, self._config.snapshot_interval),
                name="snapshot",
            ),
        }

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------
    @property
    def config(self) -> CameraConfig:
        return self._config

    @property
    def nest_id(self) -> str:
        return self._config.nest_id

    @property
    def primary_token(self) -> Optional[str]:
        return self._credentials.primary_token

    @property
    def derived_token(self) -> Optional[str]:
        return self._credentials.derived_token

    @property
    def credentials(self) -> CredentialManager:
        return self._credentials

    @property
    def events(self) -> MulticastChannel:
        """Shared events stream (newest event whenever the event count changes)."""
        return self._channels[StreamKind.EVENT]

    @property
    def snapshots(self) -> MulticastChannel:
        """Shared latest-image stream (JPEG bytes on every tick)."""
        return self._channels[StreamKind.SNAPSHOT]

    def channel(self, kind: StreamKind) -> MulticastChannel:
        return self._channels[kind]

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    async def init(self) -> "NestCamera":
        """
        Retrieve the OAuth and JWT tokens.

        Returns:
            self

        Raises:
            CredentialExchangeError: If either exchange fails
        """
        await self._credentials.refresh()
        logger.info(f"Camera client for {self.nest_id} initialized")
        return self

    async def close(self) -> None:
        """Stop polling and complete every subscriber."""
        for channel in self._channels.values():
            channel.close()
        self._registry.cancel_all()
        await self._credentials.wait_for_background()
        logger.info(f"Camera client for {self.nest_id} closed")

    async def __aenter__(self) -> "NestCamera":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Streams
    # -------------------------------------------------------------------------
    def subscribe(
        self,
        kind: Any,
        on_next: Callable[[Any], Any],
        on_error: Optional[Callable[[BaseException], Any]] = None,
        on_complete: Optional[Callable[[], Any]] = None,
    ) -> Optional[Subscription]:
        """
        Subscribe to the events or snapshot stream.

        An unknown kind is logged and ignored. Subscribing again to the same
        kind replaces (and cancels) the previous subscription of that kind.

        Args:
            kind: "event"/"events" or "snapshot"/"snapshots", any case
            on_next: Called with the newest event (dict) or the image bytes
            on_error: Called with every polling error
            on_complete: Called when the client is closed

        Returns:
            Subscription handle, or None for an unknown kind
        """
        logger.info(f"Creating subscription for stream of type: {kind}")
        stream_kind = StreamKind.parse(kind)
        if stream_kind is None:
            logger.warning(
                f'No known stream to subscribe to for input: {kind}. Use either "event" or "snapshot".'
            )
            return None

        handle = self._channels[stream_kind].subscribe(on_next, on_error, on_complete)
        self._registry.register(stream_kind, handle)
        return handle

    def unsubscribe(self, kind: Any) -> bool:
        """
        Cancel the subscription registered for kind.

        Returns:
            True if an active subscription was cancelled

        Raises:
            InvalidArgumentError: If kind is None or not a known stream
        """
        if kind is None:
            raise InvalidArgumentError(MISSING_UNSUBSCRIBE_TYPE)
        stream_kind = StreamKind.parse(kind)
        if stream_kind is None:
            raise InvalidArgumentError(INVALID_UNSUBSCRIBE_TYPE, details={"kind": str(kind)})
        return self._registry.cancel(stream_kind)

    def is_subscribed(self, kind: Any) -> bool:
        stream_kind = StreamKind.parse(kind)
        return stream_kind is not None and stream_kind in self._registry

    # -------------------------------------------------------------------------
    # One-shot calls
    # -------------------------------------------------------------------------
    async def get_events(self, start: Optional[int] = None, end: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Retrieve recent events detected by the camera.

        Args:
            start: Window start, epoch milliseconds
            end: Window end, epoch milliseconds

        Returns:
            List of event records as returned by the camera API

        Raises:
            NotInitializedError: If init() has not completed
            TransportError: If the request fails
        """
        if not self.derived_token:
            raise NotInitializedError(EVENTS_NOT_INITIALIZED)
        source = self._source(
            "events",
            NestEndpoints.events_path(self.nest_id),
            params=NestEndpoints.events_params(start, end),
        )
        return await source.execute()

    async def get_latest_snapshot(self) -> bytes:
        """
        Retrieve the camera's current image.

        Returns:
            JPEG bytes

        Raises:
            NotInitializedError: If init() has not completed
            TransportError: If the request fails
        """
        if not self.derived_token:
            raise NotInitializedError(SNAPSHOT_NOT_INITIALIZED)
        return await self.snapshots.scheduler.source.execute()

    async def get_snapshot(self, snapshot_id: str) -> bytes:
        """
        Retrieve the snapshot image of a single event.

        Args:
            snapshot_id: Event id, e.g. "1586795027-labs"

        Returns:
            JPEG bytes

        Raises:
            NotInitializedError: If init() has not completed
            TransportError: If the request fails
        """
        if not self.derived_token:
            raise NotInitializedError(SNAPSHOT_NOT_INITIALIZED)
        source = self._source(
            "snapshot",
            NestEndpoints.snapshot_path(self.nest_id, snapshot_id),
            params=NestEndpoints.snapshot_params(),
            response_mode=ResponseMode.BYTES,
        )
        return await source.execute()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _source(self, name: str, path: str, **kwargs: Any) -> FetchSource:
        return FetchSource(
            name=f"{self.nest_id}:{name}",
            credentials=self._credentials,
            http_client=self.http_client,
            base_url=self.host,
            path=path,
            rotate_on_failure=self.settings.rotate_tokens_on_failure,
            **kwargs,
        )

    @staticmethod
    def _today_params() -> Dict[str, str]:
        start, end = today_window_ms()
        return NestEndpoints.events_params(start, end)
