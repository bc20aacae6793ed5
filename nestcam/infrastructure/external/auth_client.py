# Standard library imports
import logging
from typing import Any, Dict, Optional

# External package imports
import httpx

# Local application imports
from ...core.config import Settings, get_settings
from ...core.exceptions import CredentialExchangeError
from ...domain.constants import OAuthFields, JwtFields

logger = logging.getLogger(__name__)


class AuthClient:
    """
    HTTP client for the two-stage Google/Nest authorization flow.

    Stage one trades the long-lived refresh token for an OAuth access token.
    Stage two trades that access token for a JWT accepted by the camera API.
    Unlike the camera API clients, failures here raise CredentialExchangeError
    instead of returning None, since nothing downstream can work without a token.
    """

    def __init__(self, http_client: httpx.AsyncClient, settings: Optional[Settings] = None):
        """
        Initialize authorization client.

        Args:
            http_client: AsyncClient used for both exchanges.
            settings: Service settings. If None, reads from env.
        """
        self.http_client = http_client
        self.settings = settings or get_settings()

    async def exchange_refresh_token(self, refresh_token: str, client_id: str) -> str:
        """
        Fetch an OAuth access token using the refresh token.

        Args:
            refresh_token: Long-lived Google refresh token
            client_id: OAuth client id the refresh token was issued to

        Returns:
            The access token string

        Raises:
            CredentialExchangeError: If the request fails or the payload has no access token
        """
        form = {
            OAuthFields.REFRESH_TOKEN: refresh_token,
            OAuthFields.CLIENT_ID: client_id,
            OAuthFields.GRANT_TYPE: OAuthFields.GRANT_TYPE_REFRESH,
        }
        logger.debug(f"Fetching OAuth access token from {self.settings.oauth_url}")

        payload = await self._post(
            "oauth",
            self.settings.oauth_url,
            data=form,
            headers={"Content-Type": "application/x-www-form-urlencoded; charset=UTF-8"},
        )
        return self._extract(payload, OAuthFields.ACCESS_TOKEN, "oauth")

    async def issue_jwt(self, access_token: str, api_key: str) -> str:
        """
        Fetch a JWT for the camera API using the OAuth access token.

        Args:
            access_token: Token returned by exchange_refresh_token
            api_key: Google API key of the Nest auth proxy

        Returns:
            The JWT string

        Raises:
            CredentialExchangeError: If the request fails or the payload has no jwt
        """
        body = {
            JwtFields.EXPIRE_AFTER: self.settings.jwt_expire_after,
            JwtFields.POLICY_ID: self.settings.jwt_policy_id,
            JwtFields.OAUTH_ACCESS_TOKEN: access_token,
            JwtFields.EMBED_OAUTH_ACCESS_TOKEN: "true",
        }
        headers = {
            JwtFields.API_KEY_HEADER: api_key,
            "Accept": "application/json",
            "Authorization": f"Bearer {access_token}",
        }
        logger.debug(f"Fetching JWT token from {self.settings.jwt_token_url}")

        payload = await self._post("jwt", self.settings.jwt_token_url, json=body, headers=headers)
        return self._extract(payload, JwtFields.JWT, "jwt")

    async def _post(self, stage: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await self.http_client.post(url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Timeout while fetching {stage} token from {url}")
            raise CredentialExchangeError(
                f"Timed out retrieving {stage} token", stage=stage
            ) from e
        except httpx.HTTPStatusError as e:
            logger.error(
                f"HTTP error fetching {stage} token: "
                f"{e.response.status_code} - {e.response.text}"
            )
            raise CredentialExchangeError(
                f"Failed to retrieve {stage} token: HTTP {e.response.status_code}",
                stage=stage,
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to retrieve {stage} token from {url}: {e}")
            raise CredentialExchangeError(
                f"Failed to retrieve {stage} token: {e}", stage=stage
            ) from e
        except ValueError as e:
            logger.error(f"Malformed {stage} token response from {url}: {e}")
            raise CredentialExchangeError(
                f"Malformed {stage} token response", stage=stage
            ) from e

    @staticmethod
    def _extract(payload: Any, field: str, stage: str) -> str:
        token = payload.get(field) if isinstance(payload, dict) else None
        if not token or not isinstance(token, str):
            logger.error(f"{stage} token response has no '{field}' field")
            raise CredentialExchangeError(
                f"Malformed {stage} token response: missing '{field}'", stage=stage
            )
        return token
