# Standard library imports
import os
from typing import Final, Optional


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Service settings loaded from environment variables.

    These are the constants shared by every camera client in the process:
    authorization and API hosts, JWT policy, HTTP timeout and local time zone.
    Per-camera credentials are NOT read from here; they are passed explicitly
    to the client as a CameraConfig.
    """

    def __init__(self) -> None:
        # Authorization endpoints
        self.oauth_url: Final[str] = os.getenv(
            "NEST_OAUTH_URL", "https://oauth2.googleapis.com/token"
        )
        self.jwt_token_url: Final[str] = os.getenv(
            "NEST_JWT_TOKEN_URL",
            "https://nestauthproxyservice-pa.googleapis.com/v1/issue_jwt",
        )

        # Camera API
        self.nexus_host: Final[str] = os.getenv(
            "NEST_NEXUS_HOST", "https://nexusapi-us1.dropcam.com"
        )

        # JWT Configuration
        self.jwt_expire_after: Final[str] = os.getenv("NEST_JWT_EXPIRE_AFTER", "3600s")
        self.jwt_policy_id: Final[str] = os.getenv(
            "NEST_JWT_POLICY_ID", "authproxy-oauth-policy"
        )
        self.rotate_tokens_on_failure: Final[bool] = _env_flag(
            "NEST_ROTATE_TOKENS_ON_FAILURE", "true"
        )

        # HTTP
        self.http_timeout: Final[float] = float(os.getenv("NEST_HTTP_TIMEOUT", "30"))

        # Misc
        self.local_timezone: Final[str] = os.getenv("LOCAL_TIMEZONE", "UTC")
        self.snapshot_dir: Final[str] = os.getenv("NEST_SNAPSHOT_DIR", "assets")
        self.log_level: Final[str] = os.getenv("LOG_LEVEL", "INFO").upper()


# Global settings instance (singleton pattern)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get service settings (singleton pattern)

    Returns:
        Settings instance with all configuration values
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
