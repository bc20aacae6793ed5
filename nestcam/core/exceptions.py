"""
Custom exception hierarchy for the Nest camera client.

All client errors inherit from NestCameraError and carry a user-facing
message alongside the technical one.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from typing import Any, Dict, Optional


# -----------------------------------------------------------------------------
# Base
# -----------------------------------------------------------------------------


class NestCameraError(Exception):
    """Base exception for all Nest camera client errors."""

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or "An error occurred. Please try again."
        self.details = details or {}


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------


class ConfigValidationError(NestCameraError, ValueError):
    """Raised when the camera options are missing or incomplete."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            user_message="Camera configuration is incomplete.",
            **kwargs,
        )
        self.field = field


class InvalidArgumentError(NestCameraError, ValueError):
    """Raised when an operation receives an argument it cannot accept."""
    pass


# -----------------------------------------------------------------------------
# Credentials
# -----------------------------------------------------------------------------


class CredentialError(NestCameraError):
    """Base exception for credential errors."""
    pass


class CredentialExchangeError(CredentialError):
    """Raised when the OAuth or JWT exchange fails or returns a malformed payload."""

    def __init__(self, message: str, stage: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            user_message="Could not authenticate with the camera service.",
            **kwargs,
        )
        self.stage = stage


class MissingCredentialError(CredentialError):
    """Raised when a request needs the JWT token but none is cached yet."""
    pass


class NotInitializedError(MissingCredentialError):
    """Raised when a one-shot call is made before init() completed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            user_message="Camera client is not initialized. Call init() first.",
            **kwargs,
        )


# -----------------------------------------------------------------------------
# Transport
# -----------------------------------------------------------------------------


class TransportError(NestCameraError):
    """Raised when a camera API request fails at the HTTP level."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(
            message,
            user_message="Camera service request failed. Please try again.",
            **kwargs,
        )
        self.status_code = status_code
