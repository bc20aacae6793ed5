# Standard library imports
from enum import Enum


class TokenKind(str, Enum):
    """Slots of the credential chain"""
    PRIMARY = "primary"  # OAuth access token
    DERIVED = "derived"  # JWT issued for the access token
