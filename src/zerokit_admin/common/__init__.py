"""Common utilities for the admin client."""

from zerokit_admin.common.errors import (
    InvalidCredentialsError,
    TransportError,
    ZeroKitAPIError,
    ZeroKitError,
)
from zerokit_admin.common.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "ZeroKitError",
    "InvalidCredentialsError",
    "TransportError",
    "ZeroKitAPIError",
]
