"""Shared error types and codes."""

from __future__ import annotations

from typing import Any


class ErrorCode:
    INVALID_CREDENTIALS = "invalid_credentials"
    TRANSPORT = "transport_error"
    API = "api_error"
    INVALID_RESPONSE = "invalid_response"


class ZeroKitError(Exception):
    """Base class for all admin client errors."""

    code = ErrorCode.API


class InvalidCredentialsError(ZeroKitError):
    """Admin key cannot be used as an HMAC key."""

    code = ErrorCode.INVALID_CREDENTIALS


class TransportError(ZeroKitError):
    """Request could not be built or dispatched."""

    code = ErrorCode.TRANSPORT


class ZeroKitAPIError(ZeroKitError):
    """Non-success response from the admin API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}


class InvalidResponseError(ZeroKitAPIError):
    """Response body is not the JSON shape the endpoint promises."""

    code = ErrorCode.INVALID_RESPONSE
