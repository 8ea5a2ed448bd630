"""
ZeroKit admin: signed tenant administration client.

Signs admin API requests with the tenant admin key and exposes the typed
admin endpoints on top of an injectable HTTP transport.
"""

from zerokit_admin.client import ZeroKitAdminClient
from zerokit_admin.common.errors import (
    InvalidCredentialsError,
    TransportError,
    ZeroKitAPIError,
    ZeroKitError,
)
from zerokit_admin.signer import Credentials, RequestSigner, SignableRequest, verify_request
from zerokit_admin.transport import AiohttpTransport, Transport, TransportResponse

__version__ = "1.0.0"

__all__ = [
    "AiohttpTransport",
    "Credentials",
    "InvalidCredentialsError",
    "RequestSigner",
    "SignableRequest",
    "Transport",
    "TransportError",
    "TransportResponse",
    "ZeroKitAPIError",
    "ZeroKitAdminClient",
    "ZeroKitError",
    "verify_request",
]
