"""Typed client for the tenant admin API."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import urlencode

from zerokit_admin.common.errors import InvalidResponseError, ZeroKitAPIError
from zerokit_admin.common.logging import get_logger
from zerokit_admin.common.settings import Settings
from zerokit_admin.models import RegistrationValidation, UserRegistration
from zerokit_admin.signer import Credentials, RequestSigner, SignableRequest
from zerokit_admin.transport import AiohttpTransport, Transport, TransportResponse

logger = get_logger(__name__)

DEFAULT_API_BASE_PATH = "/api/v4/admin"


def encode_json(payload: Any) -> bytes:
    """Compact JSON body, as signed and sent."""
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


class ZeroKitAdminClient:
    """
    Client for the tenant admin API.

    Every request is signed with the tenant admin key right before it is
    handed to the transport, so a re-sent request always carries a fresh
    timestamp and signature.
    """

    def __init__(
        self,
        signer: RequestSigner,
        transport: Transport,
        api_base_path: str = DEFAULT_API_BASE_PATH,
    ):
        """
        Initialize the admin client.

        Args:
            signer: Request signer holding the tenant admin credentials
            transport: Transport bound to the tenant service URL
            api_base_path: Path prefix of the admin endpoints
        """
        self._signer = signer
        self._transport = transport
        self._base_path = "/" + api_base_path.strip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ZeroKitAdminClient":
        """Build a client with an aiohttp transport from settings."""
        signer = RequestSigner(
            Credentials(
                admin_user_id=settings.admin_user_id,
                admin_key=settings.admin_key,
            )
        )
        transport = AiohttpTransport(settings.service_url, timeout=settings.http_timeout)
        return cls(signer, transport, api_base_path=settings.api_base_path)

    @property
    def signer(self) -> RequestSigner:
        return self._signer

    async def __aenter__(self) -> "ZeroKitAdminClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._transport.close()

    def build_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, str] | None = None,
        payload: Any = None,
    ) -> SignableRequest:
        """
        Build an unsigned request for an admin endpoint.

        Args:
            method: HTTP method (GET or POST)
            endpoint: Endpoint path relative to the API base path
            params: Query parameters, encoded once in the given order
            payload: JSON payload for POST requests

        Returns:
            Request ready to be signed
        """
        method = method.upper()
        body = encode_json(payload) if method == "POST" else None
        return SignableRequest(
            method=method,
            path=f"{self._base_path}/{endpoint.lstrip('/')}",
            query=urlencode(params) if params else "",
            body=body,
        )

    async def sign_and_do(self, request: SignableRequest) -> TransportResponse:
        """
        Sign a request and dispatch it.

        Raises:
            InvalidCredentialsError: If the admin key is malformed
            TransportError: If the request cannot be sent
        """
        self._signer.sign(request)
        return await self._transport.execute(request)

    async def _call(
        self,
        method: str,
        endpoint: str,
        params: dict[str, str] | None = None,
        payload: Any = None,
    ) -> Any:
        request = self.build_request(method, endpoint, params=params, payload=payload)
        logger.debug("Calling admin endpoint", method=request.method, endpoint=endpoint)

        response = await self.sign_and_do(request)
        if not response.ok:
            raise self._api_error(endpoint, response)

        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseError(
                f"Invalid JSON from {endpoint}: {e}",
                response.status,
            ) from e

    @staticmethod
    def _api_error(endpoint: str, response: TransportResponse) -> ZeroKitAPIError:
        """Map an error response to an exception, keeping the service error code."""
        error_code = None
        message = response.text() or f"HTTP {response.status}"
        details: dict[str, Any] = {}
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            error_code = data.get("ErrorCode")
            message = data.get("ErrorMessage") or error_code or message
            details = data

        logger.warning(
            "Admin API call failed",
            endpoint=endpoint,
            status=response.status,
            error_code=error_code,
        )
        return ZeroKitAPIError(
            f"{endpoint} failed: {message}",
            status_code=response.status,
            error_code=error_code,
            details=details,
        )

    # === Tresor Operations ===

    async def list_members(self, tresor_id: str) -> list[str]:
        """
        List the user ids that are members of a tresor.

        Args:
            tresor_id: Tresor identifier

        Returns:
            Member user ids
        """
        data = await self._call("GET", "tresor/list-members", params={"tresorId": tresor_id})
        members = data.get("Members", data) if isinstance(data, dict) else data
        if not isinstance(members, list):
            raise InvalidResponseError(f"Unexpected list-members response: {data!r}")
        return [str(member) for member in members]

    async def approve_tresor_creation(self, tresor_id: str) -> None:
        """Approve the creation of a tresor."""
        await self._call(
            "POST",
            "tresor/approve-tresor-creation",
            payload={"TresorId": tresor_id},
        )
        logger.info("Approved tresor creation", tresor_id=tresor_id)

    async def approve_share(self, operation_id: str) -> None:
        """Approve a pending tresor share operation."""
        await self._call("POST", "tresor/approve-share", payload={"OperationId": operation_id})
        logger.info("Approved share", operation_id=operation_id)

    async def approve_kick(self, operation_id: str) -> None:
        """Approve a pending kick of a member from a tresor."""
        await self._call("POST", "tresor/approve-kick", payload={"OperationId": operation_id})
        logger.info("Approved kick", operation_id=operation_id)

    # === User Registration ===

    async def init_user_registration(self) -> UserRegistration:
        """
        Start a user registration session.

        Returns:
            The reserved user id and registration session
        """
        data = await self._call("POST", "user/init-user-registration", payload={})
        try:
            return UserRegistration.from_dict(data)
        except (KeyError, TypeError) as e:
            raise InvalidResponseError(f"Unexpected init-user-registration response: {data!r}") from e

    async def validate_user_registration(self, validation: RegistrationValidation) -> None:
        """
        Complete a user registration.

        Args:
            validation: Session data plus the validation verifier produced by
                the client-side registration
        """
        await self._call(
            "POST",
            "user/validate-user-registration",
            payload=validation.to_dict(),
        )
        logger.info("Validated user registration", user_id=validation.user_id)
