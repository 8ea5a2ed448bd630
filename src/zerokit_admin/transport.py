"""HTTP transport for signed admin requests."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp
from yarl import URL

from zerokit_admin.common.errors import TransportError
from zerokit_admin.common.logging import get_logger
from zerokit_admin.signer import SignableRequest

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Status, headers and raw body of a completed request."""

    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON; an empty body decodes to ``None``."""
        if not self.body.strip():
            return None
        return json.loads(self.body)


class Transport(Protocol):
    """Executes a signed request against the tenant service."""

    async def execute(self, request: SignableRequest) -> TransportResponse: ...

    async def close(self) -> None: ...


class AiohttpTransport:
    """
    aiohttp-backed transport.

    The request target is sent exactly as signed: the URL is marked as
    already encoded so the query string is not requoted, and header names
    keep their case.
    """

    def __init__(
        self,
        service_url: str,
        timeout: float = 30.0,
        session: aiohttp.ClientSession | None = None,
    ):
        """
        Initialize the transport.

        Args:
            service_url: Tenant service URL (scheme and host)
            timeout: Total request timeout in seconds
            session: Optional externally owned session
        """
        self._base = service_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    @property
    def service_url(self) -> str:
        return self._base

    async def __aenter__(self) -> "AiohttpTransport":
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if not self._session:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session and self._owns_session:
            await self._session.close()
        self._session = None

    def url_for(self, request: SignableRequest) -> URL:
        """Absolute, pre-encoded URL of a request."""
        path = request.target if request.target.startswith("/") else f"/{request.target}"
        try:
            return URL(f"{self._base}{path}", encoded=True)
        except (TypeError, ValueError) as e:
            raise TransportError(f"Invalid request URL: {e}") from e

    async def execute(self, request: SignableRequest) -> TransportResponse:
        """
        Send a signed request.

        Args:
            request: Request that already carries its auth headers

        Returns:
            Response status, headers and body

        Raises:
            TransportError: On malformed URLs, connection errors or timeouts
        """
        url = self.url_for(request)
        session = self._ensure_session()

        logger.debug("Dispatching admin request", method=request.method, url=str(url))

        try:
            async with session.request(
                request.method,
                url,
                headers=list(request.headers),
                data=request.body,
            ) as response:
                body = await response.read()
                return TransportResponse(
                    status=response.status,
                    body=body,
                    headers={key: value for key, value in response.headers.items()},
                )
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise TransportError(f"Request failed: {e}") from e
