"""Shared test constants and the recording transport."""

import copy
import json
from datetime import datetime, timezone
from typing import Any

from zerokit_admin.signer import SignableRequest
from zerokit_admin.transport import TransportResponse

SERVICE_URL = "https://exampletenant.tresorit.io"
ADMIN_USER_ID = "admin@exampletenant.tresorit.io"
ADMIN_KEY = "204bcf1b"
SHA256_HEX_EMPTY = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
FIXED_NOW = datetime(2021, 1, 2, 15, 4, 5, tzinfo=timezone.utc)


class FakeTransport:
    """Transport that records requests and replays queued responses."""

    def __init__(self) -> None:
        self.requests: list[SignableRequest] = []
        self.responses: list[TransportResponse] = []
        self.closed = False

    def queue(self, status: int = 200, payload: Any = None, body: bytes | None = None) -> None:
        if body is None:
            body = json.dumps(payload).encode("utf-8") if payload is not None else b""
        self.responses.append(TransportResponse(status=status, body=body))

    async def execute(self, request: SignableRequest) -> TransportResponse:
        self.requests.append(copy.deepcopy(request))
        if self.responses:
            return self.responses.pop(0)
        return TransportResponse(status=200)

    async def close(self) -> None:
        self.closed = True
