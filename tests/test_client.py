"""Tests for the typed admin API client."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from zerokit_admin.client import ZeroKitAdminClient, encode_json
from zerokit_admin.common.errors import (
    InvalidCredentialsError,
    InvalidResponseError,
    TransportError,
    ZeroKitAPIError,
)
from zerokit_admin.models import RegistrationValidation, UserRegistration
from zerokit_admin.signer import Credentials, RequestSigner, verify_request
from zerokit_admin.transport import AiohttpTransport

from helpers import ADMIN_KEY, ADMIN_USER_ID, SERVICE_URL, FakeTransport


class TestBuildRequest:
    """Test URL and body construction."""

    def test_get_with_params(self, client):
        request = client.build_request("GET", "tresor/list-members", params={"tresorId": "a b/c"})

        assert request.method == "GET"
        assert request.path == "/api/v4/admin/tresor/list-members"
        assert request.query == "tresorId=a+b%2Fc"
        assert request.body is None

    def test_post_body_is_compact_json(self, client):
        request = client.build_request("post", "/tresor/approve-tresor-creation", payload={"TresorId": "x"})

        assert request.method == "POST"
        assert request.body == b'{"TresorId":"x"}'

    def test_custom_base_path(self, signer, transport):
        client = ZeroKitAdminClient(signer, transport, api_base_path="api/v5/admin/")

        assert client.build_request("GET", "x").path == "/api/v5/admin/x"

    def test_encode_json(self):
        assert encode_json({}) == b"{}"


class TestSignAndDo:
    """Test that requests are signed before dispatch."""

    @pytest.mark.asyncio
    async def test_dispatched_request_is_signed(self, client, transport):
        request = client.build_request("POST", "tresor/approve-tresor-creation", payload={"TresorId": "x"})

        await client.sign_and_do(request)

        sent = transport.requests[0]
        assert sent.get_header("UserId") == ADMIN_USER_ID
        assert sent.get_header("Authorization").startswith("AdminKey ")
        assert verify_request(sent, ADMIN_KEY) is True

    @pytest.mark.asyncio
    async def test_invalid_key_never_dispatches(self, transport):
        signer = RequestSigner(Credentials(admin_user_id=ADMIN_USER_ID, admin_key="0g"))
        client = ZeroKitAdminClient(signer, transport)

        with pytest.raises(InvalidCredentialsError):
            await client.list_members("tresor")

        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self, signer):
        transport = FakeTransport()
        transport.execute = AsyncMock(side_effect=TransportError("boom"))
        client = ZeroKitAdminClient(signer, transport)

        with pytest.raises(TransportError):
            await client.approve_tresor_creation("tresor")

    @pytest.mark.asyncio
    async def test_close_closes_transport(self, client, transport):
        async with client:
            pass

        assert transport.closed is True


class TestTresorOperations:
    """Test tresor endpoints."""

    @pytest.mark.asyncio
    async def test_list_members(self, client, transport):
        transport.queue(payload=["alice@tenant", "bob@tenant"])

        members = await client.list_members("0000v6c5wl03ms87ldqf9p8r")

        assert members == ["alice@tenant", "bob@tenant"]
        sent = transport.requests[0]
        assert sent.method == "GET"
        assert sent.target == "/api/v4/admin/tresor/list-members?tresorId=0000v6c5wl03ms87ldqf9p8r"
        assert sent.get_header("Content-SHA256") is None
        assert verify_request(sent, ADMIN_KEY) is True

    @pytest.mark.asyncio
    async def test_list_members_wrapped(self, client, transport):
        transport.queue(payload={"Members": ["alice@tenant"]})

        assert await client.list_members("t") == ["alice@tenant"]

    @pytest.mark.asyncio
    async def test_list_members_unexpected_shape(self, client, transport):
        transport.queue(payload={"Members": "alice"})

        with pytest.raises(InvalidResponseError):
            await client.list_members("t")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method_name", "argument", "endpoint", "payload"),
        [
            ("approve_tresor_creation", "tresor-1", "tresor/approve-tresor-creation", {"TresorId": "tresor-1"}),
            ("approve_share", "op-1", "tresor/approve-share", {"OperationId": "op-1"}),
            ("approve_kick", "op-2", "tresor/approve-kick", {"OperationId": "op-2"}),
        ],
    )
    async def test_approvals(self, client, transport, method_name, argument, endpoint, payload):
        result = await getattr(client, method_name)(argument)

        assert result is None
        sent = transport.requests[0]
        assert sent.method == "POST"
        assert sent.path == f"/api/v4/admin/{endpoint}"
        assert json.loads(sent.body) == payload
        assert sent.get_header("Content-Type") == "application/json"
        assert verify_request(sent, ADMIN_KEY) is True


class TestUserRegistration:
    """Test user registration endpoints."""

    @pytest.mark.asyncio
    async def test_init_user_registration(self, client, transport):
        transport.queue(
            payload={
                "UserId": "20171201-user",
                "RegSessionId": "session",
                "RegSessionVerifier": "verifier",
            }
        )

        registration = await client.init_user_registration()

        assert registration == UserRegistration(
            user_id="20171201-user",
            reg_session_id="session",
            reg_session_verifier="verifier",
        )
        assert transport.requests[0].body == b"{}"

    @pytest.mark.asyncio
    async def test_init_user_registration_missing_field(self, client, transport):
        transport.queue(payload={"UserId": "u"})

        with pytest.raises(InvalidResponseError):
            await client.init_user_registration()

    @pytest.mark.asyncio
    async def test_validate_user_registration(self, client, transport):
        registration = UserRegistration("u", "session", "verifier")
        validation = RegistrationValidation.for_registration(registration, "validation")

        await client.validate_user_registration(validation)

        assert json.loads(transport.requests[0].body) == {
            "RegSessionId": "session",
            "RegSessionVerifier": "verifier",
            "RegValidationVerifier": "validation",
            "UserId": "u",
        }


class TestErrorResponses:
    """Test mapping of error responses."""

    @pytest.mark.asyncio
    async def test_service_error_body(self, client, transport):
        transport.queue(status=400, payload={"ErrorCode": "BadInput", "ErrorMessage": "Unknown tresor"})

        with pytest.raises(ZeroKitAPIError) as exc_info:
            await client.approve_tresor_creation("nope")

        error = exc_info.value
        assert error.status_code == 400
        assert error.error_code == "BadInput"
        assert "Unknown tresor" in str(error)

    @pytest.mark.asyncio
    async def test_plain_text_error(self, client, transport):
        transport.queue(status=502, body=b"Bad Gateway")

        with pytest.raises(ZeroKitAPIError) as exc_info:
            await client.list_members("t")

        assert exc_info.value.status_code == 502
        assert exc_info.value.error_code is None
        assert "Bad Gateway" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_json_success_body(self, client, transport):
        transport.queue(status=200, body=b"not json")

        with pytest.raises(InvalidResponseError):
            await client.list_members("t")


class TestRetrySignsAgain:
    """Re-sending a request must carry a fresh signature."""

    @pytest.mark.asyncio
    async def test_resend_uses_new_timestamp(self, credentials, transport):
        stamps = iter(["2021-01-02T15:04:05Z", "2021-01-02T15:04:07Z"])
        signer = RequestSigner(credentials)
        client = ZeroKitAdminClient(signer, transport)
        request = client.build_request("GET", "tresor/list-members", params={"tresorId": "t"})

        with patch("zerokit_admin.signer.format_timestamp", side_effect=lambda _: next(stamps)):
            await client.sign_and_do(request)
            await client.sign_and_do(request)

        first, second = transport.requests
        assert first.get_header("TresoritDate") != second.get_header("TresoritDate")
        assert first.get_header("Authorization") != second.get_header("Authorization")
        assert verify_request(second, ADMIN_KEY) is True


class TestFromSettings:
    """Test building a client from settings."""

    def test_from_settings(self, settings):
        client = ZeroKitAdminClient.from_settings(settings)

        assert client.signer.admin_user_id == ADMIN_USER_ID
        assert isinstance(client._transport, AiohttpTransport)
        assert client._transport.service_url == SERVICE_URL
