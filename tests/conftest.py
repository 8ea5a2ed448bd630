"""Pytest configuration and fixtures."""

import pytest

from zerokit_admin.client import ZeroKitAdminClient
from zerokit_admin.common.settings import Settings
from zerokit_admin.signer import Credentials, RequestSigner

from helpers import ADMIN_KEY, ADMIN_USER_ID, FIXED_NOW, SERVICE_URL, FakeTransport


@pytest.fixture
def credentials() -> Credentials:
    """Test tenant admin credentials."""
    return Credentials(admin_user_id=ADMIN_USER_ID, admin_key=ADMIN_KEY)


@pytest.fixture
def signer(credentials: Credentials) -> RequestSigner:
    """Signer with the wall clock."""
    return RequestSigner(credentials)


@pytest.fixture
def fixed_signer(credentials: Credentials) -> RequestSigner:
    """Signer whose clock is pinned to FIXED_NOW."""
    return RequestSigner(credentials, clock=lambda: FIXED_NOW)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(signer: RequestSigner, transport: FakeTransport) -> ZeroKitAdminClient:
    """Admin client on a fake transport."""
    return ZeroKitAdminClient(signer, transport)


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        service_url=SERVICE_URL,
        admin_user_id=ADMIN_USER_ID,
        admin_key=ADMIN_KEY,
        http_timeout=5.0,
    )
