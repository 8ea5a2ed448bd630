"""Admin key request signing.

All server-side APIs of the tenant service are stateless, so every admin
request is authenticated individually by signing it with the tenant admin
key:

1. Assemble the request headers:

   - ``Content-Type: application/json`` (POST only)
   - ``Content-SHA256: <sha256 hex of the body>`` (POST only)
   - ``TresoritDate: <RFC 3339 UTC timestamp>``
   - ``UserId: <tenant admin user id>``
   - ``HMACHeaders: <comma separated header names>``

2. Assemble the canonical request string::

       <VERB>\\n<path>[?<query>]\\n<header>:<value>[\\n...]

   with the headers listed in the same order as in ``HMACHeaders``.

3. Sign it::

       BASE64(HMACSHA256(key=HEXTOBIN(AdminKey), data=UTF8(canonical)))

4. Attach ``Authorization: AdminKey <signature>``.

Header names are stored exactly as written and never case-folded; the
server verifies against the literal names listed in ``HMACHeaders``.
"""

from __future__ import annotations

import base64
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.parse import urlsplit

from zerokit_admin.common.hashing import (
    decode_admin_key,
    digests_equal,
    hmac_sha256,
    sha256_hex,
)
from zerokit_admin.common.logging import get_logger

logger = get_logger(__name__)

CONTENT_TYPE = "Content-Type"
CONTENT_SHA256 = "Content-SHA256"
TRESORIT_DATE = "TresoritDate"
USER_ID = "UserId"
HMAC_HEADERS = "HMACHeaders"
AUTHORIZATION = "Authorization"

AUTH_HEADERS = (TRESORIT_DATE, USER_ID, HMAC_HEADERS, AUTHORIZATION)
BODY_HEADERS = (CONTENT_TYPE, CONTENT_SHA256)

AUTH_SCHEME = "AdminKey"
JSON_CONTENT_TYPE = "application/json"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


@dataclass(frozen=True)
class Credentials:
    """Tenant admin credentials."""

    admin_user_id: str
    admin_key: str = field(repr=False)


@dataclass
class SignableRequest:
    """
    An outgoing admin API request.

    Headers are kept as an ordered list of ``(name, value)`` pairs. Lookups
    match names exactly, so ``UserId`` and ``Userid`` are different headers.
    """

    method: str
    path: str
    query: str = ""
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes | None = None

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        body: bytes | None = None,
        headers: Iterable[tuple[str, str]] = (),
    ) -> "SignableRequest":
        """Build a request from a path or URL, keeping the raw query string."""
        parts = urlsplit(url)
        return cls(
            method=method.upper(),
            path=parts.path,
            query=parts.query,
            headers=list(headers),
            body=body,
        )

    @property
    def target(self) -> str:
        """Path plus raw query string, as sent on the request line."""
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path

    @property
    def header_names(self) -> list[str]:
        return [name for name, _ in self.headers]

    def get_header(self, name: str) -> str | None:
        for key, value in self.headers:
            if key == name:
                return value
        return None

    def set_header(self, name: str, value: str) -> None:
        """Replace the value of ``name`` in place, or append it."""
        for index, (key, _) in enumerate(self.headers):
            if key == name:
                self.headers[index] = (name, value)
                return
        self.headers.append((name, value))

    def remove_header(self, name: str) -> None:
        self.headers = [(key, value) for key, value in self.headers if key != name]

    def discard_headers(self, names: Iterable[str]) -> None:
        """Remove every header matching one of ``names`` in any letter case."""
        folded = {name.lower() for name in names}
        self.headers = [(key, value) for key, value in self.headers if key.lower() not in folded]


def format_timestamp(moment: datetime) -> str:
    """Format an instant as an RFC 3339 UTC timestamp with second precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def canonical_string(request: SignableRequest, header_names: Iterable[str]) -> str:
    """
    Build the string that is signed for ``request``.

    Args:
        request: Request carrying the headers to sign
        header_names: Signed header names, in signing order

    Returns:
        ``VERB\\npath[?query]`` followed by one ``name:value`` line per header
    """
    path = request.path[1:] if request.path.startswith("/") else request.path
    if request.query:
        path = f"{path}?{request.query}"

    lines = [request.method.upper(), path]
    for name in header_names:
        value = request.get_header(name)
        lines.append(f"{name}:{value if value is not None else ''}")
    return "\n".join(lines)


def compute_signature(canonical: str, admin_key: str) -> str:
    """Base64 HMAC-SHA256 signature of a canonical string."""
    digest = hmac_sha256(canonical.encode("utf-8"), admin_key)
    return base64.b64encode(digest).decode("ascii")


class RequestSigner:
    """Signs admin API requests with the tenant admin key."""

    def __init__(
        self,
        credentials: Credentials,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the signer.

        Args:
            credentials: Tenant admin credentials
            clock: Returns the current instant; defaults to the UTC wall clock
        """
        self._credentials = credentials
        self._clock = clock or _utcnow

    @property
    def admin_user_id(self) -> str:
        return self._credentials.admin_user_id

    def sign(self, request: SignableRequest, body: bytes | None = None) -> SignableRequest:
        """
        Attach authentication headers to ``request``.

        Headers the signer sets replace any caller-set header of the same
        name, whatever its case, so each is sent exactly once.
        ``TresoritDate`` has second precision, so two signings only differ
        when they fall in different seconds.

        Args:
            request: Request to sign; mutated in place
            body: Raw POST body; defaults to ``request.body``

        Returns:
            The signed request

        Raises:
            InvalidCredentialsError: If the admin key is not valid hex. The
                request is left untouched.
        """
        # Fails before any header is written.
        decode_admin_key(self._credentials.admin_key)

        content = body if body is not None else request.body
        method = request.method.upper()

        # A re-signed request gets a fresh header list and signature.
        request.discard_headers(AUTH_HEADERS)

        if method == "POST":
            request.discard_headers(BODY_HEADERS)
            request.set_header(CONTENT_TYPE, JSON_CONTENT_TYPE)
            request.set_header(CONTENT_SHA256, sha256_hex(content))

        request.set_header(TRESORIT_DATE, format_timestamp(self._clock()))
        request.set_header(USER_ID, self._credentials.admin_user_id)

        signed_headers = [*request.header_names, HMAC_HEADERS]
        request.set_header(HMAC_HEADERS, ",".join(signed_headers))

        canonical = canonical_string(request, signed_headers)
        signature = compute_signature(canonical, self._credentials.admin_key)
        request.set_header(AUTHORIZATION, f"{AUTH_SCHEME} {signature}")

        logger.debug(
            "Signed admin request",
            method=method,
            path=request.path,
            signed_headers=signed_headers,
        )
        return request


def verify_request(request: SignableRequest, admin_key: str) -> bool:
    """
    Verify a signed request the way the service does.

    Recomputes the canonical string from the names listed in ``HMACHeaders``
    and compares the result with the ``Authorization`` header.

    Args:
        request: Signed request
        admin_key: Hex-encoded tenant admin key

    Returns:
        True if the signature matches

    Raises:
        InvalidCredentialsError: If the admin key is not valid hex
    """
    decode_admin_key(admin_key)

    authorization = request.get_header(AUTHORIZATION)
    listed = request.get_header(HMAC_HEADERS)
    if not authorization or not listed:
        return False

    scheme, _, signature = authorization.partition(" ")
    if scheme != AUTH_SCHEME or not signature:
        return False

    header_names = listed.split(",")
    if HMAC_HEADERS not in header_names:
        return False
    if any(request.get_header(name) is None for name in header_names):
        return False

    if request.method.upper() == "POST":
        if request.get_header(CONTENT_SHA256) != sha256_hex(request.body):
            logger.warning("Body hash mismatch", path=request.path)
            return False

    expected = compute_signature(canonical_string(request, header_names), admin_key)
    return digests_equal(expected, signature)
