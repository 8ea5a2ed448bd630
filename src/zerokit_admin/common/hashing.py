"""Hash primitives for admin request signing."""

from __future__ import annotations

import binascii
import hashlib
import hmac

from zerokit_admin.common.errors import InvalidCredentialsError


def decode_admin_key(hex_key: str) -> bytes:
    """Decode a hex-encoded admin key into raw key bytes."""
    try:
        return binascii.unhexlify(hex_key)
    except (binascii.Error, ValueError, TypeError) as e:
        raise InvalidCredentialsError(f"Admin key is not valid hex: {e}") from e


def sha256_hex(data: bytes | None) -> str:
    """Lowercase hex SHA-256 digest; ``None`` hashes as zero bytes."""
    return hashlib.sha256(data or b"").hexdigest()


def hmac_sha256(data: bytes | None, hex_key: str) -> bytes:
    """
    Compute the raw HMAC-SHA256 of ``data`` keyed with a hex-encoded secret.

    Args:
        data: Message bytes (``None`` is treated as empty)
        hex_key: Hex-encoded binary key

    Returns:
        Raw 32-byte digest

    Raises:
        InvalidCredentialsError: If the key is not valid hex
    """
    key = decode_admin_key(hex_key)
    return hmac.new(key, data or b"", hashlib.sha256).digest()


def digests_equal(expected: str, actual: str) -> bool:
    """Compare two encoded digests in constant time."""
    return hmac.compare_digest(expected.encode("ascii", "replace"), actual.encode("ascii", "replace"))
