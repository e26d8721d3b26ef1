"""Base58 / Base58Check encoding used by Dash addresses."""

from __future__ import annotations

from insight_api.utils.crypto import sha256d

_B58_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def base58_encode(payload: bytes) -> str:
    """Encode raw bytes to Base58 (no checksum)."""
    n = int.from_bytes(payload, "big")
    result: list[int] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(_B58_ALPHABET[remainder])
    # Leading zero bytes become leading '1' characters
    for byte in payload:
        if byte != 0:
            break
        result.append(_B58_ALPHABET[0])
    return bytes(reversed(result)).decode("ascii")


def base58_decode(s: str) -> bytes:
    """Decode a Base58 string to raw bytes (no checksum).

    Raises:
        ValueError: If *s* contains a character outside the Base58 alphabet.
    """
    n = 0
    for char in s:
        digit = _B58_ALPHABET.find(char.encode("ascii"))
        if digit < 0:
            msg = f"Invalid Base58 character: {char!r}"
            raise ValueError(msg)
        n = n * 58 + digit
    result = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    pad_count = len(s) - len(s.lstrip("1"))
    return b"\x00" * pad_count + result


def base58check_encode(payload: bytes) -> str:
    """Encode bytes with a 4-byte SHA256d checksum (Base58Check)."""
    checksum = sha256d(payload)[:4]
    return base58_encode(payload + checksum)


def base58check_decode(s: str) -> bytes:
    """Decode a Base58Check string, verifying the checksum.

    Raises:
        ValueError: If the string is malformed or the checksum is invalid.
    """
    raw = base58_decode(s)
    if len(raw) < 4:
        msg = "Base58Check string too short"
        raise ValueError(msg)
    payload, checksum = raw[:-4], raw[-4:]
    if checksum != sha256d(payload)[:4]:
        msg = "Base58Check checksum mismatch"
        raise ValueError(msg)
    return payload
