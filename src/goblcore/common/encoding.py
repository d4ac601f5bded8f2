from __future__ import annotations

import base64
import binascii
import math


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(value: str) -> bytes:
    """Unpadded base64url, as used in compact JWS segments."""
    if not isinstance(value, str):
        raise ValueError("segment must be str")
    if "=" in value or any(ch in value for ch in "+/"):
        raise ValueError("segment is not base64url")
    try:
        return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))
    except (binascii.Error, ValueError) as exc:
        raise ValueError("segment is not base64url") from exc


def encode_fixed_width_int(value: int, bits: int) -> bytes:
    if bits <= 0:
        raise ValueError("bits must be > 0")
    if value < 0:
        raise ValueError("value must be >= 0")
    max_value = (1 << bits) - 1
    if value > max_value:
        raise ValueError("value exceeds bit width")
    length = int(math.ceil(bits / 8))
    return value.to_bytes(length, byteorder="big")
