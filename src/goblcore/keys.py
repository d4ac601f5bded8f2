from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from goblcore.common.encoding import b64url_decode, b64url_encode, encode_fixed_width_int

CURVE_NAME = "P-256"
COORDINATE_BITS = 256

KeyLike = Union[ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey]


@dataclass(frozen=True)
class EcKeypair:
    private_key: ec.EllipticCurvePrivateKey
    public_key: ec.EllipticCurvePublicKey

    @staticmethod
    def generate() -> "EcKeypair":
        sk = ec.generate_private_key(ec.SECP256R1())
        return EcKeypair(private_key=sk, public_key=sk.public_key())

    @staticmethod
    def from_private_key(private_key: ec.EllipticCurvePrivateKey) -> "EcKeypair":
        require_p256(private_key)
        return EcKeypair(private_key=private_key, public_key=private_key.public_key())

    def private_jwk(self, kid: str | None = None) -> Dict[str, str]:
        return private_key_to_jwk(self.private_key, kid=kid)

    def public_jwk(self, kid: str | None = None) -> Dict[str, str]:
        return public_key_to_jwk(self.public_key, kid=kid)


def require_p256(key: Any) -> None:
    if not isinstance(key, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
        raise ValueError("key_not_ec")
    if not isinstance(key.curve, ec.SECP256R1):
        raise ValueError(f"unsupported_curve:{key.curve.name}")


def _coord(value: int) -> str:
    return b64url_encode(encode_fixed_width_int(value, COORDINATE_BITS))


def _int_from_b64url(value: Any, name: str) -> int:
    if not isinstance(value, str):
        raise ValueError(f"jwk_missing:{name}")
    return int.from_bytes(b64url_decode(value), "big")


def public_key_to_jwk(public_key: ec.EllipticCurvePublicKey, *, kid: str | None = None) -> Dict[str, str]:
    require_p256(public_key)
    numbers = public_key.public_numbers()
    jwk = {"kty": "EC", "crv": CURVE_NAME, "x": _coord(numbers.x), "y": _coord(numbers.y)}
    if kid is not None:
        jwk["kid"] = kid
    return jwk


def private_key_to_jwk(private_key: ec.EllipticCurvePrivateKey, *, kid: str | None = None) -> Dict[str, str]:
    jwk = public_key_to_jwk(private_key.public_key(), kid=kid)
    jwk["d"] = _coord(private_key.private_numbers().private_value)
    return jwk


def key_from_jwk(jwk: Mapping[str, Any]) -> KeyLike:
    """Build a P-256 key from a JWK; a ``d`` member yields the private key."""
    if jwk.get("kty") != "EC":
        raise ValueError("jwk_kty_not_ec")
    if jwk.get("crv") != CURVE_NAME:
        raise ValueError(f"unsupported_curve:{jwk.get('crv')}")
    public_numbers = ec.EllipticCurvePublicNumbers(
        _int_from_b64url(jwk.get("x"), "x"),
        _int_from_b64url(jwk.get("y"), "y"),
        ec.SECP256R1(),
    )
    if "d" in jwk:
        private_value = _int_from_b64url(jwk["d"], "d")
        return ec.EllipticCurvePrivateNumbers(private_value, public_numbers).private_key()
    return public_numbers.public_key()


def _load_key(path: Path) -> KeyLike:
    raw = path.read_bytes()
    if raw.lstrip().startswith(b"{"):
        return key_from_jwk(json.loads(raw.decode("utf-8")))
    if b"PRIVATE KEY" in raw:
        key = serialization.load_pem_private_key(raw, password=None)
    else:
        key = serialization.load_pem_public_key(raw)
    require_p256(key)
    return key


def load_private_key(path: Path) -> ec.EllipticCurvePrivateKey:
    key = _load_key(path)
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise ValueError("expected_private_key")
    return key


def load_public_key(path: Path) -> ec.EllipticCurvePublicKey:
    """Load a public key; a private key file yields its public half."""
    key = _load_key(path)
    if isinstance(key, ec.EllipticCurvePrivateKey):
        return key.public_key()
    return key


def private_key_pem(private_key: ec.EllipticCurvePrivateKey) -> bytes:
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def public_key_pem(public_key: ec.EllipticCurvePublicKey) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
