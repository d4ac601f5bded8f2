from __future__ import annotations

import json
import logging
from typing import Any, Dict, Tuple

from cryptography import exceptions as crypto_exceptions
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature, encode_dss_signature

from goblcore.common.canonical_json import loads
from goblcore.common.encoding import b64url_decode, b64url_encode, encode_fixed_width_int
from goblcore.common.errors import (
    InvalidSignature,
    MissingDigestClaim,
    ParseError,
)
from goblcore.keys import COORDINATE_BITS, require_p256
from goblcore.models import Digest, Header

logger = logging.getLogger(__name__)

ALGORITHM = "ES256"
SIGNATURE_SIZE = 2 * COORDINATE_BITS // 8


def _segment(obj: Dict[str, Any]) -> str:
    return b64url_encode(json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))


def _decode_segment(segment: str) -> Any:
    return loads(b64url_decode(segment))


class EcdsaSigner:
    """Compact JWS (ES256) over a GOBL header.

    Stateless; one instance may be shared between threads.
    """

    algorithm = ALGORITHM

    def sign(self, private_key: ec.EllipticCurvePrivateKey, kid: str, header: Header) -> str:
        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise ValueError("expected_private_key")
        require_p256(private_key)
        protected = {"kid": str(kid), "alg": self.algorithm}
        claims = {"uuid": str(header.uuid), "dig": header.dig.to_obj()}
        signing_input = f"{_segment(protected)}.{_segment(claims)}"

        der = private_key.sign(signing_input.encode("ascii"), ec.ECDSA(hashes.SHA256()))
        r, s = decode_dss_signature(der)
        raw = encode_fixed_width_int(r, COORDINATE_BITS) + encode_fixed_width_int(s, COORDINATE_BITS)
        return f"{signing_input}.{b64url_encode(raw)}"

    def verify(self, public_key: ec.EllipticCurvePublicKey, token: str) -> Digest:
        """Return the signed digest claim of ``token``.

        Raises ``InvalidSignature`` unless the ES256 signature checks out under
        ``public_key``; claims are only looked at afterwards.
        """
        protected_b64, payload_b64, signature = self._split(token)
        if not isinstance(public_key, ec.EllipticCurvePublicKey):
            raise InvalidSignature("expected_public_key")
        try:
            require_p256(public_key)
        except ValueError as exc:
            raise InvalidSignature(str(exc)) from exc

        r = int.from_bytes(signature[: SIGNATURE_SIZE // 2], "big")
        s = int.from_bytes(signature[SIGNATURE_SIZE // 2 :], "big")
        signing_input = f"{protected_b64}.{payload_b64}".encode("ascii")
        try:
            public_key.verify(encode_dss_signature(r, s), signing_input, ec.ECDSA(hashes.SHA256()))
        except crypto_exceptions.InvalidSignature as exc:
            logger.debug("ES256 check failed for token header %s", protected_b64)
            raise InvalidSignature("signature_check_failed") from exc

        try:
            claims = _decode_segment(payload_b64)
        except ValueError as exc:
            raise MissingDigestClaim("payload_not_json") from exc
        if not isinstance(claims, dict) or "dig" not in claims:
            raise MissingDigestClaim()
        return Digest.from_mapping(claims["dig"])

    def read_unverified(self, token: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Decode header and claims without checking the signature.

        For diagnostics only, e.g. to look up ``kid`` before choosing a key.
        """
        protected_b64, payload_b64, _ = self._split(token)
        try:
            claims = _decode_segment(payload_b64)
        except ValueError as exc:
            raise ParseError("payload_not_json") from exc
        if not isinstance(claims, dict):
            raise ParseError("payload_not_object")
        return _decode_segment(protected_b64), claims

    def _split(self, token: str) -> Tuple[str, str, bytes]:
        if not isinstance(token, str):
            raise InvalidSignature("token_not_str")
        parts = token.split(".")
        if len(parts) != 3 or not all(parts):
            raise InvalidSignature("token_not_compact")
        protected_b64, payload_b64, signature_b64 = parts
        try:
            protected = _decode_segment(protected_b64)
            signature = b64url_decode(signature_b64)
            b64url_decode(payload_b64)
        except ValueError as exc:
            raise InvalidSignature("token_not_base64url") from exc
        if not isinstance(protected, dict) or protected.get("alg") != self.algorithm:
            raise InvalidSignature("unexpected_alg")
        if len(signature) != SIGNATURE_SIZE:
            raise InvalidSignature("signature_size")
        return protected_b64, payload_b64, signature

