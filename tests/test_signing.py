import json
from uuid import uuid4

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from goblcore.common.encoding import b64url_decode, b64url_encode, encode_fixed_width_int
from goblcore.common.errors import InvalidSignature, MalformedDigestClaim, MissingDigestClaim
from goblcore.keys import EcKeypair
from goblcore.models import Digest, Header
from goblcore.signature.ecdsa import EcdsaSigner

DIG = Digest(alg="sha256", val="b6cd1dab63d786cbc6694e4314c587a2660dd3fed1d8934600fc7c5067b8f893")
KID = "9d8dba19-d041-409c-a451-74e0df6b548a"


def _b64_json(obj: dict) -> str:
    return b64url_encode(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


def _sign_claims(private_key: ec.EllipticCurvePrivateKey, claims: dict) -> str:
    signing_input = _b64_json({"alg": "ES256", "kid": KID}) + "." + _b64_json(claims)
    r, s = decode_dss_signature(private_key.sign(signing_input.encode("ascii"), ec.ECDSA(hashes.SHA256())))
    return signing_input + "." + b64url_encode(encode_fixed_width_int(r, 256) + encode_fixed_width_int(s, 256))


def test_sign_verify() -> None:
    kp = EcKeypair.generate()
    signer = EcdsaSigner()
    token = signer.sign(kp.private_key, KID, Header.fresh(DIG))
    assert signer.verify(kp.public_key, token) == DIG


def test_token_layout() -> None:
    kp = EcKeypair.generate()
    header = Header.fresh(DIG)
    token = EcdsaSigner().sign(kp.private_key, KID, header)

    protected_b64, payload_b64, signature_b64 = token.split(".")
    protected = json.loads(b64url_decode(protected_b64))
    claims = json.loads(b64url_decode(payload_b64))
    assert protected == {"kid": KID, "alg": "ES256"}
    assert claims == {"uuid": str(header.uuid), "dig": DIG.to_obj()}
    assert len(b64url_decode(signature_b64)) == 64


def test_read_unverified() -> None:
    kp = EcKeypair.generate()
    header = Header.fresh(DIG)
    token = EcdsaSigner().sign(kp.private_key, KID, header)
    protected, claims = EcdsaSigner().read_unverified(token)
    assert protected["kid"] == KID
    assert claims["uuid"] == str(header.uuid)


def test_signing_is_randomized() -> None:
    kp = EcKeypair.generate()
    header = Header(uuid=uuid4(), dig=DIG)
    signer = EcdsaSigner()
    first = signer.sign(kp.private_key, KID, header)
    second = signer.sign(kp.private_key, KID, header)
    assert first != second
    assert first.rsplit(".", 1)[0] == second.rsplit(".", 1)[0]
    assert signer.verify(kp.public_key, first) == signer.verify(kp.public_key, second)


def test_verify_fails_with_wrong_key() -> None:
    token = EcdsaSigner().sign(EcKeypair.generate().private_key, KID, Header.fresh(DIG))
    with pytest.raises(InvalidSignature):
        EcdsaSigner().verify(EcKeypair.generate().public_key, token)


def test_verify_fails_on_swapped_payload() -> None:
    kp = EcKeypair.generate()
    token = EcdsaSigner().sign(kp.private_key, KID, Header.fresh(DIG))
    protected_b64, _, signature_b64 = token.split(".")
    forged = _b64_json({"uuid": str(uuid4()), "dig": {"alg": "sha256", "val": "00" * 32}})
    with pytest.raises(InvalidSignature):
        EcdsaSigner().verify(kp.public_key, f"{protected_b64}.{forged}.{signature_b64}")


@pytest.mark.parametrize(
    "token",
    ["", "abc", "a.b", "a.b.c.d", "..", "!!!.###.$$$", _b64_json({"alg": "none"}) + ".e30.AAAA"],
)
def test_verify_rejects_malformed_tokens(token: str) -> None:
    with pytest.raises(InvalidSignature):
        EcdsaSigner().verify(EcKeypair.generate().public_key, token)


def test_verify_rejects_other_alg_header() -> None:
    kp = EcKeypair.generate()
    token = EcdsaSigner().sign(kp.private_key, KID, Header.fresh(DIG))
    _, payload_b64, signature_b64 = token.split(".")
    other = _b64_json({"alg": "HS256", "kid": KID})
    with pytest.raises(InvalidSignature):
        EcdsaSigner().verify(kp.public_key, f"{other}.{payload_b64}.{signature_b64}")


def test_verify_rejects_non_p256_key() -> None:
    kp = EcKeypair.generate()
    token = EcdsaSigner().sign(kp.private_key, KID, Header.fresh(DIG))
    other = ec.generate_private_key(ec.SECP384R1()).public_key()
    with pytest.raises(InvalidSignature):
        EcdsaSigner().verify(other, token)


def test_sign_rejects_non_p256_key() -> None:
    with pytest.raises(ValueError):
        EcdsaSigner().sign(ec.generate_private_key(ec.SECP384R1()), KID, Header.fresh(DIG))


def test_sign_rejects_public_key() -> None:
    kp = EcKeypair.generate()
    with pytest.raises(ValueError, match="expected_private_key"):
        EcdsaSigner().sign(kp.public_key, KID, Header.fresh(DIG))


def test_missing_digest_claim() -> None:
    kp = EcKeypair.generate()
    token = _sign_claims(kp.private_key, {"uuid": str(uuid4())})
    with pytest.raises(MissingDigestClaim):
        EcdsaSigner().verify(kp.public_key, token)


@pytest.mark.parametrize(
    "dig",
    [{"alg": "sha256"}, {"val": "abcd"}, {"alg": "", "val": "abcd"}, "sha256:abcd", None],
)
def test_malformed_digest_claim(dig: object) -> None:
    kp = EcKeypair.generate()
    token = _sign_claims(kp.private_key, {"uuid": str(uuid4()), "dig": dig})
    with pytest.raises(MalformedDigestClaim):
        EcdsaSigner().verify(kp.public_key, token)


def test_claims_ignored_when_signature_invalid() -> None:
    token = _sign_claims(EcKeypair.generate().private_key, {"uuid": str(uuid4())})
    with pytest.raises(InvalidSignature):
        EcdsaSigner().verify(EcKeypair.generate().public_key, token)
