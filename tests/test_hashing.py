import pytest

from goblcore.common.errors import ParseError, UnsupportedAlgorithm
from goblcore.common.hashing import SUPPORTED_ALGORITHMS, digest, normalize_algorithm

CANONICAL = b'{"a":1,"b":2}'

VECTORS = {
    "md5": "608de49a4600dbb5b173492759792e4a",
    "sha1": "4acc71e0547112eb432f0a36fb1924c4a738cb49",
    "sha256": "43258cff783fe7036d8a43033f830adfc60ec037382473548ac742b888292777",
    "sha384": "5b5061937d9429347654a4a661c91ebd23a83dd2233309e3d1a9eaab2085f2399ddfaee0fccfb405324e6bb5e008400b",
    "sha512": (
        "b5da773f945631ed9943f66ab28641439d8895e350fb1fb9e21377bc63cd546b"
        "b68a5db808c57f846ddb195def323b315fe8917213aa34f996edebfa8f9653aa"
    ),
}


@pytest.mark.parametrize("alg", SUPPORTED_ALGORITHMS)
def test_known_vectors(alg: str) -> None:
    assert digest(CANONICAL, alg) == VECTORS[alg]


def test_default_is_sha256() -> None:
    assert digest(CANONICAL) == VECTORS["sha256"]


@pytest.mark.parametrize("name", ["SHA256", "sha-256", "SHA_256", " Sha256 "])
def test_algorithm_aliases(name: str) -> None:
    assert normalize_algorithm(name) == "sha256"


@pytest.mark.parametrize("name", ["sha3-256", "blake2b", "", "crc32"])
def test_unsupported_algorithm(name: str) -> None:
    with pytest.raises(UnsupportedAlgorithm):
        digest(CANONICAL, name)


def test_unsupported_algorithm_is_not_parse_error() -> None:
    with pytest.raises(UnsupportedAlgorithm) as info:
        digest(CANONICAL, "whirlpool")
    assert not isinstance(info.value, ParseError)
    assert str(info.value) == "unsupported_algorithm:whirlpool"
