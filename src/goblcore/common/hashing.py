from __future__ import annotations

import hashlib
from typing import Union

from .errors import UnsupportedAlgorithm

BytesLike = Union[bytes, bytearray, memoryview]

SUPPORTED_ALGORITHMS = ("md5", "sha1", "sha256", "sha384", "sha512")
DEFAULT_ALGORITHM = "sha256"


def normalize_algorithm(name: str) -> str:
    """Map ``SHA-256``, ``sha_256``, ``SHA256`` and friends to ``sha256``."""
    if not isinstance(name, str):
        raise UnsupportedAlgorithm(repr(name))
    key = name.strip().lower().replace("-", "").replace("_", "")
    if key not in SUPPORTED_ALGORITHMS:
        raise UnsupportedAlgorithm(name)
    return key


def digest(data: BytesLike, algorithm: str = DEFAULT_ALGORITHM) -> str:
    return hashlib.new(normalize_algorithm(algorithm), bytes(data)).hexdigest()

