from .canonical_json import canonical_dumps_str, parse
from .errors import (
    DigestMismatch,
    GoblError,
    InvalidSignature,
    MalformedDigestClaim,
    MissingDigestClaim,
    MissingDocument,
    MultipleSignaturesUnsupported,
    NoSignature,
    ParseError,
    SignatureError,
    UnsupportedAlgorithm,
)
from .hashing import SUPPORTED_ALGORITHMS, digest, normalize_algorithm
from .schema_validate import validate_json
