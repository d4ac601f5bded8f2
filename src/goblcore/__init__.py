from goblcore.common.errors import (
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
from goblcore.config import GoblConfig, load_config
from goblcore.envelope import Gobl, validate_envelope
from goblcore.keys import EcKeypair, load_private_key, load_public_key
from goblcore.models import ENVELOPE_SCHEMA, INVOICE_SCHEMA, Digest, Envelope, Header
from goblcore.signature import EcdsaSigner

__all__ = [
    "DigestMismatch",
    "Digest",
    "ENVELOPE_SCHEMA",
    "EcKeypair",
    "EcdsaSigner",
    "Envelope",
    "Gobl",
    "GoblConfig",
    "GoblError",
    "Header",
    "INVOICE_SCHEMA",
    "InvalidSignature",
    "MalformedDigestClaim",
    "MissingDigestClaim",
    "MissingDocument",
    "MultipleSignaturesUnsupported",
    "NoSignature",
    "ParseError",
    "SignatureError",
    "UnsupportedAlgorithm",
    "load_config",
    "load_private_key",
    "load_public_key",
    "validate_envelope",
]
