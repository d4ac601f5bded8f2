from __future__ import annotations


class GoblError(RuntimeError):
    """Base class for every failure raised by goblcore.

    ``code`` is a stable snake_case identifier suitable for audit logs.
    """

    code = "gobl_error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(self.code if detail is None else f"{self.code}:{detail}")


class ParseError(GoblError, ValueError):
    code = "parse_error"


class UnsupportedAlgorithm(GoblError, ValueError):
    code = "unsupported_algorithm"


class MissingDocument(GoblError):
    code = "missing_document"


class SignatureError(GoblError):
    """Base class for the verify-path failures."""

    code = "signature_error"


class NoSignature(SignatureError):
    code = "no_signature"


class MultipleSignaturesUnsupported(SignatureError):
    code = "multiple_signatures_unsupported"


class InvalidSignature(SignatureError):
    code = "invalid_signature"


class MissingDigestClaim(SignatureError):
    code = "missing_digest_claim"


class MalformedDigestClaim(SignatureError):
    code = "malformed_digest_claim"


class DigestMismatch(SignatureError):
    code = "digest_mismatch"


__all__ = [
    "DigestMismatch",
    "GoblError",
    "InvalidSignature",
    "MalformedDigestClaim",
    "MissingDigestClaim",
    "MissingDocument",
    "MultipleSignaturesUnsupported",
    "NoSignature",
    "ParseError",
    "SignatureError",
    "UnsupportedAlgorithm",
]
