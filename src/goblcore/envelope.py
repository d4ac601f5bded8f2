from __future__ import annotations

import hmac
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union
from uuid import UUID

from cryptography.hazmat.primitives.asymmetric import ec

from goblcore.common.canonical_json import loads, parse
from goblcore.common.errors import (
    DigestMismatch,
    MultipleSignaturesUnsupported,
    NoSignature,
    ParseError,
)
from goblcore.common.hashing import digest as hex_digest
from goblcore.common.schema_validate import validate_json
from goblcore.config import GoblConfig
from goblcore.documents import SCHEMA_KEY, from_tree, split_schema, to_tree
from goblcore.models import Digest, Envelope, Header
from goblcore.signature.ecdsa import EcdsaSigner

logger = logging.getLogger(__name__)

T = TypeVar("T")

EnvelopeSource = Union[bytes, bytearray, str, Path, Mapping[str, Any]]


def _read_envelope(source: EnvelopeSource) -> Envelope:
    if isinstance(source, Path):
        source = source.read_bytes()
    if isinstance(source, (bytes, bytearray, str)):
        source = loads(source)
    if not isinstance(source, Mapping):
        raise ParseError("envelope_not_object")
    return Envelope.from_mapping(source)


def validate_envelope(envelope: Mapping[str, Any]) -> None:
    """JSON Schema check of the envelope shape. Says nothing about signatures."""
    validate_json(envelope)


class Gobl:
    """Signs documents into GOBL envelopes and extracts them back out.

    The digest covers the canonical form of the document tree without its
    top-level ``$schema`` tag. Instances hold only immutable configuration and
    may be shared between threads.
    """

    def __init__(self, config: GoblConfig | None = None, *, signer: EcdsaSigner | None = None) -> None:
        self.config = config or GoblConfig()
        self.signer = signer or EcdsaSigner()
        self._encoder = json.JSONEncoder(
            indent=self.config.indent,
            ensure_ascii=False,
            allow_nan=False,
        )

    # -- digest -----------------------------------------------------------

    def canonical(self, document: Any) -> bytes:
        _, body = split_schema(to_tree(document))
        return parse(body)

    def digest(self, document: Any, algorithm: str | None = None) -> str:
        return hex_digest(self.canonical(document), algorithm or self.config.digest_algorithm)

    def make_header(self, digest_value: str, algorithm: str | None = None) -> Header:
        return Header.fresh(Digest(alg=algorithm or self.config.digest_algorithm, val=digest_value))

    # -- sign -------------------------------------------------------------

    def sign_document(
        self,
        document: Any,
        private_key: ec.EllipticCurvePrivateKey,
        kid: Union[str, UUID],
        *,
        doc_schema: str | None = None,
    ) -> Dict[str, Any]:
        tree = to_tree(document)
        own_schema, body = split_schema(tree)
        header = self.make_header(hex_digest(parse(body), self.config.digest_algorithm))
        token = self.signer.sign(private_key, str(kid), header)
        logger.debug("signed document uuid=%s kid=%s", header.uuid, kid)
        return self._assemble(header, token, body, doc_schema or own_schema or self.config.document_schema)

    def sign_json(
        self,
        content: Union[bytes, str],
        private_key: ec.EllipticCurvePrivateKey,
        kid: Union[str, UUID],
        *,
        doc_schema: str | None = None,
    ) -> Dict[str, Any]:
        return self.sign_document(loads(content), private_key, kid, doc_schema=doc_schema)

    def sign_file(
        self,
        path: Path,
        private_key: ec.EllipticCurvePrivateKey,
        kid: Union[str, UUID],
        *,
        doc_schema: str | None = None,
    ) -> Dict[str, Any]:
        return self.sign_json(Path(path).read_bytes(), private_key, kid, doc_schema=doc_schema)

    def dumps(self, envelope: Mapping[str, Any]) -> str:
        return self._encoder.encode(envelope)

    def _assemble(self, header: Header, token: str, body: Mapping[str, Any], doc_schema: str) -> Dict[str, Any]:
        return {
            "$schema": self.config.envelope_schema,
            "head": header.to_obj(),
            "sigs": [token],
            "doc": {SCHEMA_KEY: doc_schema, **body},
        }

    # -- extract ----------------------------------------------------------

    def extract_unverified(self, source: EnvelopeSource, doc_type: Optional[Type[T]] = None) -> Any:
        """Document of an envelope with no signature check. Treat as untrusted."""
        envelope = _read_envelope(source)
        _, body = split_schema(envelope.doc)
        logger.warning("extracting document without signature verification")
        return from_tree(body, doc_type)

    def extract_from_envelope(
        self,
        source: EnvelopeSource,
        doc_type: Optional[Type[T]] = None,
        public_key: ec.EllipticCurvePublicKey | None = None,
    ) -> Any:
        """Return the enveloped document, verified when ``public_key`` is given.

        Without a key this is :meth:`extract_unverified`.
        """
        if public_key is None:
            return self.extract_unverified(source, doc_type)

        envelope = _read_envelope(source)
        _, body = split_schema(envelope.doc)
        document = from_tree(body, doc_type)

        if not envelope.sigs:
            raise NoSignature()
        if len(envelope.sigs) > 1:
            raise MultipleSignaturesUnsupported(str(len(envelope.sigs)))

        token = envelope.sigs[0]
        logger.debug("checking signature %s", token)
        signed = self.signer.verify(public_key, token)

        _, content = split_schema(to_tree(document))
        expected = hex_digest(parse(content), signed.alg)
        if not hmac.compare_digest(expected.encode("ascii"), signed.val.lower().encode("utf-8")):
            logger.warning(
                "digest from signature %s != %s (%s computed from canonical JSON)",
                signed.val,
                expected,
                signed.alg,
            )
            raise DigestMismatch()
        logger.debug("digests are equal")
        return document

    def extract_from_file(
        self,
        path: Path,
        doc_type: Optional[Type[T]] = None,
        public_key: ec.EllipticCurvePublicKey | None = None,
    ) -> Any:
        return self.extract_from_envelope(Path(path), doc_type, public_key)
