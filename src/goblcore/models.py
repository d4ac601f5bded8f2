from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple
from uuid import UUID, uuid4

from goblcore.common.errors import MalformedDigestClaim, MissingDocument, ParseError

ENVELOPE_SCHEMA = "https://gobl.org/draft-0/envelope"
INVOICE_SCHEMA = "https://gobl.org/draft-0/bill/invoice"


@dataclass(frozen=True)
class Digest:
    alg: str
    val: str

    def to_obj(self) -> Dict[str, str]:
        return {"alg": self.alg, "val": self.val}

    @classmethod
    def from_mapping(cls, data: Any) -> "Digest":
        if not isinstance(data, Mapping):
            raise MalformedDigestClaim("dig_not_object")
        alg = data.get("alg")
        val = data.get("val")
        if not isinstance(alg, str) or not alg:
            raise MalformedDigestClaim("missing_alg")
        if not isinstance(val, str) or not val:
            raise MalformedDigestClaim("missing_val")
        return cls(alg=alg, val=val)


@dataclass(frozen=True)
class Header:
    uuid: UUID
    dig: Digest

    @classmethod
    def fresh(cls, dig: Digest) -> "Header":
        return cls(uuid=uuid4(), dig=dig)

    def to_obj(self) -> Dict[str, Any]:
        return {"uuid": str(self.uuid), "dig": self.dig.to_obj()}


@dataclass(frozen=True)
class Envelope:
    """Parsed envelope. ``doc`` is the raw document tree, ``$schema`` included."""

    schema: str
    head: Mapping[str, Any] | None
    sigs: Tuple[str, ...]
    doc: Mapping[str, Any]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Envelope":
        doc = data.get("doc")
        if doc is None:
            raise MissingDocument("envelope has no 'doc' member")
        if not isinstance(doc, Mapping):
            raise ParseError("doc_not_object")
        sigs = data.get("sigs")
        if sigs is None:
            sigs = []
        if not isinstance(sigs, list) or not all(isinstance(s, str) for s in sigs):
            raise ParseError("sigs_not_string_list")
        head = data.get("head")
        if head is not None and not isinstance(head, Mapping):
            raise ParseError("head_not_object")
        return cls(
            schema=str(data.get("$schema", ENVELOPE_SCHEMA)),
            head=head,
            sigs=tuple(sigs),
            doc=doc,
        )
