from __future__ import annotations

import copy
from dataclasses import fields, is_dataclass
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from goblcore.common.canonical_json import canonicalize, loads
from goblcore.common.errors import ParseError

T = TypeVar("T")

SCHEMA_KEY = "$schema"


def to_tree(document: Any) -> Dict[str, Any]:
    """Plain JSON object tree of ``document``.

    Accepts JSON text, mappings, dataclass instances and pydantic models.
    """
    if isinstance(document, (bytes, bytearray, str)):
        document = loads(document)
    tree = canonicalize(document)
    if not isinstance(tree, dict):
        raise ParseError("document_not_object")
    return tree


def split_schema(tree: Mapping[str, Any]) -> tuple[Optional[str], Dict[str, Any]]:
    """Separate the top-level ``$schema`` tag from document content."""
    body = {k: v for k, v in tree.items() if k != SCHEMA_KEY}
    schema = tree.get(SCHEMA_KEY)
    return (schema if isinstance(schema, str) else None), body


def from_tree(tree: Mapping[str, Any], doc_type: Optional[Type[T]] = None) -> T | Dict[str, Any]:
    """Build ``doc_type`` from a document tree.

    ``None`` or ``dict`` returns a deep copy of the tree. pydantic models go
    through ``model_validate``; dataclasses get the keys they declare.
    """
    if doc_type is None or doc_type is dict:
        return copy.deepcopy(dict(tree))
    if hasattr(doc_type, "model_validate"):
        try:
            return doc_type.model_validate(dict(tree))
        except ValueError as exc:
            raise ParseError(f"document_shape:{doc_type.__name__}") from exc
    if is_dataclass(doc_type):
        names = {f.name for f in fields(doc_type) if f.init}
        try:
            return doc_type(**{k: v for k, v in tree.items() if k in names})
        except TypeError as exc:
            raise ParseError(f"document_shape:{doc_type.__name__}") from exc
    raise TypeError(f"unsupported document type: {doc_type!r}")
