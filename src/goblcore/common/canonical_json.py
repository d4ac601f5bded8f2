from __future__ import annotations

import json
import math
from dataclasses import asdict, is_dataclass
from typing import Any, Mapping

from .errors import ParseError

JsonLike = Any

# Canonical and display encoders are separate instances, never reconfigured.
CANONICAL_ENCODER = json.JSONEncoder(
    sort_keys=True,
    separators=(",", ":"),
    ensure_ascii=False,
    allow_nan=False,
)
DEFAULT_ENCODER = json.JSONEncoder(
    indent=2,
    ensure_ascii=False,
    allow_nan=False,
)


def _to_primitive(obj: JsonLike) -> JsonLike:
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if hasattr(obj, "model_dump") and callable(getattr(obj, "model_dump")):
        return obj.model_dump(mode="json", by_alias=True)
    return obj


def canonicalize(obj: JsonLike) -> JsonLike:
    """Reduce ``obj`` to a plain JSON tree.

    Members are kept as given, ``null`` included. Keys must be strings and
    leaves must be JSON scalars; anything else raises ``ParseError``.
    """
    obj = _to_primitive(obj)

    if isinstance(obj, Mapping):
        out: dict[str, JsonLike] = {}
        for k, v in obj.items():
            if not isinstance(k, str):
                raise ParseError(f"non_string_key:{type(k).__name__}")
            if k in out:
                raise ParseError(f"duplicate_key:{k}")
            out[k] = canonicalize(v)
        return out

    if isinstance(obj, (list, tuple)):
        return [canonicalize(item) for item in obj]

    if isinstance(obj, float) and not math.isfinite(obj):
        raise ParseError("non_finite_number")

    if isinstance(obj, (str, int, float, bool)) or obj is None:
        return obj

    raise ParseError(f"unserializable_value:{type(obj).__name__}")


def _reject_duplicates(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in pairs:
        if key in out:
            raise ParseError(f"duplicate_key:{key}")
        out[key] = value
    return out


def _reject_constant(name: str) -> Any:
    raise ParseError(f"non_finite_number:{name}")


def loads(content: bytes | str) -> JsonLike:
    """Strict JSON decoding: duplicate keys and NaN/Infinity are errors."""
    try:
        return json.loads(
            content,
            object_pairs_hook=_reject_duplicates,
            parse_constant=_reject_constant,
        )
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParseError("malformed_json") from exc


def parse(content: bytes | str | JsonLike) -> bytes:
    """Canonical bytes of ``content``.

    ``bytes`` and ``str`` are decoded as JSON text first; anything else is
    treated as an already structured value.
    """
    if isinstance(content, (bytes, bytearray, memoryview, str)):
        tree = loads(bytes(content) if not isinstance(content, str) else content)
    else:
        tree = content
    return CANONICAL_ENCODER.encode(canonicalize(tree)).encode("utf-8")


def canonical_dumps_str(obj: Any) -> str:
    return parse(obj).decode("utf-8")


def default_dumps_str(obj: Any) -> str:
    return DEFAULT_ENCODER.encode(obj)
