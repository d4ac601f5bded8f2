from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import jsonschema

SCHEMA_DIR = Path(__file__).resolve().parents[1] / "schemas"
ENVELOPE_SCHEMA = SCHEMA_DIR / "envelope.schema.json"


def load_schema(schema_path: Path) -> Dict[str, Any]:
    with open(schema_path, "r", encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=None)
def _validator(schema_path: Path) -> jsonschema.Draft202012Validator:
    schema = load_schema(schema_path)
    jsonschema.Draft202012Validator.check_schema(schema)
    return jsonschema.Draft202012Validator(schema)


def validate_json(instance: Any, schema_path: Path = ENVELOPE_SCHEMA) -> None:
    _validator(schema_path).validate(instance)
