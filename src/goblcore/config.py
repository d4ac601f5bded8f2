from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from goblcore.common.hashing import DEFAULT_ALGORITHM, normalize_algorithm
from goblcore.models import ENVELOPE_SCHEMA, INVOICE_SCHEMA


class GoblConfig(BaseModel):
    """Settings for envelope assembly. Immutable once built."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    envelope_schema: str = Field(default=ENVELOPE_SCHEMA, min_length=1)
    document_schema: str = Field(default=INVOICE_SCHEMA, min_length=1)
    digest_algorithm: str = DEFAULT_ALGORITHM
    indent: Optional[int] = Field(default=2, ge=0)

    @field_validator("digest_algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        return normalize_algorithm(value)


def load_config(path: Path) -> GoblConfig:
    with open(path, encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError("config must be a JSON object")
    return GoblConfig.model_validate(payload)
