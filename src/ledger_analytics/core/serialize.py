"""Plain-data rendering of read models.

Decimals are rendered as strings and dates as ISO strings so that two runs
over the same inputs serialise to byte-identical JSON.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any


def to_jsonable(obj: Any) -> Any:
    """Recursively convert a read model into JSON-compatible data."""
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if hasattr(obj, "to_dict") and not isinstance(obj, type):
        return to_jsonable(obj.to_dict())
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: to_jsonable(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
            if not f.name.startswith("_")
        }
    if hasattr(obj, "model_dump"):
        return to_jsonable(obj.model_dump())
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    if isinstance(obj, float) and obj != obj:  # NaN never leaves the engine
        return 0.0
    return obj


def dataclass_to_dict(obj: Any) -> dict[str, Any]:
    """Field-by-field conversion, skipping private fields."""
    return {
        f.name: to_jsonable(getattr(obj, f.name))
        for f in dataclasses.fields(obj)
        if not f.name.startswith("_")
    }


def canonical_json(data: Any, *, indent: int | None = None) -> str:
    """Stable JSON: sorted keys, no trailing whitespace variance."""
    return json.dumps(
        to_jsonable(data),
        sort_keys=True,
        indent=indent,
        ensure_ascii=False,
        separators=(",", ":") if indent is None else (",", ": "),
    )


def payload_hash(data: Any, *, length: int | None = None) -> str:
    """SHA-256 hex digest of :func:`canonical_json`, optionally truncated."""
    digest = hashlib.sha256(canonical_json(data).encode("utf-8")).hexdigest()
    return digest[:length] if length else digest
