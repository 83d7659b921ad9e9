"""Canonical serialization and content-addressed hashing.

canonical_bytes(obj) -> Result[bytes, str]: deterministic JSON bytes.
content_hash(obj) -> Result[str, str]: SHA-256 hex of canonical bytes.
derive_address(obj) -> Result[Address, str]: deterministic address from content.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from optadapt.core.result import Err, Ok
from optadapt.core.types import Address, FrozenMap, UtcDatetime


def _to_serializable(obj: object) -> Any:  # noqa: PLR0911
    """Recursively convert a domain object to a JSON-compatible value."""
    if obj is None:
        return None
    # bool before int (bool is subclass of int)
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, int):
        # uint256 values exceed JSON's safe integer range
        return str(obj)
    if isinstance(obj, str):
        return obj
    if isinstance(obj, bytes):
        return "0x" + obj.hex()
    if isinstance(obj, Address):
        return obj.value
    if isinstance(obj, UtcDatetime):
        return obj.value.isoformat()
    if isinstance(obj, datetime):
        if obj.tzinfo is None:
            raise TypeError("Cannot serialize naive datetime, use UtcDatetime")
        return obj.astimezone(UTC).isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (tuple, list)):
        return [_to_serializable(x) for x in obj]
    if isinstance(obj, FrozenMap):
        return {str(k): _to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, dict):
        return {str(k): _to_serializable(v) for k, v in sorted(obj.items())}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        field_names = sorted(f.name for f in dataclasses.fields(obj))
        result: dict[str, Any] = {"_type": type(obj).__name__}
        for name in field_names:
            result[name] = _to_serializable(getattr(obj, name))
        return result
    raise TypeError(f"Cannot serialize {type(obj).__name__}")


def canonical_bytes(obj: object) -> Ok[bytes] | Err[str]:
    """Canonical JSON bytes. Unsupported types give Err, never TypeError."""
    try:
        serializable = _to_serializable(obj)
    except TypeError as e:
        return Err(f"Unsupported type in canonical serialization: {e}")
    return Ok(json.dumps(serializable, sort_keys=True, separators=(",", ":")).encode("utf-8"))


def content_hash(obj: object) -> Ok[str] | Err[str]:
    """SHA-256 hex digest of canonical_bytes(obj)."""
    match canonical_bytes(obj):
        case Err() as e:
            return e
        case Ok(b):
            return Ok(hashlib.sha256(b).hexdigest())


def derive_address(obj: object) -> Ok[Address] | Err[str]:
    """Address from the last 20 bytes of the content hash (CREATE2-like)."""
    match content_hash(obj):
        case Err() as e:
            return e
        case Ok(digest):
            return Ok(Address(value="0x" + digest[-40:]))
