"""
soulreg_core.utils
------------------
Lightweight helpers for event IDs, timestamping, base64 utilities, and canonical JSON serialization.
These functions keep stored records and published events deterministic.
"""

from __future__ import annotations
import base64, json, time, uuid
from typing import Any, Dict

# Owner keys and destinations that count as "no address"
NULL_ADDRESSES = frozenset({"", "0x" + "0" * 40})


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def b64d(s: str) -> bytes:
    return base64.b64decode(s.encode("ascii"))

def now_ts() -> str:
    # RFC3339 / ISO 8601 in UTC, second precision
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

def now_seconds() -> int:
    return int(time.time())

def new_id() -> str:
    return uuid.uuid4().hex

def canonical_json(obj: Dict[str, Any]) -> bytes:
    # Deterministic, minimal JSON for storage and event payloads
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode("utf-8")

def is_null_address(addr) -> bool:
    if addr is None:
        return True
    return str(addr).strip().lower() in NULL_ADDRESSES

def to_bytes(value) -> bytes:
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return str(value).encode("utf-8")
