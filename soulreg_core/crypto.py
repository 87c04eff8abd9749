"""
soulreg_core.crypto
-------------------
Hashing primitives for the registry:

- SHA-256 digests through the `cryptography` hash backend
- Identity and registry fingerprints (fixed-size uniqueness-set keys)
- Canonical length-prefixed encoding for identifier seeds

A fingerprint stands in for a variable-length value wherever that value is
used as a set key, so uniqueness checks cost the same for any identity length.
"""

from __future__ import annotations
from typing import Iterable, Union
from cryptography.hazmat.primitives import hashes

SeedPart = Union[bytes, str, int]


def sha256_digest(data: bytes) -> bytes:
    h = hashes.Hash(hashes.SHA256())
    h.update(data)
    return h.finalize()


def encode_seed(parts: Iterable[SeedPart]) -> bytes:
    """
    Encode seed parts unambiguously: each part is tagged with its type and
    prefixed with its 4-byte big-endian length, so ("ab", "c") and ("a", "bc")
    never produce the same bytes.
    """
    out = bytearray()
    for part in parts:
        if isinstance(part, bool):
            raise TypeError("bool is not a valid seed part")
        if isinstance(part, int):
            if part < 0:
                raise ValueError("seed integers must be non-negative")
            tag, raw = b"i", part.to_bytes(32, "big")
        elif isinstance(part, str):
            tag, raw = b"s", part.encode("utf-8")
        elif isinstance(part, (bytes, bytearray)):
            tag, raw = b"b", bytes(part)
        else:
            raise TypeError(f"unsupported seed part: {type(part).__name__}")
        out += tag + len(raw).to_bytes(4, "big") + raw
    return bytes(out)


def identity_fingerprint(identity: bytes) -> bytes:
    return sha256_digest(identity)


def registry_fingerprint(base_asset: str) -> bytes:
    """Fingerprint of the bound external asset handle; computed once per registry."""
    return sha256_digest(base_asset.strip().lower().encode("utf-8"))


def compute_fingerprint(raw: bytes) -> str:
    """
    Compute a stable hex fingerprint for arbitrary bytes.

    - Output: hex-encoded SHA256 hash (truncated to 32 chars for readability)

    Used when a fingerprint has to be shown in logs or events.
    """
    digest = sha256_digest(raw).hex()
    return digest[:32]
