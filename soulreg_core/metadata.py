# soulreg_core/metadata.py
from __future__ import annotations
from typing import List, Tuple

from soulreg_core.errors import InvalidMetadataKey, MetadataKeyNotAllowed
from soulreg_core.logger import get_logger
from soulreg_core.storage.provider import StorageProvider

log = get_logger("SoulReg.Metadata")

ALLOWED_KEYS_SET = "allowed_metadata_keys"


class AllowedKeySet:
    """Administrator-controlled whitelist of metadata keys."""

    def __init__(self, storage: StorageProvider):
        self.storage = storage

    def allow(self, key: str) -> None:
        if not key:
            raise InvalidMetadataKey("metadata key must be a non-empty string")
        self.storage.set_add(ALLOWED_KEYS_SET, key.encode("utf-8"))

    def disallow(self, key: str) -> None:
        self.storage.set_remove(ALLOWED_KEYS_SET, key.encode("utf-8"))

    def is_allowed(self, key: str) -> bool:
        if not key:
            return False
        return self.storage.set_contains(ALLOWED_KEYS_SET, key.encode("utf-8"))

    def keys(self) -> List[str]:
        return [m.decode("utf-8") for m in self.storage.set_members(ALLOWED_KEYS_SET)]

    def require(self, key: str) -> None:
        if not self.is_allowed(key):
            log.warning(f"[META] rejected write to unlisted key {key!r}")
            raise MetadataKeyNotAllowed(key)


class MetadataStore:
    """
    Per-owner metadata values plus an append-only list of keys ever written.

    The key list only grows: clearing a value leaves its key in place, so
    enumeration may yield keys with empty values.
    """

    def __init__(self, storage: StorageProvider, allowed: AllowedKeySet):
        self.storage = storage
        self.allowed = allowed

    def set(self, owner: str, key: str, value: bytes) -> None:
        self.allowed.require(key)
        if value and key not in self.storage.metadata_keys(owner):
            self.storage.append_metadata_key(owner, key)
        self.storage.put_metadata(owner, key, value)
        log.debug(f"[META SET] owner={owner} key={key} bytes={len(value)}")

    def delete(self, owner: str, key: str) -> None:
        self.allowed.require(key)
        self.storage.put_metadata(owner, key, b"")
        log.debug(f"[META DEL] owner={owner} key={key}")

    def get(self, owner: str, key: str) -> bytes:
        return self.storage.get_metadata(owner, key)

    def enumerate(self, owner: str) -> Tuple[List[str], List[bytes]]:
        keys = self.storage.metadata_keys(owner)
        values = [self.storage.get_metadata(owner, k) for k in keys]
        return keys, values
