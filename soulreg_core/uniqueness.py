# soulreg_core/uniqueness.py
from __future__ import annotations

from soulreg_core.crypto import identity_fingerprint
from soulreg_core.storage.provider import StorageProvider

IDENTITY_SET = "identities"
UUID_SET = "uuids"


class UniquenessIndex:
    """
    Two independent uniqueness sets over the storage substrate:
    identity fingerprints and issued identifiers.

    The index never commits on its own; the registry calls it inside the
    same storage transaction as the record write.
    """

    def __init__(self, storage: StorageProvider):
        self.storage = storage

    # identities
    def identity_taken(self, identity: bytes) -> bool:
        return self.storage.set_contains(IDENTITY_SET, identity_fingerprint(identity))

    def reserve_identity(self, identity: bytes) -> None:
        self.storage.set_add(IDENTITY_SET, identity_fingerprint(identity))

    # identifiers
    def uuid_taken(self, uuid: bytes) -> bool:
        return self.storage.set_contains(UUID_SET, uuid)

    def reserve_uuid(self, uuid: bytes) -> None:
        self.storage.set_add(UUID_SET, uuid)

    def release_uuid(self, uuid: bytes) -> None:
        self.storage.set_remove(UUID_SET, uuid)
