# soulreg_core/storage/models.py
from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List
import uuid as uuidlib

from soulreg_core.utils import b64e, b64d


@dataclass
class Soul:
    """
    Storage-level representation of a live soul record.

    This is intentionally storage-agnostic and can be used by any provider
    (SQLite, memory, etc.). Binary fields are base64 in the dict form.
    """
    owner: str
    identity: bytes
    url: bytes
    minted_at: int
    last_update: int
    uuid: bytes

    @property
    def uuid_hex(self) -> str:
        return self.uuid.hex()

    def as_uuid(self) -> uuidlib.UUID:
        return uuidlib.UUID(bytes=self.uuid)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["identity"] = b64e(self.identity)
        d["url"] = b64e(self.url)
        d["uuid"] = b64e(self.uuid)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Soul":
        return cls(
            owner=data["owner"],
            identity=b64d(data["identity"]),
            url=b64d(data["url"]),
            minted_at=int(data["minted_at"]),
            last_update=int(data["last_update"]),
            uuid=b64d(data["uuid"]),
        )


@dataclass
class SoulView:
    """Result of a lookup: the record plus parallel metadata key/value lists."""
    soul: Soul
    keys: List[str] = field(default_factory=list)
    values: List[bytes] = field(default_factory=list)

    def metadata(self) -> Dict[str, bytes]:
        return dict(zip(self.keys, self.values))
