"""
soulreg_core.events
-------------------
Defines RegistryEvent, the notification record the registry emits for
external indexers.

Key features:
- Deterministic canonical bytes for transport
- Unique event_id and timestamp per emission
- Topic derived from the event name (soulreg.mint, soulreg.burn, ...)
"""

from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Any, Dict
from .constants import (
    SCHEMA_VERSION, TOPIC_PREFIX, EVENT_MINT, EVENT_BURN, EVENT_UPDATE, EVENT_WITHDRAWAL,
)
from .utils import new_id, now_ts, canonical_json


@dataclass
class RegistryEvent:
    name: str = ""
    payload: Dict[str, Any] = field(default_factory=dict)
    schema_ver: str = SCHEMA_VERSION
    event_id: str = field(default_factory=new_id)
    ts: str = field(default_factory=now_ts)

    @property
    def topic(self) -> str:
        return TOPIC_PREFIX + self.name.lower()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_bytes(self) -> bytes:
        return canonical_json(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> "RegistryEvent":
        return cls(
            name=data.get("name", ""),
            payload=dict(data.get("payload", {})),
            schema_ver=data.get("schema_ver", SCHEMA_VERSION),
            event_id=data.get("event_id") or new_id(),
            ts=data.get("ts", now_ts()),
        )


def mint_event(owner: str) -> RegistryEvent:
    return RegistryEvent(name=EVENT_MINT, payload={"owner": owner})


def burn_event(owner: str) -> RegistryEvent:
    return RegistryEvent(name=EVENT_BURN, payload={"owner": owner})


def update_event(owner: str) -> RegistryEvent:
    # reserved; no registry path emits Update
    return RegistryEvent(name=EVENT_UPDATE, payload={"owner": owner})


def withdrawal_event(initiator: str, destination: str, amount: int) -> RegistryEvent:
    return RegistryEvent(
        name=EVENT_WITHDRAWAL,
        payload={"initiator": initiator, "destination": destination, "amount": amount},
    )
