import copy
from contextlib import contextmanager
from typing import Optional, Dict, Any, List
from soulreg_core.storage.models import Soul
from soulreg_core.storage.provider import StorageProvider
from soulreg_core.utils import now_ts

_MISSING = object()


class InMemoryStorage(StorageProvider):
    def __init__(self):
        self.souls = {}
        self.sets = {}
        self.counters = {}
        self.metadata = {}
        self.metadata_index = {}
        self.audit = []
        # undo callbacks for the open transaction, None outside one
        self._journal = None

    # souls
    def get_soul(self, owner: str) -> Optional[Soul]:
        rec = self.souls.get(owner)
        return copy.copy(rec) if rec else None

    def put_soul(self, soul: Soul):
        self._track(self.souls, soul.owner)
        self.souls[soul.owner] = copy.copy(soul)

    def delete_soul(self, owner: str):
        self._track(self.souls, owner)
        self.souls.pop(owner, None)

    # sets
    def set_contains(self, name: str, member: bytes) -> bool:
        return member in self.sets.get(name, ())

    def set_add(self, name: str, member: bytes):
        members = self.sets.setdefault(name, set())
        if member not in members:
            self._undo(lambda: members.discard(member))
            members.add(member)

    def set_remove(self, name: str, member: bytes):
        members = self.sets.get(name, set())
        if member in members:
            self._undo(lambda: members.add(member))
            members.discard(member)

    def set_members(self, name: str) -> List[bytes]:
        return sorted(self.sets.get(name, ()))

    # counters
    def get_counter(self, name: str) -> int:
        return self.counters.get(name, 0)

    def set_counter(self, name: str, value: int):
        self._track(self.counters, name)
        self.counters[name] = value

    # metadata
    def get_metadata(self, owner: str, key: str) -> bytes:
        return self.metadata.get((owner, key), b"")

    def put_metadata(self, owner: str, key: str, value: bytes):
        self._track(self.metadata, (owner, key))
        self.metadata[(owner, key)] = value

    def metadata_keys(self, owner: str) -> List[str]:
        return list(self.metadata_index.get(owner, []))

    def append_metadata_key(self, owner: str, key: str):
        keys = self.metadata_index.setdefault(owner, [])
        self._undo(keys.pop)
        keys.append(key)

    # audit
    def log_event(self, event_type: str, payload: Dict[str, Any]):
        self._undo(self.audit.pop)
        self.audit.append((now_ts(), event_type, payload))

    def list_events(self) -> List[Dict[str, Any]]:
        return [{"ts": ts, "event_type": et, "payload": p} for ts, et, p in self.audit]

    @contextmanager
    def transaction(self):
        outer = self._journal is None
        if outer:
            self._journal = []
        mark = len(self._journal)
        try:
            yield self
        except BaseException:
            # undo only the writes made inside this block, newest first
            while len(self._journal) > mark:
                self._journal.pop()()
            raise
        finally:
            if outer:
                self._journal = None

    def snapshot(self) -> Dict[str, Any]:
        return copy.deepcopy({
            "souls": {k: v.to_dict() for k, v in self.souls.items()},
            "sets": {k: sorted(v) for k, v in self.sets.items() if v},
            "counters": self.counters,
            "metadata": self.metadata,
            "metadata_index": {k: v for k, v in self.metadata_index.items() if v},
            "audit": self.audit,
        })

    def _undo(self, fn):
        if self._journal is not None:
            self._journal.append(fn)

    def _track(self, table: dict, key):
        prev = table.get(key, _MISSING)

        def restore():
            if prev is _MISSING:
                table.pop(key, None)
            else:
                table[key] = prev

        self._undo(restore)
