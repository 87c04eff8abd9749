# soulreg_core/storage/provider.py
from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from soulreg_core.storage.models import Soul


class StorageProvider:
    """
    Key-value substrate the registry sequences its updates over.

    Each method is an atomic single-key read or write. `transaction()`
    groups several writes so that either all of them or none are visible.
    """

    # souls
    def get_soul(self, owner: str) -> Optional[Soul]: ...
    def put_soul(self, soul: Soul) -> None: ...
    def delete_soul(self, owner: str) -> None: ...

    # named membership sets
    def set_contains(self, name: str, member: bytes) -> bool: ...
    def set_add(self, name: str, member: bytes) -> None: ...
    def set_remove(self, name: str, member: bytes) -> None: ...
    def set_members(self, name: str) -> List[bytes]: ...

    # counters
    def get_counter(self, name: str) -> int: ...
    def set_counter(self, name: str, value: int) -> None: ...

    # metadata
    def get_metadata(self, owner: str, key: str) -> bytes: ...
    def put_metadata(self, owner: str, key: str, value: bytes) -> None: ...
    def metadata_keys(self, owner: str) -> List[str]: ...
    def append_metadata_key(self, owner: str, key: str) -> None: ...

    # audit
    def log_event(self, event_type: str, payload: Dict[str, Any]) -> None: ...
    def list_events(self) -> List[Dict[str, Any]]: ...

    @contextmanager
    def transaction(self) -> Iterator["StorageProvider"]:
        yield self

    def snapshot(self) -> Dict[str, Any]:
        """Full copy of the registry state, for comparing before/after a call."""
        raise NotImplementedError

    def close(self) -> None:
        return
