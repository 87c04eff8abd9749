from __future__ import annotations
from contextlib import contextmanager
from typing import Optional, Dict, Any, List
import json, sqlite3, os
from soulreg_core.storage.provider import StorageProvider
from soulreg_core.storage.models import Soul


class SQLiteStorage(StorageProvider):
    def __init__(self, path="db/soulreg_state.db"):
        # If no directory, default to current working directory
        dir_path = os.path.dirname(path) or "."
        os.makedirs(dir_path, exist_ok=True)
        self.db = sqlite3.connect(path, check_same_thread=False)
        self._tx_depth = 0

        self._init()

    def _init(self) -> None:
        c = self.db.cursor()

        c.execute("""CREATE TABLE IF NOT EXISTS souls(
            owner TEXT PRIMARY KEY,
            identity BLOB NOT NULL,
            url BLOB NOT NULL,
            minted_at INTEGER NOT NULL,
            last_update INTEGER NOT NULL,
            uuid BLOB NOT NULL
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS set_members(
            set_name TEXT NOT NULL,
            member BLOB NOT NULL,
            PRIMARY KEY (set_name, member)
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS counters(
            name TEXT PRIMARY KEY,
            value INTEGER NOT NULL
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS metadata(
            owner TEXT NOT NULL,
            key TEXT NOT NULL,
            value BLOB NOT NULL,
            PRIMARY KEY (owner, key)
        )""")
        # append-only: rows are never deleted
        c.execute("""CREATE TABLE IF NOT EXISTS metadata_keys(
            owner TEXT NOT NULL,
            position INTEGER NOT NULL,
            key TEXT NOT NULL,
            PRIMARY KEY (owner, position)
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS audit(
            ts TEXT,
            event_type TEXT,
            payload TEXT
        )""")

        self.db.commit()

    def _commit(self) -> None:
        # inside transaction() the outermost block commits
        if self._tx_depth == 0:
            self.db.commit()

    @contextmanager
    def transaction(self):
        self._tx_depth += 1
        try:
            yield self
        except BaseException:
            self._tx_depth -= 1
            if self._tx_depth == 0:
                self.db.rollback()
            raise
        else:
            self._tx_depth -= 1
            self._commit()

    # --- souls ---

    def get_soul(self, owner: str) -> Optional[Soul]:
        cur = self.db.execute(
            "SELECT owner,identity,url,minted_at,last_update,uuid FROM souls WHERE owner=?", (owner,))
        row = cur.fetchone()
        if not row: return None
        owner, identity, url, minted_at, last_update, uuid = row
        return Soul(owner, bytes(identity), bytes(url), minted_at, last_update, bytes(uuid))

    def put_soul(self, soul: Soul) -> None:
        self.db.execute(
            "INSERT INTO souls(owner,identity,url,minted_at,last_update,uuid) VALUES(?,?,?,?,?,?) "
            "ON CONFLICT(owner) DO UPDATE SET identity=excluded.identity, url=excluded.url, "
            "minted_at=excluded.minted_at, last_update=excluded.last_update, uuid=excluded.uuid",
            (soul.owner, soul.identity, soul.url, soul.minted_at, soul.last_update, soul.uuid)
        )
        self._commit()

    def delete_soul(self, owner: str) -> None:
        self.db.execute("DELETE FROM souls WHERE owner=?", (owner,))
        self._commit()

    # --- sets ---

    def set_contains(self, name: str, member: bytes) -> bool:
        cur = self.db.execute(
            "SELECT 1 FROM set_members WHERE set_name=? AND member=?", (name, member))
        return cur.fetchone() is not None

    def set_add(self, name: str, member: bytes) -> None:
        self.db.execute(
            "INSERT OR IGNORE INTO set_members(set_name,member) VALUES(?,?)", (name, member))
        self._commit()

    def set_remove(self, name: str, member: bytes) -> None:
        self.db.execute("DELETE FROM set_members WHERE set_name=? AND member=?", (name, member))
        self._commit()

    def set_members(self, name: str) -> List[bytes]:
        cur = self.db.execute(
            "SELECT member FROM set_members WHERE set_name=? ORDER BY member", (name,))
        return [bytes(r[0]) for r in cur.fetchall()]

    # --- counters ---

    def get_counter(self, name: str) -> int:
        cur = self.db.execute("SELECT value FROM counters WHERE name=?", (name,))
        row = cur.fetchone()
        return row[0] if row else 0

    def set_counter(self, name: str, value: int) -> None:
        self.db.execute(
            "INSERT INTO counters(name,value) VALUES(?,?) "
            "ON CONFLICT(name) DO UPDATE SET value=excluded.value", (name, value))
        self._commit()

    # --- metadata ---

    def get_metadata(self, owner: str, key: str) -> bytes:
        cur = self.db.execute("SELECT value FROM metadata WHERE owner=? AND key=?", (owner, key))
        row = cur.fetchone()
        return bytes(row[0]) if row else b""

    def put_metadata(self, owner: str, key: str, value: bytes) -> None:
        self.db.execute(
            "INSERT INTO metadata(owner,key,value) VALUES(?,?,?) "
            "ON CONFLICT(owner,key) DO UPDATE SET value=excluded.value", (owner, key, value))
        self._commit()

    def metadata_keys(self, owner: str) -> List[str]:
        cur = self.db.execute(
            "SELECT key FROM metadata_keys WHERE owner=? ORDER BY position", (owner,))
        return [r[0] for r in cur.fetchall()]

    def append_metadata_key(self, owner: str, key: str) -> None:
        self.db.execute(
            "INSERT INTO metadata_keys(owner,position,key) "
            "SELECT ?, COALESCE(MAX(position) + 1, 0), ? FROM metadata_keys WHERE owner=?",
            (owner, key, owner))
        self._commit()

    # --- audit ---

    def log_event(self, event_type: str, payload: Dict[str, Any]) -> None:
        from soulreg_core.utils import now_ts

        self.db.execute("INSERT INTO audit(ts,event_type,payload) VALUES(?,?,?)",
                        (now_ts(), event_type, json.dumps(payload, separators=(",", ":"), sort_keys=True)))
        self._commit()

    def list_events(self) -> List[Dict[str, Any]]:
        cur = self.db.execute("SELECT ts,event_type,payload FROM audit ORDER BY rowid")
        return [
            {"ts": ts, "event_type": et, "payload": json.loads(p)}
            for ts, et, p in cur.fetchall()
        ]

    def snapshot(self) -> Dict[str, Any]:
        tables = {
            "souls": "SELECT * FROM souls ORDER BY owner",
            "set_members": "SELECT * FROM set_members ORDER BY set_name, member",
            "counters": "SELECT * FROM counters ORDER BY name",
            "metadata": "SELECT * FROM metadata ORDER BY owner, key",
            "metadata_keys": "SELECT * FROM metadata_keys ORDER BY owner, position",
            "audit": "SELECT * FROM audit ORDER BY rowid",
        }
        return {name: [tuple(r) for r in self.db.execute(sql).fetchall()]
                for name, sql in tables.items()}

    def close(self):
        self.db.close()
