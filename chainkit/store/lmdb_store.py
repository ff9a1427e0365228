"""A store persisted in an LMDB file."""

from __future__ import annotations

import os
import struct
from typing import Iterable, Union

import lmdb

from chainkit.jsondecode import decode_log
from chainkit.store.base import Entry, Store
from chainkit.types import Log

_CONF = b"conf"
_LOGS = b"logs"
_INDEX = struct.Struct(">Q")


def _index_key(index: int) -> bytes:
    if not 0 <= index < 1 << 64:
        raise IndexError(f"log index out of range: {index}")
    return _INDEX.pack(index)


def _last_index(txn, db) -> int:
    cursor = txn.cursor(db=db)
    if cursor.last():
        return _INDEX.unpack(cursor.key())[0] + 1
    return 0


class LMDBEntry(Entry):
    """Logs kept in a named LMDB database, keyed by big-endian index."""

    def __init__(self, env: lmdb.Environment, db) -> None:
        self._env = env
        self._db = db

    def last_index(self) -> int:
        with self._env.begin(db=self._db) as txn:
            return _last_index(txn, self._db)

    def store_log(self, log: Log) -> None:
        """Append a single log."""
        self.store_logs([log])

    def store_logs(self, logs: Iterable[Log]) -> None:
        with self._env.begin(write=True, db=self._db) as txn:
            start = _last_index(txn, self._db)
            for offset, log in enumerate(logs):
                txn.put(_index_key(start + offset), log.to_json().encode("utf-8"))

    def remove_logs(self, index: int) -> None:
        key = _index_key(index)
        with self._env.begin(write=True, db=self._db) as txn:
            cursor = txn.cursor()
            if not cursor.set_range(key):
                return
            for stale in list(cursor.iternext(keys=True, values=False)):
                txn.delete(stale)

    def get_log(self, index: int) -> Log:
        with self._env.begin(db=self._db) as txn:
            raw = txn.get(_index_key(index))
        if raw is None:
            raise IndexError(f"no log at index {index}")
        return decode_log(bytes(raw))


class LMDBStore(Store):
    """A key-value store and log entries in a single LMDB file."""

    def __init__(
        self,
        path: Union[str, os.PathLike],
        *,
        map_size: int = 1 << 28,
        max_dbs: int = 128,
    ) -> None:
        self._env = lmdb.open(
            os.fspath(path), subdir=False, map_size=map_size, max_dbs=max_dbs
        )
        try:
            self._conf = self._env.open_db(_CONF, create=True)
        except Exception:
            self._env.close()
            raise

    def get(self, key: str) -> str:
        with self._env.begin(db=self._conf) as txn:
            value = txn.get(key.encode("utf-8"))
        return "" if value is None else bytes(value).decode("utf-8")

    def list_prefix(self, prefix: str) -> list[str]:
        raw_prefix = prefix.encode("utf-8")
        out: list[str] = []
        with self._env.begin(db=self._conf) as txn:
            cursor = txn.cursor()
            found = cursor.set_range(raw_prefix) if raw_prefix else cursor.first()
            if not found:
                return out
            for key, value in cursor.iternext():
                if not bytes(key).startswith(raw_prefix):
                    break
                out.append(bytes(value).decode("utf-8"))
        return out

    def set(self, key: str, value: str) -> None:
        with self._env.begin(write=True, db=self._conf) as txn:
            txn.put(key.encode("utf-8"), value.encode("utf-8"))

    def close(self) -> None:
        self._env.close()

    def get_entry(self, name: str) -> LMDBEntry:
        db = self._env.open_db(_LOGS + name.encode("utf-8"), create=True)
        return LMDBEntry(self._env, db)