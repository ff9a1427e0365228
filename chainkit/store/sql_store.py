"""A store kept in an SQL database reached through a DB-API connection."""

from __future__ import annotations

import contextlib
import os
import re
import sqlite3
from typing import Any, Iterable, Iterator, Sequence, Union

from chainkit.store.base import Entry, Store
from chainkit.types import Address, Hash, Log

_KV_SCHEMA = "CREATE TABLE IF NOT EXISTS kv (key text unique, val text)"

_PLACEHOLDERS = {"qmark": "?", "format": "%s"}

_TABLE_NAME = re.compile(r"[A-Za-z0-9_]+")


def _log_schema(table: str) -> str:
    return (
        f"CREATE TABLE IF NOT EXISTS {table} ("
        "indx numeric, tx_index numeric, tx_hash text, block_num numeric, "
        "block_hash text, address text, topics text, data text)"
    )


class _Database:
    """A connection together with the placeholder style it uses."""

    def __init__(self, connection: Any, paramstyle: str) -> None:
        if paramstyle not in _PLACEHOLDERS:
            raise ValueError(
                f"unsupported paramstyle {paramstyle!r}, "
                f"expected one of {sorted(_PLACEHOLDERS)}"
            )
        self.connection = connection
        self._mark = _PLACEHOLDERS[paramstyle]

    def _sql(self, text: str) -> str:
        return text.replace("?", self._mark)

    def query(self, text: str, params: Sequence[Any] = ()) -> list[tuple]:
        cursor = self.connection.cursor()
        try:
            cursor.execute(self._sql(text), tuple(params))
            return list(cursor.fetchall())
        finally:
            cursor.close()

    @contextlib.contextmanager
    def transaction(self) -> Iterator[Any]:
        cursor = self.connection.cursor()
        try:
            yield lambda text, params=(): cursor.execute(self._sql(text), tuple(params))
            self.connection.commit()
        except BaseException:
            self.connection.rollback()
            raise
        finally:
            cursor.close()


class SQLEntry(Entry):
    """Logs kept in their own table."""

    def __init__(self, database: _Database, table: str) -> None:
        self._db = database
        self._table = table

    def last_index(self) -> int:
        rows = self._db.query(
            f"SELECT indx FROM {self._table} ORDER BY indx DESC LIMIT 1"
        )
        return int(rows[0][0]) + 1 if rows else 0

    def store_logs(self, logs: Iterable[Log]) -> None:
        start = self.last_index()
        query = (
            f"INSERT INTO {self._table} "
            "(indx, tx_index, tx_hash, block_num, block_hash, address, data, topics) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
        )
        with self._db.transaction() as execute:
            for offset, log in enumerate(logs):
                execute(
                    query,
                    (
                        start + offset,
                        log.transaction_index,
                        str(log.transaction_hash),
                        log.block_number,
                        str(log.block_hash),
                        str(log.address),
                        "0x" + bytes(log.data).hex() if log.data else "",
                        ",".join(str(topic) for topic in log.topics),
                    ),
                )

    def remove_logs(self, index: int) -> None:
        with self._db.transaction() as execute:
            execute(f"DELETE FROM {self._table} WHERE indx >= ?", (index,))

    def get_log(self, index: int) -> Log:
        rows = self._db.query(
            "SELECT tx_index, tx_hash, block_num, block_hash, address, topics, data "
            f"FROM {self._table} WHERE indx = ?",
            (index,),
        )
        if not rows:
            raise IndexError(f"no log at index {index}")
        tx_index, tx_hash, block_num, block_hash, address, topics, data = rows[0]

        log = Log(
            transaction_index=int(tx_index),
            transaction_hash=Hash.from_hex(tx_hash),
            block_number=int(block_num),
            block_hash=Hash.from_hex(block_hash),
            address=Address.from_hex(address),
        )
        if topics:
            log.topics = [Hash.from_hex(item) for item in topics.split(",")]
        if data:
            if not data.startswith("0x"):
                raise ValueError("0x prefix not found in data")
            log.data = bytes.fromhex(data[2:])
        return log


class SQLStore(Store):
    """A key-value table plus one table of logs per entry."""

    def __init__(self, connection: Any, paramstyle: str = "qmark") -> None:
        self._db = _Database(connection, paramstyle)
        with self._db.transaction() as execute:
            execute(_KV_SCHEMA)

    def get(self, key: str) -> str:
        rows = self._db.query("SELECT val FROM kv WHERE key = ?", (key,))
        return rows[0][0] if rows else ""

    def list_prefix(self, prefix: str) -> list[str]:
        pattern = (
            prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
        )
        rows = self._db.query(
            "SELECT key, val FROM kv WHERE key LIKE ? ESCAPE '\\'", (pattern,)
        )
        # LIKE may ignore case, so keep only exact prefix matches.
        return [val for key, val in rows if key.startswith(prefix)]

    def set(self, key: str, value: str) -> None:
        with self._db.transaction() as execute:
            execute(
                "INSERT INTO kv (key, val) VALUES (?, ?) "
                "ON CONFLICT (key) DO UPDATE SET val = excluded.val",
                (key, value),
            )

    def close(self) -> None:
        self._db.connection.close()

    def get_entry(self, name: str) -> SQLEntry:
        table = "logs_" + name
        if not _TABLE_NAME.fullmatch(table):
            raise ValueError(f"invalid entry name {name!r}")
        with self._db.transaction() as execute:
            execute(_log_schema(table))
        return SQLEntry(self._db, table)


def open_sqlite_store(path: Union[str, os.PathLike]) -> SQLStore:
    """Open (or create) an SQLite database at ``path`` as a store."""
    return SQLStore(sqlite3.connect(os.fspath(path)))