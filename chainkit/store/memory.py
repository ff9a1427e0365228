"""A store that keeps everything in memory."""

from __future__ import annotations

import copy
import threading
from typing import Iterable

from chainkit.store.base import Entry, Store
from chainkit.types import Log


class MemoryEntry(Entry):
    """A log entry held in a list."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._logs: list[Log] = []

    def last_index(self) -> int:
        with self._lock:
            return len(self._logs)

    def store_logs(self, logs: Iterable[Log]) -> None:
        with self._lock:
            self._logs.extend(logs)

    def remove_logs(self, index: int) -> None:
        with self._lock:
            if not 0 <= index <= len(self._logs):
                raise IndexError(
                    f"cannot remove from index {index}, {len(self._logs)} logs stored"
                )
            del self._logs[index:]

    def get_log(self, index: int) -> Log:
        with self._lock:
            if not 0 <= index < len(self._logs):
                raise IndexError(f"no log at index {index}")
            return copy.copy(self._logs[index])


class MemoryStore(Store):
    """A key-value store and log entries held in dictionaries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, MemoryEntry] = {}
        self._kv: dict[str, str] = {}

    def get(self, key: str) -> str:
        with self._lock:
            return self._kv.get(key, "")

    def list_prefix(self, prefix: str) -> list[str]:
        with self._lock:
            return [v for k, v in self._kv.items() if k.startswith(prefix)]

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._kv[key] = value

    def close(self) -> None:
        """Nothing to release for an in-memory store."""

    def get_entry(self, name: str) -> MemoryEntry:
        with self._lock:
            entry = self._entries.get(name)
            if entry is None:
                entry = self._entries[name] = MemoryEntry()
            return entry