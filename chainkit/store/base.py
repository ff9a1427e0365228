"""Interfaces for the key-value and log storage used by a log tracker."""

from __future__ import annotations

import abc
from typing import Iterable, Iterator

from chainkit.types import Log


class Entry(abc.ABC):
    """An ordered, append-only sequence of logs for one filter."""

    @abc.abstractmethod
    def last_index(self) -> int:
        """Return the index one past the last stored log (0 when empty)."""

    @abc.abstractmethod
    def store_logs(self, logs: Iterable[Log]) -> None:
        """Append ``logs`` after the last stored log."""

    @abc.abstractmethod
    def remove_logs(self, index: int) -> None:
        """Remove every log from ``index`` onwards."""

    @abc.abstractmethod
    def get_log(self, index: int) -> Log:
        """Return the log stored at ``index``; raise IndexError if there is none."""

    def __iter__(self) -> Iterator[Log]:
        for index in range(self.last_index()):
            yield self.get_log(index)


class Store(abc.ABC):
    """A string key-value store that also holds named log entries."""

    @abc.abstractmethod
    def get(self, key: str) -> str:
        """Return the value for ``key``, or an empty string if it is unset."""

    @abc.abstractmethod
    def list_prefix(self, prefix: str) -> list[str]:
        """Return the values of every key that starts with ``prefix``."""

    @abc.abstractmethod
    def set(self, key: str, value: str) -> None:
        """Set ``key`` to ``value``, replacing any previous value."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the resources held by the store."""

    @abc.abstractmethod
    def get_entry(self, name: str) -> Entry:
        """Return the log entry called ``name``, creating it if needed."""

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()