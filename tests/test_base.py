import pytest

from chainkit.store.base import Entry, Store
from chainkit.types import Log


class _ListEntry(Entry):
    def __init__(self):
        self.items = []

    def last_index(self):
        return len(self.items)

    def store_logs(self, logs):
        self.items.extend(logs)

    def remove_logs(self, index):
        del self.items[index:]

    def get_log(self, index):
        return self.items[index]


class _DictStore(Store):
    def __init__(self):
        self.values = {}
        self.entries = {}
        self.closed = False

    def get(self, key):
        return self.values.get(key, "")

    def list_prefix(self, prefix):
        return [v for k, v in self.values.items() if k.startswith(prefix)]

    def set(self, key, value):
        self.values[key] = value

    def close(self):
        self.closed = True

    def get_entry(self, name):
        return self.entries.setdefault(name, _ListEntry())


def test_store_is_abstract():
    with pytest.raises(TypeError):
        Store()


def test_entry_is_abstract():
    with pytest.raises(TypeError):
        Entry()


def test_enter_returns_store_and_exit_closes():
    store = _DictStore()
    assert Store.__enter__(store) is store
    store.set("k1", "v1")
    assert store.get("k1") == "v1"
    assert store.closed is False
    Store.__exit__(store, None, None, None)
    assert store.closed is True


def test_exit_on_error_closes_and_does_not_suppress():
    store = _DictStore()
    Store.__enter__(store)
    error = RuntimeError("boom")
    suppressed = Store.__exit__(store, RuntimeError, error, None)
    assert not suppressed
    assert store.closed is True


def test_entry_iterates_logs_in_order():
    entry = _DictStore().get_entry("1")
    entry.store_logs([Log(block_number=i) for i in range(4)])
    assert [log.block_number for log in entry] == [0, 1, 2, 3]


def test_entry_iteration_follows_removal():
    entry = _DictStore().get_entry("1")
    entry.store_logs([Log(block_number=i) for i in range(4)])
    entry.remove_logs(2)
    assert [log.block_number for log in entry] == [0, 1]