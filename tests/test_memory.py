import threading

import pytest

from chainkit.store.memory import MemoryStore
from chainkit.types import Log


@pytest.fixture
def store():
    s = MemoryStore()
    yield s
    s.close()


def test_multiple_stores(store):
    entry0 = store.get_entry("0")
    entry0.store_logs([Log(block_number=10)])
    entry1 = store.get_entry("1")
    entry1.store_logs([Log(block_number=15)])
    assert entry0.last_index() == 1
    assert entry1.last_index() == 1


def test_get_set(store):
    assert store.get("k1") == ""
    store.set("k1", "v1")
    assert store.get("k1") == "v1"
    store.set("k1", "v2")
    assert store.get("k1") == "v2"


def test_remove_logs(store):
    logs = [Log(block_number=i) for i in range(10)]
    entry = store.get_entry("1")
    entry.store_logs(logs)
    entry.remove_logs(5)
    assert entry.last_index() == 5
    entry.store_logs(logs[5:])
    assert entry.last_index() == 10


def test_store_logs(store):
    entry = store.get_entry("1")
    assert entry.last_index() == 0
    log = Log(block_number=10)
    entry.store_logs([log])
    assert entry.last_index() == 1
    assert entry.get_log(0) == log
    assert store.get_entry("1").last_index() == 1


def test_prefix(store):
    for value in ("val1", "val2", "val3"):
        store.set(value, value)
    store.set("a", "b")
    assert sorted(store.list_prefix("val")) == ["val1", "val2", "val3"]
    assert store.list_prefix("a") == ["b"]
    assert store.list_prefix("b") == []


def test_entry_shared_by_name(store):
    store.get_entry("x").store_logs([Log(block_number=7)])
    again = store.get_entry("x")
    assert again.last_index() == 1
    assert again.get_log(0).block_number == 7
    assert store.get_entry("y").last_index() == 0


def test_get_log_out_of_range(store):
    entry = store.get_entry("1")
    entry.store_logs([Log(block_number=1)])
    with pytest.raises(IndexError):
        entry.get_log(1)
    with pytest.raises(IndexError):
        entry.get_log(-1)


def test_remove_past_end_raises(store):
    entry = store.get_entry("1")
    entry.store_logs([Log(block_number=1)])
    with pytest.raises(IndexError):
        entry.remove_logs(2)


def test_get_log_returns_copy(store):
    entry = store.get_entry("1")
    entry.store_logs([Log(block_number=3)])
    fetched = entry.get_log(0)
    fetched.block_number = 99
    assert entry.get_log(0).block_number == 3


def test_concurrent_store_logs(store):
    entry = store.get_entry("1")

    def worker():
        for i in range(50):
            entry.store_logs([Log(block_number=i)])

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert entry.last_index() == 400