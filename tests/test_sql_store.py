import sqlite3

import pytest

from chainkit.store.sql_store import SQLStore, open_sqlite_store
from chainkit.types import Address, Hash, Log


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "store.sqlite"


@pytest.fixture
def store(db_path):
    s = open_sqlite_store(db_path)
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


def test_prefix_is_case_sensitive_and_literal(store):
    store.set("VAL1", "upper")
    store.set("v_x", "underscore")
    store.set("vax", "plain")
    assert store.list_prefix("val") == []
    assert store.list_prefix("v_") == ["underscore"]


def test_log_fields_round_trip(store):
    log = Log(
        transaction_index=1,
        transaction_hash=Hash(b"\x01" * 32),
        block_hash=Hash(b"\x04" * 32),
        block_number=7,
        address=Address(b"\x02" * 20),
        topics=[Hash(b"\x03" * 32), Hash(b"\x05" * 32)],
        data=b"\xde\xad",
    )
    entry = store.get_entry("full")
    entry.store_logs([log])
    assert entry.get_log(0) == log


def test_missing_log_raises(store):
    entry = store.get_entry("1")
    with pytest.raises(IndexError):
        entry.get_log(0)


def test_invalid_entry_name(store):
    with pytest.raises(ValueError):
        store.get_entry("x; DROP TABLE kv")


def test_unknown_paramstyle():
    connection = sqlite3.connect(":memory:")
    with pytest.raises(ValueError):
        SQLStore(connection, paramstyle="named")
    connection.close()


def test_data_without_prefix_is_rejected():
    connection = sqlite3.connect(":memory:")
    store = SQLStore(connection)
    entry = store.get_entry("1")
    entry.store_logs([Log(block_number=1, data=b"\x01")])
    connection.execute("UPDATE logs_1 SET data = 'zz01'")
    connection.commit()
    with pytest.raises(ValueError, match="0x prefix not found in data"):
        entry.get_log(0)
    store.close()


def test_data_persists_after_reopen(db_path):
    with open_sqlite_store(db_path) as first:
        first.set("genesis", "0xabc")
        first.get_entry("f").store_logs([Log(block_number=i) for i in range(3)])

    with open_sqlite_store(db_path) as second:
        assert second.get("genesis") == "0xabc"
        entry = second.get_entry("f")
        assert entry.last_index() == 3
        assert [log.block_number for log in entry] == [0, 1, 2]