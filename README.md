# chainkit

Building blocks for working with Ethereum data in Python.

- **Types** (`chainkit.types`): `Hash`, `Address` (shown in EIP-55 checksum
  form), `BlockNumber`, `TransactionType`, `Block`, `Transaction`, `Receipt`,
  `Log`, `LogFilter`, `CallMsg`, `AccessList`, `StateOverride`, plus
  `keccak256`, `ether`, `gwei`, `hex_to_hash`, `hex_to_address`,
  `bytes_to_hash` and `bytes_to_address`. `Block`, `Transaction`, `Log`,
  `LogFilter`, `CallMsg` and `StateOverride` render to their JSON-RPC shape
  with `to_dict()` and to compact JSON with `to_json()`.
- **JSON decoding** (`chainkit.jsondecode`): `decode_block`,
  `decode_transaction`, `decode_receipt`, `decode_log` and
  `decode_log_filter` take JSON text, bytes or an already parsed dict.
  Malformed input raises `DecodeError` (a `ValueError`).
- **RLP** (`chainkit.rlp`): `encode` for bytes, non-negative ints and nested
  lists or tuples; `decode` returns bytes and lists. Bad input raises
  `RLPError`.
- **Transaction codec** (`chainkit.txcodec`): `encode_transaction` /
  `decode_transaction` for legacy, access-list and dynamic-fee envelopes,
  `encode_access_list` / `decode_access_list`, and `transaction_hash`.
- **Wallet** (`chainkit.wallet`):
  - `chainkit.wallet.secp256k1`: `public_key`, `sign_recoverable` (RFC 6979
    nonces, low S) and `recover_public_key`.
  - `chainkit.wallet.key`: the `Key` class (`address`, `public_key`,
    `private_key_bytes()`, `sign()`, `sign_message()`), `generate_key`,
    `key_from_private_bytes`, `recover_public_key`, `ecrecover` and
    `ecrecover_message`. Signatures are 65 bytes: R, S and a V of 0 or 1.
  - `chainkit.wallet.signer`: `EIP155Signer(chain_id)` with `sign(txn, key)`
    and `recover_sender(txn)`, plus `sign_hash` and `trim_leading_zeros`.
  - `chainkit.wallet.hd`: BIP-32 private derivation with
    `parse_derivation_path`, `master_key_from_seed`, `derive_private_key` and
    `key_from_seed`; the default path is `m/44'/60'/0'/0/0`
    (`DEFAULT_DERIVATION_PATH`).
- **Log stores** (`chainkit.store`): the `Store` / `Entry` interfaces in
  `chainkit.store.base` (a string key/value store holding named, append-only
  log entries), with three backends:
  - `MemoryStore` (`chainkit.store.memory`)
  - `LMDBStore(path, map_size=..., max_dbs=...)` (`chainkit.store.lmdb_store`),
    a single LMDB file
  - `SQLStore(connection, paramstyle="qmark")` (`chainkit.store.sql_store`)
    over any DB-API connection using `qmark` or `format` placeholders, and
    `open_sqlite_store(path)` for SQLite.

  Stores are context managers that close themselves; entries can be iterated
  to yield their logs in order. `get_log` raises `IndexError` for a missing
  index.
- **Test helpers** (`chainkit.testutil`): `MockClient`, `MockBlock`, `mock`,
  `MockList` and `encode_hash` build an in-memory chain that answers
  `block_number`, `get_block_by_hash`, `get_block_by_number`, `get_logs` and
  `chain_id`; `compare_logs` and `compare_blocks` compare lists (the latter
  ignoring difficulty); `Contract`, `Event` and `new_event` produce Solidity
  source text for test contracts.

## Installation

```
pip install chainkit
```

## Examples

Signing a transaction and recovering its sender:

```python
from chainkit.types import Transaction, hex_to_address, ether
from chainkit.wallet.key import generate_key
from chainkit.wallet.signer import EIP155Signer
from chainkit.txcodec import encode_transaction, decode_transaction

key = generate_key()
signer = EIP155Signer(1337)

txn = Transaction(to=hex_to_address("0x015f68893a39b3ba0681584387670ff8b00f4db2"),
                  value=ether(1))
signed = signer.sign(txn, key)

raw = encode_transaction(signed)
assert decode_transaction(raw).value == ether(1)
assert signer.recover_sender(signed) == key.address
```

Signing a message:

```python
from chainkit.wallet.key import generate_key, ecrecover_message

key = generate_key()
signature = key.sign_message(b"hello world")
assert ecrecover_message(b"hello world", signature) == key.address
```

Deriving a key from a seed:

```python
from chainkit.wallet.hd import key_from_seed, parse_derivation_path

seed = bytes(range(32))
key = key_from_seed(seed)                      # m/44'/60'/0'/0/0
other = key_from_seed(seed, "m/44'/60'/0'/0/1")
print(parse_derivation_path("m/44'/60'/0'/0/1"))
```

Storing logs for a filter:

```python
from chainkit.store.memory import MemoryStore
from chainkit.store.sql_store import open_sqlite_store
from chainkit.types import Log

store = MemoryStore()
entry = store.get_entry("myfilter")
entry.store_logs([Log(block_number=10)])
assert entry.last_index() == 1
assert entry.get_log(0).block_number == 10

with open_sqlite_store(":memory:") as sql_store:
    sql_store.set("genesis", "0x00")
    assert sql_store.list_prefix("gen") == ["0x00"]
```

Decoding a JSON-RPC log:

```python
from chainkit.jsondecode import decode_log

log = decode_log(
    '{"logIndex":"0x0","blockNumber":"0x10","transactionIndex":"0x1",'
    '"transactionHash":"0x1","address":"0x015f68893a39b3ba0681584387670ff8b00f4db2",'
    '"data":"0x01","topics":["0xa"]}'
)
print(log.block_number, log.address, log.topics)
```

RLP:

```python
from chainkit import rlp

data = rlp.encode([b"cat", [b"dog", 1024]])
assert rlp.decode(data) == [b"cat", [b"dog", b"\x04\x00"]]
```

## What it does not do

- There is no JSON-RPC client and no network access: `MockClient` is the only
  provider in the package.
- There is no event tracker that follows a chain and fills a store; the stores
  hold logs but nothing here syncs them.
- There is no keystore (encrypted JSON wallet) support and no BIP-39 mnemonic
  handling; `key_from_seed` takes the seed bytes directly.
- There is no ABI encoding and no Solidity compiler: `Contract.render()` only
  produces source text.

## Running the tests

```
pip install -e ".[test]"
pytest
```