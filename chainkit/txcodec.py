"""RLP encoding of transactions and access lists."""

from __future__ import annotations

from typing import Optional

from chainkit import rlp
from chainkit.rlp import RLPError
from chainkit.types import (
    AccessEntry,
    AccessList,
    Address,
    Hash,
    Transaction,
    TransactionType,
    bytes_to_hash,
    keccak256,
)

_FIELD_COUNTS = {
    TransactionType.LEGACY: 9,
    TransactionType.ACCESS_LIST: 11,
    TransactionType.DYNAMIC_FEE: 12,
}


def _access_list_item(access_list: Optional[AccessList]) -> list:
    return [
        [bytes(entry.address), [bytes(slot) for slot in entry.storage]]
        for entry in access_list or []
    ]


def _access_list_from_item(item) -> AccessList:
    if not isinstance(item, list):
        raise RLPError("access list is not a list")
    out = AccessList()
    for elem in item:
        if not isinstance(elem, list):
            raise RLPError("access list entry is not a list")
        if len(elem) != 2:
            raise RLPError(f"two elems expected but {len(elem)} found")
        address, storage = elem
        if not isinstance(address, bytes) or len(address) != 20:
            raise RLPError("access list address must be 20 bytes")
        if not isinstance(storage, list):
            raise RLPError("access list storage is not a list")
        slots = []
        for slot in storage:
            if not isinstance(slot, bytes) or len(slot) != 32:
                raise RLPError("storage key must be 32 bytes")
            slots.append(Hash(slot))
        out.append(AccessEntry(address=Address(address), storage=slots))
    return out


def encode_access_list(access_list: Optional[AccessList]) -> bytes:
    """RLP encode an access list."""
    return rlp.encode(_access_list_item(access_list))


def decode_access_list(data: bytes) -> AccessList:
    """Decode an RLP encoded access list."""
    return _access_list_from_item(rlp.decode(data))


def _fields(txn: Transaction) -> list:
    typed = txn.type != TransactionType.LEGACY
    items: list = []
    if typed:
        items.append(txn.chain_id or 0)
    items.append(txn.nonce)
    if txn.type == TransactionType.DYNAMIC_FEE:
        items.append(txn.max_priority_fee_per_gas or 0)
        items.append(txn.max_fee_per_gas or 0)
    else:
        items.append(txn.gas_price)
    items.append(txn.gas)
    items.append(b"" if txn.to is None else bytes(txn.to))
    items.append(txn.value or 0)
    items.append(bytes(txn.input))
    if typed:
        items.append(_access_list_item(txn.access_list))
    items.extend([bytes(txn.v), bytes(txn.r), bytes(txn.s)])
    return items


def encode_transaction(txn: Transaction) -> bytes:
    """Encode a transaction, prefixing the type byte for typed envelopes."""
    raw = rlp.encode(_fields(txn))
    if txn.type == TransactionType.LEGACY:
        return raw
    return bytes([int(txn.type)]) + raw


def _bytes(item) -> bytes:
    if not isinstance(item, bytes):
        raise RLPError("expected a byte string but found a list")
    return item


def _big(item) -> int:
    return int.from_bytes(_bytes(item), "big")


def _uint64(item) -> int:
    data = _bytes(item)
    if len(data) > 8:
        raise RLPError(f"integer of {len(data)} bytes does not fit in 64 bits")
    return int.from_bytes(data, "big")


def decode_transaction(data: bytes) -> Transaction:
    """Decode a transaction; its hash is the Keccak-256 of ``data``."""
    data = bytes(data)
    if not data:
        raise RLPError("expecting 1 byte but 0 byte provided")
    txn = Transaction(hash=bytes_to_hash(keccak256(data)))
    if data[0] <= 0x7F:
        if data[0] == 1:
            txn.type = TransactionType.ACCESS_LIST
        elif data[0] == 2:
            txn.type = TransactionType.DYNAMIC_FEE
        else:
            raise RLPError(f"type byte {data[0]} not found")
        data = data[1:]

    item = rlp.decode(data)
    if not isinstance(item, list):
        raise RLPError("transaction is not an RLP list")
    expected = _FIELD_COUNTS[txn.type]
    if len(item) != expected:
        raise RLPError(
            f"not enough elements to decode transaction, "
            f"expected {expected} but found {len(item)}"
        )
    fields = iter(item)
    typed = txn.type != TransactionType.LEGACY

    if typed:
        txn.chain_id = _big(next(fields))
    txn.nonce = _uint64(next(fields))
    if txn.type == TransactionType.DYNAMIC_FEE:
        txn.max_priority_fee_per_gas = _big(next(fields))
        txn.max_fee_per_gas = _big(next(fields))
    else:
        txn.gas_price = _uint64(next(fields))
    txn.gas = _uint64(next(fields))
    to = next(fields)
    txn.to = Address(to) if isinstance(to, bytes) and len(to) == 20 else None
    txn.value = _big(next(fields))
    txn.input = _bytes(next(fields))
    if typed:
        txn.access_list = _access_list_from_item(next(fields)) or None
    txn.v = _bytes(next(fields))
    txn.r = _bytes(next(fields))
    txn.s = _bytes(next(fields))
    return txn


def transaction_hash(txn: Transaction) -> Hash:
    """Return the hash of the encoded transaction."""
    return bytes_to_hash(keccak256(encode_transaction(txn)))