"""Decoding of JSON-RPC objects into the chain data types."""

from __future__ import annotations

import json
import re
from typing import Any, Optional, Union

from chainkit.types import (
    AccessEntry,
    AccessList,
    Address,
    Block,
    BlockNumber,
    Hash,
    Log,
    LogFilter,
    Receipt,
    Transaction,
    TransactionType,
)

Raw = Union[str, bytes, bytearray, dict]

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")
_SIGNED_HEX_DIGITS = re.compile(r"[+-]?[0-9a-fA-F]+")

_UINT64_LIMIT = 1 << 64
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


class DecodeError(ValueError):
    """Raised when a JSON-RPC object cannot be decoded."""


def _load(raw: Raw, context: str = "") -> Any:
    if isinstance(raw, dict):
        return raw
    try:
        return json.loads(raw)
    except (ValueError, TypeError) as exc:
        if context:
            raise DecodeError(f"{context}, {exc}") from exc
        raise DecodeError(str(exc)) from exc


def _get(obj: Any, key: str) -> Any:
    """Return the value at ``key``, or ``None`` when the key is absent."""
    if isinstance(obj, dict):
        return obj.get(key)
    return None


def _exists(obj: Any, key: str) -> bool:
    return isinstance(obj, dict) and key in obj


def _is_set(obj: Any, key: str) -> bool:
    return _exists(obj, key) and obj[key] is not None


def _array(obj: Any, key: str) -> list:
    value = _get(obj, key)
    return value if isinstance(value, list) else []


def _text(obj: Any, key: str) -> str:
    """Return the JSON text of a field with surrounding quotes removed."""
    if not _exists(obj, key):
        raise DecodeError(f"field '{key}' not found")
    encoded = json.dumps(obj[key], separators=(",", ":"), ensure_ascii=False)
    return encoded.strip('"')


def _hex_text(obj: Any, key: str) -> str:
    text = _text(obj, key)
    if not text.startswith("0x"):
        raise DecodeError(f"field '{key}' does not have 0x prefix: '{text}'")
    return text[2:]


def _string(obj: Any, key: str) -> str:
    value = _get(obj, key)
    if not isinstance(value, str) or not value:
        raise DecodeError(f"field '{key}' not found")
    return value


def _parse_fixed(cls, text: Any):
    if not isinstance(text, str):
        raise DecodeError(f"expected a string for {cls.__name__} but found {text!r}")
    try:
        return cls.from_hex(text)
    except ValueError as exc:
        raise DecodeError(f"invalid {cls.__name__} '{text}': {exc}") from exc


def _decode_hash(obj: Any, key: str) -> Hash:
    return _parse_fixed(Hash, _string(obj, key))


def _decode_address(obj: Any, key: str) -> Address:
    return _parse_fixed(Address, _string(obj, key))


def _decode_uint(obj: Any, key: str) -> int:
    digits = _hex_text(obj, key) or "0"
    if not _HEX_DIGITS.fullmatch(digits) or int(digits, 16) >= _UINT64_LIMIT:
        raise DecodeError(f"field '{key}' failed to decode uint: {digits}")
    return int(digits, 16)


def _decode_int64(obj: Any, key: str) -> int:
    digits = _hex_text(obj, key) or "0"
    if not _SIGNED_HEX_DIGITS.fullmatch(digits):
        raise DecodeError(f"field '{key}' failed to decode int64: {digits}")
    value = int(digits, 16)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise DecodeError(f"field '{key}' failed to decode int64: {digits}")
    return value


def _decode_big_int(obj: Any, key: str) -> int:
    text = _text(obj, key)
    if not text.startswith("0x"):
        raise DecodeError(f"field '{key}' does not have 0x prefix: '{text}'")
    digits = text[2:]
    if not _SIGNED_HEX_DIGITS.fullmatch(digits):
        raise DecodeError(f"field '{key}' failed to decode big int: '{text}'")
    return int(digits, 16)


def _decode_bytes(obj: Any, key: str, length: Optional[int] = None) -> bytes:
    digits = _hex_text(obj, key)
    if len(digits) % 2:
        digits = "0" + digits
    try:
        data = bytes.fromhex(digits) if _HEX_DIGITS.fullmatch(digits) or not digits else None
    except ValueError:
        data = None
    if data is None:
        raise DecodeError(f"field '{key}' is not valid hex: {digits}")
    if length is not None and len(data) != length:
        raise DecodeError(
            f"field '{key}' invalid length, expected {length} "
            f"but found {len(data)}: {digits}"
        )
    return data


def _decode_nonce(obj: Any, key: str) -> bytes:
    text = _string(obj, key).strip('"')
    if not text.startswith("0x"):
        raise DecodeError("0x prefix not found")
    digits = text[2:]
    if digits and not _HEX_DIGITS.fullmatch(digits) or len(digits) % 2:
        raise DecodeError(f"invalid hex in field '{key}': {digits}")
    data = bytes.fromhex(digits)
    if len(data) != 8:
        raise DecodeError(f"length {len(data)} is not correct, expected 8")
    return data


def _decode_bool(obj: Any, key: str) -> bool:
    if not _exists(obj, key):
        raise DecodeError(f"field '{key}' not found")
    value = obj[key]
    if isinstance(value, bool):
        return value
    raise DecodeError(
        f"field '{key}' with content '{json.dumps(value)}' cannot be decoded as bool"
    )


def _decode_optional_to(obj: Any) -> Optional[Address]:
    if _exists(obj, "to") and obj["to"] is not None:
        return _decode_address(obj, "to")
    return None


def _access_list(value: Any) -> Optional[AccessList]:
    if not isinstance(value, list):
        raise DecodeError("access list is not an array")
    entries = AccessList()
    for elem in value:
        address = _decode_address(elem, "address")
        storage = _get(elem, "storageKeys")
        if not isinstance(storage, list):
            raise DecodeError("field 'storageKeys' is not an array")
        entries.append(
            AccessEntry(address=address, storage=[_parse_fixed(Hash, s) for s in storage])
        )
    return entries or None


def _transaction(obj: Any) -> Transaction:
    if _is_set(obj, "chainId"):
        if _is_set(obj, "maxFeePerGas"):
            typ = TransactionType.DYNAMIC_FEE
        else:
            typ = TransactionType.ACCESS_LIST
    else:
        typ = TransactionType.LEGACY

    txn = Transaction(type=typ)
    txn.hash = _decode_hash(obj, "hash")
    txn.from_address = _decode_address(obj, "from")
    txn.gas_price = _decode_uint(obj, "gasPrice")
    txn.input = _decode_bytes(obj, "input")
    txn.value = _decode_big_int(obj, "value")
    txn.nonce = _decode_uint(obj, "nonce")
    txn.to = _decode_optional_to(obj)
    txn.v = _decode_bytes(obj, "v")
    txn.r = _decode_bytes(obj, "r")
    txn.s = _decode_bytes(obj, "s")

    if typ != TransactionType.LEGACY:
        txn.chain_id = _decode_big_int(obj, "chainId")
        if _is_set(obj, "accessList"):
            txn.access_list = _access_list(obj["accessList"])

    txn.gas = _decode_uint(obj, "gas")

    if typ == TransactionType.DYNAMIC_FEE:
        txn.max_priority_fee_per_gas = _decode_big_int(obj, "maxPriorityFeePerGas")
        txn.max_fee_per_gas = _decode_big_int(obj, "maxFeePerGas")

    # Only sealed transactions carry block metadata.
    if _is_set(obj, "blockHash"):
        txn.block_hash = _decode_hash(obj, "blockHash")
        txn.block_number = _decode_uint(obj, "blockNumber")
        txn.txn_index = _decode_uint(obj, "transactionIndex")
    return txn


def _log(obj: Any) -> Log:
    log = Log()
    if _exists(obj, "removed"):
        log.removed = _decode_bool(obj, "removed")
    log.log_index = _decode_uint(obj, "logIndex")
    log.block_number = _decode_uint(obj, "blockNumber")
    log.transaction_index = _decode_uint(obj, "transactionIndex")
    log.transaction_hash = _decode_hash(obj, "transactionHash")
    if _exists(obj, "blockHash"):
        log.block_hash = _decode_hash(obj, "blockHash")
    log.address = _decode_address(obj, "address")
    log.data = _decode_bytes(obj, "data")
    log.topics = [_parse_fixed(Hash, topic) for topic in _array(obj, "topics")]
    return log


def decode_block(raw: Raw) -> Block:
    """Decode a block object, with transaction hashes or full transactions."""
    obj = _load(raw)
    block = Block(
        hash=_decode_hash(obj, "hash"),
        parent_hash=_decode_hash(obj, "parentHash"),
        sha3_uncles=_decode_hash(obj, "sha3Uncles"),
        transactions_root=_decode_hash(obj, "transactionsRoot"),
        state_root=_decode_hash(obj, "stateRoot"),
        receipts_root=_decode_hash(obj, "receiptsRoot"),
        miner=_decode_address(obj, "miner"),
        number=_decode_uint(obj, "number"),
        gas_limit=_decode_uint(obj, "gasLimit"),
        gas_used=_decode_uint(obj, "gasUsed"),
        mix_hash=_decode_hash(obj, "mixHash"),
        nonce=_decode_nonce(obj, "nonce"),
        timestamp=_decode_uint(obj, "timestamp"),
        difficulty=_decode_big_int(obj, "difficulty"),
        extra_data=_decode_bytes(obj, "extraData"),
    )

    elems = _array(obj, "transactions")
    if elems:
        if isinstance(elems[0], str):
            block.transactions_hashes = [_parse_fixed(Hash, e) for e in elems]
        else:
            block.transactions = [_transaction(e) for e in elems]

    block.uncles = [_parse_fixed(Hash, e) for e in _array(obj, "uncles")]
    return block


def decode_transaction(raw: Raw) -> Transaction:
    """Decode a transaction object, detecting its envelope type."""
    return _transaction(_load(raw))


def decode_receipt(raw: Raw) -> Receipt:
    """Decode a transaction receipt object."""
    obj = _load(raw)
    receipt = Receipt()
    receipt.from_address = _decode_address(obj, "from")
    if _is_set(obj, "contractAddress"):
        receipt.contract_address = _decode_address(obj, "contractAddress")
    receipt.transaction_hash = _decode_hash(obj, "transactionHash")
    receipt.block_hash = _decode_hash(obj, "blockHash")
    receipt.transaction_index = _decode_uint(obj, "transactionIndex")
    receipt.block_number = _decode_uint(obj, "blockNumber")
    receipt.gas_used = _decode_uint(obj, "gasUsed")
    receipt.cumulative_gas_used = _decode_uint(obj, "cumulativeGasUsed")
    receipt.logs_bloom = _decode_bytes(obj, "logsBloom", 256)
    if _exists(obj, "status"):
        # present after the byzantium fork
        receipt.status = _decode_uint(obj, "status")
    receipt.to = _decode_optional_to(obj)
    receipt.logs = [_log(elem) for elem in _array(obj, "logs")]
    return receipt


def decode_log(raw: Raw) -> Log:
    """Decode a log object."""
    return _log(_load(raw))


def decode_log_filter(raw: Raw) -> LogFilter:
    """Decode a log filter object."""
    obj = _load(raw, "unable to parse input")
    log_filter = LogFilter()

    for value in _array(obj, "address"):
        log_filter.address.append(_parse_fixed(Address, value))
    single = _get(obj, "address")
    if isinstance(single, str):
        log_filter.address.append(_parse_fixed(Address, single))

    if _exists(obj, "blockHash"):
        log_filter.block_hash = _decode_hash(obj, "blockHash")
    if _exists(obj, "fromBlock"):
        log_filter.from_block = BlockNumber(_decode_int64(obj, "fromBlock"))
    if _exists(obj, "toBlock"):
        log_filter.to_block = BlockNumber(_decode_int64(obj, "toBlock"))

    topics: list[Optional[list[Optional[Hash]]]] = []
    for position in _array(obj, "topics"):
        if position is None:
            topics.append(None)
            continue
        if not isinstance(position, list):
            raise DecodeError(f"topic position is not an array: {position!r}")
        topics.append([_parse_fixed(Hash, topic) for topic in position])
    log_filter.topics = topics or None
    return log_filter