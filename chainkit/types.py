"""Core chain data types and their JSON-RPC representations."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Optional

from Crypto.Hash import keccak


def keccak256(data: bytes) -> bytes:
    """Return the Keccak-256 digest of ``data``."""
    return keccak.new(digest_bits=256, data=bytes(data)).digest()


def _scale(value: int, decimals: int) -> int:
    if value < 0:
        raise ValueError(f"value must not be negative: {value}")
    return value * 10**decimals


def ether(value: int) -> int:
    """Convert a whole amount of ether into wei (18 decimals)."""
    return _scale(value, 18)


def gwei(value: int) -> int:
    """Convert a whole amount of gwei into wei (9 decimals)."""
    return _scale(value, 9)


def _hex_int(value: int) -> str:
    return f"0x{value:x}"


def _hex_bytes(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _dumps(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"))


class _FixedBytes(bytes):
    """Immutable byte string of a fixed size."""

    size = 0

    def __new__(cls, data: bytes | None = None):
        if data is None or len(data) == 0:
            data = bytes(cls.size)
        if len(data) != cls.size:
            raise ValueError(
                f"{cls.__name__} needs {cls.size} bytes but {len(data)} were given"
            )
        return super().__new__(cls, data)

    def __str__(self) -> str:
        return _hex_bytes(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


def _fixed_from_bytes(cls, data: bytes):
    data = bytes(data)
    if len(data) > cls.size:
        data = data[len(data) - cls.size:]
    return cls(data.rjust(cls.size, b"\x00"))


def _fixed_from_hex(cls, text: str):
    digits = text[2:] if text.startswith(("0x", "0X")) else text
    if len(digits) > cls.size * 2:
        raise ValueError(
            f"{cls.__name__} hex is too long: {len(digits)} digits, "
            f"at most {cls.size * 2} allowed"
        )
    return cls(bytes.fromhex(digits.rjust(cls.size * 2, "0")))


class Hash(_FixedBytes):
    """A 32-byte hash."""

    size = 32

    @classmethod
    def from_hex(cls, text: str) -> "Hash":
        """Parse a hex string, with or without 0x, left-padding it to full size."""
        return _fixed_from_hex(cls, text)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Hash":
        """Build from ``data``, keeping its last bytes and left-padding with zeros."""
        return _fixed_from_bytes(cls, data)


class Address(_FixedBytes):
    """A 20-byte account address, shown in EIP-55 checksum form."""

    size = 20

    @classmethod
    def from_hex(cls, text: str) -> "Address":
        """Parse a hex string, with or without 0x, left-padding it to full size."""
        return _fixed_from_hex(cls, text)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Address":
        """Build from ``data``, keeping its last bytes and left-padding with zeros."""
        return _fixed_from_bytes(cls, data)

    def __str__(self) -> str:
        lower = bytes(self).hex()
        digest = keccak256(lower.encode("ascii")).hex()
        return "0x" + "".join(
            char.upper() if int(nibble, 16) >= 8 else char
            for char, nibble in zip(lower, digest)
        )


ZERO_HASH = Hash()
ZERO_ADDRESS = Address()


def hex_to_hash(text: str) -> Hash:
    """Parse a hex string into a :class:`Hash`."""
    return Hash.from_hex(text)


def hex_to_address(text: str) -> Address:
    """Parse a hex string into an :class:`Address`."""
    return Address.from_hex(text)


def bytes_to_hash(data: bytes) -> Hash:
    """Build a :class:`Hash` from the last 32 bytes of ``data``."""
    return Hash.from_bytes(data)


def bytes_to_address(data: bytes) -> Address:
    """Build an :class:`Address` from the last 20 bytes of ``data``."""
    return Address.from_bytes(data)


class BlockNumber(int):
    """A block number; the negative values name special blocks."""

    LATEST: BlockNumber
    PENDING: BlockNumber
    EARLIEST: BlockNumber

    def to_text(self) -> str:
        """Return the JSON-RPC text form of the block number."""
        if self == -1:
            return "latest"
        if self == -2:
            return "pending"
        if self == -3:
            return "earliest"
        if self < 0:
            raise ValueError(f"block number is negative: {int(self)}")
        return _hex_int(int(self))

    def __repr__(self) -> str:
        return f"BlockNumber({int(self)})"


BlockNumber.LATEST = BlockNumber(-1)
BlockNumber.PENDING = BlockNumber(-2)
BlockNumber.EARLIEST = BlockNumber(-3)


class TransactionType(enum.IntEnum):
    """Envelope type of a transaction."""

    LEGACY = 0
    ACCESS_LIST = 1
    DYNAMIC_FEE = 2


@dataclass
class AccessEntry:
    """An address together with the storage slots it touches."""

    address: Address = field(default_factory=Address)
    storage: list[Hash] = field(default_factory=list)


class AccessList(list):
    """A list of :class:`AccessEntry` values."""

    def to_dict(self) -> list[dict[str, Any]]:
        """Return the JSON-ready form (a list of objects)."""
        return [
            {
                "address": str(entry.address),
                "storageKeys": [str(slot) for slot in entry.storage],
            }
            for entry in self
        ]


@dataclass
class Log:
    """A log emitted by a contract."""

    removed: bool = False
    log_index: int = 0
    transaction_index: int = 0
    transaction_hash: Hash = field(default_factory=Hash)
    block_hash: Hash = field(default_factory=Hash)
    block_number: int = 0
    address: Address = field(default_factory=Address)
    topics: list[Hash] = field(default_factory=list)
    data: bytes = b""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-RPC object for this log."""
        return {
            "removed": self.removed,
            "logIndex": _hex_int(self.log_index),
            "transactionIndex": _hex_int(self.transaction_index),
            "transactionHash": str(self.transaction_hash),
            "blockHash": str(self.block_hash),
            "blockNumber": _hex_int(self.block_number),
            "address": str(self.address),
            "data": _hex_bytes(self.data),
            "topics": [str(topic) for topic in self.topics],
        }

    def to_json(self) -> str:
        """Serialise the log as compact JSON."""
        return _dumps(self.to_dict())


@dataclass
class Transaction:
    """A transaction of any supported envelope type."""

    type: TransactionType = TransactionType.LEGACY
    hash: Hash = field(default_factory=Hash)
    from_address: Address = field(default_factory=Address)
    input: bytes = b""
    gas_price: int = 0
    gas: int = 0
    value: Optional[int] = None
    nonce: int = 0
    to: Optional[Address] = None
    v: bytes = b""
    r: bytes = b""
    s: bytes = b""
    block_hash: Hash = field(default_factory=Hash)
    block_number: int = 0
    txn_index: int = 0
    chain_id: Optional[int] = None
    access_list: Optional[AccessList] = None
    max_priority_fee_per_gas: Optional[int] = None
    max_fee_per_gas: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-RPC object for this transaction."""
        out: dict[str, Any] = {
            "hash": str(self.hash),
            "from": str(self.from_address),
        }
        if self.input:
            out["input"] = _hex_bytes(self.input)
        if self.value is not None:
            out["value"] = _hex_int(self.value)
        out["gasPrice"] = _hex_int(self.gas_price)
        if self.gas != 0:
            out["gas"] = _hex_int(self.gas)
        if self.max_priority_fee_per_gas is not None:
            out["maxPriorityFeePerGas"] = _hex_int(self.max_priority_fee_per_gas)
        if self.max_fee_per_gas is not None:
            out["maxFeePerGas"] = _hex_int(self.max_fee_per_gas)
        if self.nonce != 0:
            out["nonce"] = _hex_int(self.nonce)
        out["to"] = None if self.to is None else str(self.to)
        out["v"] = _hex_bytes(self.v)
        out["r"] = _hex_bytes(self.r)
        out["s"] = _hex_bytes(self.s)
        if self.block_hash == ZERO_HASH:
            # pending transaction: no block metadata yet
            out["blockHash"] = None
            out["blockNumber"] = None
            out["transactionIndex"] = None
        else:
            out["blockHash"] = str(self.block_hash)
            out["blockNumber"] = _hex_int(self.block_number)
            out["transactionIndex"] = _hex_int(self.txn_index)
        if self.chain_id is not None:
            out["chainId"] = _hex_int(self.chain_id)
        if self.access_list is not None:
            out["accessList"] = AccessList(self.access_list).to_dict()
        return out

    def to_json(self) -> str:
        """Serialise the transaction as compact JSON."""
        return _dumps(self.to_dict())


@dataclass
class Block:
    """A block header with either transaction hashes or full transactions."""

    number: int = 0
    hash: Hash = field(default_factory=Hash)
    parent_hash: Hash = field(default_factory=Hash)
    sha3_uncles: Hash = field(default_factory=Hash)
    transactions_root: Hash = field(default_factory=Hash)
    state_root: Hash = field(default_factory=Hash)
    receipts_root: Hash = field(default_factory=Hash)
    miner: Address = field(default_factory=Address)
    gas_limit: int = 0
    gas_used: int = 0
    timestamp: int = 0
    difficulty: Optional[int] = None
    extra_data: bytes = b""
    mix_hash: Hash = field(default_factory=Hash)
    nonce: bytes = bytes(8)
    transactions_hashes: list[Hash] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    uncles: list[Hash] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-RPC object for this block."""
        out: dict[str, Any] = {
            "number": _hex_int(self.number),
            "hash": str(self.hash),
            "parentHash": str(self.parent_hash),
            "sha3Uncles": str(self.sha3_uncles),
            "transactionsRoot": str(self.transactions_root),
            "stateRoot": str(self.state_root),
            "receiptsRoot": str(self.receipts_root),
            "miner": str(self.miner),
            "gasLimit": _hex_int(self.gas_limit),
            "gasUsed": _hex_int(self.gas_used),
            "timestamp": _hex_int(self.timestamp),
            "difficulty": _hex_int(self.difficulty or 0),
            "extraData": _hex_bytes(self.extra_data),
            "mixHash": _hex_bytes(self.mix_hash),
            "nonce": _hex_bytes(self.nonce),
        }
        if self.uncles:
            out["uncles"] = [str(uncle) for uncle in self.uncles]
        if self.transactions_hashes:
            out["transactions"] = [str(txn) for txn in self.transactions_hashes]
        if self.transactions:
            out["transactions"] = [txn.to_dict() for txn in self.transactions]
        return out

    def to_json(self) -> str:
        """Serialise the block as compact JSON."""
        return _dumps(self.to_dict())


@dataclass
class Receipt:
    """The receipt of an executed transaction."""

    transaction_hash: Hash = field(default_factory=Hash)
    transaction_index: int = 0
    contract_address: Address = field(default_factory=Address)
    block_hash: Hash = field(default_factory=Hash)
    block_number: int = 0
    gas_used: int = 0
    cumulative_gas_used: int = 0
    logs_bloom: bytes = b""
    logs: list[Log] = field(default_factory=list)
    status: int = 0
    from_address: Address = field(default_factory=Address)
    to: Optional[Address] = None


@dataclass
class CallMsg:
    """A message for a read-only contract call."""

    from_address: Address = field(default_factory=Address)
    to: Optional[Address] = None
    data: bytes = b""
    gas_price: int = 0
    gas: Optional[int] = None
    value: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-RPC object for this call."""
        out: dict[str, Any] = {"from": str(self.from_address)}
        if self.to is not None:
            out["to"] = str(self.to)
        if self.data:
            out["data"] = _hex_bytes(self.data)
        if self.gas_price != 0:
            out["gasPrice"] = _hex_int(self.gas_price)
        if self.value is not None:
            out["value"] = _hex_int(self.value)
        if self.gas is not None:
            out["gas"] = _hex_int(self.gas)
        return out

    def to_json(self) -> str:
        """Serialise the call as compact JSON."""
        return _dumps(self.to_dict())


@dataclass
class LogFilter:
    """A query for logs by address, topics and block range or block hash."""

    address: list[Address] = field(default_factory=list)
    topics: Optional[list[Optional[list[Optional[Hash]]]]] = None
    block_hash: Optional[Hash] = None
    from_block: Optional[BlockNumber] = None
    to_block: Optional[BlockNumber] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-RPC object for this filter."""
        out: dict[str, Any] = {}
        if len(self.address) == 1:
            out["address"] = str(self.address[0])
        elif self.address:
            out["address"] = [str(addr) for addr in self.address]
        out["topics"] = [
            None
            if position is None
            else [None if topic is None else str(topic) for topic in position]
            for position in self.topics or []
        ]
        if self.block_hash is not None:
            out["blockHash"] = str(self.block_hash)
        if self.from_block is not None:
            out["fromBlock"] = BlockNumber(self.from_block).to_text()
        if self.to_block is not None:
            out["toBlock"] = BlockNumber(self.to_block).to_text()
        return out

    def to_json(self) -> str:
        """Serialise the filter as compact JSON."""
        return _dumps(self.to_dict())


@dataclass
class OverrideAccount:
    """Account fields to replace during a call."""

    nonce: Optional[int] = None
    code: Optional[bytes] = None
    balance: Optional[int] = None
    state: Optional[dict[Hash, Hash]] = None
    state_diff: Optional[dict[Hash, Hash]] = None


class StateOverride(dict):
    """A mapping from :class:`Address` to :class:`OverrideAccount`."""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-RPC object for these overrides."""
        out: dict[str, Any] = {}
        for addr, account in self.items():
            obj: dict[str, Any] = {}
            if account.nonce is not None:
                obj["nonce"] = _hex_int(account.nonce)
            if account.balance is not None:
                obj["balance"] = _hex_int(account.balance)
            if account.code is not None:
                obj["code"] = _hex_bytes(account.code)
            if account.state is not None:
                obj["state"] = {str(k): str(v) for k, v in account.state.items()}
            if account.state_diff is not None:
                obj["stateDiff"] = {
                    str(k): str(v) for k, v in account.state_diff.items()
                }
            out[str(addr)] = obj
        return out

    def to_json(self) -> str:
        """Serialise the overrides as compact JSON."""
        return _dumps(self.to_dict())