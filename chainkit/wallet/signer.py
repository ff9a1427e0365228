"""EIP-155 transaction signing and sender recovery."""

from __future__ import annotations

from typing import Protocol

from chainkit import rlp
from chainkit.txcodec import _access_list_item
from chainkit.types import Address, Transaction, TransactionType, keccak256
from chainkit.wallet.key import ecrecover


class _Signs(Protocol):
    def sign(self, digest: bytes) -> bytes: ...


def trim_leading_zeros(data: bytes) -> bytes:
    """Strip leading zero bytes."""
    return bytes(data).lstrip(b"\x00")


def sign_hash(txn: Transaction, chain_id: int) -> bytes:
    """Return the digest that a transaction's signature covers."""
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
    if chain_id != 0 and not typed:
        items.extend([chain_id, 0, 0])
    payload = rlp.encode(items)
    if typed:
        payload = bytes([int(txn.type)]) + payload
    return keccak256(payload)


def _pad32(value: bytes) -> bytes:
    if len(value) > 32:
        raise ValueError(f"signature value longer than 32 bytes: {len(value)}")
    return bytes(value).rjust(32, b"\x00")


class EIP155Signer:
    """Signs transactions for a chain and recovers their senders."""

    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id

    def sign(self, txn: Transaction, key: _Signs) -> Transaction:
        """Sign ``txn`` in place, setting V, R and S, and return it."""
        sig = key.sign(sign_hash(txn, self.chain_id))
        v = sig[64]
        if txn.type == TransactionType.LEGACY:
            v += 35 + self.chain_id * 2
        txn.r = trim_leading_zeros(sig[:32])
        txn.s = trim_leading_zeros(sig[32:64])
        txn.v = v.to_bytes((v.bit_length() + 7) // 8, "big")
        return txn

    def recover_sender(self, txn: Transaction) -> Address:
        """Return the address that signed ``txn``."""
        v = int.from_bytes(txn.v, "big")
        if v > 1:
            v -= 27
            if v > 1:
                v -= self.chain_id * 2 + 8
        signature = _pad32(txn.r) + _pad32(txn.s) + bytes([v % 256])
        return ecrecover(sign_hash(txn, self.chain_id), signature)