"""Hierarchical deterministic key derivation (BIP-32 private derivation)."""

from __future__ import annotations

import hashlib
import hmac
import re
from typing import Sequence, Union

from chainkit.wallet import secp256k1
from chainkit.wallet.key import Key

HARDENED = 0x80000000
DEFAULT_DERIVATION_PATH = (HARDENED + 44, HARDENED + 60, HARDENED + 0, 0, 0)

Path = Union[str, Sequence[int]]

_OCTAL = re.compile(r"[+-]?0[0-7_]+")


def _parse_number(text: str) -> int:
    try:
        if _OCTAL.fullmatch(text):
            return int(text, 8)
        return int(text, 0)
    except ValueError:
        raise ValueError("invalid path") from None


def parse_derivation_path(path: str) -> list[int]:
    """Parse a path such as ``m/44'/60'/0'/0/0`` into child indexes."""
    parts = [part.strip() for part in path.split("/")]
    if parts[0] != "m":
        raise ValueError("first has to be m")
    result = []
    for part in parts[1:]:
        offset = 0
        if part.endswith("'"):
            part = part[:-1]
            offset = HARDENED
        value = offset + _parse_number(part)
        if not 0 <= value < 1 << 64:
            raise ValueError(f"path component out of range: {value}")
        result.append(value & 0xFFFFFFFF)
    return result


def master_key_from_seed(seed: bytes) -> tuple[bytes, bytes]:
    """Return the master private key and chain code for ``seed``."""
    if not 16 <= len(seed) <= 64:
        raise ValueError(f"seed must be 16 to 64 bytes, got {len(seed)}")
    digest = hmac.new(b"Bitcoin seed", bytes(seed), hashlib.sha512).digest()
    key, chain_code = digest[:32], digest[32:]
    if not 0 < int.from_bytes(key, "big") < secp256k1.N:
        raise ValueError("seed produces an unusable master key")
    return key, chain_code


def _compressed(private_key: bytes) -> bytes:
    pub = secp256k1.public_key(private_key)
    return bytes([2 + (pub[63] & 1)]) + pub[:32]


def _child(key: bytes, chain_code: bytes, index: int) -> tuple[bytes, bytes]:
    if index >= HARDENED:
        data = b"\x00" + key
    else:
        data = _compressed(key)
    digest = hmac.new(chain_code, data + index.to_bytes(4, "big"), hashlib.sha512).digest()
    tweak = int.from_bytes(digest[:32], "big")
    if tweak >= secp256k1.N:
        raise ValueError(f"invalid child at index {index}")
    child = (tweak + int.from_bytes(key, "big")) % secp256k1.N
    if child == 0:
        raise ValueError(f"invalid child at index {index}")
    return child.to_bytes(32, "big"), digest[32:]


def derive_private_key(seed: bytes, path: Path = DEFAULT_DERIVATION_PATH) -> bytes:
    """Derive the 32-byte private key at ``path`` from ``seed``."""
    indexes = parse_derivation_path(path) if isinstance(path, str) else list(path)
    key, chain_code = master_key_from_seed(seed)
    for index in indexes:
        key, chain_code = _child(key, chain_code, index)
    return key


def key_from_seed(seed: bytes, path: Path = DEFAULT_DERIVATION_PATH) -> Key:
    """Derive a :class:`Key` at ``path`` from ``seed``."""
    return Key(derive_private_key(seed, path))