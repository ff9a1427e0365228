"""Private keys that sign digests, and address recovery from signatures."""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field

from chainkit.types import Address, keccak256
from chainkit.wallet import secp256k1


def _address_of(public_key: bytes) -> Address:
    return Address(keccak256(public_key)[12:])


@dataclass(frozen=True)
class Key:
    """A secp256k1 private key with its public key and address."""

    private_key: bytes = field(repr=False)
    public_key: bytes = field(init=False, repr=False)
    address: Address = field(init=False)

    def __post_init__(self) -> None:
        pub = secp256k1.public_key(bytes(self.private_key))
        object.__setattr__(self, "private_key", bytes(self.private_key))
        object.__setattr__(self, "public_key", pub)
        object.__setattr__(self, "address", _address_of(pub))

    def private_key_bytes(self) -> bytes:
        """Return the 32-byte private key."""
        return self.private_key

    def sign(self, digest: bytes) -> bytes:
        """Sign a digest; return R || S || V with V being 0 or 1."""
        sig, recovery_id = secp256k1.sign_recoverable(digest, self.private_key)
        return sig + bytes([1 if recovery_id == 1 else 0])

    def sign_message(self, message: bytes) -> bytes:
        """Sign the Keccak-256 digest of ``message``."""
        return self.sign(keccak256(message))


def key_from_private_bytes(data: bytes) -> Key:
    """Build a key from big-endian private key bytes."""
    value = int.from_bytes(bytes(data), "big")
    if not 0 < value < secp256k1.N:
        raise ValueError("private key is out of range")
    return Key(value.to_bytes(32, "big"))


def generate_key() -> Key:
    """Generate a new random key."""
    return Key((secrets.randbelow(secp256k1.N - 1) + 1).to_bytes(32, "big"))


def recover_public_key(signature: bytes, digest: bytes) -> bytes:
    """Recover the 64-byte public key from a 65-byte R || S || V signature."""
    if len(signature) != 65:
        raise ValueError(f"signature must be 65 bytes, got {len(signature)}")
    recovery_id = 1 if signature[-1] == 1 else 0
    return secp256k1.recover_public_key(digest, bytes(signature[:64]), recovery_id)


def ecrecover(digest: bytes, signature: bytes) -> Address:
    """Return the address that signed ``digest``."""
    return _address_of(recover_public_key(signature, digest))


def ecrecover_message(message: bytes, signature: bytes) -> Address:
    """Return the address that signed the Keccak-256 digest of ``message``."""
    return ecrecover(keccak256(message), signature)