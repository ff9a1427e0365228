import pytest

from chainkit.types import keccak256
from chainkit.wallet.key import (
    ecrecover,
    ecrecover_message,
    generate_key,
    key_from_private_bytes,
    recover_public_key,
)


def test_key_sign():
    key = generate_key()
    msg = b"hello world"
    signature = key.sign_message(msg)
    assert ecrecover_message(msg, signature) == key.address


def test_wallet_priv_round_trip():
    key = generate_key()
    raw = key.private_key_bytes()
    assert len(raw) == 32
    assert key_from_private_bytes(raw).address == key.address


def test_signature_shape_and_recovery():
    key = key_from_private_bytes(b"\x07" * 32)
    digest = keccak256(b"msg")
    sig = key.sign(digest)
    assert len(sig) == 65 and sig[64] in (0, 1)
    assert recover_public_key(sig, digest) == key.public_key
    assert ecrecover(digest, sig) == key.address


def test_other_message_recovers_other_address():
    key = generate_key()
    sig = key.sign_message(b"one")
    assert ecrecover_message(b"two", sig) != key.address


def test_short_key_bytes_are_padded():
    assert key_from_private_bytes(b"\x05").private_key_bytes() == b"\x00" * 31 + b"\x05"


def test_errors():
    with pytest.raises(ValueError):
        key_from_private_bytes(bytes(32))
    with pytest.raises(ValueError):
        recover_public_key(b"\x01" * 64, bytes(32))