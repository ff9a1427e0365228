import pytest

from chainkit.wallet import secp256k1
from chainkit.wallet.secp256k1 import N, public_key, recover_public_key, sign_recoverable

DIGEST = bytes(range(32))
PRIV = (12345).to_bytes(32, "big")


def test_public_key_of_one_is_generator():
    gx, gy = secp256k1.G
    assert public_key(1) == gx.to_bytes(32, "big") + gy.to_bytes(32, "big")


def test_int_and_bytes_keys_agree():
    assert public_key(12345) == public_key(PRIV)


def test_sign_and_recover():
    sig, recid = sign_recoverable(DIGEST, PRIV)
    assert len(sig) == 64
    assert recover_public_key(DIGEST, sig, recid) == public_key(PRIV)


def test_signature_is_deterministic_and_low_s():
    first = sign_recoverable(DIGEST, PRIV)
    assert sign_recoverable(DIGEST, PRIV) == first
    assert int.from_bytes(first[0][32:], "big") <= N // 2


def test_wrong_recovery_id_gives_other_key():
    sig, recid = sign_recoverable(DIGEST, PRIV)
    assert recover_public_key(DIGEST, sig, recid ^ 1) != public_key(PRIV)


@pytest.mark.parametrize("key", [0, N, bytes(32)])
def test_invalid_private_key(key):
    with pytest.raises(ValueError):
        public_key(key)


def test_invalid_signature_values():
    with pytest.raises(ValueError):
        recover_public_key(DIGEST, bytes(64), 0)
    with pytest.raises(ValueError):
        recover_public_key(DIGEST, bytes(10), 0)