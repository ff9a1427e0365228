import pytest

from chainkit.wallet.hd import (
    DEFAULT_DERIVATION_PATH,
    HARDENED,
    derive_private_key,
    key_from_seed,
    master_key_from_seed,
    parse_derivation_path,
)
from chainkit.wallet.key import key_from_private_bytes

SEED = bytes(range(16))


def test_parse_default_path():
    assert parse_derivation_path("m/44'/60'/0'/0/0") == list(DEFAULT_DERIVATION_PATH)


def test_parse_variants():
    assert parse_derivation_path(" m / 0x10 / 1'") == [16, HARDENED + 1]
    assert parse_derivation_path("m") == []
    assert parse_derivation_path("m/4294967297") == [1]


@pytest.mark.parametrize("path", ["", "x/1", "m/abc", "m/-1", "m/"])
def test_parse_errors(path):
    with pytest.raises(ValueError):
        parse_derivation_path(path)


def test_empty_path_is_master_key():
    assert derive_private_key(SEED, []) == master_key_from_seed(SEED)[0]


def test_derivation_is_deterministic_and_path_dependent():
    first = derive_private_key(SEED, "m/0'/1")
    assert derive_private_key(SEED, [HARDENED, 1]) == first
    assert derive_private_key(SEED, "m/0'/2") != first
    assert derive_private_key(bytes(range(1, 17)), "m/0'/1") != first


def test_key_from_seed_default_path():
    key = key_from_seed(SEED)
    assert key.address == key_from_private_bytes(derive_private_key(SEED)).address


def test_seed_length_errors():
    with pytest.raises(ValueError):
        master_key_from_seed(bytes(8))
    with pytest.raises(ValueError):
        master_key_from_seed(bytes(65))