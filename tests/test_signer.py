from hypothesis import given, settings, strategies as st

from chainkit.txcodec import decode_transaction, encode_transaction
from chainkit.types import Address, Transaction, TransactionType
from chainkit.wallet.key import generate_key
from chainkit.wallet.signer import EIP155Signer, sign_hash, trim_leading_zeros


@given(
    typed=st.booleans(),
    to=st.none() | st.binary(max_size=24).map(Address.from_bytes),
    chain_id=st.integers(min_value=0, max_value=2**64 - 1),
)
@settings(max_examples=20, deadline=None)
def test_sign_and_recover(typed, to, chain_id):
    txn = Transaction(to=to)
    if typed:
        txn.type = TransactionType.ACCESS_LIST
    signer = EIP155Signer(chain_id)
    key = generate_key()
    signed = signer.sign(txn, key)
    assert signer.recover_sender(signed) == key.address


def test_eip155():
    signer = EIP155Signer(1337)
    key = generate_key()
    txn = Transaction(to=Address(b"\x01" + bytes(19)), value=10, gas_price=0)
    txn = signer.sign(txn, key)
    assert int.from_bytes(txn.v, "big") in (35 + 2674, 36 + 2674)
    assert signer.recover_sender(txn) == key.address
    decoded = decode_transaction(encode_transaction(txn))
    assert signer.recover_sender(decoded) == key.address


def test_chain_id_changes_hash():
    txn = Transaction(nonce=1)
    assert sign_hash(txn, 1) != sign_hash(txn, 2)
    assert sign_hash(txn, 1) == sign_hash(txn, 1)


def test_trim_bytes_zeros():
    assert trim_leading_zeros(bytes([0x1, 0x2])) == bytes([0x1, 0x2])
    assert trim_leading_zeros(bytes([0x0, 0x1])) == bytes([0x1])
    assert trim_leading_zeros(bytes([0x0, 0x0])) == b""