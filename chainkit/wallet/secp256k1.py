"""Arithmetic on the secp256k1 curve: keys, recoverable signatures, recovery."""

from __future__ import annotations

import hashlib
import hmac
from typing import Iterator, Optional, Union

P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
G = (
    0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
    0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
)

Point = Optional[tuple[int, int]]
PrivateKey = Union[int, bytes]


def _add(a: Point, b: Point) -> Point:
    if a is None:
        return b
    if b is None:
        return a
    if a[0] == b[0]:
        if (a[1] + b[1]) % P == 0:
            return None
        slope = 3 * a[0] * a[0] * pow(2 * a[1], -1, P) % P
    else:
        slope = (b[1] - a[1]) * pow(b[0] - a[0], -1, P) % P
    x = (slope * slope - a[0] - b[0]) % P
    return x, (slope * (a[0] - x) - a[1]) % P


def _mul(k: int, point: Point) -> Point:
    result: Point = None
    while k:
        if k & 1:
            result = _add(result, point)
        point = _add(point, point)
        k >>= 1
    return result


def _scalar(private_key: PrivateKey) -> int:
    k = int.from_bytes(private_key, "big") if isinstance(private_key, (bytes, bytearray)) else private_key
    if not 0 < k < N:
        raise ValueError("private key is out of range")
    return k


def _encode_point(point: Point) -> bytes:
    if point is None:
        raise ValueError("point at infinity")
    return point[0].to_bytes(32, "big") + point[1].to_bytes(32, "big")


def public_key(private_key: PrivateKey) -> bytes:
    """Return the 64-byte uncompressed public key (X || Y)."""
    return _encode_point(_mul(_scalar(private_key), G))


def _bits2int(digest: bytes) -> int:
    value = int.from_bytes(digest, "big")
    excess = len(digest) * 8 - 256
    return value >> excess if excess > 0 else value


def _nonces(digest: bytes, d: int) -> Iterator[int]:
    """Deterministic nonces per RFC 6979 with HMAC-SHA256."""
    x = d.to_bytes(32, "big")
    h1 = (_bits2int(digest) % N).to_bytes(32, "big")
    v, k = b"\x01" * 32, b"\x00" * 32

    def mac(key: bytes, data: bytes) -> bytes:
        return hmac.new(key, data, hashlib.sha256).digest()

    k = mac(k, v + b"\x00" + x + h1)
    v = mac(k, v)
    k = mac(k, v + b"\x01" + x + h1)
    v = mac(k, v)
    while True:
        v = mac(k, v)
        candidate = int.from_bytes(v, "big")
        if 0 < candidate < N:
            yield candidate
        k = mac(k, v + b"\x00")
        v = mac(k, v)


def sign_recoverable(digest: bytes, private_key: PrivateKey) -> tuple[bytes, int]:
    """Sign ``digest``; return the 64-byte R || S (low S) and the recovery id."""
    d = _scalar(private_key)
    e = _bits2int(digest)
    for nonce in _nonces(digest, d):
        point = _mul(nonce, G)
        r = point[0] % N
        if r == 0:
            continue
        s = pow(nonce, -1, N) * (e + r * d) % N
        if s == 0:
            continue
        recovery_id = (point[1] & 1) | (2 if point[0] >= N else 0)
        if s > N // 2:
            s = N - s
            recovery_id ^= 1
        return r.to_bytes(32, "big") + s.to_bytes(32, "big"), recovery_id
    raise AssertionError("nonce generator is exhausted")


def recover_public_key(digest: bytes, signature: bytes, recovery_id: int) -> bytes:
    """Recover the 64-byte public key that made a 64-byte R || S signature."""
    if len(signature) != 64:
        raise ValueError(f"signature must be 64 bytes, got {len(signature)}")
    if not 0 <= recovery_id <= 3:
        raise ValueError(f"invalid recovery id {recovery_id}")
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:], "big")
    if not (0 < r < N and 0 < s < N):
        raise ValueError("signature values out of range")
    x = r + (N if recovery_id & 2 else 0)
    if x >= P:
        raise ValueError("invalid signature: x is not on the field")
    alpha = (pow(x, 3, P) + 7) % P
    beta = pow(alpha, (P + 1) // 4, P)
    if beta * beta % P != alpha:
        raise ValueError("invalid signature: no curve point for r")
    y = beta if (beta & 1) == (recovery_id & 1) else P - beta
    e = _bits2int(digest)
    r_inv = pow(r, -1, N)
    point = _add(_mul(s * r_inv % N, (x, y)), _mul(-e * r_inv % N, G))
    if point is None:
        raise ValueError("invalid signature: recovered the point at infinity")
    return _encode_point(point)