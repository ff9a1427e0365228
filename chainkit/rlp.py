"""Recursive Length Prefix encoding of byte strings, integers and lists."""

from __future__ import annotations

from typing import Union

Item = Union[bytes, list]


class RLPError(ValueError):
    """Raised when a value cannot be RLP encoded or decoded."""


def _prefix(length: int, offset: int) -> bytes:
    if length < 56:
        return bytes([offset + length])
    size = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([offset + 55 + len(size)]) + size


def encode(item) -> bytes:
    """Encode bytes, non-negative ints and (nested) lists or tuples of them."""
    if isinstance(item, (bytes, bytearray, memoryview)):
        data = bytes(item)
        if len(data) == 1 and data[0] < 0x80:
            return data
        return _prefix(len(data), 0x80) + data
    if isinstance(item, bool):
        raise RLPError("booleans cannot be RLP encoded")
    if isinstance(item, int):
        if item < 0:
            raise RLPError(f"negative integer cannot be RLP encoded: {item}")
        return encode(item.to_bytes((item.bit_length() + 7) // 8, "big"))
    if isinstance(item, (list, tuple)):
        payload = b"".join(encode(elem) for elem in item)
        return _prefix(len(payload), 0xC0) + payload
    raise RLPError(f"cannot RLP encode value of type {type(item).__name__}")


def _long_length(data: bytes, start: int, size: int) -> int:
    raw = data[start:start + size]
    if len(raw) != size:
        raise RLPError("input too short for length prefix")
    if raw[0] == 0:
        raise RLPError("length prefix has leading zeros")
    length = int.from_bytes(raw, "big")
    if length < 56:
        raise RLPError("long form used for a short length")
    return length


def _decode_at(data: bytes, pos: int) -> tuple[Item, int]:
    if pos >= len(data):
        raise RLPError("unexpected end of input")
    head = data[pos]
    if head < 0x80:
        return data[pos:pos + 1], pos + 1
    if head < 0xB8:
        length, start = head - 0x80, pos + 1
    elif head < 0xC0:
        size = head - 0xB7
        length, start = _long_length(data, pos + 1, size), pos + 1 + size
    elif head < 0xF8:
        length, start = head - 0xC0, pos + 1
    else:
        size = head - 0xF7
        length, start = _long_length(data, pos + 1, size), pos + 1 + size
    end = start + length
    if end > len(data):
        raise RLPError("input too short for declared length")
    if head < 0xC0:
        value = data[start:end]
        if length == 1 and value[0] < 0x80:
            raise RLPError("single byte below 0x80 must not be prefixed")
        return value, end
    items = []
    cursor = start
    while cursor < end:
        elem, cursor = _decode_at(data, cursor)
        items.append(elem)
    if cursor != end:
        raise RLPError("list payload overruns its length")
    return items, end


def decode(data: bytes) -> Item:
    """Decode one RLP item; byte strings come back as bytes, lists as lists."""
    data = bytes(data)
    item, end = _decode_at(data, 0)
    if end != len(data):
        raise RLPError(f"{len(data) - end} trailing bytes after RLP item")
    return item