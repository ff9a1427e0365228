"""Comparison of log and block lists in tests."""

from __future__ import annotations

import copy
from typing import Sequence

from chainkit.types import Block, Log


def compare_logs(one: Sequence[Log], two: Sequence[Log]) -> bool:
    """Return whether two log lists are equal."""
    if len(one) != len(two):
        return False
    if not one:
        return True
    return list(one) == list(two)


def _normalised(block: Block) -> Block:
    out = copy.copy(block)
    if out.transactions is None:
        out.transactions = []
    out.difficulty = 0
    return out


def compare_blocks(one: Sequence[Block], two: Sequence[Block]) -> bool:
    """Return whether two block lists are equal, ignoring difficulty."""
    if len(one) != len(two):
        return False
    if not one:
        return True
    return [_normalised(b) for b in one] == [_normalised(b) for b in two]