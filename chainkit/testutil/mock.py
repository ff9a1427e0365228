"""An in-memory chain of blocks and logs that answers provider queries."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from chainkit.types import Block, Hash, Log, LogFilter

_LATEST = -1
_DEFAULT_CHAIN_ID = 1337


def encode_hash(text: str) -> Hash:
    """Left-pad ``text`` with zeros to 64 hex digits and parse it as a hash."""
    return Hash.from_hex("0x" + text.rjust(64, "0"))


def _decode_data(text: str) -> bytes:
    if text.startswith("0x"):
        text = text[2:]
    if len(text) % 2:
        text += "0"
    return bytes.fromhex(text)


class MockBlock:
    """A block description used to build test chains."""

    def __init__(self, hash_text: str, num: int, parent: str) -> None:
        self._hash = hash_text
        self._extra = ""
        self._parent = parent
        self.num = num
        self._logs: list[str] = []

    def extra(self, data: str) -> "MockBlock":
        """Set extra text that changes the block hash, e.g. to mark a fork."""
        self._extra = data
        return self

    def log(self, data: str) -> "MockBlock":
        """Add a log carrying ``data`` (hex) to the block."""
        self._logs.append(data)
        return self

    def with_num(self, value: int) -> "MockBlock":
        """Set the block number."""
        self.num = value
        return self

    def parent(self, number: int) -> "MockBlock":
        """Make the block a child of block ``number``."""
        self._parent = str(number)
        self.num = number + 1
        return self

    def hash(self) -> Hash:
        """Return the hash of the block."""
        return encode_hash(self._extra + self._hash)

    def block(self) -> Block:
        """Return the block as a chain block."""
        if self.num != 0:
            return Block(
                hash=self.hash(), number=self.num, parent_hash=encode_hash(self._parent)
            )
        return Block(hash=self.hash(), number=self.num)

    def get_logs(self) -> list[Log]:
        """Return the logs of the block."""
        block_hash = self.hash()
        return [
            Log(data=_decode_data(data), block_number=self.num, block_hash=block_hash)
            for data in self._logs
        ]


def mock(number: int) -> MockBlock:
    """Return a block description for block ``number``."""
    return MockBlock(str(number), number, str(number - 1))


class MockList(list):
    """A list of block descriptions."""

    def create(
        self, start: int, stop: int, callback: Callable[[MockBlock], object]
    ) -> None:
        """Append blocks ``start`` to ``stop - 1``, passing each to ``callback``."""
        for number in range(start, stop):
            block = mock(number)
            callback(block)
            self.append(block)

    def get_logs(self) -> list[Log]:
        """Return the logs of every block in order."""
        return [log for block in self for log in block.get_logs()]

    def to_blocks(self) -> list[Block]:
        """Return the chain blocks of every description."""
        return [block.block() for block in self]


class MockClient:
    """A provider backed by blocks and logs held in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._num = 0
        self._block_num: dict[int, Hash] = {}
        self._blocks: dict[Hash, Block] = {}
        self._logs: dict[Hash, list[Log]] = {}
        self._chain_id: Optional[int] = None

    def set_chain_id(self, chain_id: int) -> None:
        """Set the chain id reported by :meth:`chain_id`."""
        self._chain_id = chain_id

    def chain_id(self) -> int:
        """Return the chain id, 1337 unless set otherwise."""
        if self._chain_id is None:
            self._chain_id = _DEFAULT_CHAIN_ID
        return self._chain_id

    def get_last_blocks(self, n: int) -> list[Optional[Block]]:
        """Return up to ``n`` blocks ending at the head, oldest first."""
        if self._num == 0:
            return []
        count = n if self._num >= n else self._num + 1
        return [
            self._blocks.get(self._block_num.get(self._num - back))
            for back in range(count - 1, -1, -1)
        ]

    def get_all_logs(self) -> list[Log]:
        """Return the logs of every block from genesis to the head."""
        if self._num == 0:
            return []
        out: list[Log] = []
        for number in range(self._num + 1):
            block = self._blocks[self._block_num[number]]
            out.extend(self._logs.get(block.hash, []))
        return out

    def add_scenario(self, blocks: MockList) -> None:
        """Add the blocks and their logs, replacing blocks at the same height."""
        with self._lock:
            for desc in blocks:
                if desc.num != 0:
                    try:
                        parent_hash = self._block_by_number(desc.num - 1).hash
                    except LookupError:
                        # partial histories have no parent block stored
                        parent_hash = encode_hash(str(desc.num - 1))
                    block = Block(
                        hash=desc.hash(), number=desc.num, parent_hash=parent_hash
                    )
                else:
                    block = Block(hash=desc.hash(), number=desc.num)
                self._add_block(block)
                self._logs.pop(block.hash, None)
                self.add_logs(desc.get_logs())

    def add_logs(self, logs: list[Log]) -> None:
        """Attach logs to the blocks named by their block hashes."""
        for log in logs:
            self._logs.setdefault(log.block_hash, []).append(log)

    def _add_block(self, block: Block) -> None:
        if block.number > self._num:
            self._num = block.number
        self._blocks[block.hash] = block
        self._block_num[block.number] = block.hash

    def _block_by_number(self, number: int) -> Block:
        block_hash = self._block_num.get(number)
        if block_hash is None:
            raise LookupError(f"number {number} not found")
        return self._blocks[block_hash]

    def block_number(self) -> int:
        """Return the number of the head block."""
        with self._lock:
            return self._num

    def get_block_by_hash(self, block_hash: Hash, full: bool = False) -> Block:
        """Return the block with ``block_hash``."""
        with self._lock:
            block = self._blocks.get(block_hash)
            if block is None:
                raise LookupError(f"hash {block_hash} not found")
            return block

    def get_block_by_number(self, number, full: bool = False) -> Block:
        """Return the block at ``number``; -1 means the latest block."""
        value = int(number)
        with self._lock:
            if value < 0:
                if value != _LATEST:
                    raise ValueError("getBlockByNumber query not supported")
                if self._num == 0:
                    return Block(number=0)
                return self._block_by_number(self._num)
            return self._block_by_number(value)

    def get_logs(self, log_filter: LogFilter) -> list[Log]:
        """Return the logs of one block hash or of a range of block numbers."""
        with self._lock:
            if log_filter.block_hash is not None:
                return list(self._logs.get(log_filter.block_hash, []))
            start, stop = int(log_filter.from_block), int(log_filter.to_block)
            if start > stop:
                raise ValueError("from higher than to")
            if stop > len(self._blocks):
                raise ValueError("out of bounds")
            out: list[Log] = []
            for number in range(start, stop + 1):
                block = self._block_by_number(number)
                out.extend(self._logs.get(block.hash, []))
            return out