"""BLAKE3 hashing helpers for transfers and account chain blocks."""

from __future__ import annotations

import struct
from dataclasses import dataclass

__all__ = ["blake3_hash", "transfer_hash", "chain_block_hash"]

_MASK = 0xFFFFFFFF
_IV = (
    0x6A09E667,
    0xBB67AE85,
    0x3C6EF372,
    0xA54FF53A,
    0x510E527F,
    0x9B05688C,
    0x1F83D9AB,
    0x5BE0CD19,
)
_MSG_PERMUTATION = (2, 6, 3, 10, 7, 0, 4, 13, 1, 11, 12, 5, 9, 14, 15, 8)
_BLOCK_LEN = 64
_CHUNK_LEN = 1024
_CHUNK_START = 1 << 0
_CHUNK_END = 1 << 1
_PARENT = 1 << 2
_ROOT = 1 << 3


def _rotr(value: int, shift: int) -> int:
    return ((value >> shift) | (value << (32 - shift))) & _MASK


def _g(state: list[int], a: int, b: int, c: int, d: int, mx: int, my: int) -> None:
    state[a] = (state[a] + state[b] + mx) & _MASK
    state[d] = _rotr(state[d] ^ state[a], 16)
    state[c] = (state[c] + state[d]) & _MASK
    state[b] = _rotr(state[b] ^ state[c], 12)
    state[a] = (state[a] + state[b] + my) & _MASK
    state[d] = _rotr(state[d] ^ state[a], 8)
    state[c] = (state[c] + state[d]) & _MASK
    state[b] = _rotr(state[b] ^ state[c], 7)


def _round(state: list[int], m: list[int]) -> None:
    # Columns
    _g(state, 0, 4, 8, 12, m[0], m[1])
    _g(state, 1, 5, 9, 13, m[2], m[3])
    _g(state, 2, 6, 10, 14, m[4], m[5])
    _g(state, 3, 7, 11, 15, m[6], m[7])
    # Diagonals
    _g(state, 0, 5, 10, 15, m[8], m[9])
    _g(state, 1, 6, 11, 12, m[10], m[11])
    _g(state, 2, 7, 8, 13, m[12], m[13])
    _g(state, 3, 4, 9, 14, m[14], m[15])


def _compress(
    cv: tuple[int, ...],
    block_words: tuple[int, ...],
    counter: int,
    block_len: int,
    flags: int,
) -> list[int]:
    state = [
        *cv,
        *_IV[:4],
        counter & _MASK,
        (counter >> 32) & _MASK,
        block_len,
        flags,
    ]
    words = list(block_words)
    for round_no in range(7):
        _round(state, words)
        if round_no < 6:
            words = [words[i] for i in _MSG_PERMUTATION]
    low, high = state[:8], state[8:]
    return [x ^ y for x, y in zip(low, high)] + [x ^ y for x, y in zip(high, cv)]


def _words(block: bytes) -> tuple[int, ...]:
    return struct.unpack("<16I", block.ljust(_BLOCK_LEN, b"\x00"))


@dataclass(frozen=True)
class _Output:
    input_cv: tuple[int, ...]
    block_words: tuple[int, ...]
    counter: int
    block_len: int
    flags: int

    def chaining_value(self) -> tuple[int, ...]:
        return tuple(
            _compress(self.input_cv, self.block_words, self.counter, self.block_len, self.flags)[:8]
        )

    def root_bytes(self) -> bytes:
        words = _compress(self.input_cv, self.block_words, 0, self.block_len, self.flags | _ROOT)
        return struct.pack("<8I", *words[:8])


def _split(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)] or [b""]


def _chunk_output(chunk: bytes, chunk_counter: int) -> _Output:
    blocks = _split(chunk, _BLOCK_LEN)
    cv = _IV
    start = _CHUNK_START
    for block in blocks[:-1]:
        cv = tuple(_compress(cv, _words(block), chunk_counter, _BLOCK_LEN, start)[:8])
        start = 0
    last = blocks[-1]
    return _Output(cv, _words(last), chunk_counter, len(last), start | _CHUNK_END)


def _parent_output(left: tuple[int, ...], right: tuple[int, ...]) -> _Output:
    return _Output(_IV, left + right, 0, _BLOCK_LEN, _PARENT)


def blake3_hash(data: bytes) -> bytes:
    """Return the 32-byte BLAKE3 digest of ``data``."""
    chunks = _split(bytes(data), _CHUNK_LEN)
    stack: list[tuple[int, ...]] = []
    for counter, chunk in enumerate(chunks[:-1]):
        cv = _chunk_output(chunk, counter).chaining_value()
        total = counter + 1
        while total & 1 == 0:
            cv = _parent_output(stack.pop(), cv).chaining_value()
            total >>= 1
        stack.append(cv)

    output = _chunk_output(chunks[-1], len(chunks) - 1)
    for left in reversed(stack):
        output = _parent_output(left, output.chaining_value())
    return output.root_bytes()


def transfer_hash(storage_bytes: bytes) -> bytes:
    """Hash a transfer's storage bytes."""
    return blake3_hash(storage_bytes)


def chain_block_hash(previous: bytes, transfer_hash: bytes, new_balance: int) -> bytes:
    """Hash an account chain block: previous ++ transfer hash ++ balance (u32 LE)."""
    return blake3_hash(bytes(previous) + bytes(transfer_hash) + new_balance.to_bytes(4, "little"))