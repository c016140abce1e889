"""Core value types: transfers, events and block references."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

__all__ = ["BlockRef", "Event", "Transfer", "HASH_LEN", "PUBKEY_LEN", "SIGNATURE_LEN"]

HASH_LEN = 32
PUBKEY_LEN = 32
SIGNATURE_LEN = 64

_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFFFFFF


def _check_len(name: str, value: bytes, expected: int) -> None:
    if len(value) != expected:
        raise ValueError(f"{name} must be {expected} bytes")


def _check_range(name: str, value: int, upper: int) -> None:
    if not 0 <= value <= upper:
        raise ValueError(f"{name} must be between 0 and {upper}")


@dataclass(frozen=True)
class Transfer:
    """A signed transfer of ``amount`` units from ``sender`` to ``receiver``."""

    sender: bytes
    receiver: bytes
    amount: int
    nonce: int
    signature: bytes = bytes(SIGNATURE_LEN)

    def __post_init__(self) -> None:
        for name in ("sender", "receiver", "signature"):
            object.__setattr__(self, name, bytes(getattr(self, name)))
        _check_len("sender", self.sender, PUBKEY_LEN)
        _check_len("receiver", self.receiver, PUBKEY_LEN)
        _check_len("signature", self.signature, SIGNATURE_LEN)
        _check_range("amount", self.amount, _U32_MAX)
        _check_range("nonce", self.nonce, _U32_MAX)

    def signing_bytes(self) -> bytes:
        """The 72 signed bytes: sender ++ receiver ++ amount ++ nonce."""
        return self.sender + self.receiver + struct.pack("<II", self.amount, self.nonce)

    def to_storage_bytes(self) -> bytes:
        """Signing bytes followed by the signature."""
        return self.signing_bytes() + self.signature


@dataclass(frozen=True)
class BlockRef:
    """A reference to an event in the DAG."""

    round: int
    author: int
    digest: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "digest", bytes(self.digest))
        _check_len("digest", self.digest, HASH_LEN)
        _check_range("round", self.round, _U32_MAX)
        _check_range("author", self.author, _U16_MAX)


@dataclass(frozen=True)
class Event:
    """A DAG event produced by a validator in a given round."""

    round: int
    author: int
    timestamp: int
    parents: tuple[BlockRef, ...] = field(default_factory=tuple)
    transactions: tuple[int, ...] = field(default_factory=tuple)
    digest: bytes = bytes(HASH_LEN)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parents", tuple(self.parents))
        object.__setattr__(self, "transactions", tuple(self.transactions))
        object.__setattr__(self, "digest", bytes(self.digest))
        _check_len("digest", self.digest, HASH_LEN)
        _check_range("round", self.round, _U32_MAX)
        _check_range("author", self.author, _U16_MAX)

    def reference(self) -> BlockRef:
        """The block reference identifying this event."""
        return BlockRef(self.round, self.author, self.digest)