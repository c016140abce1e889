"""Gossip messages between validators, their encoding, and the gossip endpoints."""

from __future__ import annotations

import abc
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from zeroledger.types import HASH_LEN, PUBKEY_LEN, SIGNATURE_LEN, BlockRef, Event, Transfer

__all__ = [
    "GossipBlockRef",
    "GossipTransfer",
    "GossipEvent",
    "GossipAck",
    "PullRequest",
    "PullResponse",
    "GossipDecodeError",
    "GossipHandler",
    "GossipServer",
    "GossipClient",
    "encode_gossip_event",
    "decode_gossip_event",
]

log = logging.getLogger(__name__)

_U16_MASK = 0xFFFF


@dataclass(frozen=True)
class GossipBlockRef:
    """Wire form of a parent reference."""

    round: int
    author: int
    digest: bytes


@dataclass(frozen=True)
class GossipTransfer:
    """Wire form of a transfer."""

    sender: bytes
    receiver: bytes
    amount: int
    nonce: int
    signature: bytes


@dataclass(frozen=True)
class GossipEvent:
    """Wire form of an event together with its transfer batch."""

    round: int
    author: int
    timestamp: int
    parents: tuple[GossipBlockRef, ...] = field(default_factory=tuple)
    transfers: tuple[GossipTransfer, ...] = field(default_factory=tuple)
    digest: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "parents", tuple(self.parents))
        object.__setattr__(self, "transfers", tuple(self.transfers))
        object.__setattr__(self, "digest", bytes(self.digest))


@dataclass(frozen=True)
class GossipAck:
    """A peer's answer to a pushed event."""

    accepted: bool
    reason: str = ""


@dataclass(frozen=True)
class PullRequest:
    """Request for events starting at a round, for catch-up."""

    from_round: int
    max_events: int


@dataclass(frozen=True)
class PullResponse:
    """Events returned for a pull request."""

    events: tuple[GossipEvent, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "events", tuple(self.events))


class GossipDecodeError(ValueError):
    """A gossip message does not describe a valid event."""


class GossipHandler(abc.ABC):
    """Receives gossiped events on behalf of the local node."""

    @abc.abstractmethod
    def handle_event(self, event: Event, transfers: list[Transfer]) -> bool:
        """Handle a peer's event and batch.

        Return True if accepted, False if a duplicate; raise ValueError
        to reject it as invalid.
        """

    @abc.abstractmethod
    def get_events_from(self, from_round: int, max_events: int) -> list[tuple[Event, list[Transfer]]]:
        """Events from ``from_round`` onwards with their batches, for catch-up."""


def encode_gossip_event(event: Event, transfers: Iterable[Transfer]) -> GossipEvent:
    """Build the wire message for an event and its transfers."""
    return GossipEvent(
        round=event.round,
        author=event.author,
        timestamp=event.timestamp,
        parents=tuple(GossipBlockRef(p.round, p.author, p.digest) for p in event.parents),
        transfers=tuple(
            GossipTransfer(tx.sender, tx.receiver, tx.amount, tx.nonce, tx.signature)
            for tx in transfers
        ),
        digest=event.digest,
    )


def _fixed(value: bytes, length: int, message: str) -> bytes:
    value = bytes(value)
    if len(value) != length:
        raise GossipDecodeError(message)
    return value


def decode_gossip_event(msg: GossipEvent) -> tuple[Event, list[Transfer]]:
    """Turn a wire message back into an event and its transfers.

    Raises GossipDecodeError when a field has the wrong size or value.
    """
    digest = _fixed(msg.digest, HASH_LEN, "digest must be 32 bytes")

    try:
        parents = [
            BlockRef(
                round=p.round,
                author=p.author & _U16_MASK,
                digest=_fixed(p.digest, HASH_LEN, "parent digest must be 32 bytes"),
            )
            for p in msg.parents
        ]
        transfers = [
            Transfer(
                sender=_fixed(t.sender, PUBKEY_LEN, "from must be 32 bytes"),
                receiver=_fixed(t.receiver, PUBKEY_LEN, "to must be 32 bytes"),
                amount=t.amount,
                nonce=t.nonce,
                signature=_fixed(t.signature, SIGNATURE_LEN, "signature must be 64 bytes"),
            )
            for t in msg.transfers
        ]
        event = Event(
            round=msg.round,
            author=msg.author & _U16_MASK,
            timestamp=msg.timestamp,
            parents=tuple(parents),
            transactions=tuple(range(len(transfers))),
            digest=digest,
        )
    except GossipDecodeError:
        raise
    except ValueError as exc:
        raise GossipDecodeError(str(exc)) from exc

    return event, transfers


class GossipServer:
    """Serves push and pull gossip requests through a handler."""

    def __init__(self, handler: GossipHandler) -> None:
        self.handler = handler

    def push_event(self, msg: GossipEvent) -> GossipAck:
        """Decode and hand a pushed event to the handler."""
        try:
            event, transfers = decode_gossip_event(msg)
        except GossipDecodeError as exc:
            return GossipAck(accepted=False, reason=str(exc))

        round_no, author, txs = event.round, event.author, len(transfers)
        try:
            accepted = self.handler.handle_event(event, transfers)
        except ValueError as exc:
            log.warning("Gossip event rejected: %s", exc)
            return GossipAck(accepted=False, reason=str(exc))

        log.info(
            "Gossip event received round=%d author=%d txs=%d accepted=%s",
            round_no,
            author,
            txs,
            accepted,
        )
        return GossipAck(accepted=bool(accepted))

    def pull_events(self, request: PullRequest) -> PullResponse:
        """Return the handler's events for a catch-up request."""
        events = self.handler.get_events_from(request.from_round, request.max_events)
        return PullResponse(
            events=tuple(encode_gossip_event(event, transfers) for event, transfers in events)
        )


class GossipClient:
    """The set of peers that events are gossiped to."""

    def __init__(self, peers: Sequence[str]) -> None:
        self.peers: tuple[str, ...] = tuple(peers)

    def peer_count(self) -> int:
        """Number of known peers."""
        return len(self.peers)