"""Per-validator consensus state: batching transfers into DAG events."""

from __future__ import annotations

import struct

from zeroledger.committee import Committee
from zeroledger.dag import Dag
from zeroledger.hashing import blake3_hash
from zeroledger.types import BlockRef, Event, Transfer

__all__ = ["ValidatorState"]

_PARENT_LOOKBACK_ROUNDS = 5


class ValidatorState:
    """A validator's pending pool, produced events and stored batches.

    Events reference the latest event of each validator seen in the
    preceding rounds; their transfer batches are kept until finalization.
    """

    def __init__(self, index: int, dag: Dag, committee: Committee, max_batch_size: int) -> None:
        self.index = index
        self._dag = dag
        self._committee = committee
        self._pending: list[Transfer] = []
        self._max_batch_size = max_batch_size
        self._last_round = 0
        self._batches: dict[bytes, list[Transfer]] = {}

    def submit_transfer(self, transfer: Transfer) -> None:
        """Add a transfer to the pending pool."""
        self._pending.append(transfer)

    def pending_count(self) -> int:
        """Number of pending transfers."""
        return len(self._pending)

    def try_produce_event(self, timestamp: int) -> Event | None:
        """Produce an event from pending transfers, or None if there are none."""
        return self._produce_event(timestamp, heartbeat=False)

    def produce_heartbeat(self, timestamp: int) -> Event:
        """Produce an event even with no pending transfers, to advance the DAG."""
        event = self._produce_event(timestamp, heartbeat=True)
        assert event is not None
        return event

    def _produce_event(self, timestamp: int, *, heartbeat: bool) -> Event | None:
        if not self._pending and not heartbeat:
            return None

        batch_size = min(len(self._pending), self._max_batch_size)
        batch = self._pending[:batch_size]
        del self._pending[:batch_size]

        round_no = self._dag.current_round() + 1
        parents = self._collect_parents(round_no)

        hasher_input = bytearray(struct.pack("<IHQ", round_no, self.index, timestamp))
        for parent in parents:
            hasher_input += parent.digest
        for tx in batch:
            hasher_input += tx.to_storage_bytes()
        digest = blake3_hash(bytes(hasher_input))

        event = Event(
            round=round_no,
            author=self.index,
            timestamp=timestamp,
            parents=tuple(parents),
            transactions=tuple(range(len(batch))),
            digest=digest,
        )

        self._batches[digest] = batch
        # Own events never equivocate, so the insert result is not needed.
        self._dag.insert(event)
        self._last_round = round_no
        return event

    def _collect_parents(self, new_round: int) -> list[BlockRef]:
        parents: list[BlockRef] = []
        if new_round == 0:
            return parents

        seen_authors: set[int] = set()
        lowest = max(new_round - _PARENT_LOOKBACK_ROUNDS, 0)
        for round_no in range(new_round - 1, lowest - 1, -1):
            for event in self._dag.events_in_round(round_no):
                if event.author not in seen_authors:
                    seen_authors.add(event.author)
                    parents.append(event.reference())
            if len(parents) >= self._committee.size():
                break
        return parents

    def take_batch(self, digest: bytes) -> list[Transfer] | None:
        """Remove and return the batch for an event digest, if held."""
        return self._batches.pop(bytes(digest), None)

    def has_batch(self, digest: bytes) -> bool:
        """Whether a batch is held for the digest."""
        return bytes(digest) in self._batches

    def peek_batch(self, digest: bytes) -> list[Transfer] | None:
        """A copy of the batch for a digest, leaving it in place."""
        batch = self._batches.get(bytes(digest))
        return list(batch) if batch is not None else None

    def try_finalize(self) -> list[BlockRef]:
        """Finalize DAG events and return the newly finalized references."""
        return self._dag.try_finalize(self._committee)

    def set_committee(self, committee: Committee) -> None:
        """Replace the committee (epoch rotation)."""
        self._committee = committee

    def last_round(self) -> int:
        """The round of this validator's last produced event."""
        return self._last_round

    def batch_count(self) -> int:
        """Number of stored batches."""
        return len(self._batches)

    def prune_batches(self, keep_last: int) -> None:
        """Drop the oldest batches once more than twice ``keep_last`` are held."""
        if len(self._batches) > keep_last * 2:
            excess = len(self._batches) - keep_last
            for digest in list(self._batches)[:excess]:
                del self._batches[digest]