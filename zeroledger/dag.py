"""The consensus DAG: events by round and author, with 2/3+ finalization."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from zeroledger.committee import Committee
from zeroledger.types import BlockRef, Event

__all__ = ["InsertStatus", "InsertResult", "Dag"]

_REFERENCE_DEPTH = 3
_KEEP_ROUNDS = 10


class InsertStatus(enum.Enum):
    """Outcome kind of inserting an event."""

    INSERTED = "inserted"
    DUPLICATE = "duplicate"
    EQUIVOCATION = "equivocation"


@dataclass(frozen=True)
class InsertResult:
    """Outcome of inserting an event; ``author`` is set for equivocation."""

    status: InsertStatus
    author: int | None = None


class Dag:
    """Events organised by round and author.

    An event is finalized once validators holding 2/3+ of the stake have
    events in later rounds that transitively reference it.
    """

    def __init__(self) -> None:
        self._events: dict[BlockRef, Event] = {}
        self._rounds: dict[int, dict[int, BlockRef]] = {}
        self._current_round = 0
        self._finalized: set[BlockRef] = set()
        self._last_finalized_round = 0

    def insert(self, event: Event) -> InsertResult:
        """Insert an event, rejecting duplicates and equivocations."""
        block_ref = event.reference()
        if block_ref in self._events:
            return InsertResult(InsertStatus.DUPLICATE)

        authors = self._rounds.setdefault(event.round, {})
        existing = authors.get(event.author)
        if existing is not None and existing.digest != block_ref.digest:
            return InsertResult(InsertStatus.EQUIVOCATION, event.author)

        authors[event.author] = block_ref
        self._current_round = max(self._current_round, event.round)
        self._events[block_ref] = event
        return InsertResult(InsertStatus.INSERTED)

    def get(self, block_ref: BlockRef) -> Event | None:
        """The event for a block reference, if present."""
        return self._events.get(block_ref)

    def events_in_round(self, round: int) -> list[Event]:
        """All events stored for a round."""
        authors = self._rounds.get(round, {})
        return [self._events[r] for r in authors.values() if r in self._events]

    def is_finalized(self, block_ref: BlockRef) -> bool:
        """Whether the event has been finalized."""
        return block_ref in self._finalized

    def try_finalize(self, committee: Committee) -> list[BlockRef]:
        """Finalize events that reached quorum support; return the new ones."""
        newly_finalized: list[BlockRef] = []
        threshold = committee.quorum_threshold()

        for round_no in sorted(r for r in self._rounds if r >= self._last_finalized_round):
            for block_ref in self._rounds[round_no].values():
                if block_ref in self._finalized:
                    continue
                if self._supporting_stake(block_ref, committee) >= threshold:
                    self._finalized.add(block_ref)
                    newly_finalized.append(block_ref)

        if newly_finalized:
            self._last_finalized_round = max(
                self._last_finalized_round, max(r.round for r in newly_finalized)
            )

        self._prune_old_rounds()
        return newly_finalized

    def _supporting_stake(self, target: BlockRef, committee: Committee) -> int:
        supporters = {
            author
            for round_no, authors in self._rounds.items()
            if round_no > target.round
            for author, block_ref in authors.items()
            if self._references_transitively(block_ref, target, _REFERENCE_DEPTH)
        }
        return sum(
            info.stake
            for info in (committee.validator(idx) for idx in supporters)
            if info is not None
        )

    def _references_transitively(self, start: BlockRef, target: BlockRef, max_depth: int) -> bool:
        if max_depth == 0:
            return False
        event = self._events.get(start)
        if event is None:
            return False
        for parent in event.parents:
            if parent == target:
                return True
            if parent.round >= target.round and self._references_transitively(
                parent, target, max_depth - 1
            ):
                return True
        return False

    def _prune_old_rounds(self) -> None:
        if self._last_finalized_round < _KEEP_ROUNDS:
            return
        cutoff = self._last_finalized_round - _KEEP_ROUNDS
        for round_no in [r for r in self._rounds if r < cutoff]:
            for block_ref in self._rounds.pop(round_no).values():
                self._events.pop(block_ref, None)
                self._finalized.discard(block_ref)

    def current_round(self) -> int:
        """The highest round holding an event."""
        return self._current_round

    def last_finalized_round(self) -> int:
        """The highest round with a finalized event."""
        return self._last_finalized_round

    def event_count(self) -> int:
        """Number of events stored."""
        return len(self._events)