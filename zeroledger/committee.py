"""The validator committee and stake-weighted quorum arithmetic."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

__all__ = ["ValidatorInfo", "Committee"]


@dataclass(frozen=True)
class ValidatorInfo:
    """A validator's identity and stake."""

    index: int
    public_key: bytes
    stake: int


class Committee:
    """The current validator committee.

    Stake is used for weighted quorum calculations. Validators are looked
    up by their position in the committee.
    """

    def __init__(self, validators: Iterable[ValidatorInfo]) -> None:
        self._validators: tuple[ValidatorInfo, ...] = tuple(validators)
        self._index_by_key = {bytes(v.public_key): v.index for v in self._validators}
        self._total_stake = sum(v.stake for v in self._validators)

    def size(self) -> int:
        """Number of validators."""
        return len(self._validators)

    def __len__(self) -> int:
        return len(self._validators)

    def total_stake(self) -> int:
        """Total stake across all validators."""
        return self._total_stake

    def quorum_threshold(self) -> int:
        """Stake required for a 2/3+ quorum."""
        return self._total_stake * 2 // 3 + 1

    def max_faulty_stake(self) -> int:
        """Maximum byzantine stake tolerated (< 1/3)."""
        if self._total_stake == 0:
            raise ValueError("committee has no stake")
        return (self._total_stake - 1) // 3

    def index_of(self, key: bytes) -> int | None:
        """Look up a validator's index by public key."""
        return self._index_by_key.get(bytes(key))

    def validator(self, index: int) -> ValidatorInfo | None:
        """Validator info at the given position, or None."""
        if 0 <= index < len(self._validators):
            return self._validators[index]
        return None

    def validators(self) -> Sequence[ValidatorInfo]:
        """All validators in committee order."""
        return self._validators

    def has_quorum(self, stakes: Iterable[int]) -> bool:
        """Whether the given stakes together reach quorum."""
        return sum(stakes) >= self.quorum_threshold()

    def fee_share(self, index: int, total_fees: int) -> int:
        """A validator's stake-proportional share of the fee pool."""
        info = self.validator(index)
        if info is None or self._total_stake == 0:
            return 0
        return total_fees * info.stake // self._total_stake