"""Validator trust scoring and ejection selection."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["TrustParams", "TrustScorer"]


@dataclass(frozen=True)
class TrustParams:
    """Scoring constants for validator reputation."""

    initial_trust_score: int = 500
    max_trust_score: int = 1000
    min_trust_score: int = 100
    score_reward_event: int = 1
    score_penalty_miss: int = 10
    score_penalty_late: int = 5
    score_penalty_equivocation: int = 1000
    max_validators: int = 100
    ejection_rate_bps: int = 500


class TrustScorer:
    """Tracks trust scores for validators.

    Validators below the minimum score are ejected; when the committee is
    full, the lowest-scoring share is ejected too.
    """

    def __init__(self, params: TrustParams | None = None) -> None:
        self.params = params if params is not None else TrustParams()
        self._scores: dict[int, int] = {}

    def register(self, index: int) -> None:
        """Register a validator with the initial score."""
        self._scores[index] = self.params.initial_trust_score

    def score(self, index: int) -> int:
        """A validator's score, 0 if unknown."""
        return self._scores.get(index, 0)

    def _adjust(self, index: int, delta: int) -> None:
        if index in self._scores:
            self._scores[index] = min(max(self._scores[index] + delta, 0), self.params.max_trust_score)

    def reward_event(self, index: int) -> None:
        """Reward a valid, timely event."""
        if index in self._scores:
            self._scores[index] = min(
                self._scores[index] + self.params.score_reward_event, self.params.max_trust_score
            )

    def penalize_miss(self, index: int) -> None:
        """Penalize a missed round."""
        if index in self._scores:
            self._scores[index] = max(self._scores[index] - self.params.score_penalty_miss, 0)

    def penalize_late(self, index: int) -> None:
        """Penalize a late event."""
        if index in self._scores:
            self._scores[index] = max(self._scores[index] - self.params.score_penalty_late, 0)

    def penalize_equivocation(self, index: int) -> None:
        """Penalize equivocation."""
        if index in self._scores:
            self._scores[index] = max(
                self._scores[index] - self.params.score_penalty_equivocation, 0
            )

    def ejection_candidates(self) -> list[int]:
        """Validators to eject: those below minimum, plus the bottom share when full."""
        candidates = [
            idx for idx, score in self._scores.items() if score < self.params.min_trust_score
        ]
        if len(self._scores) >= self.params.max_validators:
            ranked = sorted(self._scores.items(), key=lambda item: item[1])
            eject_count = len(ranked) * self.params.ejection_rate_bps // 10_000
            for idx, _ in ranked[:eject_count]:
                if idx not in candidates:
                    candidates.append(idx)
        return candidates

    def set_score(self, index: int, score: int) -> None:
        """Set a score directly, capped at the maximum."""
        self._scores[index] = min(score, self.params.max_trust_score)

    def remove(self, index: int) -> None:
        """Stop tracking a validator."""
        self._scores.pop(index, None)

    def __len__(self) -> int:
        return len(self._scores)