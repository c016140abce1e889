"""Independent vault watcher: tracks releases and flags anomalies.

The watcher only observes deposit and release events and decides whether
to log, alert or pause; it holds no signing authority.
"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field

__all__ = [
    "NormalTierExceeded",
    "ElevatedTierExceeded",
    "LargeRelease",
    "RapidReleases",
    "NetOutflow",
    "Anomaly",
    "WatcherAction",
    "WatcherConfig",
    "VaultWatcher",
]

_WINDOW_SECS = 86_400
_ELEVATED_TIER_BPS = 5000
_NORMAL_TIER_BPS = 2000


@dataclass(frozen=True)
class NormalTierExceeded:
    """Releases in the window exceeded 20% of the locked total."""

    token: str
    released: int
    total_locked: int
    pct_bps: int


@dataclass(frozen=True)
class ElevatedTierExceeded:
    """Releases in the window exceeded 50% of the locked total."""

    token: str
    released: int
    total_locked: int
    pct_bps: int


@dataclass(frozen=True)
class LargeRelease:
    """A single release at or above the configured threshold."""

    token: str
    amount: int
    tx_hash: str


@dataclass(frozen=True)
class RapidReleases:
    """Many releases within a short window."""

    count: int
    window_secs: int


@dataclass(frozen=True)
class NetOutflow:
    """More than twice as much released as deposited in the window."""

    token: str
    deposited: int
    released: int


Anomaly = NormalTierExceeded | ElevatedTierExceeded | LargeRelease | RapidReleases | NetOutflow


class WatcherAction(enum.Enum):
    """Response to an anomaly, by severity."""

    LOG = "log"
    ALERT = "alert"
    PAUSE = "pause"


@dataclass
class WatcherConfig:
    """Thresholds for anomaly detection."""

    large_release_threshold: int = 100_000_000
    rapid_release_count: int = 10
    rapid_window_secs: int = 300
    auto_pause_on_elevated: bool = True
    poll_interval_ms: int = 5000


@dataclass
class _TokenTracker:
    released_in_window: int = 0
    deposited_in_window: int = 0
    total_locked: int = 0
    recent_release_times: list[int] = field(default_factory=list)


class VaultWatcher:
    """Tracks per-token flows in a 24h window and detects anomalies."""

    def __init__(self, config: WatcherConfig | None = None, window_start: int | None = None) -> None:
        self.config = config if config is not None else WatcherConfig()
        self._window_start = int(time.time()) if window_start is None else window_start
        self._trackers: dict[str, _TokenTracker] = {}
        self._anomalies: list[tuple[int, Anomaly, WatcherAction]] = []

    def _tracker(self, token: str) -> _TokenTracker:
        return self._trackers.setdefault(token, _TokenTracker())

    def record_deposit(self, token: str, amount: int, now: int) -> None:
        """Record a deposit event."""
        self._maybe_reset_window(now)
        self._tracker(token).deposited_in_window += amount

    def record_release(
        self, token: str, amount: int, tx_hash: str, now: int
    ) -> list[tuple[Anomaly, WatcherAction]]:
        """Record a release and return the anomalies it triggers."""
        self._maybe_reset_window(now)
        config = self.config
        alerts: list[tuple[Anomaly, WatcherAction]] = []

        tracker = self._tracker(token)
        tracker.released_in_window += amount
        tracker.recent_release_times.append(now)
        cutoff = max(now - config.rapid_window_secs, 0)
        tracker.recent_release_times = [t for t in tracker.recent_release_times if t >= cutoff]

        if amount >= config.large_release_threshold:
            alerts.append((LargeRelease(token, amount, tx_hash), WatcherAction.ALERT))

        recent = len(tracker.recent_release_times)
        if recent >= config.rapid_release_count:
            alerts.append((RapidReleases(recent, config.rapid_window_secs), WatcherAction.ALERT))

        if tracker.total_locked > 0:
            pct_bps = tracker.released_in_window * 10_000 // tracker.total_locked
            if pct_bps > _ELEVATED_TIER_BPS:
                action = WatcherAction.PAUSE if config.auto_pause_on_elevated else WatcherAction.ALERT
                anomaly: Anomaly = ElevatedTierExceeded(
                    token, tracker.released_in_window, tracker.total_locked, pct_bps
                )
                alerts.append((anomaly, action))
            elif pct_bps > _NORMAL_TIER_BPS:
                anomaly = NormalTierExceeded(
                    token, tracker.released_in_window, tracker.total_locked, pct_bps
                )
                alerts.append((anomaly, WatcherAction.LOG))

        if (
            tracker.deposited_in_window > 0
            and tracker.released_in_window > tracker.deposited_in_window * 2
        ):
            anomaly = NetOutflow(token, tracker.deposited_in_window, tracker.released_in_window)
            alerts.append((anomaly, WatcherAction.ALERT))

        self._anomalies.extend((now, anomaly, action) for anomaly, action in alerts)
        return alerts

    def update_total_locked(self, token: str, total_locked: int) -> None:
        """Set the known locked total for a token."""
        self._tracker(token).total_locked = total_locked

    def _maybe_reset_window(self, now: int) -> None:
        if now < self._window_start:
            raise ValueError("event time precedes the current window start")
        if now - self._window_start >= _WINDOW_SECS:
            for tracker in self._trackers.values():
                tracker.released_in_window = 0
                tracker.deposited_in_window = 0
            self._window_start = now

    def anomalies(self) -> list[tuple[int, Anomaly, WatcherAction]]:
        """All anomalies detected so far, with the time they were seen."""
        return list(self._anomalies)

    def pause_required_count(self) -> int:
        """Number of anomalies that call for pausing the vault."""
        return sum(1 for _, _, action in self._anomalies if action is WatcherAction.PAUSE)

    def token_stats(self, token: str) -> tuple[int, int, int] | None:
        """(released, deposited, total locked) for a token, or None if untracked."""
        tracker = self._trackers.get(token)
        if tracker is None:
            return None
        return (tracker.released_in_window, tracker.deposited_in_window, tracker.total_locked)