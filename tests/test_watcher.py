import pytest

from zeroledger.watcher import (
    ElevatedTierExceeded,
    LargeRelease,
    NetOutflow,
    NormalTierExceeded,
    RapidReleases,
    VaultWatcher,
    WatcherAction,
    WatcherConfig,
)


@pytest.fixture
def watcher() -> VaultWatcher:
    return VaultWatcher(
        WatcherConfig(
            large_release_threshold=1_000_000,
            rapid_release_count=5,
            rapid_window_secs=60,
            auto_pause_on_elevated=True,
            poll_interval_ms=1000,
        ),
        0,
    )


def _kinds(alerts):
    return [type(anomaly) for anomaly, _ in alerts]


def test_default_config():
    config = WatcherConfig()
    assert config.large_release_threshold == 100_000_000
    assert config.rapid_release_count == 10
    assert config.rapid_window_secs == 300
    assert config.auto_pause_on_elevated is True
    assert config.poll_interval_ms == 5000


def test_normal_release_no_anomaly(watcher):
    watcher.update_total_locked("USDC", 100_000_000)
    assert watcher.record_release("USDC", 100_000, "0xabc", 1000) == []


def test_large_release_triggers_alert(watcher):
    watcher.update_total_locked("USDC", 100_000_000)
    alerts = watcher.record_release("USDC", 5_000_000, "0xabc", 1000)
    assert (LargeRelease("USDC", 5_000_000, "0xabc"), WatcherAction.ALERT) in alerts


def test_normal_tier_exceeded_logged(watcher):
    watcher.update_total_locked("USDC", 10_000_000)
    alerts = watcher.record_release("USDC", 2_500_000, "0xabc", 1000)
    assert any(
        isinstance(a, NormalTierExceeded) and action is WatcherAction.LOG for a, action in alerts
    )


def test_elevated_tier_triggers_pause(watcher):
    watcher.update_total_locked("USDC", 10_000_000)
    alerts = watcher.record_release("USDC", 6_000_000, "0xabc", 1000)
    assert any(
        isinstance(a, ElevatedTierExceeded) and action is WatcherAction.PAUSE
        for a, action in alerts
    )


def test_elevated_tier_alerts_without_auto_pause():
    w = VaultWatcher(WatcherConfig(auto_pause_on_elevated=False), 0)
    w.update_total_locked("USDC", 10_000_000)
    alerts = w.record_release("USDC", 6_000_000, "0xabc", 1000)
    assert any(
        isinstance(a, ElevatedTierExceeded) and action is WatcherAction.ALERT
        for a, action in alerts
    )
    assert w.pause_required_count() == 0


def test_cumulative_releases_trigger_tier(watcher):
    watcher.update_total_locked("USDC", 10_000_000)
    watcher.record_release("USDC", 800_000, "0x01", 1000)
    watcher.record_release("USDC", 800_000, "0x02", 1001)
    alerts = watcher.record_release("USDC", 800_000, "0x03", 1002)
    assert NormalTierExceeded in _kinds(alerts)


def test_rapid_releases_detected(watcher):
    watcher.update_total_locked("USDC", 1_000_000_000)
    for i in range(4):
        assert watcher.record_release("USDC", 100, f"0x{i:02x}", 1000 + i) == []
    alerts = watcher.record_release("USDC", 100, "0x05", 1004)
    assert (RapidReleases(5, 60), WatcherAction.ALERT) in alerts


def test_window_resets_after_24h(watcher):
    watcher.update_total_locked("USDC", 10_000_000)
    watcher.record_release("USDC", 1_500_000, "0x01", 1000)
    assert watcher.token_stats("USDC")[0] == 1_500_000

    alerts = watcher.record_release("USDC", 500_000, "0x02", 1000 + 86401)
    assert NormalTierExceeded not in _kinds(alerts)
    assert watcher.token_stats("USDC")[0] == 500_000


def test_net_outflow_detected(watcher):
    watcher.update_total_locked("USDC", 1_000_000_000)
    watcher.record_deposit("USDC", 100_000, 1000)
    alerts = watcher.record_release("USDC", 500_000, "0x01", 1001)
    assert (NetOutflow("USDC", 100_000, 500_000), WatcherAction.ALERT) in alerts


def test_deposits_tracked(watcher):
    watcher.record_deposit("USDC", 5_000_000, 1000)
    watcher.record_deposit("USDC", 3_000_000, 1001)
    _, deposited, _ = watcher.token_stats("USDC")
    assert deposited == 8_000_000


def test_pause_count_tracks_severe_anomalies(watcher):
    watcher.update_total_locked("USDC", 10_000_000)
    watcher.record_release("USDC", 6_000_000, "0x01", 1000)
    assert watcher.pause_required_count() == 1


def test_multiple_tokens_independent(watcher):
    watcher.update_total_locked("USDC", 10_000_000)
    watcher.update_total_locked("USDT", 20_000_000)
    usdc_alerts = watcher.record_release("USDC", 2_500_000, "0x01", 1000)
    usdt_alerts = watcher.record_release("USDT", 500_000, "0x02", 1000)
    assert NormalTierExceeded in _kinds(usdc_alerts)
    assert NormalTierExceeded not in _kinds(usdt_alerts)
    assert watcher.token_stats("USDC")[0] == 2_500_000
    assert watcher.token_stats("USDT")[0] == 500_000


def test_anomalies_are_recorded_with_time(watcher):
    watcher.update_total_locked("USDC", 100_000_000)
    alerts = watcher.record_release("USDC", 5_000_000, "0xabc", 1000)
    assert watcher.anomalies() == [(1000, a, action) for a, action in alerts]


def test_unknown_token_has_no_stats(watcher):
    assert watcher.token_stats("DAI") is None


def test_time_before_window_start_rejected():
    w = VaultWatcher(WatcherConfig(), 5000)
    with pytest.raises(ValueError):
        w.record_deposit("USDC", 100, 1000)