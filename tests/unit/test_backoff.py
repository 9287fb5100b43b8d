from __future__ import annotations

import pytest

from deckbridge.state.session import ReconnectMode
from deckbridge.state.settings import ReconnectSettings
from deckbridge.client.backoff import BackoffPolicy, fast_delay


def test_fast_delay_grows_and_caps() -> None:
    assert fast_delay(1, base_s=3.0, multiplier=1.5, max_s=30.0) == 3.0
    assert fast_delay(2, base_s=3.0, multiplier=1.5, max_s=30.0) == 4.5
    assert fast_delay(7, base_s=3.0, multiplier=1.5, max_s=30.0) == 30.0


def test_default_schedule_falls_back_to_slow_polling() -> None:
    assert BackoffPolicy().delays(12) == [3.0, 4.5, 6.75, 10.125, 15.1875, 22.78125, 30.0, 30.0, 30.0, 30.0, 60.0, 60.0]


@pytest.mark.parametrize(("attempt", "mode"), [(1, ReconnectMode.FAST), (10, ReconnectMode.FAST), (11, ReconnectMode.SLOW)])
def test_next_retry_mode(attempt: int, mode: ReconnectMode) -> None:
    assert BackoffPolicy().next_retry(attempt)[0] is mode


def test_policy_from_settings() -> None:
    settings = ReconnectSettings(
        base_delay_s=1.0,
        multiplier=2.0,
        max_delay_s=5.0,
        max_attempts=3,
        slow_delay_s=20.0,
        health_ping_interval_s=30.0,
        connect_timeout_s=5.0,
    )
    assert BackoffPolicy.from_settings(settings).delays(5) == [1.0, 2.0, 4.0, 20.0, 20.0]
