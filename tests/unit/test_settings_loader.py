from __future__ import annotations

from pathlib import Path

import pytest

from deckbridge.runtime.preferences import PreferencesStore
from deckbridge.runtime.settings_loader import load_settings, validate_host, validate_port, load_reconnect_settings


@pytest.fixture
def prefs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> PreferencesStore:
    for name in (
        "DECKBRIDGE_HOST",
        "DECKBRIDGE_PORT",
        "DECKBRIDGE_DEDUP_WINDOW_MS",
        "DECKBRIDGE_MAX_CONNECTIONS",
        "DECKBRIDGE_WATCHDOG_TICK_S",
    ):
        monkeypatch.delenv(name, raising=False)
    return PreferencesStore(tmp_path / "prefs.json")


def test_defaults(prefs: PreferencesStore) -> None:
    settings = load_settings(prefs)
    assert settings.server.host == "127.0.0.1"
    assert settings.server.port == 8888
    assert settings.server.preferences_path == prefs.path
    assert settings.limits.dedup_window_s == 0.5
    assert settings.websocket.idle_timeout_s == 150.0


def test_persisted_port_is_used_when_env_is_unset(prefs: PreferencesStore) -> None:
    prefs.set("surface_port", 9100)
    assert load_settings(prefs).server.port == 9100


def test_env_port_wins_over_preference(prefs: PreferencesStore, monkeypatch: pytest.MonkeyPatch) -> None:
    prefs.set("surface_port", 9100)
    monkeypatch.setenv("DECKBRIDGE_PORT", "9200")
    assert load_settings(prefs).server.port == 9200


@pytest.mark.parametrize("raw", ["80", "70000", "abc"])
def test_invalid_env_port_is_rejected(prefs: PreferencesStore, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("DECKBRIDGE_PORT", raw)
    with pytest.raises(ValueError):
        load_settings(prefs)


def test_malformed_numeric_env_falls_back_to_default(prefs: PreferencesStore, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DECKBRIDGE_MAX_CONNECTIONS", "lots")
    assert load_settings(prefs).limits.max_connections == 16


@pytest.mark.parametrize("host", ["127.0.0.1", "::1", "localhost", "127.0.0.2"])
def test_loopback_hosts_are_accepted(host: str) -> None:
    assert validate_host(host) == host


@pytest.mark.parametrize("host", ["0.0.0.0", "192.168.1.10", "example.com"])
def test_non_loopback_hosts_are_rejected(host: str) -> None:
    with pytest.raises(ValueError):
        validate_host(host)


@pytest.mark.parametrize("port", [1023, 65536, True, "8888", 8888.0])
def test_validate_port_rejects(port: object) -> None:
    with pytest.raises(ValueError):
        validate_port(port)  # type: ignore[arg-type]


def test_reconnect_settings_are_converted_to_seconds(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DECKBRIDGE_RECONNECT_BASE_DELAY_MS", "1500")
    settings = load_reconnect_settings()
    assert settings.base_delay_s == 1.5
    assert settings.max_attempts == 10
    assert settings.slow_delay_s == 60.0


@pytest.mark.parametrize("raw", ["0", "-1", "nan"])
def test_non_positive_watchdog_tick_is_rejected(
    prefs: PreferencesStore, monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("DECKBRIDGE_WATCHDOG_TICK_S", raw)
    with pytest.raises(ValueError):
        load_settings(prefs)


def test_watchdog_tick_from_env(prefs: PreferencesStore, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DECKBRIDGE_WATCHDOG_TICK_S", "0.5")
    assert load_settings(prefs).websocket.watchdog_tick_s == 0.5
