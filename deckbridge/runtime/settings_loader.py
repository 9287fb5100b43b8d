"""Environment parsing for runtime settings.

Values resolve as: environment variable, then persisted preference (port
only), then the defaults in `deckbridge/config/*`.
"""

from __future__ import annotations

import os
import ipaddress
from pathlib import Path

from deckbridge.config.preferences import PREF_PORT, ENV_PREFERENCES_PATH, DEFAULT_PREFERENCES_PATH
from deckbridge.config.websocket import (
    ENV_HOST,
    ENV_PORT,
    MAX_PORT,
    MIN_PORT,
    DEFAULT_HOST,
    DEFAULT_PORT,
    ENV_WS_IDLE_TIMEOUT_S,
    ENV_WS_SEND_QUEUE_MAX,
    ENV_WS_WATCHDOG_TICK_S,
    MIN_WS_WATCHDOG_TICK_S,
    DEFAULT_WS_IDLE_TIMEOUT_S,
    DEFAULT_WS_SEND_QUEUE_MAX,
    DEFAULT_WS_WATCHDOG_TICK_S,
)
from deckbridge.config.limits import (
    ENV_DEDUP_WINDOW_MS,
    ENV_COMMAND_QUEUE_MAX,
    ENV_HANDLER_TIMEOUT_S,
    ENV_MAX_CONNECTIONS,
    DEFAULT_DEDUP_WINDOW_MS,
    DEFAULT_COMMAND_QUEUE_MAX,
    DEFAULT_HANDLER_TIMEOUT_S,
    DEFAULT_MAX_CONNECTIONS,
)
from deckbridge.config.reconnect import (
    ENV_CONNECT_TIMEOUT_S,
    ENV_RECONNECT_MULTIPLIER,
    DEFAULT_CONNECT_TIMEOUT_S,
    ENV_RECONNECT_MAX_ATTEMPTS,
    ENV_RECONNECT_MAX_DELAY_MS,
    ENV_HEALTH_PING_INTERVAL_MS,
    ENV_RECONNECT_BASE_DELAY_MS,
    ENV_RECONNECT_SLOW_DELAY_MS,
    DEFAULT_RECONNECT_MULTIPLIER,
    DEFAULT_RECONNECT_MAX_ATTEMPTS,
    DEFAULT_RECONNECT_MAX_DELAY_MS,
    DEFAULT_HEALTH_PING_INTERVAL_MS,
    DEFAULT_RECONNECT_BASE_DELAY_MS,
    DEFAULT_RECONNECT_SLOW_DELAY_MS,
)
from deckbridge.state.settings import (
    AppSettings,
    LimitsSettings,
    ServerSettings,
    ReconnectSettings,
    WebSocketSettings,
)

from .preferences import PreferencesStore


def _str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except Exception:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except Exception:
        return default


def validate_host(host: str) -> str:
    """Only loopback listeners are allowed."""
    if host == "localhost":
        return host
    try:
        addr = ipaddress.ip_address(host)
    except ValueError as exc:
        raise ValueError(f"{ENV_HOST} must be a loopback address, got {host!r}") from exc
    if not addr.is_loopback:
        raise ValueError(f"{ENV_HOST} must be a loopback address, got {host!r}")
    return host


def validate_port(port: int) -> int:
    if isinstance(port, bool) or not isinstance(port, int) or not MIN_PORT <= port <= MAX_PORT:
        raise ValueError(f"port must be an integer between {MIN_PORT} and {MAX_PORT}, got {port!r}")
    return port


def preferences_path() -> Path:
    raw = os.getenv(ENV_PREFERENCES_PATH)
    return Path(raw).expanduser() if raw and raw.strip() else DEFAULT_PREFERENCES_PATH.expanduser()


def _resolve_port(preferences: PreferencesStore) -> int:
    raw = os.getenv(ENV_PORT)
    if raw is not None and raw.strip():
        try:
            port = int(raw)
        except ValueError as exc:
            raise ValueError(f"{ENV_PORT} must be an integer, got {raw!r}") from exc
        return validate_port(port)
    stored = preferences.get(PREF_PORT)
    if stored is not None:
        return validate_port(stored)
    return DEFAULT_PORT


def load_reconnect_settings() -> ReconnectSettings:
    return ReconnectSettings(
        base_delay_s=_float_env(ENV_RECONNECT_BASE_DELAY_MS, DEFAULT_RECONNECT_BASE_DELAY_MS) / 1000.0,
        multiplier=_float_env(ENV_RECONNECT_MULTIPLIER, DEFAULT_RECONNECT_MULTIPLIER),
        max_delay_s=_float_env(ENV_RECONNECT_MAX_DELAY_MS, DEFAULT_RECONNECT_MAX_DELAY_MS) / 1000.0,
        max_attempts=_int_env(ENV_RECONNECT_MAX_ATTEMPTS, DEFAULT_RECONNECT_MAX_ATTEMPTS),
        slow_delay_s=_float_env(ENV_RECONNECT_SLOW_DELAY_MS, DEFAULT_RECONNECT_SLOW_DELAY_MS) / 1000.0,
        health_ping_interval_s=_float_env(ENV_HEALTH_PING_INTERVAL_MS, DEFAULT_HEALTH_PING_INTERVAL_MS) / 1000.0,
        connect_timeout_s=_float_env(ENV_CONNECT_TIMEOUT_S, DEFAULT_CONNECT_TIMEOUT_S),
    )


def _watchdog_tick_s() -> float:
    tick = _float_env(ENV_WS_WATCHDOG_TICK_S, DEFAULT_WS_WATCHDOG_TICK_S)
    if not tick >= MIN_WS_WATCHDOG_TICK_S:
        raise ValueError(f"{ENV_WS_WATCHDOG_TICK_S} must be at least {MIN_WS_WATCHDOG_TICK_S}s, got {tick}")
    return tick


def load_settings(preferences: PreferencesStore | None = None) -> AppSettings:
    prefs = preferences or PreferencesStore(preferences_path())
    return AppSettings(
        server=ServerSettings(
            host=validate_host(_str_env(ENV_HOST, DEFAULT_HOST)),
            port=_resolve_port(prefs),
            preferences_path=prefs.path,
        ),
        limits=LimitsSettings(
            max_connections=_int_env(ENV_MAX_CONNECTIONS, DEFAULT_MAX_CONNECTIONS),
            handler_timeout_s=_float_env(ENV_HANDLER_TIMEOUT_S, DEFAULT_HANDLER_TIMEOUT_S),
            command_queue_max=_int_env(ENV_COMMAND_QUEUE_MAX, DEFAULT_COMMAND_QUEUE_MAX),
            dedup_window_s=_int_env(ENV_DEDUP_WINDOW_MS, DEFAULT_DEDUP_WINDOW_MS) / 1000.0,
        ),
        websocket=WebSocketSettings(
            idle_timeout_s=_float_env(ENV_WS_IDLE_TIMEOUT_S, DEFAULT_WS_IDLE_TIMEOUT_S),
            watchdog_tick_s=_watchdog_tick_s(),
            send_queue_max=_int_env(ENV_WS_SEND_QUEUE_MAX, DEFAULT_WS_SEND_QUEUE_MAX),
        ),
        reconnect=load_reconnect_settings(),
    )


__all__ = ["load_settings", "load_reconnect_settings", "preferences_path", "validate_host", "validate_port"]
