"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ServerSettings:
    host: str
    port: int
    preferences_path: Path


@dataclass(frozen=True, slots=True)
class LimitsSettings:
    max_connections: int
    handler_timeout_s: float
    command_queue_max: int
    dedup_window_s: float


@dataclass(frozen=True, slots=True)
class WebSocketSettings:
    idle_timeout_s: float
    watchdog_tick_s: float
    send_queue_max: int


@dataclass(frozen=True, slots=True)
class ReconnectSettings:
    base_delay_s: float
    multiplier: float
    max_delay_s: float
    max_attempts: int
    slow_delay_s: float
    health_ping_interval_s: float
    connect_timeout_s: float


@dataclass(frozen=True, slots=True)
class AppSettings:
    server: ServerSettings
    limits: LimitsSettings
    websocket: WebSocketSettings
    reconnect: ReconnectSettings


__all__ = [
    "AppSettings",
    "LimitsSettings",
    "ReconnectSettings",
    "ServerSettings",
    "WebSocketSettings",
]
