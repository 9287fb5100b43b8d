from __future__ import annotations

import socket
from pathlib import Path
from collections.abc import Callable, AsyncIterator

import pytest
import pytest_asyncio

from deckbridge.server import SurfaceServer
from deckbridge.domain.queue import CommandQueue
from deckbridge.runtime.preferences import PreferencesStore
from deckbridge.runtime.settings_loader import load_reconnect_settings
from deckbridge.state.settings import AppSettings, LimitsSettings, ServerSettings, WebSocketSettings

SettingsFactory = Callable[..., AppSettings]


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return int(sock.getsockname()[1])


@pytest.fixture
def free_port() -> int:
    return _free_port()


@pytest.fixture
def make_settings(tmp_path: Path, free_port: int) -> SettingsFactory:
    def build(
        *,
        port: int | None = None,
        max_connections: int = 8,
        idle_timeout_s: float = 30.0,
        send_queue_max: int = 64,
    ) -> AppSettings:
        return AppSettings(
            server=ServerSettings(host="127.0.0.1", port=port or free_port, preferences_path=tmp_path / "prefs.json"),
            limits=LimitsSettings(
                max_connections=max_connections,
                handler_timeout_s=1.0,
                command_queue_max=32,
                dedup_window_s=0.5,
            ),
            websocket=WebSocketSettings(
                idle_timeout_s=idle_timeout_s,
                watchdog_tick_s=0.05,
                send_queue_max=send_queue_max,
            ),
            reconnect=load_reconnect_settings(),
        )

    return build


@pytest_asyncio.fixture
async def server(make_settings: SettingsFactory) -> AsyncIterator[SurfaceServer]:
    settings = make_settings()
    srv = SurfaceServer(
        settings,
        commands=CommandQueue(maxsize=32),
        preferences=PreferencesStore(settings.server.preferences_path),
    )
    assert await srv.start()
    try:
        yield srv
    finally:
        await srv.stop()
